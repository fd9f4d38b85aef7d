from aiogram import Router
from aiogram.types import ErrorEvent
import logging

router = Router(name="errors")


@router.errors()
async def handle_errors(event: ErrorEvent) -> bool:
    """Логирует необработанную ошибку; обновление отбрасывается, бот продолжает работу"""
    logging.error(
        f"Ошибка при обработке обновления {event.update.update_id}: {event.exception}",
        exc_info=event.exception,
    )
    return True
