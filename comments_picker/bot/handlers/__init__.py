from aiogram import Dispatcher
from .errors import router as errors_router
from .start import router as start_router
from .admin import router as admin_router
from .winners import router as winners_router
from .giveaway import router as giveaway_router
from .entries import router as entries_router
import logging


def register_all_handlers(dp: Dispatcher) -> None:
    """
    Регистрирует все обработчики сообщений в диспетчере.

    Args:
        dp (Dispatcher): Диспетчер, в котором регистрируются обработчики
    """
    logging.info("Регистрация обработчиков бота...")

    dp.include_router(errors_router)
    dp.include_router(start_router)
    dp.include_router(admin_router)
    dp.include_router(winners_router)
    dp.include_router(giveaway_router)

    # Прием заявок ловит любые ответы в группах, поэтому строго последним
    dp.include_router(entries_router)

    logging.info("Все обработчики зарегистрированы успешно")
