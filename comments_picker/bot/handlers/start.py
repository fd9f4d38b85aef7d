from aiogram import Router
from aiogram.exceptions import TelegramAPIError
from aiogram.filters import CommandStart
from aiogram.types import Message
import logging

from comments_picker.bot import texts
from comments_picker.config import Settings

router = Router(name="start_commands")


@router.message(CommandStart())
async def start_command(message: Message, settings: Settings):
    """Обработчик команды /start: логотип (если задан) и инструкция"""
    if settings.logo_url:
        try:
            await message.answer_photo(settings.logo_url, caption=texts.LOGO_CAPTION)
        except TelegramAPIError as e:
            logging.warning(f"Не удалось отправить логотип: {e}")

    user = message.from_user
    await message.answer(texts.welcome(
        user_id=user.id if user else 0,
        first_name=(user.first_name or user.username) if user else None,
        mention_tag=settings.mention_tag,
    ))
