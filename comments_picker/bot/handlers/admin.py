from aiogram import Router
from aiogram.filters import Command
from aiogram.types import Message
import logging

from comments_picker.bot import texts
from comments_picker.bot.utils.telegram import is_group_chat
from comments_picker.config import Settings
from comments_picker.services import GiveawayService, Rejection

# Роутер команд владельца бота
router = Router(name="admin_commands")


@router.message(Command("approve"))
async def approve_command(message: Message, settings: Settings, service: GiveawayService):
    """
    Обработчик команды /approve.
    Только владелец и только внутри группы обсуждения.
    """
    if not is_group_chat(message.chat):
        await message.answer(texts.rejection(Rejection.WRONG_CHAT))
        return

    if message.from_user is None or message.from_user.id != settings.owner_id:
        logging.info(f"Попытка /approve не владельцем: chat={message.chat.id}")
        await message.answer(texts.rejection(Rejection.NOT_OWNER))
        return

    await service.approve(message.chat.id, message.from_user.id)
    await message.answer(texts.approved(settings.mention_tag))
