from aiogram import Router
from aiogram.exceptions import TelegramAPIError
from aiogram.filters import Command, CommandObject
from aiogram.types import CallbackQuery, Message
import logging

from comments_picker.bot import texts
from comments_picker.bot.keyboards.callback_data import WinnerListCallback
from comments_picker.bot.keyboards.inline import get_winner_list_keyboard
from comments_picker.bot.utils.telegram import is_group_chat
from comments_picker.config import Settings
from comments_picker.services import GiveawayService, Rejection
from comments_picker.utils.helpers import parse_positive_int

router = Router(name="winner_list")


@router.message(Command("winnerlist"))
async def winner_list_command(message: Message, command: CommandObject, settings: Settings,
                              service: GiveawayService):
    """Обработчик команды /winnerlist [page]"""
    if not is_group_chat(message.chat):
        await message.answer(texts.rejection(Rejection.WRONG_CHAT))
        return

    if not await service.is_approved(message.chat.id):
        await message.answer(texts.rejection(Rejection.NOT_APPROVED))
        return

    history = await service.history_page(message.chat.id, parse_positive_int(command.args, 1))
    await message.answer(
        texts.winner_list(history, settings.mention_tag, settings.display_timezone),
        reply_markup=get_winner_list_keyboard(history),
    )


@router.callback_query(WinnerListCallback.filter())
async def winner_list_page_callback(callback: CallbackQuery, callback_data: WinnerListCallback,
                                    settings: Settings, service: GiveawayService):
    """Листание истории победителей. Запросы вне диапазона страниц игнорируются"""
    try:
        await callback.answer()
    except TelegramAPIError as e:
        logging.debug(f"Не удалось ответить на callback {callback.id}: {e}")

    if callback_data.action != "page":
        return

    message = callback.message
    if not isinstance(message, Message) or not is_group_chat(message.chat):
        return
    if not await service.is_approved(message.chat.id):
        return

    history = await service.history_page(message.chat.id, callback_data.page)
    if history.page != callback_data.page:
        return

    text = texts.winner_list(history, settings.mention_tag, settings.display_timezone)
    keyboard = get_winner_list_keyboard(history)
    try:
        await message.edit_text(text, reply_markup=keyboard)
    except TelegramAPIError as e:
        logging.warning(f"Не удалось обновить историю победителей в группе {message.chat.id}: {e}")
        await message.answer(text, reply_markup=keyboard)
