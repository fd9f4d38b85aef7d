from aiogram import Bot, Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message
import logging

from comments_picker.bot import texts
from comments_picker.bot.filters.giveaway import MentionTagFilter
from comments_picker.bot.utils.telegram import (
    LiveDrawMessage,
    extract_post_ref,
    is_group_admin,
    is_group_chat,
    message_text,
    resolve_linked_group,
)
from comments_picker.config import Settings
from comments_picker.services import (
    DrawFailed,
    GiveawayService,
    PreconditionNotMet,
    Rejection,
    SelectionEngine,
)
from comments_picker.services.draw import DEFAULT_WINNERS, clamp_winners_count
from comments_picker.utils.helpers import parse_positive_int

router = Router(name="giveaway")


@router.channel_post(MentionTagFilter())
@router.edited_channel_post(MentionTagFilter())
async def detect_giveaway_post(message: Message, bot: Bot, settings: Settings, service: GiveawayService):
    """Регистрирует пост канала с меткой бота как розыгрыш"""
    try:
        linked_group_id = await resolve_linked_group(bot, message.chat.id)
        await service.detect_post(
            channel_id=message.chat.id,
            post_id=message.message_id,
            text=message_text(message),
            mention_tag=settings.mention_tag,
            linked_group_id=linked_group_id,
        )
    except Exception as e:
        logging.error(f"Ошибка при регистрации поста {message.chat.id}/{message.message_id}: {e}", exc_info=True)


@router.message(Command("pickwinner"))
async def pick_winner_command(message: Message, command: CommandObject, bot: Bot, settings: Settings,
                              service: GiveawayService, selection: SelectionEngine):
    """
    Обработчик команды /pickwinner [k].

    Проверки идут строго по порядку, на каждую - свой ответ:
    группа, одобрение, права администратора, ответ на пересланный пост,
    состояние поста, связанная группа, наличие заявок.
    """
    if not is_group_chat(message.chat):
        await message.answer(texts.rejection(Rejection.WRONG_CHAT))
        return

    group_id = message.chat.id
    if not await service.is_approved(group_id):
        await message.answer(texts.rejection(Rejection.NOT_APPROVED))
        return

    if message.from_user is None or not await is_group_admin(bot, group_id, message.from_user.id):
        await message.answer(texts.rejection(Rejection.NOT_ADMIN))
        return

    winners_count = clamp_winners_count(parse_positive_int(command.args, DEFAULT_WINNERS))

    post_ref = extract_post_ref(message)
    if post_ref is None:
        await message.answer(texts.rejection(Rejection.NOT_A_REPLY))
        return

    try:
        plan = await selection.prepare(group_id, post_ref, winners_count)
    except PreconditionNotMet as e:
        await message.answer(texts.rejection(e.reason))
        return

    logging.info(f"Администратор {message.from_user.id} запустил розыгрыш в группе {group_id}")
    display = LiveDrawMessage(bot, group_id, settings.mention_tag, reply_to_message_id=post_ref.reply_message_id)
    try:
        await selection.run(plan, display)
    except DrawFailed as e:
        logging.error(f"Розыгрыш в группе {group_id} не завершен: {e}")
