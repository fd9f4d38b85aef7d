from aiogram import F, Router
from aiogram.types import Message
import logging

from comments_picker.bot.filters.giveaway import ForwardedChannelPostFilter
from comments_picker.bot.utils.telegram import GROUP_CHAT_TYPES, display_name_of, message_text
from comments_picker.services import EntrySubmission, GiveawayService, PostRef

NON_TEXT_COMMENT = "[non-text]"

# Регистрируется последним: сюда попадают все остальные сообщения групп
router = Router(name="entries")


@router.message(F.chat.type.in_(GROUP_CHAT_TYPES), F.from_user, ForwardedChannelPostFilter())
async def collect_entry(message: Message, post_ref: PostRef, service: GiveawayService):
    """Комментарий под пересланным постом-розыгрышем становится заявкой"""
    user = message.from_user
    # Сообщения от имени канала/анонимного админа и от ботов заявками не считаются
    if user.is_bot or message.sender_chat is not None:
        return

    submission = EntrySubmission(
        group_id=message.chat.id,
        post=post_ref,
        user_id=user.id,
        username=user.username,
        display_name=display_name_of(user),
        comment=(message_text(message) or NON_TEXT_COMMENT).strip(),
        message_id=message.message_id,
    )

    try:
        await service.submit_entry(submission)
    except Exception as e:
        logging.error(f"Ошибка при сохранении заявки в группе {message.chat.id}: {e}", exc_info=True)
