from aiogram import Bot
from aiogram.enums import ChatType
from aiogram.exceptions import TelegramAPIError
from aiogram.types import Chat, Message, MessageOriginChannel, ReplyParameters, User as TelegramUser
import logging
from typing import Optional

from comments_picker.bot import texts
from comments_picker.database.models import Entry
from comments_picker.services.giveaways import PostRef
from comments_picker.services.selection import DrawPlan, DrawResult, DRAW_SECONDS

GROUP_CHAT_TYPES = (ChatType.GROUP, ChatType.SUPERGROUP)


def is_group_chat(chat: Optional[Chat]) -> bool:
    return chat is not None and chat.type in GROUP_CHAT_TYPES


def extract_post_ref(message: Message) -> Optional[PostRef]:
    """
    Достает пост канала из сообщения, на которое ответили.

    Args:
        message (Message): Комментарий или команда в группе

    Returns:
        Optional[PostRef]: Канал и ID поста, если ответ дан на пересланный пост канала
    """
    reply = message.reply_to_message
    if reply is None:
        return None

    origin = reply.forward_origin
    if not isinstance(origin, MessageOriginChannel):
        return None

    return PostRef(channel_id=origin.chat.id, post_id=origin.message_id, reply_message_id=reply.message_id)


def display_name_of(user: Optional[TelegramUser]) -> str:
    if user is None:
        return "User"
    return user.full_name.strip() or user.first_name or "User"


def message_text(message: Message) -> Optional[str]:
    return message.text or message.caption


async def is_group_admin(bot: Bot, chat_id: int, user_id: int) -> bool:
    """
    Проверяет, является ли пользователь администратором группы.

    Returns:
        bool: True если администратор; при любой ошибке запроса - False
    """
    try:
        admins = await bot.get_chat_administrators(chat_id)
        return any(admin.user.id == user_id for admin in admins)
    except Exception as e:
        logging.warning(f"Не удалось получить администраторов группы {chat_id}: {e}")
        return False


async def resolve_linked_group(bot: Bot, channel_id: int) -> Optional[int]:
    """
    Получает группу обсуждения, привязанную к каналу.

    Returns:
        Optional[int]: ID группы или None, если ее нет или запрос не удался
    """
    try:
        chat_info = await bot.get_chat(channel_id)
        return chat_info.linked_chat_id
    except Exception as e:
        logging.warning(f"Не удалось получить информацию о канале {channel_id}: {e}")
        return None


class LiveDrawMessage:
    """
    Сообщение розыгрыша в группе: отправляется ответом на пересланный пост
    и дальше редактируется на месте.
    """

    def __init__(self, bot: Bot, chat_id: int, mention_tag: str, reply_to_message_id: Optional[int] = None):
        self.bot = bot
        self.chat_id = chat_id
        self.mention_tag = mention_tag
        self.reply_to_message_id = reply_to_message_id
        self.message_id: Optional[int] = None
        self.total = DRAW_SECONDS

    async def started(self, plan: DrawPlan, seconds_left: int, rolling: Optional[Entry]) -> None:
        reply_parameters = None
        if self.reply_to_message_id:
            reply_parameters = ReplyParameters(
                message_id=self.reply_to_message_id,
                allow_sending_without_reply=True,
            )

        message = await self.bot.send_message(
            chat_id=self.chat_id,
            text=texts.draw_progress(seconds_left, seconds_left, plan.total_entries, rolling),
            reply_parameters=reply_parameters,
        )
        self.total = seconds_left
        self.message_id = message.message_id

    async def tick(self, plan: DrawPlan, seconds_left: int, rolling: Optional[Entry]) -> None:
        if self.message_id is None:
            return
        try:
            await self.bot.edit_message_text(
                text=texts.draw_progress(seconds_left, self.total, plan.total_entries, rolling),
                chat_id=self.chat_id,
                message_id=self.message_id,
            )
        except TelegramAPIError as e:
            # Удаленное сообщение, флуд-лимит и т.п. - следующий тик попробует снова
            logging.debug(f"Не удалось обновить отсчет в группе {self.chat_id}: {e}")

    async def finished(self, result: DrawResult) -> None:
        await self._replace(texts.draw_result(
            channel_post_id=result.plan.post.channel_post_id,
            entries=result.plan.total_entries,
            winners=result.winners,
            mention_tag=self.mention_tag,
        ))

    async def failed(self, plan: DrawPlan) -> None:
        await self._replace(texts.DRAW_FAILED)

    async def _replace(self, text: str) -> None:
        """Правит живое сообщение, а если не вышло - отправляет новое"""
        if self.message_id is not None:
            try:
                await self.bot.edit_message_text(text=text, chat_id=self.chat_id, message_id=self.message_id)
                return
            except TelegramAPIError as e:
                logging.warning(f"Не удалось отредактировать сообщение розыгрыша в группе {self.chat_id}: {e}")

        try:
            await self.bot.send_message(chat_id=self.chat_id, text=text)
        except TelegramAPIError as e:
            logging.error(f"Не удалось отправить итог розыгрыша в группу {self.chat_id}: {e}")
