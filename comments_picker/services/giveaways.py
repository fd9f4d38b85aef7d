from dataclasses import dataclass
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from typing import List, Optional
import logging

from comments_picker.database.models import ApprovedGroup, GiveawayPost, Entry
from comments_picker.database.repositories import (
    ApprovedGroupRepository,
    GiveawayPostRepository,
    EntryRepository,
    WinnerHistoryRepository,
    HistoryPage,
)
from comments_picker.utils.helpers import format_log_message


@dataclass(frozen=True)
class PostRef:
    """Пост канала, на который ссылается пересланное в группу сообщение"""

    channel_id: int
    post_id: int
    reply_message_id: Optional[int] = None  # ID пересланной копии в группе


@dataclass(frozen=True)
class EntrySubmission:
    group_id: int
    post: PostRef
    user_id: int
    username: Optional[str]
    display_name: str
    comment: str
    message_id: Optional[int] = None


class GiveawayService:
    """
    Одобрение групп, регистрация постов, прием заявок и история победителей.

    Каждая операция открывает свою сессию: обработчики событий живут
    независимо друг от друга, кэша между ними нет.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def is_approved(self, group_id: int) -> bool:
        async with self.session_factory() as session:
            return await ApprovedGroupRepository(session).is_approved(group_id)

    async def approve(self, group_id: int, approver_id: int) -> ApprovedGroup:
        async with self.session_factory() as session:
            return await ApprovedGroupRepository(session).approve(group_id, approver_id)

    async def detect_post(self, channel_id: int, post_id: int, text: Optional[str], mention_tag: str,
                          linked_group_id: Optional[int] = None) -> Optional[GiveawayPost]:
        """
        Регистрирует пост канала как розыгрыш, если в тексте или подписи есть метка.

        Args:
            channel_id (int): ID канала
            post_id (int): ID поста
            text (Optional[str]): Текст или подпись поста
            mention_tag (str): Метка розыгрыша
            linked_group_id (Optional[int]): Связанная группа обсуждения, если известна

        Returns:
            Optional[GiveawayPost]: Пост или None, если метки нет
        """
        if not text or mention_tag not in text:
            return None

        async with self.session_factory() as session:
            post = await GiveawayPostRepository(session).record_detection(
                channel_id, post_id, mention_tag, linked_group_id
            )

        logging.info(format_log_message("Обнаружен пост-розыгрыш", {
            "channel_id": channel_id,
            "channel_post_id": post_id,
            "discussion_group_id": post.discussion_group_id,
        }))
        return post

    async def find_pickable(self, channel_id: int, post_id: int) -> Optional[GiveawayPost]:
        async with self.session_factory() as session:
            return await GiveawayPostRepository(session).find_pickable(channel_id, post_id)

    async def submit_entry(self, submission: EntrySubmission) -> Optional[Entry]:
        """
        Принимает комментарий как заявку. Любое невыполненное условие -
        тихий отказ (None), чтобы не спамить в группу.

        Returns:
            Optional[Entry]: Новая заявка; None для неодобренной группы, закрытого
            или чужого поста и повторной заявки
        """
        async with self.session_factory() as session:
            if not await ApprovedGroupRepository(session).is_approved(submission.group_id):
                return None

            post = await GiveawayPostRepository(session).find_pickable(
                submission.post.channel_id, submission.post.post_id
            )
            if post is None or not post.accepts_group(submission.group_id):
                return None

            entry = await EntryRepository(session).add_entry(
                group_id=submission.group_id,
                channel_id=submission.post.channel_id,
                channel_post_id=submission.post.post_id,
                user_id=submission.user_id,
                username=submission.username,
                display_name=submission.display_name,
                comment=submission.comment,
                comment_message_id=submission.message_id,
            )

        if entry is not None:
            logging.debug(format_log_message("Принята заявка", {
                "group_id": submission.group_id,
                "channel_post_id": submission.post.post_id,
                "user_id": submission.user_id,
            }))
        return entry

    async def list_entries(self, group_id: int, channel_id: int, post_id: int) -> List[Entry]:
        async with self.session_factory() as session:
            return await EntryRepository(session).list_for_post(group_id, channel_id, post_id)

    async def history_page(self, group_id: int, page: int) -> HistoryPage:
        async with self.session_factory() as session:
            return await WinnerHistoryRepository(session).get_page(group_id, page)
