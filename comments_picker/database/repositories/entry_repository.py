from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import logging

from comments_picker.database.models import Entry


class EntryRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add_entry(self, group_id: int, channel_id: int, channel_post_id: int, user_id: int,
                        username: Optional[str], display_name: str, comment: str,
                        comment_message_id: Optional[int]) -> Optional[Entry]:
        """
        Сохраняет заявку. Проверки "уже участвует" нет намеренно: дубль
        отсекает уникальное ограничение, в том числе при одновременных вставках.

        Returns:
            Optional[Entry]: Новая заявка или None, если пользователь уже участвует
        """
        entry = Entry(
            group_id=group_id,
            channel_id=channel_id,
            channel_post_id=channel_post_id,
            user_id=user_id,
            username=username or None,
            display_name=display_name,
            comment=comment,
            comment_message_id=comment_message_id,
        )
        self.session.add(entry)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            logging.debug(f"Повторная заявка пользователя {user_id} на пост {channel_id}/{channel_post_id} пропущена")
            return None
        return entry

    async def list_for_post(self, group_id: int, channel_id: int, channel_post_id: int) -> List[Entry]:
        result = await self.session.execute(
            select(Entry).where(
                Entry.group_id == group_id,
                Entry.channel_id == channel_id,
                Entry.channel_post_id == channel_post_id,
            ).order_by(Entry.id)
        )
        return list(result.scalars().all())

    async def count_for_post(self, group_id: int, channel_id: int, channel_post_id: int) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(Entry).where(
                Entry.group_id == group_id,
                Entry.channel_id == channel_id,
                Entry.channel_post_id == channel_post_id,
            )
        )
        return result.scalar() or 0
