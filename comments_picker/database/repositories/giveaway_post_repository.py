from datetime import datetime, timedelta
from sqlalchemy import select, update, delete, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import logging

from comments_picker.database.models import GiveawayPost, Entry, WinnerHistory
from comments_picker.utils.helpers import utcnow, format_log_message

# Захват старше этого считается брошенным (процесс упал посреди розыгрыша)
DRAW_CLAIM_TTL = timedelta(minutes=5)


class GiveawayPostRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, channel_id: int, channel_post_id: int) -> Optional[GiveawayPost]:
        result = await self.session.execute(
            select(GiveawayPost).where(
                GiveawayPost.channel_id == channel_id,
                GiveawayPost.channel_post_id == channel_post_id,
            )
        )
        return result.scalar_one_or_none()

    async def record_detection(self, channel_id: int, channel_post_id: int, mention_tag: str,
                               linked_group_id: Optional[int] = None) -> GiveawayPost:
        """
        Регистрирует пост-розыгрыш. Повторная регистрация только обновляет связанную группу.

        Args:
            channel_id (int): ID канала
            channel_post_id (int): ID поста в канале
            mention_tag (str): Метка, по которой найден пост
            linked_group_id (Optional[int]): Группа обсуждения, если удалось узнать

        Returns:
            GiveawayPost: Запись о посте
        """
        post = await self.get(channel_id, channel_post_id)
        if post is None:
            post = GiveawayPost(
                channel_id=channel_id,
                channel_post_id=channel_post_id,
                mention_tag=mention_tag,
                discussion_group_id=linked_group_id,
                picked=False,
                created_at=utcnow(),
            )
            self.session.add(post)
            try:
                await self.session.commit()
                return post
            except IntegrityError:
                # Тот же пост пришел дважды одновременно
                await self.session.rollback()
                post = await self.get(channel_id, channel_post_id)

        # Неудачный поиск связанной группы не должен стирать уже известную
        if linked_group_id is not None and post.discussion_group_id != linked_group_id:
            post.discussion_group_id = linked_group_id
            await self.session.commit()
        return post

    async def find_pickable(self, channel_id: int, channel_post_id: int) -> Optional[GiveawayPost]:
        """Возвращает пост, только если победители по нему еще не выбраны"""
        result = await self.session.execute(
            select(GiveawayPost).where(
                GiveawayPost.channel_id == channel_id,
                GiveawayPost.channel_post_id == channel_post_id,
                GiveawayPost.picked.is_(False),
            )
        )
        return result.scalar_one_or_none()

    async def claim_for_drawing(self, post_id: int, now: Optional[datetime] = None) -> bool:
        """
        Атомарно захватывает пост под розыгрыш.
        Успех только у одного вызова: пост не выбран и не захвачен (или захват устарел).
        """
        now = now or utcnow()
        result = await self.session.execute(
            update(GiveawayPost)
            .where(
                GiveawayPost.id == post_id,
                GiveawayPost.picked.is_(False),
                or_(
                    GiveawayPost.drawing_started_at.is_(None),
                    GiveawayPost.drawing_started_at < now - DRAW_CLAIM_TTL,
                ),
            )
            .values(drawing_started_at=now)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return result.rowcount == 1

    async def release_claim(self, post_id: int) -> None:
        await self.session.execute(
            update(GiveawayPost)
            .where(GiveawayPost.id == post_id, GiveawayPost.picked.is_(False))
            .values(drawing_started_at=None)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()

    async def resolve(self, post: GiveawayPost, group_id: int, winners: List[Entry],
                      picked_at: Optional[datetime] = None) -> bool:
        """
        Завершает розыгрыш одной транзакцией: помечает пост, пишет историю
        победителей и удаляет все заявки поста.

        Args:
            post (GiveawayPost): Захваченный пост
            group_id (int): Группа, в которой проходил розыгрыш
            winners (List[Entry]): Победители в порядке мест
            picked_at (datetime, optional): Время розыгрыша

        Returns:
            bool: False, если пост уже был отмечен как разыгранный
        """
        picked_at = picked_at or utcnow()
        try:
            result = await self.session.execute(
                update(GiveawayPost)
                .where(GiveawayPost.id == post.id, GiveawayPost.picked.is_(False))
                .values(picked=True, picked_at=picked_at, drawing_started_at=None)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                await self.session.rollback()
                return False

            for winner in winners:
                self.session.add(WinnerHistory(
                    group_id=group_id,
                    channel_id=post.channel_id,
                    channel_post_id=post.channel_post_id,
                    winner_user_id=winner.user_id,
                    winner_username=winner.username,
                    winner_name=winner.display_name,
                    winner_comment=winner.comment,
                    picked_at=picked_at,
                ))

            await self.session.execute(
                delete(Entry).where(
                    Entry.group_id == group_id,
                    Entry.channel_id == post.channel_id,
                    Entry.channel_post_id == post.channel_post_id,
                )
                .execution_options(synchronize_session=False)
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logging.info(format_log_message("Розыгрыш завершен", {
            "group_id": group_id,
            "channel_id": post.channel_id,
            "channel_post_id": post.channel_post_id,
            "winners": [w.user_id for w in winners],
        }))
        return True
