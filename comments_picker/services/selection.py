import random
import logging
from dataclasses import dataclass
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from typing import List, Optional, Protocol

from comments_picker.database.models import GiveawayPost, Entry
from comments_picker.database.repositories import GiveawayPostRepository, EntryRepository
from comments_picker.services.countdown import Countdown
from comments_picker.services.draw import clamp_winners_count, pick_winners, sample_rolling
from comments_picker.services.errors import PreconditionNotMet, Rejection, DrawFailed
from comments_picker.services.giveaways import PostRef
from comments_picker.utils.helpers import utcnow, format_log_message

DRAW_SECONDS = 20


@dataclass
class DrawPlan:
    group_id: int
    post: GiveawayPost
    post_ref: PostRef
    entries: List[Entry]
    winners_count: int

    @property
    def total_entries(self) -> int:
        return len(self.entries)


@dataclass
class DrawResult:
    plan: DrawPlan
    winners: List[Entry]
    picked_at: datetime


class DrawDisplay(Protocol):
    """Живое сообщение о ходе розыгрыша"""

    async def started(self, plan: DrawPlan, seconds_left: int, rolling: Optional[Entry]) -> None: ...

    async def tick(self, plan: DrawPlan, seconds_left: int, rolling: Optional[Entry]) -> None: ...

    async def finished(self, result: DrawResult) -> None: ...

    async def failed(self, plan: DrawPlan) -> None: ...


class SelectionEngine:
    """
    Выбор победителей по посту: проверки, захват поста, 20-секундный
    отсчет с живым сообщением, жеребьевка и фиксация результата.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession],
                 rng: Optional[random.Random] = None, tick_interval: float = 1.0):
        self.session_factory = session_factory
        self.rng = rng or random.SystemRandom()
        self.tick_interval = tick_interval

    async def prepare(self, group_id: int, post_ref: PostRef, requested: Optional[int] = None) -> DrawPlan:
        """
        Проверяет пост и захватывает его под розыгрыш.

        Args:
            group_id (int): Группа, где вызвана команда
            post_ref (PostRef): Пост канала из пересланного сообщения
            requested (Optional[int]): Запрошенное число победителей

        Returns:
            DrawPlan: Снимок заявок и итоговое число победителей

        Raises:
            PreconditionNotMet: Пост не найден или уже разыгран, чужая группа,
                нет заявок, розыгрыш уже идет
        """
        winners_count = clamp_winners_count(requested)

        async with self.session_factory() as session:
            posts = GiveawayPostRepository(session)
            entries_repo = EntryRepository(session)

            post = await posts.find_pickable(post_ref.channel_id, post_ref.post_id)
            if post is None:
                raise PreconditionNotMet(Rejection.POST_UNAVAILABLE)
            if not post.accepts_group(group_id):
                raise PreconditionNotMet(Rejection.GROUP_MISMATCH)
            if not await entries_repo.count_for_post(group_id, post.channel_id, post.channel_post_id):
                raise PreconditionNotMet(Rejection.NO_ENTRIES)

            if not await posts.claim_for_drawing(post.id):
                raise PreconditionNotMet(Rejection.DRAW_IN_PROGRESS)

            entries = await entries_repo.list_for_post(group_id, post.channel_id, post.channel_post_id)
            if not entries:
                await posts.release_claim(post.id)
                raise PreconditionNotMet(Rejection.NO_ENTRIES)

        logging.info(format_log_message("Запущен розыгрыш", {
            "group_id": group_id,
            "channel_id": post.channel_id,
            "channel_post_id": post.channel_post_id,
            "entries": len(entries),
            "winners": min(winners_count, len(entries)),
        }))
        return DrawPlan(
            group_id=group_id,
            post=post,
            post_ref=post_ref,
            entries=entries,
            winners_count=min(winners_count, len(entries)),
        )

    async def run(self, plan: DrawPlan, display: DrawDisplay) -> DrawResult:
        """
        Проводит захваченный розыгрыш до конца. Отмены нет: отсчет всегда
        идет все DRAW_SECONDS секунд.

        Raises:
            DrawFailed: Не удалось показать сообщение или сохранить результат
        """
        try:
            await display.started(plan, DRAW_SECONDS, sample_rolling(plan.entries, self.rng))

            countdown = Countdown(
                DRAW_SECONDS,
                lambda left: display.tick(plan, left, sample_rolling(plan.entries, self.rng)),
                interval=self.tick_interval,
            )
            await countdown.run()

            winners = pick_winners(plan.entries, plan.winners_count, self.rng)
            picked_at = utcnow()
            async with self.session_factory() as session:
                resolved = await GiveawayPostRepository(session).resolve(
                    plan.post, plan.group_id, winners, picked_at
                )
            if not resolved:
                raise DrawFailed(f"пост {plan.post.channel_id}/{plan.post.channel_post_id} уже разыгран")
        except Exception as e:
            logging.error(f"Ошибка розыгрыша по посту {plan.post.channel_id}/{plan.post.channel_post_id}: {e}",
                          exc_info=True)
            await self._release(plan)
            try:
                await display.failed(plan)
            except Exception as notify_error:
                logging.warning(f"Не удалось сообщить об ошибке розыгрыша: {notify_error}")
            if isinstance(e, DrawFailed):
                raise
            raise DrawFailed(str(e)) from e

        result = DrawResult(plan=plan, winners=winners, picked_at=picked_at)
        await display.finished(result)
        return result

    async def _release(self, plan: DrawPlan) -> None:
        try:
            async with self.session_factory() as session:
                await GiveawayPostRepository(session).release_claim(plan.post.id)
        except Exception as e:
            logging.error(f"Не удалось снять захват поста {plan.post.id}: {e}")
