import math
from dataclasses import dataclass, field
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from comments_picker.database.models import WinnerHistory

WINNER_LIST_PAGE_SIZE = 8


@dataclass
class HistoryPage:
    rows: List[WinnerHistory] = field(default_factory=list)
    page: int = 1
    total_pages: int = 1
    total_count: int = 0
    page_size: int = WINNER_LIST_PAGE_SIZE

    @property
    def is_empty(self) -> bool:
        return self.total_count == 0

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def count_pages(total_count: int, page_size: int = WINNER_LIST_PAGE_SIZE) -> int:
    return max(1, math.ceil(total_count / page_size))


def clamp_page(page: int, total_pages: int) -> int:
    """Приводит номер страницы к диапазону [1, total_pages]"""
    return min(max(1, page), total_pages)


class WinnerHistoryRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def count_for_group(self, group_id: int) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(WinnerHistory).where(WinnerHistory.group_id == group_id)
        )
        return result.scalar() or 0

    async def get_page(self, group_id: int, page: int, page_size: int = WINNER_LIST_PAGE_SIZE) -> HistoryPage:
        """
        Получает страницу истории победителей группы, новые сверху.

        Args:
            group_id (int): ID группы
            page (int): Запрошенная страница (приводится к допустимому диапазону)
            page_size (int): Размер страницы

        Returns:
            HistoryPage: Строки страницы и данные для навигации
        """
        total = await self.count_for_group(group_id)
        if not total:
            return HistoryPage(page_size=page_size)

        total_pages = count_pages(total, page_size)
        history_page = HistoryPage(
            page=clamp_page(page, total_pages),
            total_pages=total_pages,
            total_count=total,
            page_size=page_size,
        )

        # Внутри одного розыгрыша время одинаковое - порядок мест держит id
        result = await self.session.execute(
            select(WinnerHistory)
            .where(WinnerHistory.group_id == group_id)
            .order_by(WinnerHistory.picked_at.desc(), WinnerHistory.id.asc())
            .offset(history_page.offset)
            .limit(page_size)
        )
        history_page.rows = list(result.scalars().all())
        return history_page
