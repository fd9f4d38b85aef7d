from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from comments_picker.database.models import ApprovedGroup
from comments_picker.utils.helpers import utcnow


class ApprovedGroupRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, group_id: int) -> Optional[ApprovedGroup]:
        result = await self.session.execute(
            select(ApprovedGroup).where(ApprovedGroup.group_id == group_id)
        )
        return result.scalar_one_or_none()

    async def is_approved(self, group_id: int) -> bool:
        """Проверяет, одобрена ли группа владельцем"""
        return await self.get(group_id) is not None

    async def approve(self, group_id: int, approved_by: int) -> ApprovedGroup:
        """
        Одобряет группу. Повторное одобрение просто обновляет отметку.

        Args:
            group_id (int): ID группы обсуждения
            approved_by (int): ID владельца

        Returns:
            ApprovedGroup: Запись об одобрении
        """
        group = await self.get(group_id)
        if group is None:
            group = ApprovedGroup(group_id=group_id, approved_by=approved_by, approved_at=utcnow())
            self.session.add(group)
            try:
                await self.session.commit()
                logging.info(f"Группа {group_id} одобрена пользователем {approved_by}")
                return group
            except IntegrityError:
                # Параллельное одобрение успело вставить запись - обновляем ее
                await self.session.rollback()
                group = await self.get(group_id)

        group.approved_by = approved_by
        group.approved_at = utcnow()
        await self.session.commit()
        logging.info(f"Группа {group_id} повторно одобрена пользователем {approved_by}")
        return group
