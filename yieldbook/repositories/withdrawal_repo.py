"""
Withdrawal repository — data-access layer for the ``withdrawals`` table.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.future import select

from yieldbook.models.withdrawal import Withdrawal, WithdrawalStatus
from yieldbook.repositories.base import BaseRepository


class WithdrawalRepository(BaseRepository[Withdrawal]):
    """Concrete repository for :class:`Withdrawal` entities."""

    async def list_for_user(
        self,
        user_id: UUID,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Withdrawal]:
        """Withdrawals of ``user_id``, newest first, within ``[start, end)`` when given."""
        stmt = select(self.model).where(self.model.user_id == user_id)
        if start is not None:
            stmt = stmt.where(self.model.created_at >= start)
        if end is not None:
            stmt = stmt.where(self.model.created_at < end)
        stmt = stmt.order_by(self.model.created_at.desc())
        return await self._scalars(stmt)

    async def count_for_user(self, user_id: UUID) -> int:
        stmt = select(func.count()).select_from(self.model).where(self.model.user_id == user_id)
        return await self._scalar(stmt)

    async def list_by_status(
        self, status: WithdrawalStatus, skip: int = 0, limit: int = 100
    ) -> List[Withdrawal]:
        stmt = (
            select(self.model)
            .where(self.model.status == status)
            .order_by(self.model.created_at)
            .offset(skip)
            .limit(limit)
        )
        return await self._scalars(stmt)
