"""
Investment repository — data-access layer for the ``investments`` table.

Adds the per-user history query (optionally bounded by a UTC range), a
pending queue for administrators, and the one-off legacy status backfill.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, update
from sqlalchemy.future import select

from yieldbook.models.investment import Investment, InvestmentStatus
from yieldbook.repositories.base import BaseRepository


class InvestmentRepository(BaseRepository[Investment]):
    """Concrete repository for :class:`Investment` entities."""

    async def list_for_user(
        self,
        user_id: UUID,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Investment]:
        """
        All investments of ``user_id``, newest first.

        ``start`` is inclusive and ``end`` exclusive; either may be omitted.
        Served by the ``(user_id, created_at)`` index.
        """
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
        self, status: InvestmentStatus, skip: int = 0, limit: int = 100
    ) -> List[Investment]:
        stmt = (
            select(self.model)
            .where(self.model.status == status)
            .order_by(self.model.created_at)
            .offset(skip)
            .limit(limit)
        )
        return await self._scalars(stmt)

    async def backfill_legacy_statuses(self) -> int:
        """Write ``Approved`` into rows that predate the status column.  Returns the row count."""

        async def _backfill() -> int:
            stmt = (
                update(self.model)
                .where(self.model.status.is_(None))
                .values(status=InvestmentStatus.APPROVED)
                .execution_options(synchronize_session=False)
            )
            result = await self.db.execute(stmt)
            await self._commit("legacy status backfill")
            return result.rowcount or 0

        return await self._execute_with_circuit_breaker(_backfill)
