"""
Generic async repository (Data Access Layer).

Concrete repositories inherit from ``BaseRepository[T]`` and add the
entity-specific queries their services need.

Design notes:
- **IntegrityError** is not caught here; each service maps it to its own
  domain error (duplicate email → 409, bad foreign key → 422).
- **OperationalError** (connection loss, deadlock) rolls the session back and
  is re-raised, so a failed request never leaks a dirty transaction.
- Status changes go through :meth:`update_status_if`, a single conditional
  ``UPDATE`` that only matches rows still in the expected state. Two admins
  racing on the same record cannot both win.
"""

import logging
from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import update
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from yieldbook.core.resilience import db_circuit_breaker

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """
    Generic CRUD repository for SQLModel entities.

    Every database call is routed through ``db_circuit_breaker`` so that a
    database outage fails fast instead of piling up on timeouts.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    # ── Internal helpers ──

    async def _execute_with_circuit_breaker(
        self, func: Any, *args: Any, **kwargs: Any
    ) -> Any:
        return await db_circuit_breaker.call(func, *args, **kwargs)

    async def _commit(self, operation: str) -> None:
        try:
            await self.db.commit()
        except OperationalError:
            await self.db.rollback()
            logger.error("OperationalError during %s for %s", operation, self.model.__name__)
            raise

    async def _scalars(self, stmt: Any) -> List[ModelType]:
        async def _run() -> List[ModelType]:
            result = await self.db.execute(stmt)
            return list(result.scalars().all())

        return await self._execute_with_circuit_breaker(_run)

    async def _scalar(self, stmt: Any) -> Any:
        async def _run() -> Any:
            result = await self.db.execute(stmt)
            return result.scalar_one()

        return await self._execute_with_circuit_breaker(_run)

    # ── CRUD ──

    async def get(self, id: Any) -> Optional[ModelType]:
        """Fetch a single entity by primary key.  Returns ``None`` if not found."""

        async def _get() -> Optional[ModelType]:
            return await self.db.get(self.model, id)

        return await self._execute_with_circuit_breaker(_get)

    async def create(self, obj_in: ModelType) -> ModelType:
        """Insert a new entity and return the refreshed instance."""

        async def _create() -> ModelType:
            self.db.add(obj_in)
            await self._commit("create")
            await self.db.refresh(obj_in)
            return obj_in

        return await self._execute_with_circuit_breaker(_create)

    async def update(self, entity: ModelType) -> ModelType:
        """Persist attribute changes the caller already made on ``entity``."""

        async def _update() -> ModelType:
            merged = await self.db.merge(entity)
            await self._commit("update")
            await self.db.refresh(merged)
            return merged

        return await self._execute_with_circuit_breaker(_update)

    async def update_status_if(self, id: Any, expected: Any, new: Any) -> bool:
        """
        Set ``status = new`` only where the row is still ``expected``.

        Returns ``True`` when exactly this call performed the change. The
        in-session copy of the row is reloaded either way, so a following
        :meth:`get` sees the committed state.
        """

        async def _update_status() -> bool:
            stmt = (
                update(self.model)
                .where(self.model.id == id, self.model.status == expected)
                .values(status=new)
                .execution_options(synchronize_session=False)
            )
            result = await self.db.execute(stmt)
            await self._commit("status update")
            await self.db.get(self.model, id, populate_existing=True)
            return result.rowcount == 1

        return await self._execute_with_circuit_breaker(_update_status)
