"""
User repository — data-access layer for the ``users`` table.

Extends generic CRUD with an email look-up used during duplicate detection.
"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.future import select

from yieldbook.models.user import User
from yieldbook.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Concrete repository for :class:`User` entities."""

    async def get_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive email look-up.  Returns ``None`` when absent."""
        stmt = select(self.model).where(func.lower(self.model.email) == email.lower())
        rows = await self._scalars(stmt)
        return rows[0] if rows else None
