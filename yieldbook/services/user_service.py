"""
User service — registration, profile look-ups, withdrawal PIN and account status.

Race condition note:
    The ``get_by_email()`` pre-check followed by ``create()`` can race with a
    concurrent registration for the same address.  The unique index is the
    real guard; its ``IntegrityError`` is translated to the same 409.
"""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from yieldbook.core.exceptions import (
    AuthenticationFailure,
    BusinessRuleViolation,
    ConflictException,
    NotFoundException,
)
from yieldbook.core.security import hash_pin, validate_pin_format, verify_pin
from yieldbook.models.user import User
from yieldbook.repositories.user_repo import UserRepository
from yieldbook.schemas.user import UserCreate
from yieldbook.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class UserService:
    """Encapsulates account rules for :class:`User`."""

    def __init__(self, user_repo: UserRepository, notifier: NotificationService):
        self._repo = user_repo
        self._notifier = notifier

    # ── Queries ──

    async def get_user(self, user_id: UUID) -> User:
        user = await self._repo.get(user_id)
        if not user:
            raise NotFoundException("User", user_id)
        return user

    async def get_user_by_email(self, email: str) -> User:
        user = await self._repo.get_by_email(email)
        if not user:
            raise NotFoundException("User", email)
        return user

    # ── Commands ──

    async def register_user(self, user_in: UserCreate) -> User:
        """
        Create a profile and send the registration emails.

        Raises :class:`ConflictException` when the email is already taken.
        """
        email = str(user_in.email).lower()
        if await self._repo.get_by_email(email):
            raise ConflictException(f"A user with email '{email}' already exists")

        user = User(**user_in.model_dump(exclude={"email"}), email=email)
        try:
            created = await self._repo.create(user)
        except IntegrityError:
            await self._repo.db.rollback()
            logger.warning("IntegrityError caught for duplicate email '%s' (TOCTOU race)", email)
            raise ConflictException(f"A user with email '{email}' already exists")

        logger.info("Registered user %s (%s)", created.id, created.email)
        await self._notifier.notify_new_user(created)
        return created

    async def set_withdrawal_pin(self, user_id: UUID, pin: str) -> User:
        """Store a bcrypt hash of a 4-digit PIN, replacing any previous one."""
        validate_pin_format(pin)
        user = await self.get_user(user_id)
        user.withdrawal_pin_hash = hash_pin(pin)
        updated = await self._repo.update(user)
        logger.info("Withdrawal PIN set", extra={"user_id": str(user_id), "operation": "set_pin"})
        return updated

    async def verify_withdrawal_pin(self, user_id: UUID, pin: str) -> bool:
        """
        Check ``pin`` against the stored hash.

        Raises:
            BusinessRuleViolation: No PIN has been set yet.
            AuthenticationFailure: The PIN does not match.
        """
        user = await self.get_user(user_id)
        check_pin(user, pin)
        return True

    async def set_active(self, user_id: UUID, active: bool) -> User:
        """Enable or disable the account and tell both admin and user."""
        user = await self.get_user(user_id)
        if user.is_active == active:
            return user
        user.is_active = active
        updated = await self._repo.update(user)
        logger.info(
            "User account %s",
            "activated" if active else "deactivated",
            extra={"user_id": str(user_id), "operation": "set_active"},
        )
        await self._notifier.notify_account_status(updated, active)
        return updated


def check_pin(user: User, pin: str) -> None:
    """Shared by PIN verification and withdrawal submission."""
    if not user.withdrawal_pin_hash:
        raise BusinessRuleViolation("Set a withdrawal PIN before requesting a withdrawal.")
    if not verify_pin(pin, user.withdrawal_pin_hash):
        logger.warning("Incorrect PIN", extra={"user_id": str(user.id), "operation": "verify_pin"})
        raise AuthenticationFailure()
