"""
Withdrawal service — business logic for withdrawal requests.

The ceiling a user may withdraw this month is recomputed from persisted
records immediately before every write; whatever balance a client displayed
is never trusted.

Race condition note:
    The balance check, the ``count_for_user() + 1`` sequence number and the
    insert are separate statements. Two concurrent submissions by the same
    user read the same count, so the ``(user_id, withdrawal_id)`` unique
    constraint rejects the second insert and it surfaces as a 409 instead of
    slipping past the ceiling.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from yieldbook.core.config import settings
from yieldbook.core.exceptions import (
    BusinessRuleViolation,
    ConflictException,
    NotFoundException,
    ValidationFailure,
)
from yieldbook.domain.reconciliation import BalanceBreakdown, compute_balance, management_fee
from yieldbook.models.user import User
from yieldbook.models.withdrawal import Withdrawal, WithdrawalStatus
from yieldbook.repositories.investment_repo import InvestmentRepository
from yieldbook.repositories.user_repo import UserRepository
from yieldbook.repositories.withdrawal_repo import WithdrawalRepository
from yieldbook.services.guards import ensure_account_active, ensure_window_open
from yieldbook.services.notification_service import NotificationService, format_naira
from yieldbook.services.user_service import check_pin
from yieldbook.utils.dates import month_bounds_utc, to_business_date, utcnow

logger = logging.getLogger(__name__)


class WithdrawalService:
    """Encapsulates submission rules and balance queries for :class:`Withdrawal`."""

    def __init__(
        self,
        withdraw_repo: WithdrawalRepository,
        invest_repo: InvestmentRepository,
        user_repo: UserRepository,
        notifier: NotificationService,
    ):
        self._withdraw_repo = withdraw_repo
        self._invest_repo = invest_repo
        self._user_repo = user_repo
        self._notifier = notifier

    async def _get_user(self, user_id: UUID) -> User:
        user = await self._user_repo.get(user_id)
        if not user:
            raise NotFoundException("User", user_id)
        return user

    async def _balance(self, user_id: UUID, now: datetime) -> BalanceBreakdown:
        today = to_business_date(now)
        start, end = month_bounds_utc(today)
        investments = await self._invest_repo.list_for_user(user_id)
        withdrawals = await self._withdraw_repo.list_for_user(user_id, start, end)
        return compute_balance(investments, withdrawals, today)

    # ── Queries ──

    async def get_available_balance(
        self, user_id: UUID, now: Optional[datetime] = None
    ) -> BalanceBreakdown:
        await self._get_user(user_id)
        return await self._balance(user_id, now or utcnow())

    async def list_withdrawals(self, user_id: UUID) -> List[Withdrawal]:
        await self._get_user(user_id)
        return await self._withdraw_repo.list_for_user(user_id)

    async def list_pending(self, skip: int = 0, limit: int = 100) -> List[Withdrawal]:
        return await self._withdraw_repo.list_by_status(WithdrawalStatus.PENDING, skip, limit)

    # ── Commands ──

    async def submit_withdrawal(
        self, user_id: UUID, amount: Decimal, pin: str, now: Optional[datetime] = None
    ) -> Withdrawal:
        """
        Record a Pending withdrawal request.

        Validation sequence:
        1. User exists (404) and is active (401).
        2. Submission window is open unless exempt (422).
        3. ``amount`` is at least the minimum (422).
        4. PIN is set (422) and matches (401).
        5. ``amount`` does not exceed the freshly recomputed balance (422).
        6. No concurrent request took the same sequence number (409).
        """
        now = now or utcnow()

        user = await self._get_user(user_id)
        ensure_account_active(user)
        ensure_window_open(user, to_business_date(now), "withdrawal")

        amount = Decimal(amount)
        if amount < settings.MIN_WITHDRAWAL_AMOUNT:
            raise ValidationFailure(
                f"Minimum withdrawal amount is {format_naira(settings.MIN_WITHDRAWAL_AMOUNT)}."
            )

        check_pin(user, pin)

        balance = await self._balance(user_id, now)
        if amount > balance.available:
            logger.info(
                "Withdrawal of %s refused; available %s",
                amount,
                balance.available,
                extra={"user_id": str(user_id), "operation": "submit_withdrawal"},
            )
            raise BusinessRuleViolation(
                "Requested amount exceeds your available balance of "
                f"{format_naira(balance.display_available)}."
            )

        sequence = await self._withdraw_repo.count_for_user(user_id) + 1
        fee = management_fee(amount, settings.MANAGEMENT_FEE_RATE)
        withdrawal = Withdrawal(
            withdrawal_id=str(sequence),
            user_id=user.id,
            amount=amount,
            management_fee=fee,
            payout_amount=amount - fee,
            status=WithdrawalStatus.PENDING,
            created_at=now,
        )
        try:
            created = await self._withdraw_repo.create(withdrawal)
        except IntegrityError:
            await self._withdraw_repo.db.rollback()
            logger.warning(
                "IntegrityError caught for withdrawal #%s (concurrent submission)",
                sequence,
                extra={"user_id": str(user_id), "operation": "submit_withdrawal"},
            )
            raise ConflictException(
                "Another withdrawal request was submitted at the same time. Please try again."
            )

        logger.info(
            "Created withdrawal #%s for user %s: %s (fee %s)",
            created.withdrawal_id,
            user.id,
            created.amount,
            created.management_fee,
            extra={"entity_id": str(created.id), "operation": "submit_withdrawal"},
        )

        portfolio = await self._invest_repo.list_for_user(user.id)
        await self._notifier.notify_withdrawal_request(user, created, portfolio)
        return created
