"""
Investment service — business logic for submitting and listing investments.

Submission is the only path that creates investments.  The checkout is
initialised with the payment gateway *before* anything is written, so a
gateway outage leaves no orphan Pending record behind; the gateway's
reference becomes the investment's display id.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from yieldbook.clients.paystack import PaystackClient
from yieldbook.clients.resend import EmailAttachment
from yieldbook.core.exceptions import BusinessRuleViolation, NotFoundException, ValidationFailure
from yieldbook.domain.accrual import compute_accrued_profit, compute_monthly_payout
from yieldbook.domain.plans import get_plan
from yieldbook.models.investment import Investment, InvestmentStatus
from yieldbook.repositories.investment_repo import InvestmentRepository
from yieldbook.repositories.user_repo import UserRepository
from yieldbook.schemas.investment import InvestmentSubmit
from yieldbook.services.guards import ensure_account_active, ensure_window_open
from yieldbook.services.notification_service import NotificationService
from yieldbook.services.report_service import build_report_workbook
from yieldbook.utils.dates import to_business_date, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvestmentCheckout:
    investment: Investment
    authorization_url: str
    access_code: str


@dataclass(frozen=True)
class AccruedInvestment:
    investment: Investment
    accrued_profit: Decimal
    monthly_payout: Decimal


class InvestmentService:
    """
    Encapsulates submission rules and read models for :class:`Investment`.

    Submission order:
    1. The **user** must exist (404) and be active (401).
    2. The **plan** must exist and the amount must fall within its bounds (422).
    3. The **submission window** must be open, unless the user is exempt (422).
    4. The **payment gateway** issues a checkout (502 on failure).
    5. The investment is persisted as ``Pending`` and the admin is emailed.
    """

    def __init__(
        self,
        invest_repo: InvestmentRepository,
        user_repo: UserRepository,
        payments: PaystackClient,
        notifier: NotificationService,
    ):
        self._invest_repo = invest_repo
        self._user_repo = user_repo
        self._payments = payments
        self._notifier = notifier

    # ── Queries ──

    async def list_investments(
        self, user_id: UUID, as_of: Optional[datetime] = None
    ) -> List[AccruedInvestment]:
        """All investments of a user, newest first, with live accrued profit."""
        if not await self._user_repo.get(user_id):
            raise NotFoundException("User", user_id)

        as_of = as_of or utcnow()
        investments = await self._invest_repo.list_for_user(user_id)
        return [
            AccruedInvestment(
                investment=inv,
                accrued_profit=compute_accrued_profit(inv, as_of),
                monthly_payout=compute_monthly_payout(inv),
            )
            for inv in investments
        ]

    async def list_pending(self, skip: int = 0, limit: int = 100) -> List[Investment]:
        return await self._invest_repo.list_by_status(InvestmentStatus.PENDING, skip, limit)

    # ── Commands ──

    async def backfill_legacy_statuses(self) -> int:
        """Give status-less legacy rows an explicit ``Approved`` status."""
        updated = await self._invest_repo.backfill_legacy_statuses()
        logger.info("Backfilled %d legacy investment statuses", updated)
        return updated

    async def submit_investment(
        self, user_id: UUID, invest_in: InvestmentSubmit, now: Optional[datetime] = None
    ) -> InvestmentCheckout:
        now = now or utcnow()

        user = await self._user_repo.get(user_id)
        if not user:
            raise NotFoundException("User", user_id)
        ensure_account_active(user)

        plan = get_plan(invest_in.plan_id)
        if plan is None:
            raise ValidationFailure(f"Unknown investment plan '{invest_in.plan_id}'")
        if not plan.min_amount <= invest_in.amount <= plan.max_amount:
            raise ValidationFailure(
                f"Amount for the {plan.name} plan must be between "
                f"₦{plan.min_amount:,.2f} and ₦{plan.max_amount:,.2f}",
                details={"min_amount": str(plan.min_amount), "max_amount": str(plan.max_amount)},
            )

        ensure_window_open(user, to_business_date(now), "investment")

        checkout = await self._payments.initialize_transaction(user.email, invest_in.amount)

        investment = Investment(
            investment_id=checkout.reference,
            user_id=user.id,
            investment_type=plan.label,
            plan_id=plan.plan_id,
            amount=invest_in.amount,
            status=InvestmentStatus.PENDING,
            created_at=now,
        )
        try:
            created = await self._invest_repo.create(investment)
        except IntegrityError as exc:
            await self._invest_repo.db.rollback()
            logger.warning(
                "IntegrityError creating investment (user=%s, ref=%s): %s",
                user_id,
                checkout.reference,
                exc,
            )
            raise BusinessRuleViolation(
                "Investment could not be recorded. Please contact support with "
                f"payment reference {checkout.reference}."
            )

        logger.info(
            "Created investment %s: user %s, %s ₦%s",
            created.investment_id,
            user.id,
            created.investment_type,
            created.amount,
            extra={"entity_id": str(created.id), "operation": "submit_investment"},
        )

        portfolio = await self._invest_repo.list_for_user(user.id)
        attachment = EmailAttachment(
            filename=f"Investment_Report_{'_'.join(user.full_name.split())}.xlsx",
            content=build_report_workbook(user, portfolio, []),
        )
        await self._notifier.notify_new_investment(user, created, portfolio, attachment)

        return InvestmentCheckout(
            investment=created,
            authorization_url=checkout.authorization_url,
            access_code=checkout.access_code,
        )
