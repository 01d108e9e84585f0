"""
Portfolio service — the per-user dashboard figures in one call.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from yieldbook.core.exceptions import NotFoundException
from yieldbook.domain.accrual import accrues, compute_accrued_profit, compute_monthly_payout
from yieldbook.domain.reconciliation import compute_balance
from yieldbook.domain.window import resolve_window
from yieldbook.models.investment import InvestmentStatus
from yieldbook.repositories.investment_repo import InvestmentRepository
from yieldbook.repositories.user_repo import UserRepository
from yieldbook.repositories.withdrawal_repo import WithdrawalRepository
from yieldbook.services.guards import can_submit_today
from yieldbook.utils.dates import month_bounds_utc, to_business_date, utcnow

ZERO = Decimal(0)


@dataclass(frozen=True)
class PortfolioSummary:
    user_id: UUID
    total_invested: Decimal
    pending_amount: Decimal
    accrued_profit: Decimal
    monthly_payout: Decimal
    available_balance: Decimal
    active_investments: int
    window_start: date
    window_end: date
    can_submit_today: bool


class PortfolioService:
    def __init__(
        self,
        user_repo: UserRepository,
        invest_repo: InvestmentRepository,
        withdraw_repo: WithdrawalRepository,
    ):
        self._user_repo = user_repo
        self._invest_repo = invest_repo
        self._withdraw_repo = withdraw_repo

    async def get_summary(self, user_id: UUID, now: Optional[datetime] = None) -> PortfolioSummary:
        """
        Totals over approved (and legacy) investments, plus this month's
        withdrawable balance and submission window.
        """
        now = now or utcnow()
        user = await self._user_repo.get(user_id)
        if not user:
            raise NotFoundException("User", user_id)

        today = to_business_date(now)
        start, end = month_bounds_utc(today)
        investments = await self._invest_repo.list_for_user(user_id)
        withdrawals = await self._withdraw_repo.list_for_user(user_id, start, end)

        earning = [inv for inv in investments if accrues(inv)]
        balance = compute_balance(investments, withdrawals, today)
        window = resolve_window(today.year, today.month)

        return PortfolioSummary(
            user_id=user_id,
            total_invested=sum((Decimal(inv.amount) for inv in earning), ZERO),
            pending_amount=sum(
                (
                    Decimal(inv.amount)
                    for inv in investments
                    if inv.effective_status == InvestmentStatus.PENDING
                ),
                ZERO,
            ),
            accrued_profit=sum((compute_accrued_profit(inv, now) for inv in earning), ZERO),
            monthly_payout=sum((compute_monthly_payout(inv) for inv in earning), ZERO),
            available_balance=balance.display_available,
            active_investments=len(earning),
            window_start=window.start,
            window_end=window.end,
            can_submit_today=can_submit_today(user, today),
        )
