"""
Withdrawal balance reconciliation and fee arithmetic.

A user may withdraw, in any calendar month, up to the whole-month payout of
every approved investment made before that month, less whatever they have
already requested this month (pending, completed or rejected requests all
count, by their requested ``amount``).
"""

from dataclasses import dataclass
from datetime import date, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Sequence

from yieldbook.domain.accrual import accrues, compute_monthly_payout
from yieldbook.utils.dates import BUSINESS_TZ, as_date, to_business_date

ZERO = Decimal(0)
CENT = Decimal("0.01")
DEFAULT_FEE_RATE = Decimal("0.02")


@dataclass(frozen=True)
class BalanceBreakdown:
    total_monthly_payout: Decimal
    total_withdrawn_this_month: Decimal
    available: Decimal
    eligible_investment_count: int

    @property
    def display_available(self) -> Decimal:
        """Balance shown to users; never negative."""
        return max(self.available, ZERO)


def _same_month(left: date, right: date) -> bool:
    return (left.year, left.month) == (right.year, right.month)


def is_eligible(investment, today: date, tz: tzinfo = BUSINESS_TZ) -> bool:
    """Approved and created in a month strictly before ``today``'s month."""
    if not accrues(investment):
        return False
    created = to_business_date(investment.created_at, tz)
    today = as_date(today)
    return (created.year, created.month) < (today.year, today.month)


def eligible_investments(investments: Iterable, today: date, tz: tzinfo = BUSINESS_TZ) -> List:
    return [inv for inv in investments if is_eligible(inv, today, tz)]


def withdrawn_in_month(withdrawals: Iterable, today: date, tz: tzinfo = BUSINESS_TZ) -> Decimal:
    today = as_date(today)
    return sum(
        (
            Decimal(w.amount)
            for w in withdrawals
            if _same_month(to_business_date(w.created_at, tz), today)
        ),
        ZERO,
    )


def compute_balance(
    investments: Sequence, withdrawals: Sequence, today: date, tz: tzinfo = BUSINESS_TZ
) -> BalanceBreakdown:
    eligible = eligible_investments(investments, today, tz)
    total_payout = sum((compute_monthly_payout(inv) for inv in eligible), ZERO)
    withdrawn = withdrawn_in_month(withdrawals, today, tz)
    return BalanceBreakdown(
        total_monthly_payout=total_payout,
        total_withdrawn_this_month=withdrawn,
        available=total_payout - withdrawn,
        eligible_investment_count=len(eligible),
    )


def compute_available_balance(
    user_id, investments: Iterable, withdrawals: Iterable, today: date, tz: tzinfo = BUSINESS_TZ
) -> Decimal:
    """
    Raw available balance of ``user_id`` for ``today``'s month.

    Records that belong to other users are ignored. The result may be
    negative; use :attr:`BalanceBreakdown.display_available` for display.
    """
    own_investments = [inv for inv in investments if inv.user_id == user_id]
    own_withdrawals = [w for w in withdrawals if w.user_id == user_id]
    return compute_balance(own_investments, own_withdrawals, today, tz).available


def management_fee(amount: Decimal, rate: Decimal = DEFAULT_FEE_RATE) -> Decimal:
    """``amount × rate`` rounded half-up to the kobo."""
    return (Decimal(amount) * rate).quantize(CENT, rounding=ROUND_HALF_UP)


def payout_amount(amount: Decimal, rate: Decimal = DEFAULT_FEE_RATE) -> Decimal:
    return Decimal(amount) - management_fee(amount, rate)
