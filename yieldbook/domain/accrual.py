"""
Profit accrual.

Two figures are derived from an investment and must not be confused:

- :func:`compute_accrued_profit` grows continuously with elapsed time
  (pro-rata over a fixed 30-day month) and feeds live dashboard displays.
- :func:`compute_monthly_payout` is the whole-month figure (principal × monthly
  rate) used for withdrawal-ceiling accounting.

Both accept any object exposing ``amount``, ``investment_type``, ``plan_id``,
``effective_status`` and ``created_at`` (the :class:`Investment` model does).
"""

from datetime import datetime
from decimal import Decimal

from yieldbook.domain.plans import monthly_rate_for
from yieldbook.models.investment import InvestmentStatus
from yieldbook.utils.dates import ensure_utc

DAYS_PER_MONTH = Decimal(30)
SECONDS_PER_DAY = Decimal(86400)
ZERO = Decimal(0)


def accrues(investment) -> bool:
    """Only approved (including legacy, status-less) investments earn."""
    return investment.effective_status == InvestmentStatus.APPROVED


def compute_accrued_profit(investment, as_of: datetime) -> Decimal:
    if not accrues(investment):
        return ZERO

    monthly_rate = monthly_rate_for(investment.plan_id, investment.investment_type)
    if monthly_rate == 0:
        return ZERO

    created_at = ensure_utc(investment.created_at)
    as_of = ensure_utc(as_of)
    if as_of <= created_at:
        return ZERO

    elapsed = as_of - created_at
    days_elapsed = Decimal(elapsed.days) + (
        Decimal(elapsed.seconds) + Decimal(elapsed.microseconds) / Decimal(1_000_000)
    ) / SECONDS_PER_DAY
    return Decimal(investment.amount) * monthly_rate * days_elapsed / DAYS_PER_MONTH


def compute_monthly_payout(investment) -> Decimal:
    """Principal × monthly rate, regardless of status or age."""
    monthly_rate = monthly_rate_for(investment.plan_id, investment.investment_type)
    return Decimal(investment.amount) * monthly_rate
