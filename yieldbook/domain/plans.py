"""
Investment plan catalogue.

New investments reference a plan by ``plan_id``; the human-readable label
("Moderate - 20% Monthly") is kept for display. Records created before plans
were structured carry only the label, so the rate can still be parsed from
it as a fallback.
"""

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional

RATE_PATTERN = re.compile(r"(\d+)%")


@dataclass(frozen=True)
class Plan:
    plan_id: str
    name: str
    monthly_rate: Decimal
    min_amount: Decimal
    max_amount: Decimal
    tenure_months: int
    capital_refund: bool = False

    @property
    def label(self) -> str:
        percent = (self.monthly_rate * 100).normalize()
        return f"{self.name} - {percent:f}% Monthly"


PLANS: Dict[str, Plan] = {
    "moderate": Plan(
        plan_id="moderate",
        name="Moderate",
        monthly_rate=Decimal("0.20"),
        min_amount=Decimal("50000"),
        max_amount=Decimal("5000000"),
        tenure_months=12,
    ),
}


def get_plan(plan_id: Optional[str]) -> Optional[Plan]:
    if not plan_id:
        return None
    return PLANS.get(plan_id)


def parse_monthly_rate(label: Optional[str]) -> Decimal:
    """
    First ``<digits>%`` in ``label`` as a fraction; ``Decimal(0)`` if absent.

    >>> parse_monthly_rate("Moderate - 20% Monthly")
    Decimal('0.2')
    """
    if not label:
        return Decimal(0)
    match = RATE_PATTERN.search(label)
    if not match:
        return Decimal(0)
    return Decimal(match.group(1)) / 100


def plan_name_from_label(label: str) -> str:
    """``"Moderate - 20% Monthly"`` → ``"Moderate"``."""
    return label.split(" - ")[0]


def monthly_rate_for(plan_id: Optional[str], label: Optional[str]) -> Decimal:
    plan = get_plan(plan_id)
    if plan is not None:
        return plan.monthly_rate
    return parse_monthly_rate(label)
