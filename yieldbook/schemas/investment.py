"""
Pydantic schemas for Investment API request / response serialisation.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_serializer

from yieldbook.domain.accrual import compute_monthly_payout
from yieldbook.domain.plans import Plan
from yieldbook.models.investment import Investment, InvestmentStatus
from yieldbook.schemas.common import money_as_number


class InvestmentSubmit(BaseModel):
    """Schema for ``POST /users/{user_id}/investments``."""

    plan_id: str = Field(default="moderate", max_length=64, examples=["moderate"])
    amount: Decimal = Field(
        ...,
        gt=0,
        max_digits=20,
        decimal_places=2,
        description="Principal in naira",
        examples=[100_000],
    )


class InvestmentResponse(BaseModel):
    """
    Schema returned by investment endpoints.

    ``status`` is the effective status: legacy rows without one report
    ``Approved``.
    """

    id: UUID
    investment_id: str
    user_id: UUID
    investment_type: str
    plan_id: Optional[str]
    amount: Decimal
    status: InvestmentStatus
    created_at: datetime
    monthly_payout: Decimal
    accrued_profit: Optional[Decimal] = Field(
        default=None, description="Pro-rata profit earned so far (list endpoint only)"
    )

    @field_serializer("amount", "monthly_payout", "accrued_profit")
    @classmethod
    def serialize_money(cls, v: Optional[Decimal]) -> Optional[float]:
        return money_as_number(v)

    @classmethod
    def from_model(
        cls, investment: Investment, accrued_profit: Optional[Decimal] = None
    ) -> "InvestmentResponse":
        return cls(
            id=investment.id,
            investment_id=investment.investment_id,
            user_id=investment.user_id,
            investment_type=investment.investment_type,
            plan_id=investment.plan_id,
            amount=investment.amount,
            status=investment.effective_status,
            created_at=investment.created_at,
            monthly_payout=compute_monthly_payout(investment),
            accrued_profit=accrued_profit,
        )


class InvestmentCheckoutResponse(BaseModel):
    """Returned after submission; the client redirects to ``authorization_url``."""

    investment: InvestmentResponse
    authorization_url: str
    access_code: str


class InvestmentStatusUpdate(BaseModel):
    status: InvestmentStatus = Field(..., examples=["Approved"])


class InvestmentTransitionResponse(BaseModel):
    investment: InvestmentResponse
    changed: bool = Field(..., description="False when the decision had already been applied")
    notified: bool = Field(..., description="True when both notification emails were accepted")


class PlanResponse(BaseModel):
    plan_id: str
    name: str
    label: str
    monthly_rate: Decimal
    min_amount: Decimal
    max_amount: Decimal
    tenure_months: int
    capital_refund: bool

    @field_serializer("min_amount", "max_amount")
    @classmethod
    def serialize_money(cls, v: Decimal) -> float:
        return money_as_number(v)

    @classmethod
    def from_plan(cls, plan: Plan) -> "PlanResponse":
        return cls(
            plan_id=plan.plan_id,
            name=plan.name,
            label=plan.label,
            monthly_rate=plan.monthly_rate,
            min_amount=plan.min_amount,
            max_amount=plan.max_amount,
            tenure_months=plan.tenure_months,
            capital_refund=plan.capital_refund,
        )


class BackfillResponse(BaseModel):
    updated: int
