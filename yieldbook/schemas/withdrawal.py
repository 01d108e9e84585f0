"""
Pydantic schemas for Withdrawal API request / response serialisation.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from yieldbook.models.withdrawal import WithdrawalStatus
from yieldbook.schemas.common import money_as_number


class WithdrawalSubmit(BaseModel):
    """Schema for ``POST /users/{user_id}/withdrawals``."""

    amount: Decimal = Field(
        ..., gt=0, max_digits=20, decimal_places=2, description="Requested amount in naira",
        examples=[15_000],
    )
    pin: str = Field(..., pattern=r"^[0-9]{4}$", description="Withdrawal PIN", examples=["4821"])


class WithdrawalResponse(BaseModel):
    id: UUID
    withdrawal_id: str
    user_id: UUID
    amount: Decimal
    management_fee: Decimal
    payout_amount: Decimal
    status: WithdrawalStatus
    created_at: datetime

    @field_serializer("amount", "management_fee", "payout_amount")
    @classmethod
    def serialize_money(cls, v: Decimal) -> float:
        return money_as_number(v)

    model_config = ConfigDict(from_attributes=True)


class WithdrawalStatusUpdate(BaseModel):
    status: WithdrawalStatus = Field(..., examples=["Completed"])


class WithdrawalTransitionResponse(BaseModel):
    withdrawal: WithdrawalResponse
    changed: bool
    notified: bool


class BalanceResponse(BaseModel):
    """This month's withdrawable balance and how it was derived."""

    total_monthly_payout: Decimal
    total_withdrawn_this_month: Decimal
    available_balance: Decimal = Field(..., description="Never negative")
    eligible_investment_count: int

    @field_serializer("total_monthly_payout", "total_withdrawn_this_month", "available_balance")
    @classmethod
    def serialize_money(cls, v: Decimal) -> float:
        return money_as_number(v)
