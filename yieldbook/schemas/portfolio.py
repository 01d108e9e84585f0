"""
Pydantic schemas for dashboard, calendar and market-data responses.
"""

from datetime import date
from decimal import Decimal
from typing import List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_serializer

from yieldbook.schemas.common import money_as_number


class PortfolioSummaryResponse(BaseModel):
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

    @field_serializer(
        "total_invested", "pending_amount", "accrued_profit", "monthly_payout", "available_balance"
    )
    @classmethod
    def serialize_money(cls, v: Decimal) -> float:
        return money_as_number(v)

    model_config = ConfigDict(from_attributes=True)


class HolidayResponse(BaseModel):
    day: date
    name: str

    model_config = ConfigDict(from_attributes=True)


class WindowResponse(BaseModel):
    year: int
    month: int
    start: date
    end: date
    is_open: bool


class PricePointResponse(BaseModel):
    time: str
    price: float

    model_config = ConfigDict(from_attributes=True)


class ForexSeriesResponse(BaseModel):
    symbol: str
    interval: str
    values: List[PricePointResponse]
