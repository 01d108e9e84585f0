"""
Market data and calendar endpoints.

- GET  /market/forex                 — Recent 5-minute closes for a currency pair
- GET  /calendar/window              — Submission window for a month
- GET  /calendar/holidays/{year}     — Public holidays for a year
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query

from yieldbook.api.dependencies import get_twelvedata_client
from yieldbook.clients.twelvedata import INTERVAL, TwelveDataClient
from yieldbook.domain.holidays import get_default_calendar
from yieldbook.domain.window import resolve_window
from yieldbook.schemas.common import ERROR_RESPONSES
from yieldbook.schemas.portfolio import (
    ForexSeriesResponse,
    HolidayResponse,
    PricePointResponse,
    WindowResponse,
)
from yieldbook.services.market_data_service import MarketDataService
from yieldbook.utils.dates import to_business_date, utcnow

router = APIRouter()


def _get_market_data_service(
    client: TwelveDataClient = Depends(get_twelvedata_client),
) -> MarketDataService:
    return MarketDataService(client)


@router.get(
    "/market/forex",
    response_model=ForexSeriesResponse,
    summary="Forex series",
    description="Last 30 five-minute closes, oldest first.  Cached for five minutes.",
    responses={422: ERROR_RESPONSES[422], 502: ERROR_RESPONSES[502]},
)
async def get_forex(
    base: str = Query("USD", min_length=3, max_length=3),
    quote: str = Query("NGN", min_length=3, max_length=3),
    service: MarketDataService = Depends(_get_market_data_service),
) -> ForexSeriesResponse:
    series = await service.get_forex_series(base, quote)
    return ForexSeriesResponse(
        symbol=f"{base.upper()}/{quote.upper()}",
        interval=INTERVAL,
        values=[PricePointResponse.model_validate(point) for point in series],
    )


@router.get(
    "/calendar/window",
    response_model=WindowResponse,
    summary="Submission window",
    description="Defaults to the current month in the business timezone.",
)
async def get_window(
    year: Optional[int] = Query(None, ge=1900, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
) -> WindowResponse:
    today = to_business_date(utcnow())
    year = year or today.year
    month = month or today.month
    window = resolve_window(year, month)
    return WindowResponse(
        year=year,
        month=month,
        start=window.start,
        end=window.end,
        is_open=window.contains(today),
    )


@router.get(
    "/calendar/holidays/{year}",
    response_model=List[HolidayResponse],
    summary="Public holidays",
)
async def list_holidays(year: int = Path(..., ge=1900, le=9999)) -> List[HolidayResponse]:
    return [
        HolidayResponse.model_validate(holiday)
        for holiday in get_default_calendar().holidays_for_year(year)
    ]
