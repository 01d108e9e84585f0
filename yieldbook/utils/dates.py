"""Date helpers shared by the calendar, accrual and reconciliation code."""

from datetime import date, datetime, time, timezone, tzinfo
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta

from yieldbook.core.config import settings

BUSINESS_TZ: tzinfo = ZoneInfo(settings.BUSINESS_TIMEZONE)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on read)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_business_date(value: datetime, tz: tzinfo = BUSINESS_TZ) -> date:
    """Calendar date of ``value`` as seen in the business timezone."""
    return ensure_utc(value).astimezone(tz).date()


def as_date(value: date) -> date:
    """Strip the time-of-day from a datetime; plain dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    return value


def month_start(day: date) -> date:
    return day.replace(day=1)


def month_bounds_utc(day: date, tz: tzinfo = BUSINESS_TZ) -> Tuple[datetime, datetime]:
    """
    UTC instants covering the whole business-timezone month containing ``day``.

    Returns ``(start, end)`` where ``start`` is local midnight of the first
    day and ``end`` is local midnight of the first day of the next month
    (exclusive).
    """
    first = month_start(day)
    following = first + relativedelta(months=1)
    start = datetime.combine(first, time.min, tzinfo=tz).astimezone(timezone.utc)
    end = datetime.combine(following, time.min, tzinfo=tz).astimezone(timezone.utc)
    return start, end


def day_bounds_utc(
    start_day: Optional[date], end_day: Optional[date], tz: tzinfo = BUSINESS_TZ
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    UTC instants for ``[start_day 00:00, end_day + 1 00:00)`` in ``tz``.

    A missing day leaves that side open (``None``).
    """
    start = end = None
    if start_day is not None:
        start = datetime.combine(start_day, time.min, tzinfo=tz).astimezone(timezone.utc)
    if end_day is not None:
        end = datetime.combine(
            end_day + relativedelta(days=1), time.min, tzinfo=tz
        ).astimezone(timezone.utc)
    return start, end


def format_display_date(value: datetime, tz: tzinfo = BUSINESS_TZ) -> str:
    """``dd/mm/yyyy`` in the business timezone."""
    return to_business_date(value, tz).strftime("%d/%m/%Y")
