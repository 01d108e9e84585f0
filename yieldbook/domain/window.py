"""
Monthly submission window.

New investments and withdrawals are accepted only on the 1st and 2nd of
each month. Both days roll forward over weekends and public holidays; when
they collapse onto the same business day the window is stretched to the next
business day so it always spans at least one day.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

from yieldbook.domain.holidays import HolidayCalendar, get_default_calendar
from yieldbook.utils.dates import as_date

NOMINAL_START_DAY = 1
NOMINAL_END_DAY = 2


@dataclass(frozen=True)
class SubmissionWindow:
    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= as_date(day) <= self.end


def resolve_window(
    year: int, month: int, calendar: Optional[HolidayCalendar] = None
) -> SubmissionWindow:
    """Business-day-adjusted window for ``year``/``month``."""
    calendar = calendar or get_default_calendar()
    start = calendar.next_business_day(date(year, month, NOMINAL_START_DAY))
    end = calendar.next_business_day(date(year, month, NOMINAL_END_DAY))
    if end <= start:
        end = calendar.next_business_day(start + timedelta(days=1))
    return SubmissionWindow(start=start, end=end)


def is_submission_window_open(today: date, calendar: Optional[HolidayCalendar] = None) -> bool:
    today = as_date(today)
    return resolve_window(today.year, today.month, calendar).contains(today)


def is_window_exempt(
    email: Optional[str], privileged_flag: bool, allow_list: Iterable[str] = ()
) -> bool:
    """Privileged accounts may submit outside the window."""
    if privileged_flag:
        return True
    return bool(email) and email.strip().lower() in {e.lower() for e in allow_list}
