"""
Nigerian public-holiday calendar.

A day is a non-business day when it falls on a weekend or on one of:

- the fixed-date holidays in :data:`FIXED_HOLIDAYS`;
- Good Friday and Easter Monday, derived from Gregorian Easter;
- Eid al-Fitr, Eid al-Adha (each followed by a holiday) and Eid-el-Maulud.

The Islamic dates depend on moon sightings and are only estimates. They come
from a JSON table keyed by year (with a ``default`` row for years the table
does not list) so they can be recalibrated each year without a code change.
"""

import json
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Set

from dateutil.easter import EASTER_WESTERN, easter

from yieldbook.core.config import settings
from yieldbook.utils.dates import as_date

logger = logging.getLogger(__name__)

# (month, day, name)
FIXED_HOLIDAYS = (
    (1, 1, "New Year's Day"),
    (5, 1, "Workers' Day"),
    (5, 27, "Children's Day"),
    (5, 29, "Democracy Day Handover"),
    (6, 12, "Democracy Day"),
    (10, 1, "Independence Day"),
    (12, 25, "Christmas Day"),
    (12, 26, "Boxing Day"),
)

IslamicTable = Mapping[str, Mapping[str, str]]


@dataclass(frozen=True)
class Holiday:
    day: date
    name: str


def load_islamic_table(path: Optional[str] = None) -> Dict[str, Dict[str, str]]:
    """
    Read the Islamic holiday table.

    ``path`` (or ``ISLAMIC_HOLIDAYS_FILE``) overrides the table bundled in
    ``yieldbook/data``. Values are ``"MM-DD"`` strings.
    """
    path = path or settings.ISLAMIC_HOLIDAYS_FILE
    if path:
        raw = Path(path).read_text(encoding="utf-8")
        logger.info("Loaded Islamic holiday table from %s", path)
    else:
        raw = resources.files("yieldbook.data").joinpath("islamic_holidays.json").read_text(
            encoding="utf-8"
        )
    table = json.loads(raw)
    if "default" not in table:
        raise ValueError("Islamic holiday table must define a 'default' row")
    return table


def _month_day(year: int, value: str) -> Optional[date]:
    month, day = (int(part) for part in value.split("-"))
    try:
        return date(year, month, day)
    except ValueError:
        # e.g. "02-29" outside a leap year
        return None


class HolidayCalendar:
    """
    Computes holidays per year and answers business-day questions.

    Instances memoise the holiday set of every year they have seen; they hold
    no other state, so one instance can be shared process-wide.
    """

    def __init__(self, islamic_table: Optional[IslamicTable] = None):
        self._islamic_table = islamic_table if islamic_table is not None else load_islamic_table()
        self._by_year: Dict[int, List[Holiday]] = {}
        self._dates_by_year: Dict[int, Set[date]] = {}

    def _islamic_holidays(self, year: int) -> List[Holiday]:
        row = self._islamic_table.get(str(year)) or self._islamic_table["default"]
        holidays: List[Holiday] = []

        fitr = _month_day(year, row["eid_al_fitr"])
        if fitr:
            holidays.append(Holiday(fitr, "Eid al-Fitr"))
            holidays.append(Holiday(fitr + timedelta(days=1), "Eid al-Fitr Holiday"))

        adha = _month_day(year, row["eid_al_adha"])
        if adha:
            holidays.append(Holiday(adha, "Eid al-Adha"))
            holidays.append(Holiday(adha + timedelta(days=1), "Eid al-Adha Holiday"))

        maulud = _month_day(year, row["eid_el_maulud"])
        if maulud:
            holidays.append(Holiday(maulud, "Eid-el-Maulud"))
        return holidays

    def holidays_for_year(self, year: int) -> List[Holiday]:
        """All public holidays of ``year``, sorted by date."""
        if year not in self._by_year:
            easter_sunday = easter(year, EASTER_WESTERN)
            holidays = [Holiday(date(year, month, day), name) for month, day, name in FIXED_HOLIDAYS]
            holidays.append(Holiday(easter_sunday - timedelta(days=2), "Good Friday"))
            holidays.append(Holiday(easter_sunday + timedelta(days=1), "Easter Monday"))
            holidays.extend(self._islamic_holidays(year))
            # An Eid "+1" day can spill into the next year; keep only this year's.
            holidays = sorted(
                (h for h in holidays if h.day.year == year), key=lambda h: h.day
            )
            self._by_year[year] = holidays
            self._dates_by_year[year] = {h.day for h in holidays}
        return self._by_year[year]

    def is_public_holiday(self, day: date) -> bool:
        day = as_date(day)
        self.holidays_for_year(day.year)
        return day in self._dates_by_year[day.year]

    def is_non_business_day(self, day: date) -> bool:
        """True for Saturdays, Sundays and public holidays."""
        day = as_date(day)
        if day.weekday() >= 5:
            return True
        return self.is_public_holiday(day)

    def next_business_day(self, day: date) -> date:
        """First business day on or after ``day``."""
        current = as_date(day)
        while self.is_non_business_day(current):
            current += timedelta(days=1)
        return current


@lru_cache(maxsize=1)
def get_default_calendar() -> HolidayCalendar:
    """Process-wide calendar built from the configured holiday table."""
    return HolidayCalendar()


def is_non_business_day(day: date) -> bool:
    return get_default_calendar().is_non_business_day(day)
