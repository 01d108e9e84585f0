"""
Unit tests for the Nigerian holiday calendar.

Tests cover:
- Weekends and fixed-date holidays
- Easter-derived holidays (Good Friday, Easter Monday)
- Islamic holidays from the bundled table and the ``default`` row
- Override files and next_business_day
"""

import json
from datetime import date, datetime

import pytest

from yieldbook.domain.holidays import (
    FIXED_HOLIDAYS,
    HolidayCalendar,
    get_default_calendar,
    is_non_business_day,
    load_islamic_table,
)


@pytest.fixture()
def calendar():
    return HolidayCalendar()


class TestWeekends:
    @pytest.mark.parametrize("day", [date(2024, 3, 2), date(2024, 3, 3)])
    def test_weekend_is_non_business(self, calendar, day):
        assert calendar.is_non_business_day(day)
        assert not calendar.is_public_holiday(day)

    def test_plain_weekday_is_business(self, calendar):
        assert not calendar.is_non_business_day(date(2024, 3, 5))

    def test_datetime_is_accepted(self, calendar):
        assert calendar.is_non_business_day(datetime(2024, 3, 2, 15, 30))


class TestFixedHolidays:
    def test_every_fixed_holiday_is_listed(self, calendar):
        days = {h.day for h in calendar.holidays_for_year(2025)}
        for month, day, _ in FIXED_HOLIDAYS:
            assert date(2025, month, day) in days

    @pytest.mark.parametrize(
        "day",
        [date(2024, 1, 1), date(2024, 6, 12), date(2024, 10, 1), date(2024, 12, 26)],
    )
    def test_fixed_dates(self, calendar, day):
        assert calendar.is_public_holiday(day)


class TestEaster:
    def test_2024(self, calendar):
        names = {h.day: h.name for h in calendar.holidays_for_year(2024)}
        assert names[date(2024, 3, 29)] == "Good Friday"
        assert names[date(2024, 4, 1)] == "Easter Monday"

    def test_2025(self, calendar):
        assert calendar.is_public_holiday(date(2025, 4, 18))
        assert calendar.is_public_holiday(date(2025, 4, 21))
        assert not calendar.is_public_holiday(date(2025, 4, 22))


class TestIslamicHolidays:
    def test_bundled_2024_row(self, calendar):
        names = {h.day: h.name for h in calendar.holidays_for_year(2024)}
        assert names[date(2024, 4, 10)] == "Eid al-Fitr"
        assert names[date(2024, 4, 11)] == "Eid al-Fitr Holiday"
        assert names[date(2024, 6, 17)] == "Eid al-Adha"
        assert names[date(2024, 6, 18)] == "Eid al-Adha Holiday"
        assert names[date(2024, 9, 16)] == "Eid-el-Maulud"

    def test_default_row_for_unlisted_year(self):
        table = {"default": {"eid_al_fitr": "03-30", "eid_al_adha": "06-06", "eid_el_maulud": "09-04"}}
        cal = HolidayCalendar(islamic_table=table)
        assert cal.is_public_holiday(date(2031, 3, 30))
        assert cal.is_public_holiday(date(2031, 3, 31))

    def test_invalid_month_day_is_skipped(self):
        table = {"default": {"eid_al_fitr": "02-29", "eid_al_adha": "06-06", "eid_el_maulud": "09-04"}}
        names = [h.name for h in HolidayCalendar(islamic_table=table).holidays_for_year(2023)]
        assert "Eid al-Fitr" not in names
        assert "Eid al-Adha" in names

    def test_next_day_spilling_into_next_year_is_dropped(self):
        table = {"default": {"eid_al_fitr": "12-31", "eid_al_adha": "06-06", "eid_el_maulud": "09-04"}}
        holidays = HolidayCalendar(islamic_table=table).holidays_for_year(2027)
        assert all(h.day.year == 2027 for h in holidays)

    def test_holidays_sorted(self, calendar):
        days = [h.day for h in calendar.holidays_for_year(2024)]
        assert days == sorted(days)


class TestTableLoading:
    def test_override_file(self, tmp_path):
        path = tmp_path / "islamic.json"
        path.write_text(
            json.dumps(
                {"default": {"eid_al_fitr": "04-01", "eid_al_adha": "06-01", "eid_el_maulud": "09-01"}}
            )
        )
        table = load_islamic_table(str(path))
        assert table["default"]["eid_al_fitr"] == "04-01"

    def test_missing_default_row_rejected(self, tmp_path):
        path = tmp_path / "islamic.json"
        path.write_text(json.dumps({"2024": {}}))
        with pytest.raises(ValueError, match="default"):
            load_islamic_table(str(path))


class TestNextBusinessDay:
    def test_business_day_is_returned_unchanged(self, calendar):
        assert calendar.next_business_day(date(2024, 3, 5)) == date(2024, 3, 5)

    def test_skips_easter_weekend(self, calendar):
        # Good Friday → Sat → Sun → Easter Monday → Tuesday
        assert calendar.next_business_day(date(2024, 3, 29)) == date(2024, 4, 2)

    def test_skips_christmas_and_boxing_day(self, calendar):
        # 2021-12-25 is a Saturday; Boxing Day a Sunday
        assert calendar.next_business_day(date(2021, 12, 25)) == date(2021, 12, 27)


def test_module_level_helper_uses_shared_calendar():
    assert get_default_calendar() is get_default_calendar()
    assert is_non_business_day(date(2024, 12, 25))
