import calendar
from datetime import date, datetime, timedelta

import pytest
from dateutil import tz

from services.schedule_calc import (
    compute_next_send_date,
    reference_noon,
    reference_today,
    to_reference_tz,
    validate_cut_off_day,
)


class TestMonthly:
    def test_lands_on_cut_off_day_of_next_month(self):
        assert compute_next_send_date("monthly", 5, date(2024, 3, 5)) == date(2024, 4, 5)

    def test_day_31_clamps_to_end_of_february_in_leap_year(self):
        assert compute_next_send_date("monthly", 31, date(2024, 1, 20)) == date(2024, 2, 29)

    def test_day_31_clamps_to_end_of_february(self):
        assert compute_next_send_date("monthly", 31, date(2023, 1, 31)) == date(2023, 2, 28)

    def test_day_31_clamps_to_thirty_day_month(self):
        assert compute_next_send_date("monthly", 31, date(2024, 3, 31)) == date(2024, 4, 30)

    def test_crosses_year_boundary(self):
        assert compute_next_send_date("monthly", 5, date(2024, 12, 10)) == date(2025, 1, 5)

    def test_result_is_independent_of_day_within_month(self):
        results = {compute_next_send_date("monthly", 15, date(2024, 6, d)) for d in range(1, 31)}
        assert results == {date(2024, 7, 15)}


class TestBiweekly:
    def test_day_1_goes_to_first_of_next_month(self):
        assert compute_next_send_date("biweekly", 1, date(2024, 3, 1)) == date(2024, 4, 1)

    def test_day_16_goes_to_sixteenth_of_next_month(self):
        assert compute_next_send_date("biweekly", 16, date(2024, 3, 1)) == date(2024, 4, 16)

    def test_crosses_year_boundary(self):
        assert compute_next_send_date("biweekly", 16, date(2024, 12, 20)) == date(2025, 1, 16)


class TestProperties:
    @pytest.mark.parametrize("cadence,days", [("monthly", range(1, 32)), ("biweekly", (1, 16))])
    def test_always_strictly_after_today_and_on_a_valid_day(self, cadence, days):
        today = date(2024, 1, 1)
        while today.year == 2024:
            for cut in days:
                result = compute_next_send_date(cadence, cut, today)
                assert result > today
                last_day = calendar.monthrange(result.year, result.month)[1]
                assert result.day == min(cut, last_day)
            today += timedelta(days=1)

    def test_deterministic(self):
        now = datetime(2024, 5, 10, 15, 30, tzinfo=tz.UTC)
        assert compute_next_send_date("monthly", 20, now) == compute_next_send_date("monthly", 20, now)


class TestReferenceTimezone:
    def test_utc_instant_is_read_as_bogota_calendar_date(self):
        # 03:00 UTC on March 1st is still February 29th in Bogota (UTC-5).
        now = datetime(2024, 3, 1, 3, 0, tzinfo=tz.UTC)
        assert compute_next_send_date("monthly", 31, now) == date(2024, 3, 31)

    def test_naive_datetime_is_treated_as_utc(self):
        naive = datetime(2024, 3, 1, 3, 0)
        aware = datetime(2024, 3, 1, 3, 0, tzinfo=tz.UTC)
        assert compute_next_send_date("monthly", 31, naive) == compute_next_send_date("monthly", 31, aware)

    def test_to_reference_tz_keeps_the_instant(self):
        instant = datetime(2024, 7, 1, 12, 0, tzinfo=tz.UTC)
        local = to_reference_tz(instant)
        assert local == instant
        assert local.hour == 7

    def test_reference_today(self):
        assert reference_today(datetime(2024, 1, 1, 2, 0, tzinfo=tz.UTC)) == date(2023, 12, 31)

    def test_reference_noon(self):
        noon = reference_noon(date(2024, 5, 1))
        assert noon.hour == 12
        assert noon.utcoffset() == timedelta(hours=-5)
        assert to_reference_tz(noon).date() == date(2024, 5, 1)


class TestValidation:
    @pytest.mark.parametrize("cadence,day", [
        ("monthly", 0),
        ("monthly", 32),
        ("biweekly", 15),
        ("biweekly", 31),
        ("weekly", 1),
    ])
    def test_rejects_invalid_combinations(self, cadence, day):
        with pytest.raises(ValueError):
            compute_next_send_date(cadence, day, date(2024, 1, 1))

    def test_accepts_valid_combinations(self):
        validate_cut_off_day("monthly", 1)
        validate_cut_off_day("monthly", 31)
        validate_cut_off_day("biweekly", 1)
        validate_cut_off_day("biweekly", 16)
