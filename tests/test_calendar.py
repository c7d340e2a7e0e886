"""Tests for calendar and time-coordinate helpers."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from shiftcover.domain.calendar import (
    date_for_day,
    datetime_for,
    day_index,
    day_name,
    normalized_week_start,
    short_day_name,
    time_label,
    week_minute_of,
    week_start_date,
    weekday,
)


class TestDayMapping:
    """Tests for weekday (1 = Sunday) <-> day index (0 = Monday) mapping."""

    def test_known_values(self):
        assert day_index(1) == 6  # Sunday
        assert day_index(2) == 0  # Monday
        assert day_index(7) == 5  # Saturday
        assert weekday(0) == 2
        assert weekday(6) == 1

    def test_round_trip_from_weekday(self):
        for value in range(1, 8):
            assert weekday(day_index(value)) == value

    def test_round_trip_from_day_index(self):
        for value in range(0, 7):
            assert day_index(weekday(value)) == value

    def test_day_index_matches_python_weekday(self):
        """Day index follows date.weekday() for every day of a week."""
        for offset in range(7):
            d = date(2024, 1, 14 + offset)  # Sunday .. Saturday
            calendar_weekday = (d.weekday() + 1) % 7 + 1
            assert day_index(calendar_weekday) == d.weekday()

    @pytest.mark.parametrize("value", [0, 8, -1])
    def test_day_index_out_of_range(self, value):
        with pytest.raises(ValueError):
            day_index(value)

    @pytest.mark.parametrize("value", [-1, 7, 10])
    def test_weekday_out_of_range(self, value):
        with pytest.raises(ValueError):
            weekday(value)


class TestWeekStart:
    """Tests for week normalization."""

    def test_mid_week_date_snaps_to_monday(self):
        assert week_start_date(date(2024, 1, 17), "UTC") == date(2024, 1, 15)

    def test_sunday_belongs_to_previous_monday(self):
        assert week_start_date(date(2024, 1, 21), "UTC") == date(2024, 1, 15)

    def test_normalized_week_start_is_local_midnight(self):
        tz = ZoneInfo("America/New_York")
        value = datetime(2024, 1, 17, 15, 30, tzinfo=tz)
        result = normalized_week_start(value, "America/New_York")
        assert result == datetime(2024, 1, 15, 0, 0, tzinfo=tz)
        assert result.hour == 0 and result.minute == 0

    def test_aware_datetime_uses_shop_zone(self):
        """Monday 02:00 UTC is still Sunday evening in New York."""
        value = datetime(2024, 1, 15, 2, 0, tzinfo=timezone.utc)
        assert week_start_date(value, "America/New_York") == date(2024, 1, 8)
        assert week_start_date(value, "UTC") == date(2024, 1, 15)


class TestCoordinates:
    """Tests for (day, minute) <-> wall clock conversion."""

    def test_date_for_day(self):
        assert date_for_day(date(2024, 1, 15), 0) == date(2024, 1, 15)
        assert date_for_day(date(2024, 1, 15), 6) == date(2024, 1, 21)

    def test_datetime_for(self):
        tz = ZoneInfo("UTC")
        assert datetime_for(date(2024, 1, 15), 1, 450, "UTC") == datetime(
            2024, 1, 16, 7, 30, tzinfo=tz
        )

    def test_datetime_for_end_of_day(self):
        tz = ZoneInfo("UTC")
        assert datetime_for(date(2024, 1, 15), 2, 1440, "UTC") == datetime(
            2024, 1, 18, 0, 0, tzinfo=tz
        )

    def test_week_minute_of(self):
        moment = datetime(2024, 1, 16, 7, 0, tzinfo=ZoneInfo("UTC"))
        assert week_minute_of(moment, date(2024, 1, 15), "UTC") == 1440 + 420

    def test_week_minute_before_week_is_negative(self):
        moment = datetime(2024, 1, 14, 23, 0, tzinfo=ZoneInfo("UTC"))
        assert week_minute_of(moment, date(2024, 1, 15), "UTC") == -60


class TestLabels:
    """Tests for display helpers."""

    def test_time_label(self):
        assert time_label(0) == "00:00"
        assert time_label(450) == "07:30"
        assert time_label(1440) == "24:00"

    def test_day_names(self):
        assert day_name(0) == "Monday"
        assert day_name(6) == "Sunday"
        assert short_day_name(2) == "Wed"
