"""Tests for availability resolution."""

from datetime import date

import pytest

from shiftcover.domain.models import (
    EmployeeAvailabilityContext,
    EmployeeAvailabilityOverride,
    EmployeeAvailabilityWindow,
    EmployeeUnavailableDate,
)
from shiftcover.scheduling.availability import (
    AvailabilityResolver,
    is_available,
    merge_intervals,
)

MONDAY = date(2024, 1, 15)
TUESDAY = date(2024, 1, 16)
WEDNESDAY = date(2024, 1, 17)
THURSDAY = date(2024, 1, 18)


def window(day: int, start: int, end: int, employee_id: str = "E1", shop_id=None):
    return EmployeeAvailabilityWindow(
        employee_id=employee_id,
        day_of_week=day,
        start_minutes=start,
        end_minutes=end,
        shop_id=shop_id,
    )


class TestMergeIntervals:
    """Tests for interval merging."""

    def test_overlapping_and_touching_merge(self):
        assert merge_intervals([(720, 900), (360, 720), (800, 1000)]) == [(360, 1000)]

    def test_gap_is_kept(self):
        assert merge_intervals([(660, 900), (360, 600)]) == [(360, 600), (660, 900)]

    def test_empty_intervals_dropped(self):
        assert merge_intervals([(600, 600), (700, 650)]) == []


class TestWeeklyWindows:
    """Tests for recurring weekly availability."""

    @pytest.fixture
    def resolver(self):
        context = EmployeeAvailabilityContext(
            weekly_windows=(
                window(0, 360, 720),
                window(0, 720, 900),
                window(1, 360, 600),
                window(1, 660, 900),
                window(3, 360, 900),
            ),
        )
        return AvailabilityResolver(context)

    def test_touching_windows_form_union(self, resolver):
        assert resolver.is_available("E1", 0, 420, 840, MONDAY) is True

    def test_request_spanning_gap_is_unavailable(self, resolver):
        assert resolver.is_available("E1", 1, 540, 700, TUESDAY) is False

    def test_request_inside_one_window(self, resolver):
        assert resolver.is_available("E1", 1, 360, 600, TUESDAY) is True

    def test_no_windows_means_unavailable(self, resolver):
        assert resolver.is_available("E1", 2, 600, 660, WEDNESDAY) is False

    def test_unknown_employee_is_unavailable(self, resolver):
        assert resolver.is_available("E9", 0, 420, 480, MONDAY) is False

    def test_empty_or_inverted_request_is_unavailable(self, resolver):
        assert resolver.is_available("E1", 0, 600, 600, MONDAY) is False
        assert resolver.is_available("E1", 0, 700, 600, MONDAY) is False

    def test_without_date_uses_weekly_windows(self, resolver):
        assert resolver.is_available("E1", 0, 420, 840) is True

    def test_open_windows(self, resolver):
        assert resolver.open_windows("E1", 0, MONDAY) == [(360, 900)]
        assert resolver.open_windows("E1", 2, WEDNESDAY) == []


class TestPrecedence:
    """Tests for blackout > override > weekly precedence."""

    @pytest.fixture
    def context(self):
        return EmployeeAvailabilityContext(
            weekly_windows=tuple(window(day, 360, 900) for day in range(7)),
            overrides=(
                EmployeeAvailabilityOverride(
                    employee_id="E1", date=MONDAY, start_minutes=360, end_minutes=900
                ),
                EmployeeAvailabilityOverride(
                    employee_id="E1", date=TUESDAY, start_minutes=1000, end_minutes=1200
                ),
                EmployeeAvailabilityOverride(
                    employee_id="E1", date=WEDNESDAY, start_minutes=480, end_minutes=1020
                ),
                EmployeeAvailabilityOverride(
                    employee_id="E1",
                    date=WEDNESDAY,
                    start_minutes=720,
                    end_minutes=780,
                    is_available=False,
                ),
                EmployeeAvailabilityOverride(
                    employee_id="E1",
                    date=THURSDAY,
                    start_minutes=600,
                    end_minutes=660,
                    is_available=False,
                ),
            ),
            unavailable_dates=(
                EmployeeUnavailableDate(employee_id="E1", date=MONDAY, reason="Vacation"),
            ),
        )

    def test_blackout_beats_windows_and_overrides(self, context):
        resolver = AvailabilityResolver(context)
        assert resolver.is_available("E1", 0, 420, 600, MONDAY) is False
        assert resolver.open_windows("E1", 0, MONDAY) == []

    def test_blackout_only_affects_its_date(self, context):
        resolver = AvailabilityResolver(context)
        next_monday = date(2024, 1, 22)
        assert resolver.is_available("E1", 0, 420, 600, next_monday) is True

    def test_override_replaces_weekly_windows(self, context):
        resolver = AvailabilityResolver(context)
        assert resolver.is_available("E1", 1, 360, 600, TUESDAY) is False
        assert resolver.is_available("E1", 1, 1000, 1200, TUESDAY) is True

    def test_unavailable_override_blocks_overlap(self, context):
        resolver = AvailabilityResolver(context)
        assert resolver.is_available("E1", 2, 480, 700, WEDNESDAY) is True
        assert resolver.is_available("E1", 2, 700, 800, WEDNESDAY) is False
        assert resolver.is_available("E1", 2, 780, 1020, WEDNESDAY) is True
        assert resolver.open_windows("E1", 2, WEDNESDAY) == [(480, 720), (780, 1020)]

    def test_unavailable_override_carves_weekly_window(self, context):
        resolver = AvailabilityResolver(context)
        assert resolver.is_available("E1", 3, 360, 500, THURSDAY) is True
        assert resolver.is_available("E1", 3, 580, 700, THURSDAY) is False
        assert resolver.is_available("E1", 3, 660, 900, THURSDAY) is True
        assert resolver.open_windows("E1", 3, THURSDAY) == [(360, 600), (660, 900)]

    def test_blocked_lunch_keeps_rest_of_day(self):
        context = EmployeeAvailabilityContext(
            weekly_windows=(window(2, 420, 1020),),
            overrides=(
                EmployeeAvailabilityOverride(
                    employee_id="E1",
                    date=WEDNESDAY,
                    start_minutes=720,
                    end_minutes=780,
                    is_available=False,
                ),
            ),
        )
        resolver = AvailabilityResolver(context)

        assert resolver.is_available("E1", 2, 480, 660, WEDNESDAY) is True
        assert resolver.is_available("E1", 2, 780, 1020, WEDNESDAY) is True
        assert resolver.is_available("E1", 2, 700, 800, WEDNESDAY) is False
        assert resolver.is_available("E1", 2, 700, 800, date(2024, 1, 24)) is True

    def test_module_level_helper(self, context):
        assert is_available("E1", 4, 420, 600, date(2024, 1, 19), context) is True
        assert is_available("E1", 0, 420, 600, MONDAY, context) is False


class TestShopScoping:
    """Tests for dropping other shops' entries."""

    def test_scoped_to_drops_other_shop(self):
        context = EmployeeAvailabilityContext(
            weekly_windows=(
                window(0, 360, 900, shop_id="shop-1"),
                window(1, 360, 900, shop_id="shop-2"),
                window(2, 360, 900),
            ),
        )
        resolver = AvailabilityResolver(context.scoped_to("shop-1"))
        assert resolver.is_available("E1", 0, 420, 600) is True
        assert resolver.is_available("E1", 1, 420, 600) is False
        assert resolver.is_available("E1", 2, 420, 600) is True
