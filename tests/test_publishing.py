"""Tests for turning draft shifts into planned shift records."""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from shiftcover.domain.errors import PublishingError
from shiftcover.domain.models import (
    Employee,
    PlannedShiftStatus,
    ScheduleDraftShift,
    ScheduleOption,
)
from shiftcover.scheduling.publishing import (
    expand_to_month,
    month_dates,
    to_planned_shifts,
)

NEW_YORK = ZoneInfo("America/New_York")
WEEK = date(2024, 1, 15)


class TestToPlannedShifts:
    """Tests for to_planned_shifts."""

    @pytest.fixture
    def employees_by_id(self):
        return {"E1": Employee(id="E1", name="Alice"), "E2": Employee(id="E2", name="Bob")}

    @pytest.fixture
    def option(self):
        return ScheduleOption(
            id="opt-1",
            name="Balanced",
            score=100,
            shifts=(
                ScheduleDraftShift("E1", 0, 420, 780, id="s1"),
                ScheduleDraftShift("E2", 2, 1080, 1440, id="s2", notes="close"),
            ),
        )

    def test_uses_shop_time_zone(self, option, employees_by_id):
        planned = to_planned_shifts(
            option, "shop-1", WEEK, "America/New_York", employees_by_id
        )

        first, second = planned
        assert first.start == datetime(2024, 1, 15, 7, 0, tzinfo=NEW_YORK)
        assert first.end == datetime(2024, 1, 15, 13, 0, tzinfo=NEW_YORK)
        assert first.id == "s1"
        assert first.status == PlannedShiftStatus.DRAFT
        assert first.duration_minutes == 360

    def test_end_of_day_is_next_midnight(self, option, employees_by_id):
        planned = to_planned_shifts(option, "shop-1", WEEK, NEW_YORK, employees_by_id)

        second = planned[1]
        assert second.start == datetime(2024, 1, 17, 18, 0, tzinfo=NEW_YORK)
        assert second.end == datetime(2024, 1, 18, 0, 0, tzinfo=NEW_YORK)
        assert second.notes == "close"

    def test_any_date_in_week_works(self, option, employees_by_id):
        from_monday = to_planned_shifts(option, "shop-1", WEEK, "UTC", employees_by_id)
        from_friday = to_planned_shifts(
            option, "shop-1", date(2024, 1, 19), "UTC", employees_by_id
        )
        assert [p.start for p in from_monday] == [p.start for p in from_friday]

    def test_accepts_plain_shift_list(self, option, employees_by_id):
        planned = to_planned_shifts(
            list(option.shifts),
            "shop-1",
            WEEK,
            "UTC",
            employees_by_id,
            status=PlannedShiftStatus.PUBLISHED,
        )
        assert all(p.status == PlannedShiftStatus.PUBLISHED for p in planned)
        assert all(p.shop_id == "shop-1" for p in planned)

    def test_unassigned_shift_rejected(self, employees_by_id):
        with pytest.raises(PublishingError, match="no assigned employee"):
            to_planned_shifts(
                [ScheduleDraftShift(None, 0, 420, 780)], "shop-1", WEEK, "UTC", employees_by_id
            )

    def test_unknown_employee_rejected(self, employees_by_id):
        with pytest.raises(PublishingError, match="unknown employee E9"):
            to_planned_shifts(
                [ScheduleDraftShift("E9", 0, 420, 780)], "shop-1", WEEK, "UTC", employees_by_id
            )


class TestExpandToMonth:
    """Tests for repeating a week across a month."""

    @pytest.fixture
    def employees_by_id(self):
        return {"E1": Employee(id="E1", name="Alice")}

    def test_month_dates(self):
        days = month_dates(date(2024, 2, 10))
        assert days[0] == date(2024, 2, 1)
        assert days[-1] == date(2024, 2, 29)

    def test_monday_template_repeats_on_every_monday(self, employees_by_id):
        template = [ScheduleDraftShift("E1", 0, 420, 780, id="s1")]

        planned = expand_to_month(template, "shop-1", WEEK, "UTC", employees_by_id)

        assert [p.start.date() for p in planned] == [
            date(2024, 1, 1),
            date(2024, 1, 8),
            date(2024, 1, 15),
            date(2024, 1, 22),
            date(2024, 1, 29),
        ]
        assert all(p.start.weekday() == 0 for p in planned)
        assert len({p.id for p in planned}) == 5

    def test_explicit_month(self, employees_by_id):
        template = [ScheduleDraftShift("E1", 4, 600, 900)]

        planned = expand_to_month(
            template, "shop-1", WEEK, NEW_YORK, employees_by_id, month=date(2024, 3, 1)
        )

        assert len(planned) == 5
        assert all(p.start.weekday() == 4 for p in planned)
        assert all(p.start.hour == 10 for p in planned)
        assert all(p.end - p.start == timedelta(hours=5) for p in planned)

    def test_results_sorted_by_start(self, employees_by_id):
        template = [
            ScheduleDraftShift("E1", 3, 420, 600),
            ScheduleDraftShift("E1", 1, 420, 600),
        ]
        planned = expand_to_month(template, "shop-1", WEEK, "UTC", employees_by_id)
        starts = [p.start for p in planned]
        assert starts == sorted(starts)

    def test_validation_errors_propagate(self, employees_by_id):
        with pytest.raises(PublishingError):
            expand_to_month(
                [ScheduleDraftShift("E9", 0, 420, 600)], "shop-1", WEEK, "UTC", employees_by_id
            )
