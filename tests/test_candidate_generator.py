"""Tests for candidate generation."""

from dataclasses import replace
from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

from shiftcover.domain.models import (
    CoverageRequirement,
    Employee,
    EmployeeAvailabilityContext,
    EmployeeAvailabilityWindow,
    EmployeeRole,
    PlannedShift,
    PlannedShiftStatus,
    SchedulingGeneratorInput,
)
from shiftcover.domain.policies import Heuristic, ScheduleGenerationConstraints
from shiftcover.scheduling.candidate_generator import (
    CandidateGenerator,
    GenerationPlan,
    WorkingShift,
    draft_shift_id,
    generate,
    planned_shift_pieces,
)

WEEK = date(2024, 1, 15)
UTC = ZoneInfo("UTC")


def requirement(day, start, end, headcount=1, role=None, shop_id="shop-1", week=WEEK):
    return CoverageRequirement(
        shop_id=shop_id,
        week_start_date=week,
        day_of_week=day,
        start_minutes=start,
        end_minutes=end,
        headcount=headcount,
        role_requirement=role,
    )


def all_week(employee_id, start=0, end=1440):
    return [
        EmployeeAvailabilityWindow(
            employee_id=employee_id, day_of_week=day, start_minutes=start, end_minutes=end
        )
        for day in range(7)
    ]


def make_input(requirements, employees, constraints=None, existing=()):
    windows = []
    for employee in employees:
        windows.extend(all_week(employee.id))
    return SchedulingGeneratorInput(
        shop_id="shop-1",
        week_start_date=WEEK,
        time_zone="UTC",
        coverage_requirements=requirements,
        employees=employees,
        availability_context=EmployeeAvailabilityContext(weekly_windows=windows),
        existing_planned_shifts=existing,
        constraints=constraints or ScheduleGenerationConstraints(),
    )


def spans(shifts):
    return [(s.employee_id, s.day_of_week, s.start_minutes, s.end_minutes) for s in shifts]


class TestCandidateGenerator:
    """Tests for one greedy pass."""

    @pytest.fixture
    def alice(self):
        return Employee(id="E1", name="Alice")

    @pytest.fixture
    def bob(self):
        return Employee(id="E2", name="Bob")

    def test_fills_headcount_with_one_shift_per_person(self, alice, bob):
        shifts = generate(
            make_input([requirement(0, 420, 780, headcount=2)], [alice, bob]),
            Heuristic.BALANCED,
        )
        assert spans(shifts) == [("E1", 0, 420, 780), ("E2", 0, 420, 780)]

    def test_buckets_are_merged_into_one_shift(self, alice):
        shifts = generate(make_input([requirement(3, 600, 900)], [alice]), Heuristic.BALANCED)
        assert len(shifts) == 1
        assert shifts[0].duration_minutes == 300

    def test_unavailable_employee_not_scheduled(self, alice):
        generator_input = make_input([requirement(0, 420, 480)], [alice])
        generator_input = replace(
            generator_input,
            availability_context=EmployeeAvailabilityContext(
                weekly_windows=all_week("E1", 600, 900)
            ),
        )
        assert generate(generator_input, Heuristic.BALANCED) == []

    def test_weekly_budget_respected(self, alice):
        constraints = ScheduleGenerationConstraints(max_weekly_hours=8)
        requirements = [requirement(day, 420, 900) for day in range(7)]

        shifts = generate(make_input(requirements, [alice], constraints), Heuristic.BALANCED)

        assert spans(shifts) == [("E1", 0, 420, 900)]

    def test_rest_rule_prefers_rested_employee(self, alice, bob):
        requirements = [requirement(0, 960, 1320), requirement(1, 360, 600)]

        shifts = generate(make_input(requirements, [alice, bob]), Heuristic.BALANCED)

        assert spans(shifts) == [("E1", 0, 960, 1320), ("E2", 1, 360, 600)]

    def test_rest_rule_relaxed_when_nobody_else(self, alice):
        """The fallback pass keeps coverage even if rest is short."""
        requirements = [requirement(0, 960, 1320), requirement(1, 360, 600)]

        shifts = generate(make_input(requirements, [alice]), Heuristic.BALANCED)

        assert spans(shifts) == [("E1", 0, 960, 1320), ("E1", 1, 360, 600)]

    def test_max_shift_length_splits_long_demand(self, alice, bob):
        constraints = ScheduleGenerationConstraints(max_shift_hours=8)

        shifts = generate(
            make_input([requirement(0, 420, 1140)], [alice, bob], constraints),
            Heuristic.BALANCED,
        )

        assert spans(shifts) == [("E1", 0, 420, 900), ("E2", 0, 900, 1140)]
        assert all(s.duration_minutes <= 480 for s in shifts)

    def test_inactive_employee_never_scheduled(self, alice):
        inactive = Employee(id="E0", name="Aaron", is_active=False)
        shifts = generate(
            make_input([requirement(0, 420, 780, headcount=2)], [inactive, alice]),
            Heuristic.BALANCED,
        )
        assert {s.employee_id for s in shifts} == {"E1"}

    def test_other_shop_and_week_ignored(self, alice):
        requirements = [
            requirement(0, 420, 780, shop_id="shop-2"),
            requirement(0, 420, 780, week=date(2024, 1, 22)),
        ]
        assert generate(make_input(requirements, [alice]), Heuristic.BALANCED) == []

    def test_requirement_dated_mid_week_counts(self, alice):
        shifts = generate(
            make_input([requirement(0, 420, 480, week=date(2024, 1, 18))], [alice]),
            Heuristic.BALANCED,
        )
        assert spans(shifts) == [("E1", 0, 420, 480)]

    def test_deterministic(self, alice, bob):
        generator_input = make_input(
            [requirement(day, 420, 1020, headcount=2) for day in range(5)], [alice, bob]
        )
        plan = GenerationPlan.from_input(generator_input)

        first = CandidateGenerator(plan).generate(Heuristic.CONTINUITY)
        second = CandidateGenerator(plan).generate(Heuristic.CONTINUITY)

        assert first == second

    def test_shift_ids_are_stable(self, alice):
        shifts = generate(make_input([requirement(0, 420, 480)], [alice]), Heuristic.BALANCED)
        assert shifts[0].id == draft_shift_id("shop-1", WEEK, "E1", 0, 420, 480)
        assert shifts[0].color_seed == "E1"

    def test_shifts_sorted_in_schedule_order(self, alice, bob):
        requirements = [requirement(2, 600, 660), requirement(0, 420, 480, headcount=2)]
        shifts = generate(make_input(requirements, [bob, alice]), Heuristic.BALANCED)
        keys = [(s.day_of_week, s.start_minutes, s.employee_id) for s in shifts]
        assert keys == sorted(keys)


class TestHeuristics:
    """Tests for heuristic-specific choices."""

    def test_cost_optimized_picks_cheapest(self):
        alice = Employee(id="E1", name="Alice", hourly_wage=20.0)
        bob = Employee(id="E2", name="Bob", hourly_wage=12.0)

        shifts = generate(
            make_input([requirement(0, 420, 780)], [alice, bob]), Heuristic.COST_OPTIMIZED
        )

        assert spans(shifts) == [("E2", 0, 420, 780)]

    def test_role_requirement_uses_qualified_employee(self):
        alice = Employee(id="E1", name="Alice", role=EmployeeRole.EMPLOYEE)
        bob = Employee(id="E2", name="Bob", role=EmployeeRole.SHIFT_LEAD)

        shifts = generate(
            make_input([requirement(0, 660, 900, role=EmployeeRole.SHIFT_LEAD)], [alice, bob]),
            Heuristic.BALANCED,
        )

        assert spans(shifts) == [("E2", 0, 660, 900)]

    def test_role_requirement_left_open_without_qualified_employee(self):
        alice = Employee(id="E1", name="Alice", role=EmployeeRole.EMPLOYEE)
        shifts = generate(
            make_input([requirement(0, 660, 900, role=EmployeeRole.MANAGER)], [alice]),
            Heuristic.BALANCED,
        )
        assert shifts == []

    def test_lead_on_shift_satisfies_role_before_open_demand(self):
        alice = Employee(id="E1", name="Alice", role=EmployeeRole.EMPLOYEE)
        bob = Employee(id="E2", name="Bob", role=EmployeeRole.SHIFT_LEAD)
        requirements = [
            requirement(0, 420, 780, role=EmployeeRole.SHIFT_LEAD),
            requirement(0, 420, 780),
        ]

        shifts = generate(make_input(requirements, [alice, bob]), Heuristic.BALANCED)

        assert sorted(spans(shifts)) == [("E1", 0, 420, 780), ("E2", 0, 420, 780)]

    def test_consistent_starts_keeps_start_times(self):
        alice = Employee(id="E1", name="Alice")
        bob = Employee(id="E2", name="Bob")
        requirements = [
            requirement(day, start, end)
            for day in (0, 1)
            for start, end in ((420, 660), (840, 1080))
        ]

        shifts = generate(make_input(requirements, [alice, bob]), Heuristic.CONSISTENT_STARTS)

        assert {s.start_minutes for s in shifts if s.employee_id == "E1"} == {420}
        assert {s.start_minutes for s in shifts if s.employee_id == "E2"} == {840}


class TestWorkingShift:
    """Tests for the mutable shift used during a pass."""

    def test_overlaps_same_day_only(self):
        shift = WorkingShift(day_of_week=1, start_minutes=420, end_minutes=780)

        assert shift.overlaps(1, 600, 660)
        assert shift.overlaps(1, 360, 450)
        assert not shift.overlaps(1, 780, 840)
        assert not shift.overlaps(1, 360, 420)
        assert not shift.overlaps(2, 600, 660)


class TestFrozenShifts:
    """Tests for published shifts acting as fixed occupancy."""

    @pytest.fixture
    def employees(self):
        return [Employee(id="E1", name="Alice"), Employee(id="E2", name="Bob")]

    @pytest.fixture
    def published(self):
        return PlannedShift(
            shop_id="shop-1",
            employee_id="E1",
            start=datetime(2024, 1, 15, 7, 0, tzinfo=UTC),
            end=datetime(2024, 1, 15, 13, 0, tzinfo=UTC),
            status=PlannedShiftStatus.PUBLISHED,
        )

    def test_published_shift_counts_as_coverage(self, employees, published):
        shifts = generate(
            make_input([requirement(0, 420, 780)], employees, existing=[published]),
            Heuristic.BALANCED,
        )
        assert shifts == []

    def test_published_employee_is_occupied(self, employees, published):
        shifts = generate(
            make_input([requirement(0, 420, 780, headcount=2)], employees, existing=[published]),
            Heuristic.BALANCED,
        )
        assert spans(shifts) == [("E2", 0, 420, 780)]

    def test_draft_shifts_are_not_frozen(self, employees, published):
        draft = replace(published, status=PlannedShiftStatus.DRAFT)
        shifts = generate(
            make_input([requirement(0, 420, 780)], employees, existing=[draft]),
            Heuristic.BALANCED,
        )
        assert spans(shifts) == [("E1", 0, 420, 780)]

    def test_freeze_disabled(self, employees, published):
        constraints = ScheduleGenerationConstraints(freeze_published_shifts=False)
        shifts = generate(
            make_input([requirement(0, 420, 780)], employees, constraints, [published]),
            Heuristic.BALANCED,
        )
        assert spans(shifts) == [("E1", 0, 420, 780)]

    def test_other_shop_published_shift_ignored(self, employees, published):
        elsewhere = replace(published, shop_id="shop-2")
        plan = GenerationPlan.from_input(
            make_input([requirement(0, 420, 780)], employees, existing=[elsewhere])
        )
        assert plan.fixed_shifts == []


class TestPlannedShiftPieces:
    """Tests for projecting planned shifts into week coordinates."""

    def test_overnight_shift_split_at_midnight(self):
        shift = PlannedShift(
            shop_id="shop-1",
            employee_id="E1",
            start=datetime(2024, 1, 15, 22, 0, tzinfo=UTC),
            end=datetime(2024, 1, 16, 6, 0, tzinfo=UTC),
        )

        pieces = planned_shift_pieces(shift, WEEK, UTC)

        assert [(p.day_of_week, p.start_minutes, p.end_minutes) for p in pieces] == [
            (0, 1320, 1440),
            (1, 0, 360),
        ]
        assert all(p.id == shift.id for p in pieces)

    def test_part_before_week_dropped(self):
        shift = PlannedShift(
            shop_id="shop-1",
            employee_id="E1",
            start=datetime(2024, 1, 14, 22, 0, tzinfo=UTC),
            end=datetime(2024, 1, 15, 2, 0, tzinfo=UTC),
        )
        pieces = planned_shift_pieces(shift, WEEK, UTC)
        assert [(p.day_of_week, p.start_minutes, p.end_minutes) for p in pieces] == [
            (0, 0, 120)
        ]

    def test_shift_outside_week(self):
        shift = PlannedShift(
            shop_id="shop-1",
            employee_id="E1",
            start=datetime(2024, 1, 23, 9, 0, tzinfo=UTC),
            end=datetime(2024, 1, 23, 17, 0, tzinfo=UTC),
        )
        assert planned_shift_pieces(shift, WEEK, UTC) == []
