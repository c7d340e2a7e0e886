"""Candidate generator for building one weekly schedule per heuristic.

The generator sweeps coverage buckets in chronological order. For every bucket
that is still understaffed it picks the best eligible employee according to
the heuristic and either extends a shift that ends right where the bucket
starts or opens a new one. It never fails: demand nobody can fill is left
for the scorer to report as a coverage gap.
"""

import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, tzinfo
from typing import Optional

from shiftcover.domain.calendar import (
    MINUTES_PER_DAY,
    MINUTES_PER_WEEK,
    date_for_day,
    resolve_time_zone,
    week_minute_of,
    week_start_date,
)
from shiftcover.domain.models import (
    MIN_SHIFT_MINUTES,
    CoverageRequirement,
    Employee,
    EmployeeRole,
    PlannedShift,
    PlannedShiftStatus,
    ScheduleDraftShift,
    SchedulingGeneratorInput,
)
from shiftcover.domain.policies import Heuristic, ScheduleGenerationConstraints
from shiftcover.scheduling.availability import AvailabilityResolver
from shiftcover.scheduling.coverage import (
    BucketDemand,
    bucket_demands,
    covering_roles,
    match_coverage,
)
from shiftcover.scheduling.heuristics import (
    RankingCandidate,
    RankingStrategy,
    strategy_for,
)

logger = logging.getLogger(__name__)

SHIFT_ID_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "shiftcover/draft-shift")


def draft_shift_id(
    shop_id: str,
    week_start: date,
    employee_id: Optional[str],
    day_of_week: int,
    start_minutes: int,
    end_minutes: int,
) -> str:
    """Stable identifier for a generated shift."""
    key = f"{shop_id}|{week_start.isoformat()}|{employee_id}|{day_of_week}|{start_minutes}|{end_minutes}"
    return str(uuid.uuid5(SHIFT_ID_NAMESPACE, key))


def scoped_requirements(
    requirements: list[CoverageRequirement],
    shop_id: str,
    week_start: date,
    time_zone: tzinfo,
) -> list[CoverageRequirement]:
    """Requirements belonging to the shop and to the week starting at ``week_start``."""
    return [
        req
        for req in requirements
        if req.shop_id == shop_id
        and week_start_date(req.week_start_date, time_zone) == week_start
    ]


def planned_shift_pieces(
    shift: PlannedShift,
    week_start: date,
    time_zone: tzinfo,
) -> list[ScheduleDraftShift]:
    """Project a planned shift into week coordinates, split at midnight.

    Parts outside the week are dropped. Each piece keeps the planned shift's id.
    """
    start = max(0, week_minute_of(shift.start, week_start, time_zone))
    end = min(MINUTES_PER_WEEK, week_minute_of(shift.end, week_start, time_zone))

    pieces = []
    while start < end:
        day, minute = divmod(start, MINUTES_PER_DAY)
        piece_end = min(end, (day + 1) * MINUTES_PER_DAY)
        pieces.append(
            ScheduleDraftShift(
                employee_id=shift.employee_id,
                day_of_week=day,
                start_minutes=minute,
                end_minutes=piece_end - day * MINUTES_PER_DAY,
                id=shift.id,
                notes=shift.notes,
            )
        )
        start = piece_end
    return pieces


def frozen_shifts(
    existing: list[PlannedShift],
    shop_id: str,
    week_start: date,
    time_zone: tzinfo,
) -> list[ScheduleDraftShift]:
    """Published, assigned shifts of the shop that overlap the week."""
    pieces = []
    for shift in existing:
        if shift.status != PlannedShiftStatus.PUBLISHED:
            continue
        if shift.shop_id != shop_id or shift.employee_id is None:
            continue
        pieces.extend(planned_shift_pieces(shift, week_start, time_zone))
    return pieces


@dataclass
class GenerationPlan:
    """Heuristic-independent preparation shared by every pass of one run.

    Attributes:
        shop_id: Shop being scheduled.
        week_start: Monday of the target week.
        time_zone: Shop-local zone.
        requirements: Requirements scoped to the shop and week.
        employees: Active employees in (name, id) order.
        demands: Bucket demands per day.
        resolver: Indexed availability.
        fixed_shifts: Published shifts treated as immovable occupancy.
        constraints: Generation constraints.
    """

    shop_id: str
    week_start: date
    time_zone: tzinfo
    requirements: list[CoverageRequirement]
    employees: list[Employee]
    demands: dict[int, list[BucketDemand]]
    resolver: AvailabilityResolver
    fixed_shifts: list[ScheduleDraftShift]
    constraints: ScheduleGenerationConstraints

    @classmethod
    def from_input(cls, generator_input: SchedulingGeneratorInput) -> "GenerationPlan":
        """Scope and index an input once for all heuristic passes."""
        tz = resolve_time_zone(generator_input.time_zone)
        week_start = week_start_date(generator_input.week_start_date, tz)
        constraints = generator_input.constraints

        requirements = scoped_requirements(
            list(generator_input.coverage_requirements),
            generator_input.shop_id,
            week_start,
            tz,
        )
        fixed = []
        if constraints.freeze_published_shifts:
            fixed = frozen_shifts(
                list(generator_input.existing_planned_shifts),
                generator_input.shop_id,
                week_start,
                tz,
            )

        return cls(
            shop_id=generator_input.shop_id,
            week_start=week_start,
            time_zone=tz,
            requirements=requirements,
            employees=generator_input.active_employees,
            demands=bucket_demands(requirements, constraints.bucket_minutes),
            resolver=AvailabilityResolver(
                generator_input.availability_context.scoped_to(generator_input.shop_id)
            ),
            fixed_shifts=fixed,
            constraints=constraints,
        )

    @property
    def employee_roles(self) -> dict[str, EmployeeRole]:
        return {e.id: e.role for e in self.employees}


@dataclass
class WorkingShift:
    """Mutable shift under construction."""

    day_of_week: int
    start_minutes: int
    end_minutes: int

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    @property
    def week_start_minute(self) -> int:
        return self.day_of_week * MINUTES_PER_DAY + self.start_minutes

    @property
    def week_end_minute(self) -> int:
        return self.day_of_week * MINUTES_PER_DAY + self.end_minutes

    def overlaps(self, day_of_week: int, start_minutes: int, end_minutes: int) -> bool:
        return (
            self.day_of_week == day_of_week
            and self.start_minutes < end_minutes
            and start_minutes < self.end_minutes
        )


@dataclass
class EmployeeWeekState:
    """Running weekly state of one employee during a pass.

    Attributes:
        employee: The employee.
        shifts: Shifts built so far in this pass.
        fixed: Frozen occupancy as week-minute intervals.
    """

    employee: Employee
    shifts: list[WorkingShift] = field(default_factory=list)
    fixed: list[tuple[int, int]] = field(default_factory=list)

    @property
    def fixed_minutes(self) -> int:
        return sum(end - start for start, end in self.fixed)

    @property
    def total_minutes(self) -> int:
        return self.fixed_minutes + sum(s.duration_minutes for s in self.shifts)

    def running_shift(self, day_of_week: int, minute: int) -> Optional[WorkingShift]:
        """Shift on ``day_of_week`` that ends exactly at ``minute``."""
        for shift in self.shifts:
            if shift.day_of_week == day_of_week and shift.end_minutes == minute:
                return shift
        return None

    def occupied(self, exclude: Optional[WorkingShift] = None) -> list[tuple[int, int]]:
        """Week-minute intervals already taken, optionally skipping one shift."""
        intervals = list(self.fixed)
        for shift in self.shifts:
            if shift is not exclude:
                intervals.append((shift.week_start_minute, shift.week_end_minute))
        return intervals

    def usual_start(self, day_of_week: int) -> Optional[float]:
        """Average start minute of shifts on other days."""
        starts = [s.start_minutes for s in self.shifts if s.day_of_week != day_of_week]
        if not starts:
            return None
        return sum(starts) / len(starts)


@dataclass
class Proposal:
    """How an eligible employee would cover a bucket."""

    state: EmployeeWeekState
    start_minutes: int
    end_minutes: int
    extends: Optional[WorkingShift] = None


class CandidateGenerator:
    """Builds one candidate schedule per heuristic from a shared plan.

    Example:
        >>> plan = GenerationPlan.from_input(generator_input)
        >>> shifts = CandidateGenerator(plan).generate(Heuristic.BALANCED)
    """

    def __init__(self, plan: GenerationPlan):
        self.plan = plan
        self.constraints = plan.constraints

    def generate(self, heuristic: Heuristic) -> list[ScheduleDraftShift]:
        """Run one greedy pass and return its shifts in schedule order."""
        strategy = strategy_for(heuristic)
        states = self._initial_states()
        fixed_by_day: dict[int, list[ScheduleDraftShift]] = defaultdict(list)
        for shift in self.plan.fixed_shifts:
            fixed_by_day[shift.day_of_week].append(shift)

        roles = self.plan.employee_roles
        for day in sorted(self.plan.demands):
            for demand in self.plan.demands[day]:
                self._fill_bucket(demand, states, fixed_by_day[day], roles, strategy)

        self._repair(states)
        shifts = self._to_draft_shifts(states)
        logger.debug(
            "%s pass built %d shifts for %d employees",
            heuristic.value,
            len(shifts),
            len({s.employee_id for s in shifts}),
        )
        return shifts

    def _initial_states(self) -> dict[str, EmployeeWeekState]:
        states = {e.id: EmployeeWeekState(employee=e) for e in self.plan.employees}
        for shift in self.plan.fixed_shifts:
            state = states.get(shift.employee_id)
            if state is not None:
                state.fixed.append((shift.week_start_minute, shift.week_end_minute))
        return states

    def _present_roles(
        self,
        demand: BucketDemand,
        states: dict[str, EmployeeWeekState],
        fixed: list[ScheduleDraftShift],
        roles: dict[str, EmployeeRole],
    ) -> list[Optional[EmployeeRole]]:
        """Roles of everyone already working during the bucket."""
        present = [
            state.employee.role
            for state in states.values()
            for shift in state.shifts
            if shift.overlaps(demand.day_of_week, demand.span_start, demand.span_end)
        ]
        return present + covering_roles(
            fixed,
            demand.day_of_week,
            demand.span_start,
            demand.span_end,
            roles,
        )

    def _fill_bucket(
        self,
        demand: BucketDemand,
        states: dict[str, EmployeeWeekState],
        fixed: list[ScheduleDraftShift],
        roles: dict[str, EmployeeRole],
        strategy: RankingStrategy,
    ) -> None:
        exhausted: set[Optional[EmployeeRole]] = set()

        while True:
            match = match_coverage(
                demand.needed_by_role,
                self._present_roles(demand, states, fixed, roles),
            )
            targets = self._targets(match.unmet_by_role, exhausted)
            if not targets:
                return
            role = targets[0]

            proposal = self._select(demand, role, states, strategy, strict=True)
            if proposal is None:
                proposal = self._select(demand, role, states, strategy, strict=False)
            if proposal is None:
                exhausted.add(role)
                continue

            if proposal.extends is not None:
                proposal.extends.end_minutes = proposal.end_minutes
            else:
                proposal.state.shifts.append(
                    WorkingShift(
                        day_of_week=demand.day_of_week,
                        start_minutes=proposal.start_minutes,
                        end_minutes=proposal.end_minutes,
                    )
                )

    @staticmethod
    def _targets(
        unmet_by_role: dict[Optional[EmployeeRole], int],
        exhausted: set[Optional[EmployeeRole]],
    ) -> list[Optional[EmployeeRole]]:
        """Roles still to staff: specific roles first, then "any role"."""
        order: list[Optional[EmployeeRole]] = list(EmployeeRole) + [None]
        return [
            role
            for role in order
            if unmet_by_role.get(role, 0) > 0 and role not in exhausted
        ]

    def _select(
        self,
        demand: BucketDemand,
        role: Optional[EmployeeRole],
        states: dict[str, EmployeeWeekState],
        strategy: RankingStrategy,
        strict: bool,
    ) -> Optional[Proposal]:
        proposals = {}
        candidates = []
        for state in states.values():
            if role is not None and state.employee.role != role:
                continue
            proposal = self._propose(demand, state, strict)
            if proposal is None:
                continue
            extending = proposal.extends
            prior = state.total_minutes
            if extending is not None:
                prior -= extending.duration_minutes
            candidate = RankingCandidate(
                employee=state.employee,
                continues=extending is not None,
                assigned_minutes=state.total_minutes,
                prior_minutes=prior,
                proposed_start=proposal.start_minutes,
                usual_start=state.usual_start(demand.day_of_week),
            )
            proposals[state.employee.id] = proposal
            candidates.append(candidate)

        best = strategy.pick(candidates)
        if best is None:
            return None
        return proposals[best.employee.id]

    def _propose(
        self,
        demand: BucketDemand,
        state: EmployeeWeekState,
        strict: bool,
    ) -> Optional[Proposal]:
        """Eligible way for this employee to cover the bucket, if any."""
        day = demand.day_of_week
        running = state.running_shift(day, demand.span_start)
        max_shift = self.constraints.max_shift_minutes

        if running is not None and (
            max_shift is None or demand.span_end - running.start_minutes <= max_shift
        ):
            proposal = Proposal(
                state=state,
                start_minutes=running.start_minutes,
                end_minutes=demand.span_end,
                extends=running,
            )
            added = (demand.span_start, demand.span_end)
        else:
            start = min(demand.span_start, MINUTES_PER_DAY - MIN_SHIFT_MINUTES)
            end = max(demand.span_end, start + MIN_SHIFT_MINUTES)
            if max_shift is not None and end - start > max_shift:
                return None
            proposal = Proposal(state=state, start_minutes=start, end_minutes=end)
            added = (start, end)

        added_minutes = added[1] - added[0]
        if state.total_minutes + added_minutes > self.constraints.max_weekly_minutes:
            return None

        check_availability = strict or not self.constraints.allow_availability_fallback
        if check_availability and not self.plan.resolver.is_available(
            state.employee.id,
            day,
            added[0],
            added[1],
            date_for_day(self.plan.week_start, day),
        ):
            return None

        offset = day * MINUTES_PER_DAY
        result = (offset + proposal.start_minutes, offset + proposal.end_minutes)
        occupied = state.occupied(exclude=proposal.extends)
        for start, end in occupied:
            if start < result[1] and result[0] < end:
                return None

        if strict and self._breaks_rest(result, occupied):
            return None

        return proposal

    def _breaks_rest(
        self,
        interval: tuple[int, int],
        occupied: list[tuple[int, int]],
    ) -> bool:
        """Check if a non-contiguous neighbour is closer than the minimum rest."""
        min_rest = self.constraints.min_rest_minutes
        for start, end in occupied:
            if end <= interval[0]:
                gap = interval[0] - end
            else:
                gap = start - interval[1]
            if 0 < gap < min_rest:
                return True
        return False

    def _repair(self, states: dict[str, EmployeeWeekState]) -> None:
        """Merge touching shifts of the same employee and day."""
        max_shift = self.constraints.max_shift_minutes
        for state in states.values():
            merged: list[WorkingShift] = []
            for shift in sorted(state.shifts, key=lambda s: s.week_start_minute):
                last = merged[-1] if merged else None
                if (
                    last is not None
                    and last.day_of_week == shift.day_of_week
                    and last.end_minutes == shift.start_minutes
                    and (
                        max_shift is None
                        or shift.end_minutes - last.start_minutes <= max_shift
                    )
                ):
                    last.end_minutes = shift.end_minutes
                else:
                    merged.append(shift)
            state.shifts = merged

    def _to_draft_shifts(
        self, states: dict[str, EmployeeWeekState]
    ) -> list[ScheduleDraftShift]:
        shifts = []
        for state in states.values():
            for shift in state.shifts:
                shifts.append(
                    ScheduleDraftShift(
                        employee_id=state.employee.id,
                        day_of_week=shift.day_of_week,
                        start_minutes=shift.start_minutes,
                        end_minutes=shift.end_minutes,
                        id=draft_shift_id(
                            self.plan.shop_id,
                            self.plan.week_start,
                            state.employee.id,
                            shift.day_of_week,
                            shift.start_minutes,
                            shift.end_minutes,
                        ),
                        color_seed=state.employee.id,
                    )
                )
        return sort_shifts(shifts)


def sort_shifts(shifts: list[ScheduleDraftShift]) -> list[ScheduleDraftShift]:
    """Order shifts by (day, start, end, employee id)."""
    return sorted(
        shifts,
        key=lambda s: (s.day_of_week, s.start_minutes, s.end_minutes, s.employee_id or ""),
    )


def generate(
    generator_input: SchedulingGeneratorInput,
    heuristic: Heuristic,
) -> list[ScheduleDraftShift]:
    """Build one candidate schedule for ``heuristic``."""
    return CandidateGenerator(GenerationPlan.from_input(generator_input)).generate(heuristic)

