"""Coverage bucketization.

Requirements are sliced into fixed-width buckets aligned to multiples of the
bucket width from midnight. Buckets exist only where at least one requirement
overlaps. A requirement adds its full headcount to every bucket it touches,
and overlapping requirements sum.
"""

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Optional

from shiftcover.domain.calendar import MINUTES_PER_DAY
from shiftcover.domain.models import (
    CoverageBucketState,
    CoverageRequirement,
    EmployeeRole,
    ScheduleDraftShift,
)

RoleDemand = dict[Optional[EmployeeRole], int]


@dataclass(frozen=True)
class BucketDemand:
    """Staffing demand inside one bucket.

    Attributes:
        day_of_week: Day the bucket belongs to.
        start_minutes: Bucket start.
        end_minutes: Bucket end (exclusive).
        span_start: Earliest requirement minute inside the bucket.
        span_end: Latest requirement minute inside the bucket.
        needed_by_role: Headcount keyed by role (None = any role).
    """

    day_of_week: int
    start_minutes: int
    end_minutes: int
    span_start: int
    span_end: int
    needed_by_role: RoleDemand = field(default_factory=dict, hash=False)

    @property
    def needed(self) -> int:
        return sum(self.needed_by_role.values())


@dataclass(frozen=True)
class CoverageMatch:
    """Outcome of matching present employees against a bucket's demand."""

    assigned: int
    unmet: int
    unmet_by_role: RoleDemand = field(default_factory=dict, hash=False)

    @property
    def unmet_roles(self) -> tuple[EmployeeRole, ...]:
        """Specific roles still missing, in role declaration order."""
        return tuple(
            role for role in EmployeeRole if self.unmet_by_role.get(role, 0) > 0
        )


def bucket_starts(start: int, end: int, bucket_minutes: int) -> range:
    """Aligned bucket starts overlapping [start, end)."""
    first = (start // bucket_minutes) * bucket_minutes
    return range(first, end, bucket_minutes)


def bucket_demands(
    requirements: Iterable[CoverageRequirement],
    bucket_minutes: int,
) -> dict[int, list[BucketDemand]]:
    """Group requirement headcount into aligned buckets per day.

    Args:
        requirements: Requirements for a single week.
        bucket_minutes: Bucket width in minutes.

    Returns:
        Dict mapping day index to chronologically ordered bucket demands.
    """
    needed: dict[tuple[int, int], Counter] = defaultdict(Counter)
    spans: dict[tuple[int, int], tuple[int, int]] = {}

    for req in requirements:
        if req.start_minutes >= req.end_minutes:
            continue
        for b_start in bucket_starts(req.start_minutes, req.end_minutes, bucket_minutes):
            b_end = min(b_start + bucket_minutes, MINUTES_PER_DAY)
            key = (req.day_of_week, b_start)
            needed[key][req.role_requirement] += req.headcount

            span = (max(b_start, req.start_minutes), min(b_end, req.end_minutes))
            if key in spans:
                span = (min(spans[key][0], span[0]), max(spans[key][1], span[1]))
            spans[key] = span

    result: dict[int, list[BucketDemand]] = defaultdict(list)
    for day, b_start in sorted(needed):
        span_start, span_end = spans[(day, b_start)]
        result[day].append(
            BucketDemand(
                day_of_week=day,
                start_minutes=b_start,
                end_minutes=min(b_start + bucket_minutes, MINUTES_PER_DAY),
                span_start=span_start,
                span_end=span_end,
                needed_by_role=dict(needed[(day, b_start)]),
            )
        )
    return dict(result)


def match_coverage(
    needed_by_role: RoleDemand,
    covering_roles: Iterable[Optional[EmployeeRole]],
) -> CoverageMatch:
    """Match present employees against one bucket's demand.

    Role-qualified demand is filled first by employees holding that role.
    Everyone left over, including employees whose role nobody asked for,
    may fill "any role" demand.

    Args:
        needed_by_role: Headcount keyed by role (None = any role).
        covering_roles: Role of each employee working during the bucket.

    Returns:
        CoverageMatch with the eligible headcount and the shortfall.
    """
    covering = list(covering_roles)
    present = Counter(covering)

    unmet_by_role: RoleDemand = {}
    pool = 0
    for role, count in present.items():
        if role is None or role not in needed_by_role:
            pool += count

    for role, need in needed_by_role.items():
        if role is None:
            continue
        matched = min(need, present.get(role, 0))
        pool += present.get(role, 0) - matched
        if need > matched:
            unmet_by_role[role] = need - matched

    any_need = needed_by_role.get(None, 0)
    if any_need > pool:
        unmet_by_role[None] = any_need - pool

    if any_need > 0:
        assigned = len(covering)
    else:
        assigned = sum(present.get(role, 0) for role in needed_by_role)

    return CoverageMatch(
        assigned=assigned,
        unmet=sum(unmet_by_role.values()),
        unmet_by_role=unmet_by_role,
    )


def covering_roles(
    shifts: Iterable[ScheduleDraftShift],
    day_of_week: int,
    start_minutes: int,
    end_minutes: int,
    employee_roles: Optional[dict[str, EmployeeRole]] = None,
) -> list[Optional[EmployeeRole]]:
    """Roles of the assigned shifts overlapping a window on one day.

    Open shifts never count. Without ``employee_roles`` every employee is
    treated as role-less and can only fill "any role" demand.
    """
    roles = employee_roles or {}
    return [
        roles.get(shift.employee_id)
        for shift in shifts
        if shift.employee_id is not None
        and shift.day_of_week == day_of_week
        and shift.start_minutes < end_minutes
        and start_minutes < shift.end_minutes
    ]


def bucketize(
    requirements: Iterable[CoverageRequirement],
    bucket_minutes: int,
    shifts: Iterable[ScheduleDraftShift] = (),
    employee_roles: Optional[dict[str, EmployeeRole]] = None,
) -> dict[int, list[CoverageBucketState]]:
    """Compute per-bucket coverage for a set of shifts.

    Args:
        requirements: Requirements for a single week.
        bucket_minutes: Bucket width in minutes.
        shifts: Shifts providing coverage.
        employee_roles: Role of each employee by id.

    Returns:
        Dict mapping day index to chronologically ordered bucket states.
    """
    by_day: dict[int, list[ScheduleDraftShift]] = defaultdict(list)
    for shift in shifts:
        by_day[shift.day_of_week].append(shift)

    states: dict[int, list[CoverageBucketState]] = {}
    for day, demands in bucket_demands(requirements, bucket_minutes).items():
        day_states = []
        for demand in demands:
            roles = covering_roles(
                by_day.get(day, []),
                day,
                demand.span_start,
                demand.span_end,
                employee_roles,
            )
            match = match_coverage(demand.needed_by_role, roles)
            day_states.append(
                CoverageBucketState(
                    day_of_week=day,
                    bucket_start_minutes=demand.start_minutes,
                    bucket_end_minutes=demand.end_minutes,
                    needed=demand.needed,
                    assigned=match.assigned,
                    unmet=match.unmet,
                    unmet_roles=match.unmet_roles,
                )
            )
        states[day] = day_states
    return states
