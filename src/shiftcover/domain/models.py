"""Domain models for the scheduling engine.

This module contains the value objects exchanged with the engine: employees,
coverage requirements, availability, planned and draft shifts, coverage
buckets, warnings and generated schedule options.

Everything here is a plain snapshot. Callers copy live application state into
these types before generation and convert results back afterwards.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum, IntEnum
from typing import Optional

from shiftcover.domain.calendar import (
    DAYS_PER_WEEK,
    MINUTES_PER_DAY,
    DateLike,
    TimeZoneLike,
)
from shiftcover.domain.policies import Heuristic, ScheduleGenerationConstraints

MIN_SHIFT_MINUTES = 15


def new_id() -> str:
    """Random identifier for caller-created records."""
    return str(uuid.uuid4())


class EmployeeRole(Enum):
    """Roles an employee can hold in the shop."""

    MANAGER = "manager"
    SHIFT_LEAD = "shift_lead"
    EMPLOYEE = "employee"


class PlannedShiftStatus(Enum):
    """Lifecycle state of a persisted shift."""

    DRAFT = "draft"
    PUBLISHED = "published"


class WarningKind(Enum):
    """Kinds of weaknesses the scorer can report on an option."""

    COVERAGE_GAP = "coverage_gap"
    CONFLICT = "conflict"
    AVAILABILITY = "availability"
    OVERTIME = "overtime"
    REST_VIOLATION = "rest_violation"


class WarningSeverity(IntEnum):
    """Ordered warning severity (INFO < WARNING < CRITICAL)."""

    INFO = 0
    WARNING = 1
    CRITICAL = 2


@dataclass(frozen=True)
class Employee:
    """Snapshot of a schedulable employee.

    Attributes:
        id: Unique identifier.
        name: Display name, also used as the deterministic tie-breaker.
        role: Role used to satisfy role-qualified coverage.
        hourly_wage: Wage used by cost-aware ranking and scoring.
        is_active: Inactive employees are never scheduled.
    """

    id: str
    name: str
    role: EmployeeRole = EmployeeRole.EMPLOYEE
    hourly_wage: Optional[float] = None
    is_active: bool = True


@dataclass(frozen=True)
class CoverageRequirement:
    """One staffing need: ``headcount`` people during a window on one day.

    Attributes:
        shop_id: Shop the requirement belongs to.
        week_start_date: Any date in the target week (normalized by the engine).
        day_of_week: 0 = Monday ... 6 = Sunday.
        start_minutes: Window start, minutes from local midnight.
        end_minutes: Window end (exclusive), up to 1440.
        headcount: Number of people needed (at least 1).
        role_requirement: Required role, or None for any role.
        notes: Free-text manager note.
        id: Identifier of this requirement state.
    """

    shop_id: str
    week_start_date: DateLike
    day_of_week: int
    start_minutes: int
    end_minutes: int
    headcount: int = 1
    role_requirement: Optional[EmployeeRole] = None
    notes: Optional[str] = None
    id: str = field(default_factory=new_id)

    @property
    def duration_minutes(self) -> int:
        """Length of the requirement window in minutes."""
        return max(0, self.end_minutes - self.start_minutes)


@dataclass(frozen=True)
class EmployeeAvailabilityWindow:
    """Recurring weekly availability for one employee on one day."""

    employee_id: str
    day_of_week: int
    start_minutes: int
    end_minutes: int
    shop_id: Optional[str] = None


@dataclass(frozen=True)
class EmployeeAvailabilityOverride:
    """Date-specific availability replacing the recurring pattern for that date.

    Attributes:
        employee_id: Employee the override applies to.
        date: Local calendar date.
        start_minutes: Window start.
        end_minutes: Window end (exclusive).
        is_available: False marks the window as blocked instead of open.
        shop_id: Owning shop, None when unscoped.
        notes: Free-text note.
    """

    employee_id: str
    date: date
    start_minutes: int
    end_minutes: int
    is_available: bool = True
    shop_id: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class EmployeeUnavailableDate:
    """Full-day blackout for one employee."""

    employee_id: str
    date: date
    reason: Optional[str] = None
    shop_id: Optional[str] = None


@dataclass(frozen=True)
class EmployeeAvailabilityContext:
    """Read-only bundle of availability data for one shop."""

    shop_id: Optional[str] = None
    weekly_windows: tuple[EmployeeAvailabilityWindow, ...] = ()
    overrides: tuple[EmployeeAvailabilityOverride, ...] = ()
    unavailable_dates: tuple[EmployeeUnavailableDate, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "weekly_windows", tuple(self.weekly_windows))
        object.__setattr__(self, "overrides", tuple(self.overrides))
        object.__setattr__(self, "unavailable_dates", tuple(self.unavailable_dates))

    def scoped_to(self, shop_id: str) -> "EmployeeAvailabilityContext":
        """Drop entries explicitly tagged for a different shop."""

        def keep(entry) -> bool:
            return entry.shop_id is None or entry.shop_id == shop_id

        return EmployeeAvailabilityContext(
            shop_id=shop_id,
            weekly_windows=tuple(w for w in self.weekly_windows if keep(w)),
            overrides=tuple(o for o in self.overrides if keep(o)),
            unavailable_dates=tuple(u for u in self.unavailable_dates if keep(u)),
        )


@dataclass(frozen=True)
class PlannedShift:
    """An existing, persisted shift with absolute start and end times."""

    shop_id: str
    employee_id: Optional[str]
    start: datetime
    end: datetime
    status: PlannedShiftStatus = PlannedShiftStatus.DRAFT
    role_requirement: Optional[EmployeeRole] = None
    notes: Optional[str] = None
    id: str = field(default_factory=new_id)

    @property
    def duration_minutes(self) -> int:
        """Elapsed length of the shift in minutes."""
        return max(0, int((self.end - self.start).total_seconds() // 60))


@dataclass(frozen=True)
class ScheduleDraftShift:
    """A not-yet-persisted shift in week coordinates.

    Construction clamps the window so that ``end_minutes`` is at least
    ``MIN_SHIFT_MINUTES`` after ``start_minutes`` and both stay inside the day.

    Attributes:
        employee_id: Assigned employee, None for an open shift.
        day_of_week: 0 = Monday ... 6 = Sunday.
        start_minutes: Shift start, minutes from local midnight.
        end_minutes: Shift end (exclusive), up to 1440.
        id: Shift identifier.
        color_seed: Presentation-only tag.
        notes: Free-text note.
    """

    employee_id: Optional[str]
    day_of_week: int
    start_minutes: int
    end_minutes: int
    id: str = field(default_factory=new_id)
    color_seed: str = ""
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        day = max(0, min(DAYS_PER_WEEK - 1, self.day_of_week))
        start = max(0, min(MINUTES_PER_DAY - MIN_SHIFT_MINUTES, self.start_minutes))
        end = max(start + MIN_SHIFT_MINUTES, min(MINUTES_PER_DAY, self.end_minutes))
        object.__setattr__(self, "day_of_week", day)
        object.__setattr__(self, "start_minutes", start)
        object.__setattr__(self, "end_minutes", end)
        if not self.color_seed:
            object.__setattr__(self, "color_seed", self.employee_id or "open")

    @property
    def duration_minutes(self) -> int:
        """Shift length in minutes."""
        return self.end_minutes - self.start_minutes

    @property
    def week_start_minute(self) -> int:
        """Start as minutes from the beginning of the week."""
        return self.day_of_week * MINUTES_PER_DAY + self.start_minutes

    @property
    def week_end_minute(self) -> int:
        """End as minutes from the beginning of the week."""
        return self.day_of_week * MINUTES_PER_DAY + self.end_minutes

    def overlaps(self, other: "ScheduleDraftShift") -> bool:
        """Check if the two shifts share any minute of the week."""
        return (
            self.week_start_minute < other.week_end_minute
            and other.week_start_minute < self.week_end_minute
        )


@dataclass(frozen=True)
class CoverageBucketState:
    """Computed coverage for one fixed-width time slice of one day.

    Attributes:
        day_of_week: Day the bucket belongs to.
        bucket_start_minutes: Bucket start, minutes from midnight.
        bucket_end_minutes: Bucket end (exclusive).
        needed: Summed headcount of all requirements overlapping the bucket.
        assigned: Overlapping shifts whose employee can fill some demand here.
        unmet: Headcount still missing after role-aware matching.
        unmet_roles: Roles with unmet role-qualified demand.
    """

    day_of_week: int
    bucket_start_minutes: int
    bucket_end_minutes: int
    needed: int
    assigned: int
    unmet: int = 0
    unmet_roles: tuple[EmployeeRole, ...] = ()

    @property
    def delta(self) -> int:
        """Assigned minus needed (negative means understaffed)."""
        return self.assigned - self.needed

    @property
    def filled(self) -> int:
        """Headcount actually satisfied."""
        return self.needed - self.unmet

    @property
    def is_covered(self) -> bool:
        return self.unmet == 0


@dataclass(frozen=True)
class ScheduleDraftWarning:
    """A non-fatal weakness of a generated option.

    Attributes:
        kind: What went wrong.
        severity: How bad it is.
        message: Human-readable description.
        day_of_week: Day the warning points at, if any.
        minute: Minute of day the warning points at, if any.
        shift_id: Offending shift, if any.
        related_shift_id: Second shift for pairwise problems.
        employee_id: Employee concerned, if any.
        details: Numeric facts backing the message.
    """

    kind: WarningKind
    severity: WarningSeverity
    message: str
    day_of_week: Optional[int] = None
    minute: Optional[int] = None
    shift_id: Optional[str] = None
    related_shift_id: Optional[str] = None
    employee_id: Optional[str] = None
    details: dict = field(default_factory=dict, compare=False)

    def __str__(self) -> str:
        return f"[{self.severity.name.lower()}/{self.kind.value}] {self.message}"


@dataclass(frozen=True)
class ScheduleOption:
    """One complete proposed weekly schedule."""

    id: str
    name: str
    shifts: tuple[ScheduleDraftShift, ...]
    score: int
    warnings: tuple[ScheduleDraftWarning, ...] = ()
    heuristic: Optional[Heuristic] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "shifts", tuple(self.shifts))
        object.__setattr__(self, "warnings", tuple(self.warnings))

    @property
    def total_shift_count(self) -> int:
        return len(self.shifts)

    @property
    def total_hours(self) -> float:
        """Scheduled hours across all shifts."""
        return sum(s.duration_minutes for s in self.shifts) / 60.0

    @property
    def warnings_count(self) -> int:
        return len(self.warnings)

    @property
    def highest_severity(self) -> Optional[WarningSeverity]:
        """Most severe warning level, None for a clean option."""
        if not self.warnings:
            return None
        return max(w.severity for w in self.warnings)

    def warnings_by_kind(self, kind: WarningKind) -> list[ScheduleDraftWarning]:
        """Warnings of one kind, in report order."""
        return [w for w in self.warnings if w.kind == kind]

    def shifts_for_employee(self, employee_id: str) -> list[ScheduleDraftShift]:
        """Shifts assigned to one employee, in schedule order."""
        return [s for s in self.shifts if s.employee_id == employee_id]


@dataclass(frozen=True)
class SchedulingGeneratorInput:
    """Everything one generation run needs, snapshotted by the caller.

    Attributes:
        shop_id: Shop being scheduled; other shops' data is ignored.
        week_start_date: Any date or datetime inside the target week.
        time_zone: Shop-local IANA zone name or tzinfo.
        coverage_requirements: Staffing needs (may include other weeks).
        employees: Candidate employees; inactive ones are skipped.
        availability_context: Availability for the shop's employees.
        existing_planned_shifts: Already persisted shifts.
        constraints: Generation constraints and scoring weights.
    """

    shop_id: str
    week_start_date: DateLike
    time_zone: TimeZoneLike
    coverage_requirements: tuple[CoverageRequirement, ...]
    employees: tuple[Employee, ...]
    availability_context: EmployeeAvailabilityContext = field(
        default_factory=EmployeeAvailabilityContext
    )
    existing_planned_shifts: tuple[PlannedShift, ...] = ()
    constraints: ScheduleGenerationConstraints = field(
        default_factory=ScheduleGenerationConstraints
    )

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "coverage_requirements", tuple(self.coverage_requirements)
        )
        object.__setattr__(self, "employees", tuple(self.employees))
        object.__setattr__(
            self, "existing_planned_shifts", tuple(self.existing_planned_shifts)
        )

    @property
    def active_employees(self) -> list[Employee]:
        """Active employees in deterministic (name, id) order."""
        return sorted(
            (e for e in self.employees if e.is_active),
            key=lambda e: (e.name, e.id),
        )
