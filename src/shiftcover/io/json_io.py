"""JSON payloads for generator input and generated options.

Incoming payloads are validated by pydantic models that mirror the engine's
value objects and are then converted into them. Times of day may be given
either as minutes from midnight or as ``"HH:MM"`` strings (``"24:00"`` is
midnight at the end of the day). Dates use ISO format and planned shift times
ISO datetimes with an offset.
"""

import json
from datetime import date, datetime
from pathlib import Path
from typing import Annotated, Any, Optional, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StrictBool,
    ValidationError,
    field_validator,
)

from shiftcover.domain.calendar import day_name, time_label
from shiftcover.domain.errors import InvalidInputError
from shiftcover.domain.models import (
    CoverageRequirement,
    Employee,
    EmployeeAvailabilityContext,
    EmployeeAvailabilityOverride,
    EmployeeAvailabilityWindow,
    EmployeeRole,
    EmployeeUnavailableDate,
    PlannedShift,
    PlannedShiftStatus,
    ScheduleOption,
    SchedulingGeneratorInput,
)
from shiftcover.domain.policies import (
    Heuristic,
    ScheduleGenerationConstraints,
    ScoringWeights,
)

JsonSource = Union[dict, str, Path]

_DEFAULT_CONSTRAINTS = ScheduleGenerationConstraints()
_DEFAULT_WEIGHTS = ScoringWeights()


def parse_minutes(value: Any) -> int:
    """Minutes from midnight for an int or an ``"HH:MM"`` string."""
    if isinstance(value, bool):
        raise ValueError(f"invalid time of day: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and ":" in value:
        hours, mins = value.split(":", 1)
        return int(hours) * 60 + int(mins)
    raise ValueError(f"invalid time of day: {value!r}")


def parse_role(value: Any) -> Optional[EmployeeRole]:
    if value is None or value == "any":
        return None
    return EmployeeRole(value)


def _identifier(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


TimeOfDay = Annotated[int, BeforeValidator(parse_minutes)]
RoleName = Annotated[Optional[EmployeeRole], BeforeValidator(parse_role)]
Identifier = Annotated[str, BeforeValidator(_identifier)]


class EmployeePayload(BaseModel):
    """One roster entry."""

    id: Identifier
    name: Optional[str] = None
    role: RoleName = None
    hourly_wage: Optional[float] = Field(default=None, ge=0)
    is_active: StrictBool = True

    @field_validator("hourly_wage", mode="before")
    @classmethod
    def wage_is_number(cls, v):
        if isinstance(v, (str, bool)):
            raise ValueError(f"hourly wage must be a number, got {v!r}")
        return v

    def to_domain(self) -> Employee:
        return Employee(
            id=self.id,
            name=self.name if self.name is not None else self.id,
            role=self.role or EmployeeRole.EMPLOYEE,
            hourly_wage=self.hourly_wage,
            is_active=self.is_active,
        )


class RequirementPayload(BaseModel):
    """One coverage requirement; shop and week default to the payload's."""

    day_of_week: int
    start: TimeOfDay
    end: TimeOfDay
    headcount: int = 1
    role_requirement: RoleName = None
    notes: Optional[str] = None
    id: Optional[Identifier] = None
    shop_id: Optional[Identifier] = None
    week_start_date: Optional[date] = None

    def to_domain(self, shop_id: str, week_start: date) -> CoverageRequirement:
        optional = {}
        if self.id is not None:
            optional["id"] = self.id
        return CoverageRequirement(
            shop_id=self.shop_id or shop_id,
            week_start_date=self.week_start_date or week_start,
            day_of_week=self.day_of_week,
            start_minutes=self.start,
            end_minutes=self.end,
            headcount=self.headcount,
            role_requirement=self.role_requirement,
            notes=self.notes,
            **optional,
        )


class WindowPayload(BaseModel):
    employee_id: Identifier
    day_of_week: int
    start: TimeOfDay
    end: TimeOfDay
    shop_id: Optional[Identifier] = None


class OverridePayload(BaseModel):
    employee_id: Identifier
    date: date
    start: TimeOfDay
    end: TimeOfDay
    is_available: StrictBool = True
    shop_id: Optional[Identifier] = None
    notes: Optional[str] = None


class BlackoutPayload(BaseModel):
    employee_id: Identifier
    date: date
    reason: Optional[str] = None
    shop_id: Optional[Identifier] = None


class AvailabilityPayload(BaseModel):
    """Weekly windows, date overrides and blackout dates."""

    weekly_windows: list[WindowPayload] = Field(default_factory=list)
    overrides: list[OverridePayload] = Field(default_factory=list)
    unavailable_dates: list[BlackoutPayload] = Field(default_factory=list)

    def to_domain(self, shop_id: str) -> EmployeeAvailabilityContext:
        return EmployeeAvailabilityContext(
            shop_id=shop_id,
            weekly_windows=tuple(
                EmployeeAvailabilityWindow(
                    employee_id=w.employee_id,
                    day_of_week=w.day_of_week,
                    start_minutes=w.start,
                    end_minutes=w.end,
                    shop_id=w.shop_id,
                )
                for w in self.weekly_windows
            ),
            overrides=tuple(
                EmployeeAvailabilityOverride(
                    employee_id=o.employee_id,
                    date=o.date,
                    start_minutes=o.start,
                    end_minutes=o.end,
                    is_available=o.is_available,
                    shop_id=o.shop_id,
                    notes=o.notes,
                )
                for o in self.overrides
            ),
            unavailable_dates=tuple(
                EmployeeUnavailableDate(
                    employee_id=u.employee_id,
                    date=u.date,
                    reason=u.reason,
                    shop_id=u.shop_id,
                )
                for u in self.unavailable_dates
            ),
        )


class PlannedShiftPayload(BaseModel):
    """An already planned shift with absolute start and end times."""

    start: datetime
    end: datetime
    employee_id: Optional[Identifier] = None
    status: PlannedShiftStatus = PlannedShiftStatus.DRAFT
    role_requirement: RoleName = None
    notes: Optional[str] = None
    id: Optional[Identifier] = None
    shop_id: Optional[Identifier] = None

    def to_domain(self, shop_id: str) -> PlannedShift:
        optional = {}
        if self.id is not None:
            optional["id"] = self.id
        return PlannedShift(
            shop_id=self.shop_id or shop_id,
            employee_id=self.employee_id,
            start=self.start,
            end=self.end,
            status=self.status,
            role_requirement=self.role_requirement,
            notes=self.notes,
            **optional,
        )


class ScoringPayload(BaseModel):
    """Overrides for individual scoring weights."""

    model_config = ConfigDict(extra="forbid")

    covered_bucket: int = _DEFAULT_WEIGHTS.covered_bucket
    gap_bucket: int = _DEFAULT_WEIGHTS.gap_bucket
    critical_gap_multiplier: int = _DEFAULT_WEIGHTS.critical_gap_multiplier
    missing_headcount: int = _DEFAULT_WEIGHTS.missing_headcount
    role_gap: int = _DEFAULT_WEIGHTS.role_gap
    conflict: int = _DEFAULT_WEIGHTS.conflict
    availability: int = _DEFAULT_WEIGHTS.availability
    rest_violation: int = _DEFAULT_WEIGHTS.rest_violation
    overtime_per_hour: int = _DEFAULT_WEIGHTS.overtime_per_hour
    per_shift: int = _DEFAULT_WEIGHTS.per_shift
    labor_cost_per_unit: float = _DEFAULT_WEIGHTS.labor_cost_per_unit
    fairness_per_hour_spread: float = _DEFAULT_WEIGHTS.fairness_per_hour_spread

    def to_domain(self) -> ScoringWeights:
        return ScoringWeights(**self.model_dump())


class ConstraintsPayload(BaseModel):
    """Generation constraints; unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")

    bucket_minutes: int = _DEFAULT_CONSTRAINTS.bucket_minutes
    max_weekly_hours: float = _DEFAULT_CONSTRAINTS.max_weekly_hours
    min_rest_hours: float = _DEFAULT_CONSTRAINTS.min_rest_hours
    max_shift_hours: Optional[float] = _DEFAULT_CONSTRAINTS.max_shift_hours
    freeze_published_shifts: StrictBool = _DEFAULT_CONSTRAINTS.freeze_published_shifts
    allow_availability_fallback: StrictBool = _DEFAULT_CONSTRAINTS.allow_availability_fallback
    overtime_warning_threshold_hours: float = (
        _DEFAULT_CONSTRAINTS.overtime_warning_threshold_hours
    )
    requested_option_count: int = _DEFAULT_CONSTRAINTS.requested_option_count
    heuristics: tuple[Heuristic, ...] = _DEFAULT_CONSTRAINTS.heuristics
    coverage_weight: float = _DEFAULT_CONSTRAINTS.coverage_weight
    labor_cost_weight: float = _DEFAULT_CONSTRAINTS.labor_cost_weight
    fairness_weight: float = _DEFAULT_CONSTRAINTS.fairness_weight
    scoring: ScoringPayload = Field(default_factory=ScoringPayload)

    def to_domain(self) -> ScheduleGenerationConstraints:
        values = {name: getattr(self, name) for name in type(self).model_fields}
        values["scoring"] = self.scoring.to_domain()
        return ScheduleGenerationConstraints(**values)


class GeneratorPayload(BaseModel):
    """A complete generation request for one shop and week."""

    shop_id: Identifier
    week_start_date: date
    time_zone: str = "UTC"
    employees: list[EmployeePayload] = Field(default_factory=list)
    coverage_requirements: list[RequirementPayload] = Field(default_factory=list)
    availability: AvailabilityPayload = Field(default_factory=AvailabilityPayload)
    existing_planned_shifts: list[PlannedShiftPayload] = Field(default_factory=list)
    constraints: ConstraintsPayload = Field(default_factory=ConstraintsPayload)

    def to_domain(self) -> SchedulingGeneratorInput:
        return SchedulingGeneratorInput(
            shop_id=self.shop_id,
            week_start_date=self.week_start_date,
            time_zone=self.time_zone,
            coverage_requirements=tuple(
                r.to_domain(self.shop_id, self.week_start_date)
                for r in self.coverage_requirements
            ),
            employees=tuple(e.to_domain() for e in self.employees),
            availability_context=self.availability.to_domain(self.shop_id),
            existing_planned_shifts=tuple(
                s.to_domain(self.shop_id) for s in self.existing_planned_shifts
            ),
            constraints=self.constraints.to_domain(),
        )


def validation_problems(exc: ValidationError) -> list[str]:
    """One readable line per pydantic error, keyed by the field path."""
    problems = []
    for error in exc.errors():
        loc = [str(part) for part in error["loc"]]
        where = ".".join(loc)
        if error["type"] == "missing":
            problem = f"missing field {loc[-1]!r}"
            if len(loc) > 1:
                problem += f" in {'.'.join(loc[:-1])}"
        elif error["type"] == "extra_forbidden":
            problem = f"unknown field {where!r}"
        elif where:
            problem = f"{where}: {error['msg']}"
        else:
            problem = error["msg"]
        problems.append(problem)
    return problems


def input_from_dict(data: dict) -> SchedulingGeneratorInput:
    """Build generator input from a decoded JSON payload.

    Raises:
        InvalidInputError: If the payload is missing fields or has bad values.
    """
    try:
        payload = GeneratorPayload.model_validate(data)
    except ValidationError as exc:
        raise InvalidInputError(validation_problems(exc)) from exc
    return payload.to_domain()


def load_generator_input(source: JsonSource) -> SchedulingGeneratorInput:
    """Load generator input from a dict, a JSON string or a file path."""
    if isinstance(source, dict):
        return input_from_dict(source)
    if isinstance(source, Path) or not str(source).lstrip().startswith("{"):
        text = Path(source).read_text()
    else:
        text = source
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidInputError([f"malformed JSON: {exc}"]) from exc
    return input_from_dict(data)


def option_to_dict(
    option: ScheduleOption,
    employees_by_id: Optional[dict[str, Employee]] = None,
) -> dict:
    """JSON-ready representation of a schedule option."""
    employees_by_id = employees_by_id or {}

    def name_of(employee_id: Optional[str]) -> Optional[str]:
        employee = employees_by_id.get(employee_id)
        return employee.name if employee else None

    return {
        "id": option.id,
        "name": option.name,
        "heuristic": option.heuristic.value if option.heuristic else None,
        "score": option.score,
        "total_shift_count": option.total_shift_count,
        "total_hours": round(option.total_hours, 2),
        "shifts": [
            {
                "id": s.id,
                "employee_id": s.employee_id,
                "employee_name": name_of(s.employee_id),
                "day_of_week": s.day_of_week,
                "day": day_name(s.day_of_week),
                "start": time_label(s.start_minutes),
                "end": time_label(s.end_minutes),
                "start_minutes": s.start_minutes,
                "end_minutes": s.end_minutes,
                "color_seed": s.color_seed,
            }
            for s in option.shifts
        ],
        "warnings": [
            {
                "kind": w.kind.value,
                "severity": w.severity.name.lower(),
                "message": w.message,
                "day_of_week": w.day_of_week,
                "minute": w.minute,
                "shift_id": w.shift_id,
                "related_shift_id": w.related_shift_id,
                "employee_id": w.employee_id,
                "details": w.details,
            }
            for w in option.warnings
        ],
    }


def options_to_json(
    options: list[ScheduleOption],
    employees_by_id: Optional[dict[str, Employee]] = None,
    indent: Optional[int] = 2,
) -> str:
    """Serialize ranked options to a JSON document."""
    return json.dumps(
        {"options": [option_to_dict(o, employees_by_id) for o in options]},
        indent=indent,
    )
