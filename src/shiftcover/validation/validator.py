"""Scoring and warning detection for candidate schedules.

This module is the single source of truth for judging a schedule. Every
generated candidate is evaluated here: weaknesses become warnings and the
whole schedule is reduced to one integer score used for ranking.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from shiftcover.domain.calendar import (
    date_for_day,
    day_name,
    short_day_name,
    time_label,
)
from shiftcover.domain.models import (
    CoverageBucketState,
    CoverageRequirement,
    Employee,
    EmployeeAvailabilityContext,
    ScheduleDraftShift,
    ScheduleDraftWarning,
    WarningKind,
    WarningSeverity,
)
from shiftcover.domain.policies import ScheduleGenerationConstraints
from shiftcover.scheduling.availability import AvailabilityResolver
from shiftcover.scheduling.coverage import bucketize

logger = logging.getLogger(__name__)


@dataclass
class Evaluation:
    """Result of evaluating one schedule.

    Attributes:
        score: Higher is better. Not clamped; may be negative.
        warnings: Detected weaknesses in report order.
        buckets: Coverage state per day.
    """

    score: int
    warnings: list[ScheduleDraftWarning] = field(default_factory=list)
    buckets: dict[int, list[CoverageBucketState]] = field(default_factory=dict)

    @property
    def gap_count(self) -> int:
        return sum(1 for w in self.warnings if w.kind == WarningKind.COVERAGE_GAP)

    @property
    def is_fully_covered(self) -> bool:
        return all(b.is_covered for day in self.buckets.values() for b in day)


@dataclass
class _Tally:
    """Penalty counters collected while detecting warnings."""

    conflicts: int = 0
    availability: int = 0
    rest: int = 0
    overtime_minutes: int = 0


class ScheduleEvaluator:
    """Scores schedules and explains their weaknesses.

    Example:
        >>> evaluator = ScheduleEvaluator(constraints)
        >>> evaluation = evaluator.evaluate(
        ...     shifts, requirements, context, week_start=date(2024, 1, 15)
        ... )
        >>> for warning in evaluation.warnings:
        ...     print(warning)
    """

    def __init__(self, constraints: Optional[ScheduleGenerationConstraints] = None):
        self.constraints = constraints or ScheduleGenerationConstraints()
        self.weights = self.constraints.scoring

    def evaluate(
        self,
        shifts: Iterable[ScheduleDraftShift],
        requirements: Iterable[CoverageRequirement],
        availability_context: EmployeeAvailabilityContext,
        *,
        week_start: date,
        employees: Iterable[Employee] = (),
        fixed_shifts: Iterable[ScheduleDraftShift] = (),
    ) -> Evaluation:
        """Evaluate a candidate schedule.

        Args:
            shifts: Draft shifts of the candidate.
            requirements: Requirements of the scheduled week.
            availability_context: Availability used for mismatch detection.
            week_start: Monday of the scheduled week.
            employees: Employees for roles, wages and fairness.
            fixed_shifts: Frozen shifts in week coordinates; they provide
                coverage and participate in conflict, rest and hour checks.

        Returns:
            Evaluation with score, warnings and coverage buckets.
        """
        shifts = list(shifts)
        fixed = list(fixed_shifts)
        employees_by_id = {e.id: e for e in employees}
        roles = {e.id: e.role for e in employees_by_id.values()}

        buckets = bucketize(
            requirements, self.constraints.bucket_minutes, shifts + fixed, roles
        )

        warnings: list[ScheduleDraftWarning] = []
        tally = _Tally()
        warnings.extend(self._coverage_warnings(buckets))
        warnings.extend(self._conflict_warnings(shifts, fixed, tally))
        warnings.extend(
            self._availability_warnings(
                shifts, fixed, AvailabilityResolver(availability_context), week_start, tally
            )
        )
        warnings.extend(self._rest_warnings(shifts, fixed, tally))
        warnings.extend(self._overtime_warnings(shifts, fixed, tally))

        score = self._score(buckets, shifts, fixed, employees_by_id, tally)
        logger.debug(
            "Evaluated %d shifts: score=%d warnings=%d", len(shifts), score, len(warnings)
        )
        return Evaluation(score=score, warnings=warnings, buckets=buckets)

    def _coverage_warnings(
        self, buckets: dict[int, list[CoverageBucketState]]
    ) -> list[ScheduleDraftWarning]:
        warnings = []
        for day in sorted(buckets):
            for bucket in buckets[day]:
                if bucket.is_covered:
                    continue
                severity = (
                    WarningSeverity.CRITICAL if bucket.filled == 0 else WarningSeverity.WARNING
                )
                message = (
                    f"{day_name(day)} {time_label(bucket.bucket_start_minutes)}-"
                    f"{time_label(bucket.bucket_end_minutes)}: "
                    f"{bucket.filled} of {bucket.needed} needed staffed"
                )
                if bucket.unmet_roles:
                    missing = ", ".join(r.value for r in bucket.unmet_roles)
                    message += f" (missing {missing})"
                warnings.append(
                    ScheduleDraftWarning(
                        kind=WarningKind.COVERAGE_GAP,
                        severity=severity,
                        message=message,
                        day_of_week=day,
                        minute=bucket.bucket_start_minutes,
                        details={
                            "needed": bucket.needed,
                            "assigned": bucket.assigned,
                            "unmet": bucket.unmet,
                            "unmet_roles": [r.value for r in bucket.unmet_roles],
                        },
                    )
                )
        return warnings

    def _conflict_warnings(
        self,
        shifts: list[ScheduleDraftShift],
        fixed: list[ScheduleDraftShift],
        tally: _Tally,
    ) -> list[ScheduleDraftWarning]:
        warnings = []
        draft_ids = {id(s) for s in shifts}
        for employee_id, own in _by_employee(shifts + fixed).items():
            for i, first in enumerate(own):
                for second in own[i + 1:]:
                    if second.week_start_minute >= first.week_end_minute:
                        break
                    if id(first) not in draft_ids and id(second) not in draft_ids:
                        continue
                    tally.conflicts += 1
                    warnings.append(
                        ScheduleDraftWarning(
                            kind=WarningKind.CONFLICT,
                            severity=WarningSeverity.CRITICAL,
                            message=(
                                f"{employee_id} double-booked on "
                                f"{short_day_name(second.day_of_week)} "
                                f"{time_label(first.start_minutes)}-{time_label(first.end_minutes)} and "
                                f"{time_label(second.start_minutes)}-{time_label(second.end_minutes)}"
                            ),
                            day_of_week=second.day_of_week,
                            minute=second.start_minutes,
                            shift_id=first.id,
                            related_shift_id=second.id,
                            employee_id=employee_id,
                        )
                    )
        return warnings

    def _availability_warnings(
        self,
        shifts: list[ScheduleDraftShift],
        fixed: list[ScheduleDraftShift],
        resolver: AvailabilityResolver,
        week_start: date,
        tally: _Tally,
    ) -> list[ScheduleDraftWarning]:
        warnings = []
        for shift in shifts + fixed:
            if shift.employee_id is None:
                continue
            if resolver.is_available(
                shift.employee_id,
                shift.day_of_week,
                shift.start_minutes,
                shift.end_minutes,
                date_for_day(week_start, shift.day_of_week),
            ):
                continue
            tally.availability += 1
            warnings.append(
                ScheduleDraftWarning(
                    kind=WarningKind.AVAILABILITY,
                    severity=WarningSeverity.WARNING,
                    message=(
                        f"{shift.employee_id} is not available "
                        f"{short_day_name(shift.day_of_week)} "
                        f"{time_label(shift.start_minutes)}-{time_label(shift.end_minutes)}"
                    ),
                    day_of_week=shift.day_of_week,
                    minute=shift.start_minutes,
                    shift_id=shift.id,
                    employee_id=shift.employee_id,
                )
            )
        return warnings

    def _rest_warnings(
        self,
        shifts: list[ScheduleDraftShift],
        fixed: list[ScheduleDraftShift],
        tally: _Tally,
    ) -> list[ScheduleDraftWarning]:
        warnings = []
        min_rest = self.constraints.min_rest_minutes
        draft_ids = {id(s) for s in shifts}
        for employee_id, own in _by_employee(shifts + fixed).items():
            for first, second in zip(own, own[1:]):
                gap = second.week_start_minute - first.week_end_minute
                if not 0 < gap < min_rest:
                    continue
                if id(first) not in draft_ids and id(second) not in draft_ids:
                    continue
                tally.rest += 1
                warnings.append(
                    ScheduleDraftWarning(
                        kind=WarningKind.REST_VIOLATION,
                        severity=WarningSeverity.WARNING,
                        message=(
                            f"{employee_id} rests only {gap / 60:.1f}h before "
                            f"{short_day_name(second.day_of_week)} "
                            f"{time_label(second.start_minutes)}"
                        ),
                        day_of_week=second.day_of_week,
                        minute=second.start_minutes,
                        shift_id=second.id,
                        related_shift_id=first.id,
                        employee_id=employee_id,
                        details={"rest_minutes": gap, "min_rest_minutes": min_rest},
                    )
                )
        return warnings

    def _overtime_warnings(
        self,
        shifts: list[ScheduleDraftShift],
        fixed: list[ScheduleDraftShift],
        tally: _Tally,
    ) -> list[ScheduleDraftWarning]:
        warnings = []
        limit = self.constraints.max_weekly_minutes
        threshold = self.constraints.overtime_threshold_minutes
        for employee_id, own in _by_employee(shifts + fixed).items():
            total = sum(s.duration_minutes for s in own)
            excess = total - limit
            if excess <= 0:
                continue
            tally.overtime_minutes += excess
            severity = WarningSeverity.INFO if excess <= threshold else WarningSeverity.WARNING
            warnings.append(
                ScheduleDraftWarning(
                    kind=WarningKind.OVERTIME,
                    severity=severity,
                    message=(
                        f"{employee_id} scheduled {total / 60:.1f}h, "
                        f"{excess / 60:.1f}h over the {limit / 60:.1f}h weekly limit"
                    ),
                    employee_id=employee_id,
                    details={
                        "total_minutes": total,
                        "limit_minutes": limit,
                        "excess_minutes": excess,
                    },
                )
            )
        return warnings

    def _score(
        self,
        buckets: dict[int, list[CoverageBucketState]],
        shifts: list[ScheduleDraftShift],
        fixed: list[ScheduleDraftShift],
        employees_by_id: dict[str, Employee],
        tally: _Tally,
    ) -> int:
        """Reduce a schedule to one comparable number."""
        w = self.weights
        c = self.constraints

        coverage = 0.0
        for day_buckets in buckets.values():
            for bucket in day_buckets:
                if bucket.is_covered:
                    coverage += w.covered_bucket
                    continue
                gap = w.gap_bucket
                if bucket.filled == 0:
                    gap *= w.critical_gap_multiplier
                coverage -= gap
                coverage -= w.missing_headcount * bucket.unmet
                coverage -= w.role_gap * len(bucket.unmet_roles)

        labor = 0.0
        for shift in shifts:
            employee = employees_by_id.get(shift.employee_id)
            if employee is not None and employee.hourly_wage is not None:
                labor += employee.hourly_wage * shift.duration_minutes / 60.0

        spread = self._hours_spread(shifts + fixed, employees_by_id)

        penalties = (
            w.conflict * tally.conflicts
            + w.availability * tally.availability
            + w.rest_violation * tally.rest
            + w.overtime_per_hour * tally.overtime_minutes / 60.0
            + w.per_shift * len(shifts)
        )

        total = (
            c.coverage_weight * coverage
            - c.labor_cost_weight * w.labor_cost_per_unit * labor
            - c.fairness_weight * w.fairness_per_hour_spread * spread
            - penalties
        )
        return int(round(total))

    @staticmethod
    def _hours_spread(
        shifts: list[ScheduleDraftShift],
        employees_by_id: dict[str, Employee],
    ) -> float:
        """Hours between the most and least scheduled active employee."""
        active = [e.id for e in employees_by_id.values() if e.is_active]
        if len(active) < 2:
            return 0.0
        minutes = dict.fromkeys(active, 0)
        for shift in shifts:
            if shift.employee_id in minutes:
                minutes[shift.employee_id] += shift.duration_minutes
        return (max(minutes.values()) - min(minutes.values())) / 60.0


def _by_employee(
    shifts: list[ScheduleDraftShift],
) -> dict[str, list[ScheduleDraftShift]]:
    """Assigned shifts grouped by employee, each group in week order."""
    grouped: dict[str, list[ScheduleDraftShift]] = defaultdict(list)
    for shift in shifts:
        if shift.employee_id is not None:
            grouped[shift.employee_id].append(shift)
    for own in grouped.values():
        own.sort(key=lambda s: (s.week_start_minute, s.week_end_minute))
    return dict(sorted(grouped.items()))


def evaluate(
    shifts: Iterable[ScheduleDraftShift],
    requirements: Iterable[CoverageRequirement],
    availability_context: EmployeeAvailabilityContext,
    constraints: Optional[ScheduleGenerationConstraints] = None,
    *,
    week_start: date,
    employees: Iterable[Employee] = (),
    fixed_shifts: Iterable[ScheduleDraftShift] = (),
) -> Evaluation:
    """Evaluate a schedule with a throwaway evaluator."""
    return ScheduleEvaluator(constraints).evaluate(
        shifts,
        requirements,
        availability_context,
        week_start=week_start,
        employees=employees,
        fixed_shifts=fixed_shifts,
    )
