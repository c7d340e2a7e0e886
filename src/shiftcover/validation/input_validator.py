"""Fail-fast validation of generator input.

Malformed input is a caller error: it is reported in full before any
generation work starts, so one round trip fixes every problem at once.
"""

from collections import Counter

from shiftcover.domain.calendar import DAYS_PER_WEEK, MINUTES_PER_DAY, day_name
from shiftcover.domain.errors import InvalidInputError
from shiftcover.domain.models import CoverageRequirement, SchedulingGeneratorInput
from shiftcover.domain.policies import ScheduleGenerationConstraints


def requirement_problems(req: CoverageRequirement) -> list[str]:
    """Problems with a single coverage requirement."""
    problems = []
    label = f"requirement {req.id}"
    if not 0 <= req.day_of_week < DAYS_PER_WEEK:
        problems.append(f"{label}: day_of_week {req.day_of_week} is outside 0..6")
    if not 0 <= req.start_minutes <= MINUTES_PER_DAY:
        problems.append(f"{label}: start_minutes {req.start_minutes} is outside 0..1440")
    if not 0 <= req.end_minutes <= MINUTES_PER_DAY:
        problems.append(f"{label}: end_minutes {req.end_minutes} is outside 0..1440")
    if req.start_minutes >= req.end_minutes:
        where = day_name(req.day_of_week) if 0 <= req.day_of_week < DAYS_PER_WEEK else "?"
        problems.append(
            f"{label} ({where}): start {req.start_minutes} is not before end {req.end_minutes}"
        )
    if req.headcount < 1:
        problems.append(f"{label}: headcount {req.headcount} must be at least 1")
    return problems


def constraint_problems(constraints: ScheduleGenerationConstraints) -> list[str]:
    """Problems with generation constraints."""
    problems = []
    width = constraints.bucket_minutes
    if width <= 0 or MINUTES_PER_DAY % width != 0:
        problems.append(f"bucket_minutes {width} must be positive and divide 1440")
    if constraints.max_weekly_hours <= 0:
        problems.append(f"max_weekly_hours {constraints.max_weekly_hours} must be positive")
    if constraints.min_rest_hours < 0:
        problems.append(f"min_rest_hours {constraints.min_rest_hours} must not be negative")
    if constraints.max_shift_hours is not None and constraints.max_shift_hours <= 0:
        problems.append(f"max_shift_hours {constraints.max_shift_hours} must be positive")
    if constraints.overtime_warning_threshold_hours < 0:
        problems.append("overtime_warning_threshold_hours must not be negative")
    if not constraints.heuristics:
        problems.append("at least one heuristic is required")
    return problems


def validate_generator_input(
    generator_input: SchedulingGeneratorInput,
    strict: bool = False,
) -> None:
    """Validate generator input, collecting every problem.

    Args:
        generator_input: Input to check.
        strict: Also reject empty employee or requirement lists.

    Raises:
        InvalidInputError: If any problem was found.
    """
    problems = constraint_problems(generator_input.constraints)

    for req in generator_input.coverage_requirements:
        problems.extend(requirement_problems(req))

    duplicates = [
        emp_id
        for emp_id, count in Counter(e.id for e in generator_input.employees).items()
        if count > 1
    ]
    for emp_id in sorted(duplicates):
        problems.append(f"employee id {emp_id} appears more than once")

    if strict:
        if not generator_input.employees:
            problems.append("no employees given")
        if not generator_input.coverage_requirements:
            problems.append("no coverage requirements given")

    if problems:
        raise InvalidInputError(problems)
