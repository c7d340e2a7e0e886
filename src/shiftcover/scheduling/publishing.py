"""Conversion of a chosen option into planned shift records.

Draft shifts live in week coordinates; planned shifts carry absolute,
time-zone-aware datetimes. Publishing refuses anything that would produce a
record nobody can work: open shifts, unknown employees and empty ranges.
"""

import calendar as month_calendar
import logging
from datetime import date, timedelta
from typing import Iterable, Optional, Union

from shiftcover.domain.calendar import (
    DateLike,
    TimeZoneLike,
    datetime_for,
    resolve_time_zone,
    week_start_date,
)
from shiftcover.domain.errors import PublishingError
from shiftcover.domain.models import (
    Employee,
    PlannedShift,
    PlannedShiftStatus,
    ScheduleDraftShift,
    ScheduleOption,
)

logger = logging.getLogger(__name__)

ShiftSource = Union[ScheduleOption, Iterable[ScheduleDraftShift]]


def _draft_shifts(source: ShiftSource) -> list[ScheduleDraftShift]:
    if isinstance(source, ScheduleOption):
        return list(source.shifts)
    return list(source)


def to_planned_shifts(
    source: ShiftSource,
    shop_id: str,
    week_start: DateLike,
    time_zone: TimeZoneLike,
    employees_by_id: dict[str, Employee],
    status: PlannedShiftStatus = PlannedShiftStatus.DRAFT,
) -> list[PlannedShift]:
    """Convert draft shifts into planned shifts for one week.

    Args:
        source: A schedule option or its draft shifts.
        shop_id: Shop the shifts are planned for.
        week_start: Any date in the target week.
        time_zone: Shop-local zone used to build absolute times.
        employees_by_id: Known employees; every shift must reference one.
        status: Status given to every created record.

    Returns:
        Planned shifts in the order of the draft shifts.

    Raises:
        PublishingError: If a shift is unassigned, references an unknown
            employee or has an empty time range.
    """
    tz = resolve_time_zone(time_zone)
    monday = week_start_date(week_start, tz)

    planned = []
    for shift in _draft_shifts(source):
        if shift.employee_id is None:
            raise PublishingError(f"shift {shift.id} has no assigned employee")
        if shift.employee_id not in employees_by_id:
            raise PublishingError(
                f"shift {shift.id} references unknown employee {shift.employee_id}"
            )
        start = datetime_for(monday, shift.day_of_week, shift.start_minutes, tz)
        end = datetime_for(monday, shift.day_of_week, shift.end_minutes, tz)
        if end <= start:
            raise PublishingError(f"shift {shift.id} has an empty time range")
        planned.append(
            PlannedShift(
                shop_id=shop_id,
                employee_id=shift.employee_id,
                start=start,
                end=end,
                status=status,
                notes=shift.notes,
                id=shift.id,
            )
        )

    logger.info(
        "Prepared %d planned shifts for shop %s week of %s", len(planned), shop_id, monday
    )
    return planned


def month_dates(anchor: date) -> list[date]:
    """Every date of ``anchor``'s month."""
    _, days = month_calendar.monthrange(anchor.year, anchor.month)
    first = anchor.replace(day=1)
    return [first + timedelta(days=offset) for offset in range(days)]


def expand_to_month(
    source: ShiftSource,
    shop_id: str,
    week_start: DateLike,
    time_zone: TimeZoneLike,
    employees_by_id: dict[str, Employee],
    status: PlannedShiftStatus = PlannedShiftStatus.DRAFT,
    month: Optional[date] = None,
) -> list[PlannedShift]:
    """Repeat a weekly template on every matching weekday of a month.

    Args:
        source: A schedule option or its draft shifts.
        shop_id: Shop the shifts are planned for.
        week_start: Any date in the template week.
        time_zone: Shop-local zone.
        employees_by_id: Known employees.
        status: Status given to every created record.
        month: Any date in the target month; defaults to the month of the
            template week's Monday.

    Returns:
        Planned shifts ordered by start time. Ids are fresh per occurrence.

    Raises:
        PublishingError: Under the same conditions as ``to_planned_shifts``.
    """
    tz = resolve_time_zone(time_zone)
    monday = week_start_date(week_start, tz)
    drafts = _draft_shifts(source)
    template = to_planned_shifts(drafts, shop_id, monday, tz, employees_by_id, status)

    planned = []
    for day in month_dates(month or monday):
        day_of_week = day.weekday()
        for draft, record in zip(drafts, template):
            if draft.day_of_week != day_of_week:
                continue
            start = datetime_for(day, day_of_week, draft.start_minutes, tz)
            end = datetime_for(day, day_of_week, draft.end_minutes, tz)
            planned.append(
                PlannedShift(
                    shop_id=record.shop_id,
                    employee_id=record.employee_id,
                    start=start,
                    end=end,
                    status=status,
                    notes=record.notes,
                )
            )

    planned.sort(key=lambda s: (s.start, s.end, s.employee_id or ""))
    logger.info("Expanded week template to %d shifts", len(planned))
    return planned
