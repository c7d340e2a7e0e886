"""Availability resolution.

Answers "can this employee work [start, end) on this day of this week?" from
recurring weekly windows, date-specific overrides and full-day blackouts.

Precedence, highest first:
    1. A blackout date makes the employee unavailable all day.
    2. Unavailable overrides block any request that touches them.
    3. If available overrides exist for the date, their union replaces the
       weekly pattern and must contain the request.
    4. Otherwise the merged weekly windows for that day must contain the request.
"""

from collections import defaultdict
from datetime import date
from typing import Iterable, Optional

from shiftcover.domain.models import EmployeeAvailabilityContext

Interval = tuple[int, int]


def merge_intervals(intervals: Iterable[Interval]) -> list[Interval]:
    """Merge overlapping or touching intervals into a sorted disjoint list.

    Empty and inverted intervals are dropped.
    """
    merged: list[Interval] = []
    for start, end in sorted(i for i in intervals if i[0] < i[1]):
        if merged and start <= merged[-1][1]:
            last_start, last_end = merged[-1]
            merged[-1] = (last_start, max(last_end, end))
        else:
            merged.append((start, end))
    return merged


def contains(merged: list[Interval], start: int, end: int) -> bool:
    """Check if a single merged interval fully contains [start, end)."""
    return any(s <= start and end <= e for s, e in merged)


def overlaps_any(intervals: Iterable[Interval], start: int, end: int) -> bool:
    return any(s < end and start < e for s, e in intervals)


class AvailabilityResolver:
    """Indexed view of an availability context.

    Building the resolver indexes every window, override and blackout once,
    so that the many lookups made during one generation run stay cheap.

    Example:
        >>> resolver = AvailabilityResolver(context)
        >>> resolver.is_available("emp-1", 0, 420, 780, date(2024, 1, 15))
        True
    """

    def __init__(self, context: EmployeeAvailabilityContext):
        self.context = context

        windows: dict[tuple[str, int], list[Interval]] = defaultdict(list)
        for window in context.weekly_windows:
            windows[(window.employee_id, window.day_of_week)].append(
                (window.start_minutes, window.end_minutes)
            )
        self._weekly = {key: merge_intervals(v) for key, v in windows.items()}

        open_overrides: dict[tuple[str, date], list[Interval]] = defaultdict(list)
        blocked_overrides: dict[tuple[str, date], list[Interval]] = defaultdict(list)
        for override in context.overrides:
            key = (override.employee_id, override.date)
            target = open_overrides if override.is_available else blocked_overrides
            target[key].append((override.start_minutes, override.end_minutes))
        self._open = {key: merge_intervals(v) for key, v in open_overrides.items()}
        self._blocked = {key: merge_intervals(v) for key, v in blocked_overrides.items()}

        self._blackouts = {(u.employee_id, u.date) for u in context.unavailable_dates}

    def is_blacked_out(self, employee_id: str, calendar_date: date) -> bool:
        return (employee_id, calendar_date) in self._blackouts

    def open_windows(
        self,
        employee_id: str,
        day_of_week: int,
        calendar_date: Optional[date] = None,
    ) -> list[Interval]:
        """Effective open windows for an employee on one day.

        Args:
            employee_id: Employee to resolve.
            day_of_week: 0 = Monday ... 6 = Sunday.
            calendar_date: Concrete date; None resolves weekly windows only.

        Returns:
            Sorted disjoint intervals in minutes from midnight. Blocked
            override windows are carved out.
        """
        if calendar_date is not None:
            if self.is_blacked_out(employee_id, calendar_date):
                return []
            key = (employee_id, calendar_date)
            return _subtract(
                self._base_windows(employee_id, day_of_week, key),
                self._blocked.get(key, []),
            )
        return list(self._weekly.get((employee_id, day_of_week), []))

    def is_available(
        self,
        employee_id: str,
        day_of_week: int,
        start_minutes: int,
        end_minutes: int,
        calendar_date: Optional[date] = None,
    ) -> bool:
        """Check if the employee can work all of [start_minutes, end_minutes)."""
        if start_minutes >= end_minutes:
            return False

        if calendar_date is not None:
            if self.is_blacked_out(employee_id, calendar_date):
                return False
            key = (employee_id, calendar_date)
            if overlaps_any(self._blocked.get(key, []), start_minutes, end_minutes):
                return False
            return contains(
                self._base_windows(employee_id, day_of_week, key),
                start_minutes,
                end_minutes,
            )

        return contains(
            self._weekly.get((employee_id, day_of_week), []),
            start_minutes,
            end_minutes,
        )

    def _base_windows(
        self, employee_id: str, day_of_week: int, key: tuple[str, date]
    ) -> list[Interval]:
        """Available overrides for the date if any, else the weekly windows."""
        if key in self._open:
            return self._open[key]
        return self._weekly.get((employee_id, day_of_week), [])


def _subtract(intervals: list[Interval], blocked: list[Interval]) -> list[Interval]:
    """Remove blocked intervals from a merged interval list."""
    result = []
    for start, end in intervals:
        pieces = [(start, end)]
        for b_start, b_end in blocked:
            next_pieces = []
            for p_start, p_end in pieces:
                if b_end <= p_start or p_end <= b_start:
                    next_pieces.append((p_start, p_end))
                    continue
                if p_start < b_start:
                    next_pieces.append((p_start, b_start))
                if b_end < p_end:
                    next_pieces.append((b_end, p_end))
            pieces = next_pieces
        result.extend(pieces)
    return result


def is_available(
    employee_id: str,
    day_of_week: int,
    start_minutes: int,
    end_minutes: int,
    calendar_date: Optional[date],
    context: EmployeeAvailabilityContext,
) -> bool:
    """One-off availability check without keeping a resolver around."""
    return AvailabilityResolver(context).is_available(
        employee_id, day_of_week, start_minutes, end_minutes, calendar_date
    )
