"""Calendar and time-coordinate helpers.

All scheduling math runs in a week-relative coordinate system:
``(day_of_week, minute_of_day)`` where ``day_of_week`` is 0 = Monday ... 6 = Sunday
and minutes count from local midnight. These helpers are the only place where
that coordinate system meets wall-clock dates and time zones.
"""

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Union
from zoneinfo import ZoneInfo

MINUTES_PER_DAY = 24 * 60
DAYS_PER_WEEK = 7
MINUTES_PER_WEEK = MINUTES_PER_DAY * DAYS_PER_WEEK

DAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

TimeZoneLike = Union[str, tzinfo]
DateLike = Union[date, datetime]


def resolve_time_zone(time_zone: TimeZoneLike) -> tzinfo:
    """Return a tzinfo for an IANA name or pass an existing tzinfo through."""
    if isinstance(time_zone, str):
        return ZoneInfo(time_zone)
    return time_zone


def day_index(from_weekday: int) -> int:
    """Convert a calendar weekday (1 = Sunday ... 7 = Saturday) to a day index.

    Raises:
        ValueError: If the weekday is outside 1..7.
    """
    if not 1 <= from_weekday <= 7:
        raise ValueError(f"weekday must be in 1..7, got {from_weekday}")
    return (from_weekday + 5) % 7


def weekday(from_day_index: int) -> int:
    """Convert a day index (0 = Monday ... 6 = Sunday) to a calendar weekday.

    Raises:
        ValueError: If the day index is outside 0..6.
    """
    if not 0 <= from_day_index <= 6:
        raise ValueError(f"day index must be in 0..6, got {from_day_index}")
    return ((from_day_index + 1) % 7) + 1


def local_date(value: DateLike, time_zone: TimeZoneLike) -> date:
    """Calendar date of ``value`` as seen in the shop's time zone.

    Naive datetimes are taken to already be shop-local wall clock.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(resolve_time_zone(time_zone))
        return value.date()
    return value


def week_start_date(value: DateLike, time_zone: TimeZoneLike) -> date:
    """Calendar date of the Monday that starts ``value``'s week."""
    day = local_date(value, time_zone)
    return day - timedelta(days=day.weekday())


def normalized_week_start(value: DateLike, time_zone: TimeZoneLike) -> datetime:
    """Snap any date or datetime to local midnight of its week's Monday."""
    tz = resolve_time_zone(time_zone)
    return datetime.combine(week_start_date(value, tz), time(0), tzinfo=tz)


def date_for_day(week_start: DateLike, day_of_week: int) -> date:
    """Calendar date of ``day_of_week`` within the week starting at ``week_start``."""
    if isinstance(week_start, datetime):
        week_start = week_start.date()
    return week_start + timedelta(days=day_of_week)


def datetime_for(
    week_start: DateLike,
    day_of_week: int,
    minutes: int,
    time_zone: TimeZoneLike,
) -> datetime:
    """Aware local datetime for a ``(day_of_week, minutes)`` coordinate.

    ``minutes`` may be 1440 to express midnight at the end of the day.
    """
    tz = resolve_time_zone(time_zone)
    day = date_for_day(week_start_date(week_start, tz), day_of_week)
    extra_days, minute_of_day = divmod(minutes, MINUTES_PER_DAY)
    hours, mins = divmod(minute_of_day, 60)
    return datetime.combine(
        day + timedelta(days=extra_days), time(hours, mins), tzinfo=tz
    )


def week_minute_of(
    moment: datetime,
    week_start: DateLike,
    time_zone: TimeZoneLike,
) -> int:
    """Minutes from the start of the week to ``moment`` on the local wall clock.

    The result is negative before the week and can exceed a week after it.
    """
    tz = resolve_time_zone(time_zone)
    if moment.tzinfo is not None:
        moment = moment.astimezone(tz)
    start = week_start_date(week_start, tz)
    days = (moment.date() - start).days
    return days * MINUTES_PER_DAY + moment.hour * 60 + moment.minute


def day_name(day_of_week: int) -> str:
    """Full English day name for a day index."""
    return DAY_NAMES[day_of_week % DAYS_PER_WEEK]


def short_day_name(day_of_week: int) -> str:
    """Three-letter day name for a day index."""
    return day_name(day_of_week)[:3]


def time_label(minutes: int) -> str:
    """24-hour ``HH:MM`` label for minutes from midnight (1440 renders as 24:00)."""
    safe = max(0, min(minutes, MINUTES_PER_DAY))
    hours, mins = divmod(safe, 60)
    return f"{hours:02d}:{mins:02d}"
