"""Day timeline layout.

The timeline covers a fixed 08:00-20:00 window. Each visit is placed by its
start time and stretched by its duration, both expressed in percent of the
window. Values are never clamped: a visit starting before 08:00 gets a
negative offset, one running past 20:00 overflows 100%, and clipping is left
to whoever draws it.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable

from salon.scheduling.calendar import filter_same_day
from salon.scheduling.models import LogicalAppointment, TimelineEntry, TimelinePosition

TIMELINE_START_HOUR = 8
TIMELINE_HOURS = 12
TIMELINE_START_MINUTES = TIMELINE_START_HOUR * 60
TIMELINE_TOTAL_MINUTES = TIMELINE_HOURS * 60
MINUTES_PER_DAY = 24 * 60


def time_to_minutes(value: str | dt.time) -> int:
    """Convert a wall-clock time to minutes after midnight.

    Accepts `datetime.time` or strings shaped `H:MM`, `HH:MM` or `HH:MM:SS`
    (seconds are ignored).

    Raises:
        ValueError: If the string is not a time.
    """
    if isinstance(value, dt.time):
        return value.hour * 60 + value.minute

    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time: {value!r}")
    try:
        hours, minutes = int(parts[0]), int(parts[1])
    except ValueError as exc:
        raise ValueError(f"Invalid time: {value!r}") from exc
    return hours * 60 + minutes


def format_minutes(total_minutes: int) -> str:
    """Render minutes after midnight as `HH:MM`, wrapping past midnight."""
    total_minutes %= MINUTES_PER_DAY
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours:02d}:{minutes:02d}"


def calculate_position(time: str | dt.time, duration: int) -> TimelinePosition:
    """Place a visit on the timeline window.

    Args:
        time: Start time of the visit.
        duration: Length in minutes.

    Returns:
        Left offset and width, both in percent of the 12-hour window.

    Example:
        09:00 for 60 minutes sits at left=8.33 with width=8.33.
    """
    start_minutes = time_to_minutes(time)
    left = (start_minutes - TIMELINE_START_MINUTES) / TIMELINE_TOTAL_MINUTES * 100
    width = duration / TIMELINE_TOTAL_MINUTES * 100
    return TimelinePosition(left=left, width=width)


def end_time(time: str | dt.time, duration: int) -> str:
    """End of a visit as `HH:MM`; 23:30 plus 90 minutes gives 01:00."""
    return format_minutes(time_to_minutes(time) + duration)


def timeline_hours() -> list[str]:
    """Hour labels drawn along the timeline axis (08:00 through 19:00)."""
    return [
        f"{hour:02d}:00"
        for hour in range(TIMELINE_START_HOUR, TIMELINE_START_HOUR + TIMELINE_HOURS)
    ]


def layout_day(
    appointments: Iterable[LogicalAppointment], day: dt.date
) -> list[TimelineEntry]:
    """Lay out the visits that fall on `day`, keeping their order."""
    entries: list[TimelineEntry] = []
    for appointment in filter_same_day(appointments, day):
        entries.append(
            TimelineEntry(
                appointment=appointment,
                position=calculate_position(appointment.time, appointment.duration),
                start=format_minutes(time_to_minutes(appointment.time)),
                end=end_time(appointment.time, appointment.duration),
            )
        )
    return entries
