"""Derived appointment views: visits, timeline layout, debts and day buckets.

Everything here is a pure function of already-fetched records.
"""

from salon.scheduling.aggregator import (
    UnresolvedReferenceError,
    group_appointments,
    resolve_records,
)
from salon.scheduling.calendar import filter_by_selection, filter_same_day, group_by_date
from salon.scheduling.debts import calculate_service_price, format_price, summarize_debts
from salon.scheduling.models import (
    AppointmentRecord,
    ClientDetails,
    DebtRecord,
    LogicalAppointment,
    ServiceDetails,
    ServiceLine,
    TimelineEntry,
    TimelinePosition,
)
from salon.scheduling.snapshot import AppointmentSnapshot
from salon.scheduling.timeline import (
    calculate_position,
    end_time,
    layout_day,
    time_to_minutes,
    timeline_hours,
)

__all__ = [
    "AppointmentRecord",
    "AppointmentSnapshot",
    "ClientDetails",
    "DebtRecord",
    "LogicalAppointment",
    "ServiceDetails",
    "ServiceLine",
    "TimelineEntry",
    "TimelinePosition",
    "UnresolvedReferenceError",
    "calculate_position",
    "calculate_service_price",
    "end_time",
    "filter_by_selection",
    "filter_same_day",
    "format_price",
    "group_appointments",
    "group_by_date",
    "layout_day",
    "resolve_records",
    "summarize_debts",
    "time_to_minutes",
    "timeline_hours",
]
