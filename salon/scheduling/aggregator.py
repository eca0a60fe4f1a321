"""Collapse raw appointment rows into visits.

A client booking several services for the same slot produces one raw row per
service. The calendar shows them as a single visit whose service list and
duration combine every row.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Literal

from salon.core.logging import get_logger
from salon.scheduling.models import AppointmentRecord, LogicalAppointment, ServiceLine

logger = get_logger(__name__)

UnresolvedPolicy = Literal["exclude", "fail"]
PaidStatusPolicy = Literal["first", "all"]


class UnresolvedReferenceError(Exception):
    """Raised when an appointment points at a client or service that is gone."""

    def __init__(self, record: AppointmentRecord):
        self.record = record
        missing = "client" if record.client is None else "service"
        missing_id = record.client_id if record.client is None else record.service_id
        super().__init__(
            f"Appointment {record.id} references missing {missing} {missing_id}"
        )


def group_key(record: AppointmentRecord) -> str:
    """Key shared by every raw row of the same visit."""
    return f"{record.client_id}-{record.date.isoformat()}-{record.time.isoformat()}"


def resolve_records(
    records: Iterable[AppointmentRecord],
    unresolved: UnresolvedPolicy = "exclude",
) -> list[AppointmentRecord]:
    """Apply the unresolved-reference policy to a fetched list.

    Args:
        records: Raw records in fetch order.
        unresolved: `exclude` drops rows with a missing client or service,
            `fail` raises on the first one.

    Returns:
        Records whose client and service both resolved, in input order.

    Raises:
        UnresolvedReferenceError: On a dangling row under the `fail` policy.
    """
    resolved: list[AppointmentRecord] = []
    for record in records:
        if record.is_resolved:
            resolved.append(record)
            continue
        if unresolved == "fail":
            raise UnresolvedReferenceError(record)
        logger.warning(
            "appointment_reference_unresolved",
            appointment_id=record.id,
            client_id=record.client_id,
            service_id=record.service_id,
        )
    return resolved


def group_appointments(
    records: Iterable[AppointmentRecord],
    *,
    unresolved: UnresolvedPolicy = "exclude",
    paid_policy: PaidStatusPolicy = "first",
) -> list[LogicalAppointment]:
    """Group raw records sharing client, date and time into visits.

    Visits appear in the order their first member appears in `records`, and
    member services keep their input order.

    Notes always come from the first member. The paid flag follows
    `paid_policy`: `first` copies the first member's flag even when other
    members disagree, `all` marks the visit paid only when every member is.
    """
    groups: dict[str, LogicalAppointment] = {}
    paid_flags: dict[str, list[bool]] = {}

    for record in resolve_records(records, unresolved):
        key = group_key(record)
        visit = groups.get(key)
        if visit is None:
            visit = LogicalAppointment(
                id=record.id,
                client_id=record.client_id,
                client_name=record.client.full_name,
                date=record.date,
                time=record.time,
                notes=record.notes,
                is_paid=record.is_paid,
            )
            groups[key] = visit
            paid_flags[key] = []

        visit.services.append(
            ServiceLine(
                name=record.service.name,
                duration=record.service.duration,
                color=record.service.color,
            )
        )
        visit.member_ids.append(record.id)
        paid_flags[key].append(record.is_paid)

    if paid_policy == "all":
        for key, visit in groups.items():
            visit.is_paid = all(paid_flags[key])

    return list(groups.values())
