"""Immutable records and derived views used by the scheduling functions.

Raw records mirror stored appointment rows already joined with client and
service detail. Everything else in this module is a projection rebuilt from
those records on every fetch and never persisted.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class ClientDetails:
    """Client fields embedded in a joined appointment record."""

    id: int
    first_name: str
    last_name: str
    phone: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class ServiceDetails:
    """Service fields embedded in a joined appointment record."""

    id: int
    name: str
    duration: int
    color: str


@dataclass(frozen=True)
class AppointmentRecord:
    """One stored appointment row: a single service for a single client.

    Attributes:
        client: Joined client detail, or None when the client row is missing.
        service: Joined service detail, or None when the service row is missing.
    """

    id: int
    client_id: int
    service_id: int
    date: dt.date
    time: dt.time
    notes: str | None = None
    is_paid: bool = False
    client: ClientDetails | None = None
    service: ServiceDetails | None = None
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None

    @property
    def is_resolved(self) -> bool:
        """Whether both foreign keys resolved to existing rows."""
        return self.client is not None and self.service is not None


@dataclass(frozen=True)
class ServiceLine:
    """A service booked as part of a visit."""

    name: str
    duration: int
    color: str


@dataclass
class LogicalAppointment:
    """A visit: raw appointments sharing client, date and time.

    Attributes:
        id: ID of the first raw appointment in the group.
        member_ids: IDs of every raw appointment in the group, in input order.
        services: One line per member, in input order.
        notes: Notes of the first member.
        is_paid: Paid flag derived by the configured paid-status policy.
    """

    id: int
    client_id: int
    client_name: str
    date: dt.date
    time: dt.time
    notes: str | None = None
    is_paid: bool = False
    services: list[ServiceLine] = field(default_factory=list)
    member_ids: list[int] = field(default_factory=list)

    @property
    def service_name(self) -> str:
        return ", ".join(line.name for line in self.services)

    @property
    def service_color(self) -> str:
        return self.services[0].color if self.services else ""

    @property
    def duration(self) -> int:
        """Combined length of all services in minutes."""
        return sum(line.duration for line in self.services)

    @property
    def duration_label(self) -> str:
        return f"{self.duration} min"


@dataclass(frozen=True)
class TimelinePosition:
    """Horizontal placement on the day timeline, in percent of its width."""

    left: float
    width: float


@dataclass(frozen=True)
class TimelineEntry:
    """A visit laid out on the day timeline."""

    appointment: LogicalAppointment
    position: TimelinePosition
    start: str
    end: str


@dataclass
class DebtRecord:
    """Unpaid appointments of one client and what they add up to."""

    client: ClientDetails
    appointments: list[AppointmentRecord] = field(default_factory=list)
    total_debt: Decimal = field(default_factory=lambda: Decimal("0"))
