"""Data access for clients, services and appointments.

Every function takes the caller's AsyncSession and only flushes; committing
or rolling back is left to the session owner, so a failed multi-row write
leaves nothing behind. Store errors propagate unchanged and nothing is
retried.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Sequence
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from salon.core.logging import get_logger
from salon.models import Appointment, Client, Service
from salon.scheduling.models import AppointmentRecord, ClientDetails, ServiceDetails

logger = get_logger(__name__)

CLIENT_FIELDS = frozenset({"first_name", "last_name", "phone"})
SERVICE_FIELDS = frozenset({"name", "duration", "color"})
APPOINTMENT_FIELDS = frozenset({"date", "time", "notes", "is_paid"})


class RecordNotFoundError(Exception):
    """Raised when a single-record operation targets an id that does not exist."""

    def __init__(self, kind: str, record_id: int):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} {record_id} not found")


def _escape_like(term: str) -> str:
    """Make LIKE wildcards in user input match literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _apply(record: Any, allowed: frozenset[str], fields: dict[str, Any]) -> None:
    unknown = set(fields) - allowed
    if unknown:
        raise ValueError(f"Unknown fields: {', '.join(sorted(unknown))}")
    for key, value in fields.items():
        setattr(record, key, value)


# =============================================================================
# Services
# =============================================================================


async def list_services(db: AsyncSession) -> Sequence[Service]:
    """All services in creation order."""
    result = await db.execute(select(Service).order_by(Service.created_at, Service.id))
    return result.scalars().all()


async def get_service(db: AsyncSession, service_id: int) -> Service:
    service = await db.get(Service, service_id)
    if service is None:
        raise RecordNotFoundError("Service", service_id)
    return service


async def create_service(
    db: AsyncSession, *, name: str, duration: int, color: str
) -> Service:
    service = Service(name=name, duration=duration, color=color)
    db.add(service)
    await db.flush()
    logger.info("service_created", service_id=service.id, duration=duration)
    return service


async def update_service(db: AsyncSession, service_id: int, **fields: Any) -> Service:
    """Update the given service fields in place."""
    service = await get_service(db, service_id)
    _apply(service, SERVICE_FIELDS, fields)
    await db.flush()
    await db.refresh(service)
    return service


async def delete_service(db: AsyncSession, service_id: int) -> None:
    service = await get_service(db, service_id)
    await db.delete(service)
    await db.flush()
    logger.info("service_deleted", service_id=service_id)


# =============================================================================
# Clients
# =============================================================================


async def list_clients(db: AsyncSession, search: str | None = None) -> Sequence[Client]:
    """All clients in creation order.

    Args:
        db: Session to query with.
        search: Optional case-insensitive fragment matched against
            "first last phone".
    """
    stmt = select(Client).order_by(Client.created_at, Client.id)
    if search and search.strip():
        pattern = f"%{_escape_like(search.strip().lower())}%"
        haystack = Client.first_name + " " + Client.last_name + " " + Client.phone
        stmt = stmt.where(func.lower(haystack).like(pattern, escape="\\"))
    result = await db.execute(stmt)
    return result.scalars().all()


async def get_client(db: AsyncSession, client_id: int) -> Client:
    client = await db.get(Client, client_id)
    if client is None:
        raise RecordNotFoundError("Client", client_id)
    return client


async def create_client(
    db: AsyncSession, *, first_name: str, last_name: str, phone: str
) -> Client:
    client = Client(first_name=first_name, last_name=last_name, phone=phone)
    db.add(client)
    await db.flush()
    logger.info("client_created", client_id=client.id)
    return client


async def update_client(db: AsyncSession, client_id: int, **fields: Any) -> Client:
    """Update the given client fields in place."""
    client = await get_client(db, client_id)
    _apply(client, CLIENT_FIELDS, fields)
    await db.flush()
    await db.refresh(client)
    return client


async def delete_client(db: AsyncSession, client_id: int) -> None:
    """Delete a client. Appointments referencing it are left untouched."""
    client = await get_client(db, client_id)
    await db.delete(client)
    await db.flush()
    logger.info("client_deleted", client_id=client_id)


# =============================================================================
# Appointments
# =============================================================================


def _appointments_query():
    return select(Appointment).options(
        selectinload(Appointment.client),
        selectinload(Appointment.service),
    )


async def _load_appointments(
    db: AsyncSession, appointment_ids: Sequence[int]
) -> list[Appointment]:
    """Reload appointments with fresh column values and joined detail."""
    stmt = (
        _appointments_query()
        .where(Appointment.id.in_(appointment_ids))
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    by_id = {appointment.id: appointment for appointment in result.scalars().all()}
    return [by_id[appointment_id] for appointment_id in appointment_ids]


async def list_appointments(db: AsyncSession) -> Sequence[Appointment]:
    """All appointments joined with client and service, by date then time."""
    stmt = _appointments_query().order_by(
        Appointment.date, Appointment.time, Appointment.id
    )
    result = await db.execute(stmt)
    return result.scalars().all()


async def get_appointment(db: AsyncSession, appointment_id: int) -> Appointment:
    appointment = await db.get(Appointment, appointment_id)
    if appointment is None:
        raise RecordNotFoundError("Appointment", appointment_id)
    return appointment


async def create_appointments(
    db: AsyncSession,
    *,
    client_id: int,
    service_ids: Sequence[int],
    date: dt.date,
    time: dt.time,
) -> list[Appointment]:
    """Book one appointment per service for a client at one slot.

    The client and every service are checked before anything is inserted,
    and all rows go out in a single flush. If any part fails, the caller's
    transaction rolls back and no row of the batch persists.

    Returns:
        The new appointments in `service_ids` order, with joined detail.

    Raises:
        ValueError: If `service_ids` is empty.
        RecordNotFoundError: If the client or any service does not exist.
    """
    if not service_ids:
        raise ValueError("At least one service is required")

    await get_client(db, client_id)
    for service_id in service_ids:
        await get_service(db, service_id)

    appointments = [
        Appointment(client_id=client_id, service_id=service_id, date=date, time=time)
        for service_id in service_ids
    ]
    db.add_all(appointments)
    await db.flush()

    logger.info(
        "appointments_created",
        client_id=client_id,
        count=len(appointments),
        date=date.isoformat(),
        time=time.isoformat(timespec="minutes"),
    )
    return await _load_appointments(db, [appointment.id for appointment in appointments])


async def update_appointment(
    db: AsyncSession, appointment_id: int, **fields: Any
) -> Appointment:
    """Update one raw appointment. Other rows of the same visit are untouched."""
    appointment = await get_appointment(db, appointment_id)
    _apply(appointment, APPOINTMENT_FIELDS, fields)
    await db.flush()
    (updated,) = await _load_appointments(db, [appointment_id])
    return updated


async def toggle_payment(db: AsyncSession, appointment_id: int) -> Appointment:
    """Flip the paid flag of one raw appointment."""
    appointment = await get_appointment(db, appointment_id)
    return await update_appointment(db, appointment_id, is_paid=not appointment.is_paid)


async def delete_appointment(db: AsyncSession, appointment_id: int) -> None:
    appointment = await get_appointment(db, appointment_id)
    await db.delete(appointment)
    await db.flush()
    logger.info("appointment_deleted", appointment_id=appointment_id)


def to_record(appointment: Appointment) -> AppointmentRecord:
    """Convert a loaded ORM appointment into an immutable record.

    Client and service must have been eagerly loaded; a missing row maps to
    None rather than raising.
    """
    client = appointment.client
    service = appointment.service
    return AppointmentRecord(
        id=appointment.id,
        client_id=appointment.client_id,
        service_id=appointment.service_id,
        date=appointment.date,
        time=appointment.time,
        notes=appointment.notes,
        is_paid=appointment.is_paid,
        client=(
            ClientDetails(
                id=client.id,
                first_name=client.first_name,
                last_name=client.last_name,
                phone=client.phone,
            )
            if client is not None
            else None
        ),
        service=(
            ServiceDetails(
                id=service.id,
                name=service.name,
                duration=service.duration,
                color=service.color,
            )
            if service is not None
            else None
        ),
        created_at=appointment.created_at,
        updated_at=appointment.updated_at,
    )
