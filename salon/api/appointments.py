"""Appointments API endpoints: booking, payment, and calendar views."""

import datetime as dt

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from salon.api.deps import get_appointment_records, get_db, get_snapshot, get_today
from salon.core.config import settings
from salon.core.logging import client_id_ctx, get_logger
from salon.scheduling.aggregator import (
    UnresolvedReferenceError,
    group_appointments,
    resolve_records,
)
from salon.scheduling.calendar import filter_by_selection, group_by_date
from salon.scheduling.models import (
    AppointmentRecord,
    LogicalAppointment,
    TimelineEntry,
)
from salon.scheduling.snapshot import AppointmentSnapshot
from salon.scheduling.timeline import layout_day, timeline_hours
from salon.store import queries
from salon.store.queries import RecordNotFoundError, to_record

logger = get_logger(__name__)

router = APIRouter(prefix="/api/appointments", tags=["appointments"])


class AppointmentCreateRequest(BaseModel):
    """Payload for booking a visit: one appointment is stored per service."""

    client_id: int
    service_ids: list[int] = Field(min_length=1)
    date: dt.date
    time: dt.time


class AppointmentUpdateRequest(BaseModel):
    """Payload for updating a single stored appointment."""

    date: dt.date | None = None
    time: dt.time | None = None
    notes: str | None = None
    is_paid: bool | None = None


class ClientSummary(BaseModel):
    id: int
    first_name: str
    last_name: str
    phone: str


class ServiceSummary(BaseModel):
    id: int
    name: str
    duration: int
    color: str


class AppointmentResponse(BaseModel):
    """Stored appointment joined with its client and service."""

    id: int
    client_id: int
    service_id: int
    date: dt.date
    time: str
    notes: str | None
    is_paid: bool
    client: ClientSummary | None
    service: ServiceSummary | None
    created_at: dt.datetime | None
    updated_at: dt.datetime | None


class ServiceLineResponse(BaseModel):
    name: str
    duration: int
    color: str


class VisitResponse(BaseModel):
    """A visit combining every service booked for one client and slot."""

    id: int
    member_ids: list[int]
    client_id: int
    client_name: str
    date: dt.date
    time: str
    service_name: str
    service_color: str
    services: list[ServiceLineResponse]
    duration: int
    duration_label: str
    notes: str | None
    is_paid: bool
    is_selected_day: bool = False


class VisitDayResponse(BaseModel):
    date: str
    appointments: list[VisitResponse]


class VisitsResponse(BaseModel):
    """Visits bucketed by day, as shown in the calendar list."""

    selected_date: dt.date
    days: list[VisitDayResponse]


class TimelineEntryResponse(BaseModel):
    appointment: VisitResponse
    left: float
    width: float
    start: str
    end: str


class TimelineResponse(BaseModel):
    """Day timeline spanning 08:00 to 20:00."""

    day: dt.date
    hours: list[str]
    entries: list[TimelineEntryResponse]


class HistoryDayResponse(BaseModel):
    date: str
    appointments: list[AppointmentResponse]


class HistoryResponse(BaseModel):
    """Stored appointments matching a date picked in the history view."""

    selected_date: dt.date
    today: dt.date
    days: list[HistoryDayResponse]


def _format_time(value: dt.time) -> str:
    return value.strftime("%H:%M")


def _to_appointment_response(record: AppointmentRecord) -> AppointmentResponse:
    """Map an appointment record to response model."""
    return AppointmentResponse(
        id=record.id,
        client_id=record.client_id,
        service_id=record.service_id,
        date=record.date,
        time=_format_time(record.time),
        notes=record.notes,
        is_paid=record.is_paid,
        client=(
            ClientSummary(
                id=record.client.id,
                first_name=record.client.first_name,
                last_name=record.client.last_name,
                phone=record.client.phone,
            )
            if record.client is not None
            else None
        ),
        service=(
            ServiceSummary(
                id=record.service.id,
                name=record.service.name,
                duration=record.service.duration,
                color=record.service.color,
            )
            if record.service is not None
            else None
        ),
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def _to_visit_response(
    visit: LogicalAppointment, selected_date: dt.date | None = None
) -> VisitResponse:
    return VisitResponse(
        id=visit.id,
        member_ids=list(visit.member_ids),
        client_id=visit.client_id,
        client_name=visit.client_name,
        date=visit.date,
        time=_format_time(visit.time),
        service_name=visit.service_name,
        service_color=visit.service_color,
        services=[
            ServiceLineResponse(name=line.name, duration=line.duration, color=line.color)
            for line in visit.services
        ],
        duration=visit.duration,
        duration_label=visit.duration_label,
        notes=visit.notes,
        is_paid=visit.is_paid,
        is_selected_day=selected_date is not None and visit.date == selected_date,
    )


def _to_timeline_entry_response(entry: TimelineEntry) -> TimelineEntryResponse:
    return TimelineEntryResponse(
        appointment=_to_visit_response(entry.appointment, entry.appointment.date),
        left=entry.position.left,
        width=entry.position.width,
        start=entry.start,
        end=entry.end,
    )


def _group_visits(records: tuple[AppointmentRecord, ...]) -> list[LogicalAppointment]:
    try:
        return group_appointments(
            records,
            unresolved=settings.unresolved_reference_policy,
            paid_policy=settings.paid_status_policy,
        )
    except UnresolvedReferenceError as exc:
        logger.error("appointment_fetch_rejected", error=str(exc))
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc


def _not_found(exc: RecordNotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=f"{exc.kind} not found")


@router.get("", response_model=list[AppointmentResponse])
async def list_appointments(
    records: tuple[AppointmentRecord, ...] = Depends(get_appointment_records),
) -> list[AppointmentResponse]:
    """List stored appointments with client and service, by date then time."""
    return [_to_appointment_response(record) for record in records]


@router.post(
    "",
    response_model=list[AppointmentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_appointments(
    payload: AppointmentCreateRequest,
    db: AsyncSession = Depends(get_db),
    snapshot: AppointmentSnapshot = Depends(get_snapshot),
) -> list[AppointmentResponse]:
    """Book a visit: one stored appointment per selected service, all or none."""
    token = client_id_ctx.set(payload.client_id)
    try:
        appointments = await queries.create_appointments(
            db,
            client_id=payload.client_id,
            service_ids=payload.service_ids,
            date=payload.date,
            time=payload.time,
        )
    except RecordNotFoundError as exc:
        raise _not_found(exc) from exc
    finally:
        client_id_ctx.reset(token)
    await db.commit()
    snapshot.invalidate()
    return [_to_appointment_response(to_record(appointment)) for appointment in appointments]


@router.get("/visits", response_model=VisitsResponse)
async def list_visits(
    selected_date: dt.date | None = Query(default=None),
    today: dt.date = Depends(get_today),
    records: tuple[AppointmentRecord, ...] = Depends(get_appointment_records),
) -> VisitsResponse:
    """Visits bucketed by day; visits on `selected_date` (today by default) are flagged."""
    picked = selected_date or today
    visits = _group_visits(records)
    days = group_by_date(visits)
    return VisitsResponse(
        selected_date=picked,
        days=[
            VisitDayResponse(
                date=day,
                appointments=[_to_visit_response(visit, picked) for visit in items],
            )
            for day, items in days.items()
        ],
    )


@router.get("/timeline", response_model=TimelineResponse)
async def day_timeline(
    day: dt.date | None = Query(default=None),
    today: dt.date = Depends(get_today),
    records: tuple[AppointmentRecord, ...] = Depends(get_appointment_records),
) -> TimelineResponse:
    """Lay out the visits of one day (today by default) on the timeline."""
    target = day or today
    entries = layout_day(_group_visits(records), target)
    return TimelineResponse(
        day=target,
        hours=timeline_hours(),
        entries=[_to_timeline_entry_response(entry) for entry in entries],
    )


@router.get("/history", response_model=HistoryResponse)
async def appointment_history(
    selected_date: dt.date | None = Query(default=None),
    today: dt.date = Depends(get_today),
    records: tuple[AppointmentRecord, ...] = Depends(get_appointment_records),
) -> HistoryResponse:
    """Stored appointments for a picked date.

    Today or a future date lists everything from today on; a past date lists
    that day only.
    """
    picked = selected_date or today
    try:
        resolved = resolve_records(records, settings.unresolved_reference_policy)
    except UnresolvedReferenceError as exc:
        logger.error("appointment_fetch_rejected", error=str(exc))
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    days = group_by_date(filter_by_selection(resolved, picked, today))
    return HistoryResponse(
        selected_date=picked,
        today=today,
        days=[
            HistoryDayResponse(
                date=day,
                appointments=[_to_appointment_response(record) for record in items],
            )
            for day, items in days.items()
        ],
    )


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: int,
    records: tuple[AppointmentRecord, ...] = Depends(get_appointment_records),
) -> AppointmentResponse:
    """Get a stored appointment by ID."""
    for record in records:
        if record.id == appointment_id:
            return _to_appointment_response(record)
    raise HTTPException(status_code=404, detail="Appointment not found")


@router.patch("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: int,
    payload: AppointmentUpdateRequest,
    db: AsyncSession = Depends(get_db),
    snapshot: AppointmentSnapshot = Depends(get_snapshot),
) -> AppointmentResponse:
    """Partially update one stored appointment.

    Other appointments of the same visit keep their own values.
    """
    updates = payload.model_dump(exclude_unset=True)
    for key in ("date", "time", "is_paid"):
        if key in updates and updates[key] is None:
            del updates[key]
    try:
        appointment = await queries.update_appointment(db, appointment_id, **updates)
    except RecordNotFoundError as exc:
        raise _not_found(exc) from exc
    await db.commit()
    snapshot.invalidate()
    return _to_appointment_response(to_record(appointment))


@router.post("/{appointment_id}/toggle-payment", response_model=AppointmentResponse)
async def toggle_payment(
    appointment_id: int,
    db: AsyncSession = Depends(get_db),
    snapshot: AppointmentSnapshot = Depends(get_snapshot),
) -> AppointmentResponse:
    """Flip the paid flag of one stored appointment."""
    try:
        appointment = await queries.toggle_payment(db, appointment_id)
    except RecordNotFoundError as exc:
        raise _not_found(exc) from exc
    await db.commit()
    snapshot.invalidate()
    logger.info(
        "appointment_payment_toggled",
        appointment_id=appointment_id,
        is_paid=appointment.is_paid,
    )
    return _to_appointment_response(to_record(appointment))


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_appointment(
    appointment_id: int,
    db: AsyncSession = Depends(get_db),
    snapshot: AppointmentSnapshot = Depends(get_snapshot),
) -> Response:
    """Delete one stored appointment."""
    try:
        await queries.delete_appointment(db, appointment_id)
    except RecordNotFoundError as exc:
        raise _not_found(exc) from exc
    await db.commit()
    snapshot.invalidate()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
