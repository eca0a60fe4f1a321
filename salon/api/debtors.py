"""Debtors report endpoint."""

import datetime as dt
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from salon.api.deps import get_appointment_records
from salon.core.config import settings
from salon.core.logging import get_logger
from salon.scheduling.aggregator import UnresolvedReferenceError, resolve_records
from salon.scheduling.debts import calculate_service_price, format_price, summarize_debts
from salon.scheduling.models import AppointmentRecord, DebtRecord

logger = get_logger(__name__)

router = APIRouter(prefix="/api/debtors", tags=["debtors"])


class DebtAppointmentResponse(BaseModel):
    """An unpaid appointment and its estimated charge."""

    id: int
    date: dt.date
    time: str
    service_name: str
    duration: int
    price: Decimal
    price_display: str
    is_paid: bool


class DebtorResponse(BaseModel):
    client_id: int
    first_name: str
    last_name: str
    phone: str
    appointment_count: int
    total_debt: Decimal
    total_debt_display: str
    appointments: list[DebtAppointmentResponse]


class DebtorsResponse(BaseModel):
    """Clients with unpaid appointments, in order of their first unpaid visit."""

    currency: str
    total_debt: Decimal
    items: list[DebtorResponse]


def _to_debtor_response(debt: DebtRecord, currency: str) -> DebtorResponse:
    appointments = []
    for record in debt.appointments:
        price = calculate_service_price(record.service.duration)
        appointments.append(
            DebtAppointmentResponse(
                id=record.id,
                date=record.date,
                time=record.time.strftime("%H:%M"),
                service_name=record.service.name,
                duration=record.service.duration,
                price=price,
                price_display=format_price(price, currency),
                is_paid=record.is_paid,
            )
        )
    return DebtorResponse(
        client_id=debt.client.id,
        first_name=debt.client.first_name,
        last_name=debt.client.last_name,
        phone=debt.client.phone,
        appointment_count=len(debt.appointments),
        total_debt=debt.total_debt,
        total_debt_display=format_price(debt.total_debt, currency),
        appointments=appointments,
    )


@router.get("", response_model=DebtorsResponse)
async def list_debtors(
    records: tuple[AppointmentRecord, ...] = Depends(get_appointment_records),
) -> DebtorsResponse:
    """Sum estimated charges of unpaid appointments per client."""
    try:
        resolved = resolve_records(records, settings.unresolved_reference_policy)
    except UnresolvedReferenceError as exc:
        logger.error("appointment_fetch_rejected", error=str(exc))
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    debts = summarize_debts(resolved)
    return DebtorsResponse(
        currency=settings.currency,
        total_debt=sum((debt.total_debt for debt in debts), Decimal("0")),
        items=[_to_debtor_response(debt, settings.currency) for debt in debts],
    )
