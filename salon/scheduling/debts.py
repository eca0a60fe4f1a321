"""Debt estimates for unpaid appointments.

Prices are not stored; each appointment is charged from its service duration
at a flat per-minute rate with a minimum charge. All monetary values use
Decimal.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from salon.scheduling.models import AppointmentRecord, DebtRecord

PRICE_PER_MINUTE = Decimal("3")
MIN_SERVICE_PRICE = Decimal("50")


def calculate_service_price(duration: int) -> Decimal:
    """Price of one service: 3 per minute, never below 50."""
    return max(Decimal(duration) * PRICE_PER_MINUTE, MIN_SERVICE_PRICE)


def format_price(price: Decimal, currency: str = "PLN") -> str:
    """Render a price rounded to whole units, e.g. `90 PLN`."""
    whole = price.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return f"{whole} {currency}"


def summarize_debts(records: Iterable[AppointmentRecord]) -> list[DebtRecord]:
    """Sum unpaid appointments per client.

    Works on raw rows, so a visit with three services contributes three
    charges. Rows whose client or service did not resolve are skipped since
    they can be neither attributed nor priced.

    Args:
        records: Raw appointment records in fetch order.

    Returns:
        One DebtRecord per client with unpaid appointments, ordered by the
        client's first unpaid appointment.
    """
    debts: dict[int, DebtRecord] = {}
    for record in records:
        if record.is_paid or not record.is_resolved:
            continue
        debt = debts.get(record.client.id)
        if debt is None:
            debt = DebtRecord(client=record.client)
            debts[record.client.id] = debt
        debt.appointments.append(record)
        debt.total_debt += calculate_service_price(record.service.duration)
    return list(debts.values())
