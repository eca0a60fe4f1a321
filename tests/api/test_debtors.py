"""Tests for the debtors report endpoint."""

from decimal import Decimal

import pytest
from httpx import AsyncClient


async def _create(api_client: AsyncClient, path: str, payload: dict) -> dict:
    response = await api_client.post(path, json=payload)
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_debtors_sum_unpaid_rows(api_client: AsyncClient) -> None:
    """Each unpaid service is charged separately and paid ones are skipped."""
    anna = await _create(
        api_client,
        "/api/clients",
        {"first_name": "Anna", "last_name": "Kowalska", "phone": "+48 123"},
    )
    jan = await _create(
        api_client,
        "/api/clients",
        {"first_name": "Jan", "last_name": "Nowak", "phone": "+48 987"},
    )
    haircut = await _create(
        api_client, "/api/services", {"name": "Haircut", "duration": 30, "color": "#FFB3BA"}
    )
    trim = await _create(
        api_client, "/api/services", {"name": "Fringe trim", "duration": 10, "color": "#FFDFD3"}
    )
    booked = (
        await api_client.post(
            "/api/appointments",
            json={
                "client_id": jan["id"],
                "service_ids": [haircut["id"], trim["id"]],
                "date": "2024-06-03",
                "time": "09:00",
            },
        )
    ).json()
    paid = (
        await api_client.post(
            "/api/appointments",
            json={
                "client_id": anna["id"],
                "service_ids": [haircut["id"]],
                "date": "2024-06-01",
                "time": "12:00",
            },
        )
    ).json()
    await api_client.post(f"/api/appointments/{paid[0]['id']}/toggle-payment")
    await api_client.post(
        "/api/appointments",
        json={
            "client_id": anna["id"],
            "service_ids": [haircut["id"]],
            "date": "2024-06-05",
            "time": "14:00",
        },
    )

    response = await api_client.get("/api/debtors")

    assert response.status_code == 200
    data = response.json()
    assert data["currency"] == "PLN"
    assert Decimal(data["total_debt"]) == Decimal("230")
    assert [item["first_name"] for item in data["items"]] == ["Jan", "Anna"]

    jan_debt = data["items"][0]
    assert jan_debt["appointment_count"] == 2
    assert Decimal(jan_debt["total_debt"]) == Decimal("140")
    assert jan_debt["total_debt_display"] == "140 PLN"
    assert [row["id"] for row in jan_debt["appointments"]] == [row["id"] for row in booked]
    assert [row["price_display"] for row in jan_debt["appointments"]] == ["90 PLN", "50 PLN"]

    anna_debt = data["items"][1]
    assert anna_debt["appointment_count"] == 1
    assert anna_debt["appointments"][0]["date"] == "2024-06-05"


@pytest.mark.asyncio
async def test_no_debtors(api_client: AsyncClient) -> None:
    """An empty book has no debtors."""
    response = await api_client.get("/api/debtors")

    assert response.status_code == 200
    data = response.json()
    assert data["items"] == []
    assert Decimal(data["total_debt"]) == Decimal("0")
