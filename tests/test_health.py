"""Unit tests for health and clock endpoint behavior."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from salon.api.deps import get_clock, get_db
from salon.core.clock import WallClock
from salon.main import app


class FakeSession:
    """Fake async database session for health checks."""

    def __init__(self, should_fail: bool) -> None:
        self.should_fail = should_fail

    async def execute(self, _statement: object) -> None:
        """Simulate database execute behavior."""
        if self.should_fail:
            raise RuntimeError("database unavailable")


async def _make_request(db_fail: bool = False) -> AsyncClient:
    async def override_get_db() -> AsyncGenerator[FakeSession, None]:
        yield FakeSession(should_fail=db_fail)

    app.dependency_overrides[get_db] = override_get_db

    return AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    )


@pytest.mark.asyncio
async def test_health_endpoint_returns_ok() -> None:
    """Return ok when db is connected."""
    client = await _make_request()
    try:
        response = await client.get("/api/health")
    finally:
        await client.aclose()
        app.dependency_overrides.clear()

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["db"] == "connected"


@pytest.mark.asyncio
async def test_health_endpoint_degraded_on_db_failure() -> None:
    """Return degraded when database is disconnected."""
    client = await _make_request(db_fail=True)
    try:
        response = await client.get("/api/health")
    finally:
        await client.aclose()
        app.dependency_overrides.clear()

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["db"] == "disconnected"


@pytest.mark.asyncio
async def test_health_endpoint_echoes_request_id() -> None:
    """Incoming X-Request-ID is returned on the response."""
    client = await _make_request()
    try:
        response = await client.get("/api/health", headers={"X-Request-ID": "req-123"})
    finally:
        await client.aclose()
        app.dependency_overrides.clear()

    assert response.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_clock_endpoint_reads_running_clock() -> None:
    """Return the latest tick of the application clock."""
    clock = WallClock(interval=60, tz="Europe/Warsaw")
    app.dependency_overrides[get_clock] = lambda: clock
    await clock.start()
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as client:
            response = await client.get("/api/clock")
    finally:
        await clock.stop()
        app.dependency_overrides.clear()

    assert response.status_code == 200
    data = response.json()
    assert data["running"] is True
    assert data["date"] == clock.now.date().isoformat()
    assert data["time"] == clock.now.strftime("%H:%M")


@pytest.mark.asyncio
async def test_clock_endpoint_without_running_clock() -> None:
    """Fall back to a one-off reading when no clock was started."""
    app.dependency_overrides[get_clock] = lambda: None
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as client:
            response = await client.get("/api/clock")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    data = response.json()
    assert data["running"] is False
    assert len(data["time"]) == 5
