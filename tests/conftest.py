"""Pytest configuration and shared fixtures for tests."""

import os

# Settings are read at import time; point them at an in-memory database
# before any application module is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import datetime as dt  # noqa: E402
from collections.abc import AsyncGenerator, Callable  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from salon.api.deps import get_db, get_today  # noqa: E402
from salon.core.database import create_schema  # noqa: E402
from salon.main import app  # noqa: E402
from salon.scheduling.models import (  # noqa: E402
    AppointmentRecord,
    ClientDetails,
    ServiceDetails,
)
from salon.scheduling.snapshot import AppointmentSnapshot  # noqa: E402

TODAY = dt.date(2024, 6, 10)


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Create sqlite-backed session factory with every table created."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    await create_schema(engine)

    factory = async_sessionmaker(engine, expire_on_commit=False)
    app.state.async_session = factory
    try:
        yield factory
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Session for exercising the data access layer directly."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def api_client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """Create API client with DB dependency override and a fixed today."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: TODAY
    app.state.appointment_snapshot = AppointmentSnapshot()
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def make_record() -> Callable[..., AppointmentRecord]:
    """Factory for joined appointment records.

    Returns:
        Callable building an AppointmentRecord; `client` and `service` may be
        passed as None to simulate a dangling reference.
    """
    counter = {"next_id": 1}
    anna = ClientDetails(id=1, first_name="Anna", last_name="Kowalska", phone="+48 123")
    haircut = ServiceDetails(id=10, name="Haircut", duration=30, color="#FFB3BA")

    def _make(
        *,
        client: ClientDetails | None = anna,
        service: ServiceDetails | None = haircut,
        client_id: int | None = None,
        service_id: int | None = None,
        date: dt.date = TODAY,
        time: dt.time = dt.time(9, 0),
        notes: str | None = None,
        is_paid: bool = False,
        record_id: int | None = None,
    ) -> AppointmentRecord:
        if record_id is None:
            record_id = counter["next_id"]
        counter["next_id"] = record_id + 1
        return AppointmentRecord(
            id=record_id,
            client_id=client_id if client_id is not None else (client.id if client else 0),
            service_id=service_id if service_id is not None else (service.id if service else 0),
            date=date,
            time=time,
            notes=notes,
            is_paid=is_paid,
            client=client,
            service=service,
        )

    return _make


@pytest.fixture
def today() -> dt.date:
    """The date API tests treat as today."""
    return TODAY
