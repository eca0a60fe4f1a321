"""FastAPI dependency injection for database, snapshot and clock access."""

from collections.abc import AsyncGenerator
from datetime import date

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from salon.core.clock import WallClock, today
from salon.core.config import settings
from salon.core.logging import get_logger
from salon.scheduling.models import AppointmentRecord
from salon.scheduling.snapshot import AppointmentSnapshot
from salon.store import queries
from salon.store.queries import to_record

logger = get_logger(__name__)


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session from the app's session factory.

    Args:
        request: FastAPI request containing app state.

    Yields:
        AsyncSession for database operations with automatic commit/rollback.
    """
    async with request.app.state.async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_snapshot(request: Request) -> AppointmentSnapshot:
    """Get the process-wide appointment snapshot from app state."""
    return request.app.state.appointment_snapshot


def get_clock(request: Request) -> WallClock | None:
    """Get the running wall clock, if the application started one."""
    return getattr(request.app.state, "clock", None)


def get_today() -> date:
    """Today's date in the salon's time zone."""
    return today(settings.timezone)


async def get_appointment_records(
    db: AsyncSession = Depends(get_db),
    snapshot: AppointmentSnapshot = Depends(get_snapshot),
) -> tuple[AppointmentRecord, ...]:
    """Fetch every appointment record and offer the result to the snapshot.

    Reads always go to the store, so rows committed by other processes are
    seen on the next request. The generation token only decides whether this
    result may replace the held snapshot.
    """
    token = snapshot.begin_fetch()
    appointments = await queries.list_appointments(db)
    records = tuple(to_record(appointment) for appointment in appointments)
    if snapshot.publish(token, records):
        logger.debug("appointment_snapshot_published", generation=token, count=len(records))
    return records
