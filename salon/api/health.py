"""Health check and wall clock endpoints."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from salon.api.deps import get_clock, get_db
from salon.core.clock import WallClock
from salon.core.config import settings
from salon.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    db: str


class ClockResponse(BaseModel):
    """Current salon time as shown above the calendar."""

    now: datetime
    date: str
    time: str
    running: bool


@router.get("/health", response_model=HealthResponse)
async def health_check(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> HealthResponse:
    """Check application health including database connectivity."""
    try:
        await db.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        logger.exception("database_health_check_failed", error=str(e))
        db_status = "disconnected"

    return HealthResponse(
        status="ok" if db_status == "connected" else "degraded",
        db=db_status,
    )


@router.get("/clock", response_model=ClockResponse)
async def current_time(
    clock: Annotated[WallClock | None, Depends(get_clock)],
) -> ClockResponse:
    """Return the wall clock's latest tick.

    Falls back to a one-off reading when no clock is running.
    """
    if clock is None:
        clock = WallClock(tz=settings.timezone)
    now = clock.now
    return ClockResponse(
        now=now,
        date=now.date().isoformat(),
        time=now.strftime("%H:%M"),
        running=clock.running,
    )
