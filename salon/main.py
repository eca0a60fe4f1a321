"""FastAPI application entry point with lifespan management."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from salon.api.appointments import router as appointments_router
from salon.api.clients import router as clients_router
from salon.api.debtors import router as debtors_router
from salon.api.health import router as health_router
from salon.api.middleware import RequestContextMiddleware
from salon.api.services import router as services_router
from salon.core.clock import WallClock
from salon.core.config import settings
from salon.core.database import create_engine, create_schema, create_session_factory
from salon.core.logging import configure_logging, get_logger
from salon.core.sentry import init_sentry
from salon.scheduling.snapshot import AppointmentSnapshot

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle resources.

    Startup:
        - Configure structured logging
        - Initialize Sentry error tracking
        - Create database engine and session factory
        - Start the wall clock

    Shutdown:
        - Stop the wall clock
        - Dispose database engine
    """
    # Configure logging first
    configure_logging()
    logger.info("Starting application", environment=settings.environment)

    # Initialize error tracking
    if init_sentry():
        logger.info("Sentry initialized")

    # Create database engine and session factory
    app.state.db_engine = create_engine()
    app.state.async_session = create_session_factory(app.state.db_engine)
    if settings.auto_create_schema:
        await create_schema(app.state.db_engine)
        logger.info("Database schema created")
    logger.info("Database engine created")

    app.state.clock = WallClock(
        interval=settings.clock_interval_seconds,
        tz=settings.timezone,
    )
    await app.state.clock.start()

    yield

    # Shutdown
    logger.info("Shutting down application")

    await app.state.clock.stop()

    # Dispose database engine
    await app.state.db_engine.dispose()
    logger.info("Database engine disposed")


app = FastAPI(
    title="Salon",
    description="Appointment booking for a beauty salon: clients, services, calendar and debts",
    version="0.1.0",
    lifespan=lifespan,
)

# Replaced wholesale after every fetch and dropped after every write.
app.state.appointment_snapshot = AppointmentSnapshot()


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Report a failed store call; the user action is aborted, not retried."""
    logger.exception(
        "store_operation_failed",
        method=request.method,
        path=request.url.path,
        error=type(exc).__name__,
    )
    sentry_sdk.capture_exception(exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Data store operation failed"},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add request context middleware
app.add_middleware(RequestContextMiddleware)

# Include routers
app.include_router(health_router)
app.include_router(clients_router)
app.include_router(services_router)
app.include_router(appointments_router)
app.include_router(debtors_router)
