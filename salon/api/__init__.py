"""API module exports."""

from salon.api.appointments import router as appointments_router
from salon.api.clients import router as clients_router
from salon.api.debtors import router as debtors_router
from salon.api.deps import get_appointment_records, get_db, get_snapshot, get_today
from salon.api.health import router as health_router
from salon.api.services import router as services_router

__all__ = [
    "appointments_router",
    "clients_router",
    "debtors_router",
    "get_appointment_records",
    "get_db",
    "get_snapshot",
    "get_today",
    "health_router",
    "services_router",
]
