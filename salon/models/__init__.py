"""SQLAlchemy models for the salon booking service."""

from salon.models.appointment import Appointment
from salon.models.base import Base, TimestampMixin
from salon.models.client import Client
from salon.models.service import Service

__all__ = [
    "Base",
    "TimestampMixin",
    "Appointment",
    "Client",
    "Service",
]
