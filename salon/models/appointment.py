"""Appointment SQLAlchemy model.

One row books exactly one service for one client at one date and time.
A visit with several services is stored as several rows sharing
client, date and time.
"""

import datetime as dt
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Date, ForeignKey, Index, Text, Time, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from salon.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from salon.models.client import Client
    from salon.models.service import Service


class Appointment(Base, TimestampMixin):
    """Represents a single booked (client, service) slot."""

    __tablename__ = "appointments"
    __table_args__ = (Index("ix_appointments_date_time", "date", "time"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    client_id: Mapped[int] = mapped_column(ForeignKey("clients.id"), nullable=False)
    service_id: Mapped[int] = mapped_column(ForeignKey("services.id"), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time: Mapped[dt.time] = mapped_column(Time, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)
    is_paid: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false(), nullable=False
    )

    # Relationships
    client: Mapped["Client"] = relationship(back_populates="appointments")
    service: Mapped["Service"] = relationship(back_populates="appointments")
