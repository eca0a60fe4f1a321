"""Service catalog SQLAlchemy model."""

from typing import TYPE_CHECKING

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from salon.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from salon.models.appointment import Appointment


class Service(Base, TimestampMixin):
    """Represents a bookable service with a fixed duration and display color."""

    __tablename__ = "services"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    """Length of the service in minutes."""
    color: Mapped[str] = mapped_column(String(32), nullable=False)

    # Relationships
    appointments: Mapped[list["Appointment"]] = relationship(
        back_populates="service", passive_deletes=True
    )
