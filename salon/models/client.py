"""Client SQLAlchemy model."""

from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from salon.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from salon.models.appointment import Appointment


class Client(Base, TimestampMixin):
    """Represents a salon client."""

    __tablename__ = "clients"

    id: Mapped[int] = mapped_column(primary_key=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)

    # Relationships
    appointments: Mapped[list["Appointment"]] = relationship(
        back_populates="client", passive_deletes=True
    )
