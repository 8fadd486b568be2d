"""Flight model definition."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .booking import Booking


class Flight(Base):
    """Flight entity representing a scheduled flight."""

    __tablename__ = "flights"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Flight details; flight numbers are unique by convention only
    flight_number: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    departure: Mapped[str] = mapped_column(String(128), nullable=False)
    destination: Mapped[str] = mapped_column(String(128), nullable=False)
    departure_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    arrival_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)

    # Constraints
    __table_args__ = (
        CheckConstraint("length(flight_number) > 0", name="ck_flight_number_not_empty"),
        CheckConstraint("price >= 0", name="ck_flight_price_non_negative"),
    )

    # Relationships
    bookings: Mapped[list["Booking"]] = relationship(
        "Booking",
        back_populates="flight",
        passive_deletes=True
    )

    def __repr__(self) -> str:
        return (
            f"<Flight(id={self.id}, flight_number='{self.flight_number}', "
            f"departure='{self.departure}', destination='{self.destination}')>"
        )
