"""Booking model definition."""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .flight import Flight
    from .user import User


class Booking(Base):
    """
    Booking entity for a user's seat on a flight.

    The route and times are a snapshot taken when the booking was made, so a
    later change to the flight does not rewrite what was booked.
    """

    __tablename__ = "bookings"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Foreign keys
    flight_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("flights.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Route snapshot
    from_location: Mapped[str] = mapped_column(String(128), nullable=False)
    to_location: Mapped[str] = mapped_column(String(128), nullable=False)
    departure_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    arrival_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # Booking details
    booking_date: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now()
    )
    username: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    # Constraints
    __table_args__ = (
        CheckConstraint("length(from_location) > 0", name="ck_booking_from_not_empty"),
        CheckConstraint("length(to_location) > 0", name="ck_booking_to_not_empty"),
    )

    # Relationships
    flight: Mapped["Flight"] = relationship("Flight", back_populates="bookings")
    user: Mapped["User"] = relationship("User", back_populates="bookings")

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, flight_id={self.flight_id}, user_id={self.user_id}, "
            f"from='{self.from_location}', to='{self.to_location}', booking_date={self.booking_date})>"
        )
