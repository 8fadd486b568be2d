"""Booking-related Pydantic schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class BookingForm(BaseModel):
    """Booking form prefilled from a flight."""

    flight_id: int = Field(..., description="Flight to book")
    from_location: str = Field(..., alias="from", description="Departure of the flight")
    to_location: str = Field(..., alias="to", description="Destination of the flight")
    departure_time: datetime = Field(..., description="Departure time (ISO 8601)")
    arrival_time: datetime = Field(..., description="Arrival time (ISO 8601)")

    model_config = {"populate_by_name": True}


class BookingDto(BookingForm):
    """Booking transport object."""

    id: Optional[int] = Field(None, description="Booking ID; empty before the booking is stored")
    user_id: int = Field(..., description="User who booked")
    booking_date: datetime = Field(default_factory=datetime.now, description="When the booking was made")
    username: Optional[str] = Field(None, description="Username snapshot")

    model_config = {"populate_by_name": True, "from_attributes": True}


class CreateBookingRequest(BaseModel):
    """Request schema for booking a flight."""

    flight_id: int = Field(..., ge=1, description="Flight to book")
