"""Flight-related Pydantic schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class FlightBase(BaseModel):
    """Fields shared by flight requests and responses."""

    flight_number: str = Field(..., description="Flight number, e.g. FL001")
    departure: str = Field(..., description="Departure city or airport")
    destination: str = Field(..., description="Destination city or airport")
    departure_time: datetime = Field(..., description="Scheduled departure (ISO 8601)")
    arrival_time: datetime = Field(..., description="Scheduled arrival (ISO 8601)")
    price: float = Field(..., description="Ticket price")


class FlightRequest(FlightBase):
    """Request schema for creating or editing a flight."""

    flight_number: str = Field(..., min_length=1, max_length=32, description="Flight number, e.g. FL001")
    departure: str = Field(..., min_length=1, max_length=128, description="Departure city or airport")
    destination: str = Field(..., min_length=1, max_length=128, description="Destination city or airport")
    price: float = Field(..., ge=0, description="Ticket price")

    @model_validator(mode="after")
    def check_schedule(self) -> "FlightRequest":
        """Arrival must not precede departure."""
        if self.arrival_time < self.departure_time:
            raise ValueError("arrival_time must not be earlier than departure_time")
        return self


class FlightDto(FlightBase):
    """Flight transport object."""

    id: Optional[int] = Field(None, description="Flight ID; empty before the flight is stored")

    model_config = {"from_attributes": True}


class FlightUpdateResult(BaseModel):
    """Outcome of a flight edit."""

    id: int = Field(..., description="Flight ID that was targeted")
    updated: bool = Field(..., description="False when no flight with this ID exists")
