"""Dashboard Pydantic schemas."""

from typing import List

from pydantic import BaseModel, Field

from .flight import FlightDto
from .user import UserDto


class DashboardResponse(BaseModel):
    """Manager overview of flights and registered users."""

    flights: List[FlightDto] = Field(default_factory=list, description="All flights")
    users: List[UserDto] = Field(default_factory=list, description="All registered users")
    total_flights: int = Field(..., ge=0, description="Number of flights")
    total_users: int = Field(..., ge=0, description="Number of users")
