"""Service layer package."""

from .booking_service import BookingService
from .events import BookingCompletedEvent, BookingEvents, create_booking_events
from .flight_service import FlightService
from .user_service import UserService

__all__ = [
    "BookingCompletedEvent",
    "BookingEvents",
    "BookingService",
    "FlightService",
    "UserService",
    "create_booking_events",
]
