"""Models module exporting all database models."""

from .booking import Booking
from .flight import Flight
from .user import User, UserRole

__all__ = [
    # Core entities
    "Flight",
    "User",
    "UserRole",

    # Booking entity
    "Booking",
]
