"""Booking router for booking operations."""

import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Query, status

from ..core.dependencies import (
    AnyRole,
    get_booking_service,
    get_flight_service,
    get_user_service,
)
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError
from ..schemas.booking import BookingDto, BookingForm, CreateBookingRequest
from ..schemas.common import PROBLEM_RESPONSES
from ..schemas.user import CurrentUser
from ..services.booking_service import BookingService
from ..services.flight_service import FlightService
from ..services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/booking", tags=["booking"], responses=PROBLEM_RESPONSES)

# Define dependencies to avoid B008 linting errors
FLIGHT_SERVICE_DEPENDENCY = Depends(get_flight_service)
BOOKING_SERVICE_DEPENDENCY = Depends(get_booking_service)
USER_SERVICE_DEPENDENCY = Depends(get_user_service)


async def _require_flight(flight_service: FlightService, flight_id: int):
    flight = await flight_service.get_by_id(flight_id)
    if flight is None:
        raise NotFoundError(resource_type="flight", resource_id=str(flight_id))
    return flight


@router.get("/book", response_model=BookingForm)
async def booking_form(
    flight_id: int = Query(..., ge=1, description="Flight to book"),
    flight_service: FlightService = FLIGHT_SERVICE_DEPENDENCY,
    user: CurrentUser = AnyRole,
) -> BookingForm:
    """Booking form prefilled with the flight's route and times."""
    flight = await _require_flight(flight_service, flight_id)
    return BookingForm(
        flight_id=flight.id,
        from_location=flight.departure,
        to_location=flight.destination,
        departure_time=flight.departure_time,
        arrival_time=flight.arrival_time,
    )


@router.post("/book", response_model=BookingDto, status_code=status.HTTP_201_CREATED)
async def book_flight(
    request: CreateBookingRequest,
    flight_service: FlightService = FLIGHT_SERVICE_DEPENDENCY,
    booking_service: BookingService = BOOKING_SERVICE_DEPENDENCY,
    user_service: UserService = USER_SERVICE_DEPENDENCY,
    user: CurrentUser = AnyRole,
) -> BookingDto:
    """
    Book a flight for the signed-in user.

    Route and times are snapshotted from the flight as it is now; later
    edits to the flight do not change the booking.
    """
    account = await user_service.get_user_by_username(user.username)
    if account is None:
        raise AuthenticationError(detail="The signed-in user no longer exists")

    flight = await _require_flight(flight_service, request.flight_id)

    booking = await booking_service.add_booking(
        BookingDto(
            flight_id=flight.id,
            user_id=account.id,
            username=account.username,
            from_location=flight.departure,
            to_location=flight.destination,
            departure_time=flight.departure_time,
            arrival_time=flight.arrival_time,
            booking_date=datetime.now(),
        )
    )

    logger.info(
        "Flight booked",
        extra={
            "booking_id": booking.id,
            "flight_id": flight.id,
            "username": account.username,
        }
    )
    return booking


@router.get("/mine", response_model=List[BookingDto])
async def my_bookings(
    booking_service: BookingService = BOOKING_SERVICE_DEPENDENCY,
    user: CurrentUser = AnyRole,
) -> List[BookingDto]:
    """Bookings made by the signed-in user."""
    return await booking_service.get_bookings_by_user(user.user_id)


@router.get("/{booking_id}", response_model=BookingDto)
async def get_booking(
    booking_id: int,
    booking_service: BookingService = BOOKING_SERVICE_DEPENDENCY,
    user: CurrentUser = AnyRole,
) -> BookingDto:
    """
    Get a booking by ID.

    Managers see every booking; users only their own.
    """
    booking = await booking_service.get_booking_by_id(booking_id)
    if booking is None:
        raise NotFoundError(resource_type="booking", resource_id=str(booking_id))

    if not user.is_manager and booking.user_id != user.user_id:
        raise AuthorizationError(detail="Users may only view their own bookings")

    return booking
