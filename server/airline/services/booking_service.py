"""Booking service for business logic operations."""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.mapping import Mapper
from ..models.booking import Booking
from ..schemas.booking import BookingDto
from .events import BookingCompletedEvent, BookingEvents

logger = logging.getLogger(__name__)


class BookingService:
    """Service for booking-related operations. Bookings are never cached."""

    def __init__(self, db: AsyncSession, mapper: Mapper, events: Optional[BookingEvents] = None):
        self.db = db
        self.mapper = mapper
        self.events = events if events is not None else BookingEvents()

    async def add_booking(self, booking: BookingDto) -> BookingDto:
        """
        Store a booking and notify subscribers.

        Route and time fields are copied verbatim from ``booking``; they are
        not checked against the flight's current state.

        Args:
            booking: Booking to store

        Returns:
            The committed booking with its new ID
        """
        entity = self.mapper.map(booking, Booking)

        self.db.add(entity)
        await self.db.commit()
        await self.db.refresh(entity)

        logger.info(
            "Booking created successfully",
            extra={
                "booking_id": entity.id,
                "flight_id": entity.flight_id,
                "user_id": entity.user_id,
                "username": entity.username,
            }
        )

        # Subscriber failures are isolated inside emit and never reach the caller
        self.events.emit(
            BookingCompletedEvent(
                booking_id=entity.id,
                flight_id=entity.flight_id,
                user_id=entity.user_id,
                username=entity.username,
                booking_date=entity.booking_date,
            )
        )

        return self.mapper.map(entity, BookingDto)

    async def get_bookings_by_user(self, user_id: int) -> List[BookingDto]:
        """Get every booking made by a user."""
        stmt = (
            select(Booking)
            .options(selectinload(Booking.flight))
            .where(Booking.user_id == user_id)
            .order_by(Booking.booking_date, Booking.id)
        )
        result = await self.db.execute(stmt)
        return self.mapper.map_many(result.scalars().all(), BookingDto)

    async def get_booking_by_id(self, booking_id: int) -> Optional[BookingDto]:
        """Get booking by ID, or None if it does not exist."""
        stmt = (
            select(Booking)
            .options(selectinload(Booking.flight))
            .where(Booking.id == booking_id)
        )
        result = await self.db.execute(stmt)
        return self.mapper.map(result.scalar_one_or_none(), BookingDto)
