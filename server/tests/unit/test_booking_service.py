"""Unit tests for the booking service and booking-completed events."""

from datetime import datetime

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from airline.models import Booking
from airline.schemas.booking import BookingDto
from airline.services.booking_service import BookingService
from airline.services.events import BookingCompletedEvent, BookingEvents


def _booking_for(flight, user, **overrides) -> BookingDto:
    data = dict(
        flight_id=flight.id,
        user_id=user.id,
        username=user.username,
        from_location=flight.departure,
        to_location=flight.destination,
        departure_time=flight.departure_time,
        arrival_time=flight.arrival_time,
        booking_date=datetime(2030, 5, 1, 12, 0),
    )
    data.update(overrides)
    return BookingDto(**data)


@pytest.mark.asyncio
async def test_add_booking_returns_committed_booking(test_session, mapper, flight, traveller):
    service = BookingService(test_session, mapper)

    booking = await service.add_booking(_booking_for(flight, traveller))

    assert booking.id is not None
    assert booking.flight_id == flight.id
    assert booking.user_id == traveller.id
    assert booking.username == "traveller"


@pytest.mark.asyncio
async def test_booking_keeps_route_given_at_booking_time(test_session, mapper, flight, traveller):
    """Route fields are stored as passed, not re-read from the flight."""
    service = BookingService(test_session, mapper)

    await service.add_booking(_booking_for(
        flight,
        traveller,
        from_location="Somewhere",
        to_location="Elsewhere",
        departure_time=datetime(2029, 1, 1, 6, 0),
        arrival_time=datetime(2029, 1, 1, 7, 0),
    ))
    flight.departure = "Changed"
    await test_session.commit()

    bookings = await service.get_bookings_by_user(traveller.id)

    assert len(bookings) == 1
    assert bookings[0].from_location == "Somewhere"
    assert bookings[0].to_location == "Elsewhere"
    assert bookings[0].departure_time == datetime(2029, 1, 1, 6, 0)
    assert bookings[0].arrival_time == datetime(2029, 1, 1, 7, 0)


@pytest.mark.asyncio
async def test_get_bookings_by_user_filters(test_session, mapper, flight, traveller, other_traveller):
    service = BookingService(test_session, mapper)
    await service.add_booking(_booking_for(flight, traveller))
    await service.add_booking(_booking_for(flight, other_traveller))
    await service.add_booking(_booking_for(flight, traveller))

    mine = await service.get_bookings_by_user(traveller.id)

    assert len(mine) == 2
    assert {b.user_id for b in mine} == {traveller.id}


@pytest.mark.asyncio
async def test_get_booking_by_id(test_session, mapper, flight, traveller):
    service = BookingService(test_session, mapper)
    created = await service.add_booking(_booking_for(flight, traveller))

    found = await service.get_booking_by_id(created.id)

    assert found.id == created.id
    assert await service.get_booking_by_id(created.id + 100) is None


@pytest.mark.asyncio
async def test_booking_event_emitted_after_commit(test_session, mapper, flight, traveller):
    events = BookingEvents()
    received = []
    events.subscribe(received.append)
    service = BookingService(test_session, mapper, events)

    booking = await service.add_booking(_booking_for(flight, traveller))

    assert received == [
        BookingCompletedEvent(
            booking_id=booking.id,
            flight_id=flight.id,
            user_id=traveller.id,
            username="traveller",
            booking_date=datetime(2030, 5, 1, 12, 0),
        )
    ]


@pytest.mark.asyncio
async def test_failing_subscriber_does_not_undo_booking(test_session, mapper, flight, traveller):
    events = BookingEvents()
    received = []

    def broken(event):
        raise RuntimeError("mail server down")

    events.subscribe(broken)
    events.subscribe(received.append)
    service = BookingService(test_session, mapper, events)

    booking = await service.add_booking(_booking_for(flight, traveller))

    rows = (await test_session.execute(select(Booking))).scalars().all()
    assert [row.id for row in rows] == [booking.id]
    assert len(received) == 1


@pytest.mark.asyncio
async def test_booking_for_unknown_flight_rejected_by_store(test_session, mapper, flight, traveller):
    events = BookingEvents()
    received = []
    events.subscribe(received.append)
    service = BookingService(test_session, mapper, events)

    with pytest.raises(IntegrityError):
        await service.add_booking(_booking_for(flight, traveller, flight_id=flight.id + 999))

    assert received == []


def test_emit_counts_failures_and_keeps_order():
    events = BookingEvents()
    calls = []

    def first(event):
        calls.append("first")

    def second(event):
        calls.append("second")
        raise ValueError("boom")

    def third(event):
        calls.append("third")

    for handler in (first, second, third):
        events.subscribe(handler)

    event = BookingCompletedEvent(1, 2, 3, "u", datetime(2030, 1, 1))
    failures = events.emit(event)

    assert failures == 1
    assert calls == ["first", "second", "third"]


def test_unsubscribe():
    events = BookingEvents()
    calls = []
    events.subscribe(calls.append)

    events.unsubscribe(calls.append)
    events.unsubscribe(calls.append)
    events.emit(BookingCompletedEvent(1, 2, 3, None, datetime(2030, 1, 1)))

    assert calls == []
    assert events.handlers == ()
