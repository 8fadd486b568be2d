"""Unit tests for the cache-backed flight service."""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from airline.core.cache import CacheKeys, LookasideCache
from airline.models import Booking, Flight
from airline.schemas.flight import FlightBase
from airline.services.flight_service import FlightService


class RecordingCache(LookasideCache):
    """Lookaside cache that remembers every lookup and removal."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.hits = []
        self.misses = []
        self.removed = []

    def get(self, key):
        value = super().get(key)
        (self.misses if value is None else self.hits).append(key)
        return value

    def remove(self, key):
        self.removed.append(key)
        super().remove(key)


@pytest.fixture
def recording_cache():
    return RecordingCache(sliding_expiration=300)


@pytest.fixture
def service(test_session, recording_cache, mapper):
    return FlightService(test_session, recording_cache, mapper)


def _flight(number: str, departure: str = "Lisbon", destination: str = "London", price: float = 100.0) -> FlightBase:
    departs = datetime(2030, 6, 1, 8, 0)
    return FlightBase(
        flight_number=number,
        departure=departure,
        destination=destination,
        departure_time=departs,
        arrival_time=departs + timedelta(hours=2),
        price=price,
    )


@pytest.mark.asyncio
async def test_get_all_populates_cache_and_returns_same_list(service, recording_cache, flight):
    first = await service.get_all()
    second = await service.get_all()

    assert [f.flight_number for f in first] == ["FL001"]
    assert second is first
    assert recording_cache.misses == ["flights"]
    assert recording_cache.hits == ["flights"]


@pytest.mark.asyncio
async def test_get_by_id_consistent_with_store_after_get_all(service, test_session, flight):
    await service.get_all()

    dto = await service.get_by_id(flight.id)
    row = await test_session.get(Flight, flight.id)

    assert dto.id == row.id
    assert dto.flight_number == row.flight_number
    assert dto.departure == row.departure
    assert dto.price == row.price


@pytest.mark.asyncio
async def test_get_by_id_missing_is_not_cached(service, recording_cache):
    assert await service.get_by_id(12345) is None
    assert await service.get_by_id(12345) is None

    assert CacheKeys.flight(12345) not in recording_cache
    assert recording_cache.misses == ["flight_12345", "flight_12345"]


@pytest.mark.asyncio
async def test_get_users_omits_passwords(service, recording_cache, manager, traveller):
    users = await service.get_users()

    assert sorted(u.username for u in users) == ["manager", "traveller"]
    assert all("password" not in u.model_dump() for u in users)
    assert CacheKeys.USERS in recording_cache


@pytest.mark.asyncio
async def test_add_invalidates_flights_only(service, recording_cache, flight):
    await service.get_all()
    await service.get_by_id(flight.id)

    created = await service.add(_flight("FL002"))

    assert created.id is not None
    assert recording_cache.removed == ["flights"]
    assert CacheKeys.flight(flight.id) in recording_cache

    numbers = [f.flight_number for f in await service.get_all()]
    assert sorted(numbers) == ["FL001", "FL002"]


@pytest.mark.asyncio
async def test_get_by_id_of_new_flight_is_a_miss(service, recording_cache):
    created = await service.add(_flight("FL003"))

    dto = await service.get_by_id(created.id)

    assert dto.flight_number == "FL003"
    assert recording_cache.misses == [CacheKeys.flight(created.id)]


@pytest.mark.asyncio
async def test_update_existing_invalidates_both_keys(service, recording_cache, flight):
    await service.get_all()
    await service.get_by_id(flight.id)

    updated = await service.update(flight.id, _flight("FL999", departure="Porto", destination="Madrid"))

    assert updated is True
    assert recording_cache.removed == ["flights", CacheKeys.flight(flight.id)]

    dto = await service.get_by_id(flight.id)
    assert dto.flight_number == "FL999"
    assert dto.departure == "Porto"
    assert dto.destination == "Madrid"
    assert [f.flight_number for f in await service.get_all()] == ["FL999"]


@pytest.mark.asyncio
async def test_update_keeps_times_and_price(service, flight):
    """Only the number and route are editable; schedule and price are kept."""
    changed = _flight("FL001", price=999.0)
    changed = changed.model_copy(update={
        "departure_time": datetime(2031, 1, 1, 0, 0),
        "arrival_time": datetime(2031, 1, 1, 5, 0),
    })

    await service.update(flight.id, changed)
    dto = await service.get_by_id(flight.id)

    assert dto.price == 155.0
    assert dto.departure_time == datetime(2030, 6, 1, 8, 0)
    assert dto.arrival_time == datetime(2030, 6, 1, 10, 30)


@pytest.mark.asyncio
async def test_update_missing_is_silent_noop(service, recording_cache, test_session, flight):
    await service.get_all()

    updated = await service.update(4242, _flight("FL404"))

    assert updated is False
    assert recording_cache.removed == []
    assert CacheKeys.FLIGHTS in recording_cache

    rows = (await test_session.execute(select(Flight))).scalars().all()
    assert [row.flight_number for row in rows] == ["FL001"]


@pytest.mark.asyncio
async def test_delete_removes_row_and_invalidates(service, recording_cache, flight):
    await service.get_all()
    await service.get_by_id(flight.id)

    await service.delete(flight.id)

    assert recording_cache.removed == ["flights", CacheKeys.flight(flight.id)]
    assert await service.get_by_id(flight.id) is None
    assert await service.get_all() == []


@pytest.mark.asyncio
async def test_delete_missing_still_invalidates(service, recording_cache):
    await service.delete(777)

    assert recording_cache.removed == ["flights", "flight_777"]


@pytest.mark.asyncio
async def test_delete_cascades_to_bookings(service, test_session, flight, traveller):
    test_session.add(Booking(
        flight_id=flight.id,
        user_id=traveller.id,
        from_location=flight.departure,
        to_location=flight.destination,
        departure_time=flight.departure_time,
        arrival_time=flight.arrival_time,
        username=traveller.username,
    ))
    await test_session.commit()

    await service.delete(flight.id)

    remaining = (await test_session.execute(select(Booking))).scalars().all()
    assert remaining == []


@pytest.mark.asyncio
async def test_suggestions_empty_term_skips_store(recording_cache, mapper):
    db = AsyncMock()
    service = FlightService(db, recording_cache, mapper)

    assert await service.suggestions("") == []
    db.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_suggestions_case_insensitive_substring(service):
    for number in ("FL001", "FL002", "AA123"):
        await service.add(_flight(number))

    assert sorted(await service.suggestions("FL")) == ["FL001", "FL002"]
    assert sorted(await service.suggestions("fl")) == ["FL001", "FL002"]
    assert await service.suggestions("a12") == ["AA123"]


@pytest.mark.asyncio
async def test_suggestions_distinct_and_capped(test_session, recording_cache, mapper):
    service = FlightService(test_session, recording_cache, mapper)
    for i in range(15):
        await service.add(_flight(f"FL{i:03d}"))
    await service.add(_flight("FL000"))

    results = await service.suggestions("FL")

    assert len(results) == 10
    assert len(set(results)) == 10


@pytest.mark.asyncio
async def test_suggestions_treats_wildcards_literally(service):
    await service.add(_flight("FL001"))

    assert await service.suggestions("%") == []
    assert await service.suggestions("_") == []


@pytest.mark.asyncio
async def test_store_errors_propagate_without_caching(recording_cache, mapper):
    db = AsyncMock()
    db.execute.side_effect = OperationalError("SELECT", {}, Exception("connection refused"))
    service = FlightService(db, recording_cache, mapper)

    with pytest.raises(OperationalError):
        await service.get_all()

    assert CacheKeys.FLIGHTS not in recording_cache
    assert db.execute.await_count == 1


@pytest.mark.asyncio
async def test_suggestions_explicit_zero_limit_is_kept(test_session, recording_cache, mapper):
    service = FlightService(test_session, recording_cache, mapper, suggestions_limit=0)
    await service.add(_flight("FL001"))

    assert service.suggestions_limit == 0
    assert await service.suggestions("FL") == []
