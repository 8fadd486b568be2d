"""Flight service: cache-backed reads and writes for flights and users."""

import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.cache import Cache, CacheKeys
from ..core.config import settings
from ..core.mapping import Mapper
from ..core.observability import metrics_collector
from ..models.flight import Flight
from ..models.user import User
from ..schemas.flight import FlightBase, FlightDto
from ..schemas.user import UserDto

logger = logging.getLogger(__name__)


class FlightService:
    """
    Service for flight and user lookups with a lookaside cache.

    Reads consult the cache first and populate it on a miss. Writes go to the
    database and then remove the affected keys. Database errors propagate to
    the caller unchanged.
    """

    def __init__(
        self,
        db: AsyncSession,
        cache: Cache,
        mapper: Mapper,
        suggestions_limit: Optional[int] = None,
    ):
        self.db = db
        self.cache = cache
        self.mapper = mapper
        self.suggestions_limit = settings.suggestions_limit if suggestions_limit is None else suggestions_limit

    async def get_all(self) -> List[FlightDto]:
        """
        Get all flights.

        Returns:
            The cached list on a hit (the same object, not a copy), otherwise
            a freshly loaded list that is then cached
        """
        cached = self.cache.get(CacheKeys.FLIGHTS)
        if cached is not None:
            return cached

        result = await self.db.execute(select(Flight))
        flights = self.mapper.map_many(result.scalars().all(), FlightDto)
        self.cache.set(CacheKeys.FLIGHTS, flights)

        logger.debug("Flights loaded from store", extra={"count": len(flights)})
        return flights

    async def get_users(self) -> List[UserDto]:
        """Get all users as transport objects, cached like ``get_all``."""
        cached = self.cache.get(CacheKeys.USERS)
        if cached is not None:
            return cached

        result = await self.db.execute(select(User))
        users = self.mapper.map_many(result.scalars().all(), UserDto)
        self.cache.set(CacheKeys.USERS, users)

        logger.debug("Users loaded from store", extra={"count": len(users)})
        return users

    async def get_by_id(self, flight_id: int) -> Optional[FlightDto]:
        """
        Get flight by ID.

        Args:
            flight_id: Flight ID to search for

        Returns:
            Flight if found, None otherwise. Absence is not cached.
        """
        key = CacheKeys.flight(flight_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        flight = await self.db.get(Flight, flight_id)
        if flight is None:
            return None

        dto = self.mapper.map(flight, FlightDto)
        self.cache.set(key, dto)
        return dto

    async def add(self, flight: FlightBase) -> FlightDto:
        """
        Create a new flight.

        Only the ``flights`` list is invalidated; no per-id entry can exist
        for an id the database has not handed out yet.
        """
        entity = self.mapper.map(flight, Flight)
        self.db.add(entity)
        await self.db.commit()
        await self.db.refresh(entity)

        self.cache.remove(CacheKeys.FLIGHTS)
        metrics_collector.record_flight_write("create")

        logger.info(
            "Flight created successfully",
            extra={
                "flight_id": entity.id,
                "flight_number": entity.flight_number,
            }
        )

        return self.mapper.map(entity, FlightDto)

    async def update(self, flight_id: int, flight: FlightBase) -> bool:
        """
        Edit an existing flight.

        Only the flight number, departure and destination are overwritten;
        times and price keep their stored values.

        Returns:
            False when no flight has this ID. Nothing is written and the
            cache is left alone in that case.
        """
        entity = await self.db.get(Flight, flight_id)
        if entity is None:
            logger.info("Flight update skipped - flight not found", extra={"flight_id": flight_id})
            return False

        entity.flight_number = flight.flight_number
        entity.departure = flight.departure
        entity.destination = flight.destination
        await self.db.commit()

        self.cache.remove(CacheKeys.FLIGHTS)
        self.cache.remove(CacheKeys.flight(flight_id))
        metrics_collector.record_flight_write("update")

        logger.info(
            "Flight updated successfully",
            extra={
                "flight_id": flight_id,
                "flight_number": entity.flight_number,
            }
        )
        return True

    async def delete(self, flight_id: int) -> None:
        """
        Delete a flight with a direct DELETE statement.

        Both cache keys are removed whether or not a row was deleted.
        """
        result = await self.db.execute(
            delete(Flight)
            .where(Flight.id == flight_id)
        )
        await self.db.commit()

        self.cache.remove(CacheKeys.FLIGHTS)
        self.cache.remove(CacheKeys.flight(flight_id))
        metrics_collector.record_flight_write("delete")

        logger.info(
            "Flight delete executed",
            extra={"flight_id": flight_id, "rows_deleted": result.rowcount}
        )

    async def suggestions(self, term: str) -> List[str]:
        """
        Flight numbers containing ``term``, case-insensitively.

        Returns at most ``suggestions_limit`` distinct values. An empty term
        returns an empty list without querying the database.
        """
        if not term:
            return []

        stmt = (
            select(Flight.flight_number)
            .where(Flight.flight_number.icontains(term, autoescape=True))
            .distinct()
            .order_by(Flight.flight_number)
            .limit(self.suggestions_limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
