"""Flight router for listing, lookup and manager edits."""

import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ..core.config import settings
from ..core.dependencies import AnyRole, ManagerOnly, get_flight_service
from ..core.exceptions import NotFoundError
from ..schemas.common import PROBLEM_RESPONSES, Page
from ..schemas.flight import FlightDto, FlightRequest, FlightUpdateResult
from ..schemas.user import CurrentUser
from ..services.flight_service import FlightService
from ..services.listing import MAX_PAGE_SIZE, filter_by_substring, paginate, sort_items

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/flights", tags=["flights"], responses=PROBLEM_RESPONSES)

FLIGHT_SERVICE_DEPENDENCY = Depends(get_flight_service)


@router.get("", response_model=Page[FlightDto])
async def list_flights(
    search: Optional[str] = Query(None, description="Substring of the flight number"),
    sort: Optional[str] = Query(None, description="Field to sort by, e.g. price"),
    order: Literal["asc", "desc"] = Query("asc", description="Sort direction"),
    page: int = Query(1, ge=1, description="1-based page number"),
    page_size: int = Query(settings.default_page_size, ge=1, le=MAX_PAGE_SIZE),
    flight_service: FlightService = FLIGHT_SERVICE_DEPENDENCY,
    user: CurrentUser = AnyRole,
) -> Page[FlightDto]:
    """
    List flights from the cached flight list.

    Filtering, sorting and paging run over the cached list, so they never
    hit the database on a warm cache.
    """
    flights = await flight_service.get_all()
    flights = filter_by_substring(flights, "flight_number", search)
    flights = sort_items(flights, sort, order)
    return paginate(flights, page, page_size)


@router.get("/suggestions", response_model=List[str])
async def flight_suggestions(
    term: str = Query("", description="Part of a flight number"),
    flight_service: FlightService = FLIGHT_SERVICE_DEPENDENCY,
    user: CurrentUser = AnyRole,
) -> List[str]:
    """Autocomplete flight numbers containing ``term``."""
    return await flight_service.suggestions(term)


@router.get("/{flight_id}", response_model=FlightDto)
async def get_flight(
    flight_id: int,
    flight_service: FlightService = FLIGHT_SERVICE_DEPENDENCY,
    user: CurrentUser = AnyRole,
) -> FlightDto:
    flight = await flight_service.get_by_id(flight_id)
    if flight is None:
        raise NotFoundError(resource_type="flight", resource_id=str(flight_id))
    return flight


@router.post("", response_model=FlightDto, status_code=status.HTTP_201_CREATED)
async def create_flight(
    request: FlightRequest,
    flight_service: FlightService = FLIGHT_SERVICE_DEPENDENCY,
    user: CurrentUser = ManagerOnly,
) -> FlightDto:
    """Create a flight (Manager only)."""
    return await flight_service.add(request)


@router.put("/{flight_id}", response_model=FlightUpdateResult)
async def update_flight(
    flight_id: int,
    request: FlightRequest,
    flight_service: FlightService = FLIGHT_SERVICE_DEPENDENCY,
    user: CurrentUser = ManagerOnly,
) -> FlightUpdateResult:
    """
    Edit a flight (Manager only).

    Only the flight number, departure and destination change. An unknown ID
    is not an error: the response reports ``updated: false``.
    """
    updated = await flight_service.update(flight_id, request)
    return FlightUpdateResult(id=flight_id, updated=updated)


@router.delete("/{flight_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_flight(
    flight_id: int,
    flight_service: FlightService = FLIGHT_SERVICE_DEPENDENCY,
    user: CurrentUser = ManagerOnly,
) -> Response:
    """Delete a flight and its bookings (Manager only)."""
    await flight_service.delete(flight_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
