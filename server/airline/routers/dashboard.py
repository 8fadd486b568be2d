"""Manager dashboard router."""

from fastapi import APIRouter, Depends

from ..core.dependencies import ManagerOnly, get_flight_service
from ..schemas.common import PROBLEM_RESPONSES
from ..schemas.dashboard import DashboardResponse
from ..schemas.user import CurrentUser
from ..services.flight_service import FlightService

router = APIRouter(prefix="/v1/dashboard", tags=["dashboard"], responses=PROBLEM_RESPONSES)

FLIGHT_SERVICE_DEPENDENCY = Depends(get_flight_service)


@router.get("", response_model=DashboardResponse)
async def dashboard(
    flight_service: FlightService = FLIGHT_SERVICE_DEPENDENCY,
    user: CurrentUser = ManagerOnly,
) -> DashboardResponse:
    """Flights and users overview, both served from the cache when warm."""
    flights = await flight_service.get_all()
    users = await flight_service.get_users()
    return DashboardResponse(
        flights=flights,
        users=users,
        total_flights=len(flights),
        total_users=len(users),
    )
