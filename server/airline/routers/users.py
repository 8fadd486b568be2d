"""User listing router for managers."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..core.config import settings
from ..core.dependencies import ManagerOnly, get_flight_service
from ..schemas.common import PROBLEM_RESPONSES, Page
from ..schemas.user import CurrentUser, UserDto
from ..services.flight_service import FlightService
from ..services.listing import MAX_PAGE_SIZE, filter_by_substring, paginate

router = APIRouter(prefix="/v1/users", tags=["users"], responses=PROBLEM_RESPONSES)

FLIGHT_SERVICE_DEPENDENCY = Depends(get_flight_service)


@router.get("", response_model=Page[UserDto])
async def list_users(
    search: Optional[str] = Query(None, description="Substring of the username"),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=MAX_PAGE_SIZE),
    flight_service: FlightService = FLIGHT_SERVICE_DEPENDENCY,
    user: CurrentUser = ManagerOnly,
) -> Page[UserDto]:
    """List registered users from the cached user list (Manager only)."""
    users = await flight_service.get_users()
    users = filter_by_substring(users, "username", search)
    return paginate(users, page, page_size)
