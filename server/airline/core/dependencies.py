"""FastAPI dependencies for database, shared state, services and authentication."""

from typing import AsyncGenerator, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import UserRole
from ..schemas.user import CurrentUser
from ..services.booking_service import BookingService
from ..services.events import BookingEvents
from ..services.flight_service import FlightService
from ..services.user_service import UserService
from .cache import Cache
from .config import settings
from .database import get_async_session
from .exceptions import AuthenticationError, AuthorizationError
from .mapping import Mapper
from .security import decode_access_token


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Database dependency that provides async database sessions.

    Yields:
        AsyncSession: Database session
    """
    async for session in get_async_session():
        yield session


def get_cache(request: Request) -> Cache:
    """Process-wide lookaside cache created in the lifespan."""
    return request.app.state.cache


def get_mapper(request: Request) -> Mapper:
    return request.app.state.mapper


def get_booking_events(request: Request) -> BookingEvents:
    return request.app.state.booking_events


DatabaseSession = Depends(get_db)
CacheDependency = Depends(get_cache)
MapperDependency = Depends(get_mapper)
EventsDependency = Depends(get_booking_events)


def get_flight_service(
    db: AsyncSession = DatabaseSession,
    cache: Cache = CacheDependency,
    mapper: Mapper = MapperDependency,
) -> FlightService:
    return FlightService(db, cache, mapper)


def get_booking_service(
    db: AsyncSession = DatabaseSession,
    mapper: Mapper = MapperDependency,
    events: BookingEvents = EventsDependency,
) -> BookingService:
    return BookingService(db, mapper, events)


def get_user_service(
    db: AsyncSession = DatabaseSession,
    cache: Cache = CacheDependency,
    mapper: Mapper = MapperDependency,
) -> UserService:
    return UserService(db, mapper, cache)


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None

    try:
        scheme, token = authorization.split()
    except ValueError:
        raise AuthenticationError(detail="Invalid authorization header format")

    if scheme.lower() != "bearer":
        raise AuthenticationError(detail="Invalid authentication scheme")
    return token


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None, alias="Authorization"),
) -> CurrentUser:
    """
    Authentication dependency that validates Bearer tokens.

    The ``Authorization`` header wins; without it the token is read from the
    login cookie.

    Returns:
        CurrentUser: Identity from the validated token

    Raises:
        AuthenticationError: If the token is missing or invalid
    """
    token = _bearer_token(authorization) or request.cookies.get(settings.jwt_cookie_name)
    if not token:
        raise AuthenticationError(detail="Authorization header missing")

    payload = decode_access_token(token)

    try:
        return CurrentUser(
            user_id=int(payload["sub"]),
            username=payload["username"],
            role=payload["role"],
        )
    except ValueError as e:
        raise AuthenticationError(detail="Invalid token payload") from e


RequiredAuth = Depends(get_current_user)


def require_roles(*roles: UserRole):
    """
    Build a dependency that only admits the given roles.

    Raises:
        AuthorizationError: If the caller's role is not listed
    """
    allowed = {UserRole(role) for role in roles}

    async def checker(user: CurrentUser = RequiredAuth) -> CurrentUser:
        if user.role not in allowed:
            raise AuthorizationError(
                detail=f"Role '{user.role.value}' may not access this resource",
                required_roles=sorted(role.value for role in allowed),
            )
        return user

    return checker


ManagerOnly = Depends(require_roles(UserRole.MANAGER))
AnyRole = Depends(require_roles(UserRole.MANAGER, UserRole.USER))
