"""Authentication router for registration, login and logout."""

import logging

from fastapi import APIRouter, Depends, Response, status

from ..core.config import settings
from ..core.dependencies import get_user_service
from ..core.exceptions import ValidationError
from ..core.security import create_access_token
from ..schemas.common import PROBLEM_RESPONSES
from ..schemas.user import LoginRequest, RegisterRequest, TokenResponse, UserDto
from ..services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/auth", tags=["auth"], responses=PROBLEM_RESPONSES)

USER_SERVICE_DEPENDENCY = Depends(get_user_service)


@router.post("/register", response_model=UserDto, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    user_service: UserService = USER_SERVICE_DEPENDENCY,
) -> UserDto:
    """
    Register a new account.

    Returns 409 when the username is already taken.
    """
    return await user_service.register(request)


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    response: Response,
    user_service: UserService = USER_SERVICE_DEPENDENCY,
) -> TokenResponse:
    """
    Sign in and receive an access token.

    The token is returned in the body and also set as an httpOnly cookie so
    browser clients can authenticate without handling it.
    """
    user = await user_service.authenticate(request.username, request.password)
    if user is None:
        raise ValidationError(detail="Invalid username or password")

    token = create_access_token(user.id, user.username, user.role)
    expires_in = settings.jwt_expire_minutes * 60

    response.set_cookie(
        key=settings.jwt_cookie_name,
        value=token,
        max_age=expires_in,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )

    logger.info(
        "User logged in",
        extra={"user_id": user.id, "username": user.username, "role": user.role}
    )

    return TokenResponse(
        access_token=token,
        expires_in=expires_in,
        username=user.username,
        role=user.role,
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(response: Response) -> None:
    """Delete the login cookie. Bearer tokens stay valid until they expire."""
    response.delete_cookie(key=settings.jwt_cookie_name)
