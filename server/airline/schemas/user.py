"""User and authentication Pydantic schemas."""

from pydantic import BaseModel, Field

from ..models.user import UserRole


class UserDto(BaseModel):
    """User transport object; never carries the password hash."""

    id: int = Field(..., description="User ID")
    username: str = Field(..., description="Unique username")
    role: UserRole = Field(..., description="Manager or User")
    email: str = Field(..., description="Email address")

    model_config = {"from_attributes": True}


class RegisterRequest(BaseModel):
    """Request schema for registering an account."""

    username: str = Field(..., min_length=4, max_length=64, description="Username")
    password: str = Field(..., min_length=6, max_length=128, description="Plain-text password")
    email: str = Field(
        ...,
        max_length=255,
        pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$",
        description="Email address"
    )
    role: UserRole = Field(..., description="Manager or User")


class LoginRequest(BaseModel):
    """Request schema for signing in."""

    username: str = Field(..., min_length=1, description="Username")
    password: str = Field(..., min_length=1, description="Password")


class TokenResponse(BaseModel):
    """Access token issued on login."""

    access_token: str = Field(..., description="Signed JWT")
    token_type: str = Field("bearer", description="Token type for the Authorization header")
    expires_in: int = Field(..., description="Lifetime in seconds")
    username: str = Field(..., description="Signed-in username")
    role: UserRole = Field(..., description="Signed-in role")


class CurrentUser(BaseModel):
    """Identity resolved from a validated access token."""

    user_id: int
    username: str
    role: UserRole

    @property
    def is_manager(self) -> bool:
        return self.role == UserRole.MANAGER
