"""User service for registration and sign-in."""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.cache import Cache, CacheKeys, NullCache
from ..core.exceptions import ConflictError
from ..core.mapping import Mapper
from ..core.security import hash_password, verify_password
from ..models.user import User
from ..schemas.user import RegisterRequest, UserDto

logger = logging.getLogger(__name__)


class UserService:
    """Service for user accounts."""

    def __init__(self, db: AsyncSession, mapper: Mapper, cache: Optional[Cache] = None):
        self.db = db
        self.mapper = mapper
        self.cache = cache if cache is not None else NullCache()

    async def get_user_by_username(self, username: str) -> Optional[User]:
        """
        Get user by username.

        Args:
            username: Username to search for

        Returns:
            User if found, None otherwise
        """
        stmt = select(User).where(User.username == username)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def add_user(self, user: User) -> User:
        """Insert a user whose password is already hashed."""
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)

        # The cached user list would otherwise miss the new account
        self.cache.remove(CacheKeys.USERS)
        return user

    async def register(self, request: RegisterRequest) -> UserDto:
        """
        Create an account.

        Raises:
            ConflictError: If the username is taken
        """
        existing = await self.get_user_by_username(request.username)
        if existing:
            logger.warning(
                "Registration failed - username already exists",
                extra={"username": request.username}
            )
            raise ConflictError(
                detail=f"Username '{request.username}' already exists",
                conflicting_resource={"username": request.username}
            )

        user = User(
            username=request.username,
            password=hash_password(request.password),
            role=request.role.value,
            email=request.email,
        )

        try:
            await self.add_user(user)
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(
                "Registration failed due to integrity constraint",
                extra={"username": request.username, "error": str(e)}
            )
            raise ConflictError(
                detail=f"Username '{request.username}' already exists",
                conflicting_resource={"username": request.username}
            ) from e

        logger.info(
            "User registered successfully",
            extra={"user_id": user.id, "username": user.username, "role": user.role}
        )
        return self.mapper.map(user, UserDto)

    async def authenticate(self, username: str, password: str) -> Optional[User]:
        """Return the user when the password matches, None otherwise."""
        user = await self.get_user_by_username(username)
        if user is None:
            logger.info("Login failed - unknown username", extra={"username": username})
            return None

        if not verify_password(password, user.password):
            logger.info("Login failed - wrong password", extra={"username": username})
            return None

        return user
