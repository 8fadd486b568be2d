"""User model definition."""

from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .booking import Booking


class UserRole(str, Enum):
    """User role enumeration."""
    MANAGER = "Manager"
    USER = "User"


class User(Base):
    """User entity; the password column holds a PBKDF2 hash."""

    __tablename__ = "users"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Account details
    username: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=UserRole.USER.value)
    email: Mapped[str] = mapped_column(String(255), nullable=False)

    # Constraints
    __table_args__ = (
        CheckConstraint("length(username) > 0", name="ck_user_username_not_empty"),
        CheckConstraint("role IN ('Manager', 'User')", name="ck_user_role_valid"),
    )

    # Relationships
    bookings: Mapped[list["Booking"]] = relationship(
        "Booking",
        back_populates="user",
        passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role={self.role})>"
