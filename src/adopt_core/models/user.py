"""
User model for the adopt-core package.

This module contains the User SQLAlchemy model with password-based
authentication, role-based access control and an optional rescue membership.
"""

import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Optional

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..database.types import JSONType, enum_type
from .base import BaseModel

if TYPE_CHECKING:
    from .rescue import Rescue


class UserRole(enum.Enum):
    """Enumeration of user roles in the adoption platform."""

    USER = "user"
    RESCUE = "rescue"
    ADMIN = "admin"


class User(BaseModel):
    """
    User model with role-based access control.

    Rescue-role users carry a ``rescue_id``; the pair (role, rescue_id) is
    what every ownership check in the service layer is based on.
    """

    __tablename__ = "users"

    def __init__(self, **kwargs: Any) -> None:
        """Initialize User with default values."""
        if "role" not in kwargs:
            kwargs["role"] = UserRole.USER
        if "profile_info" not in kwargs or kwargs["profile_info"] is None:
            kwargs["profile_info"] = {}

        super().__init__(**kwargs)

    username: Mapped[str] = mapped_column(
        String(50), nullable=False, unique=True, comment="Public username"
    )

    email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, comment="Login email address"
    )

    password_hash: Mapped[str] = mapped_column(
        String(255), nullable=False, comment="bcrypt password hash"
    )

    role: Mapped[UserRole] = mapped_column(
        enum_type(UserRole, "user_role"),
        nullable=False,
        default=UserRole.USER,
        server_default=UserRole.USER.value,
        index=True,
        comment="User's role in the system",
    )

    rescue_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("rescues.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="Rescue the user works for (rescue role only)",
    )

    profile_info: Mapped[Dict[str, Any]] = mapped_column(
        JSONType, nullable=False, default=dict, comment="Free-form profile data"
    )

    last_login: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, comment="Last successful login"
    )

    reset_token_hash: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True, comment="bcrypt hash of the password reset token"
    )

    reset_token_expires: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, comment="Reset token expiry"
    )

    rescue: Mapped[Optional["Rescue"]] = relationship("Rescue", back_populates="users")

    __table_args__ = (Index("idx_users_role_rescue", "role", "rescue_id"),)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role={self.role})>"

    def is_admin(self) -> bool:
        """Check if user is an administrator."""
        return self.role == UserRole.ADMIN

    def is_rescue(self) -> bool:
        """Check if user is a rescue member with a linked rescue."""
        return self.role == UserRole.RESCUE and self.rescue_id is not None

    def belongs_to_rescue(self, rescue_id: Optional[uuid.UUID]) -> bool:
        """Check if user is a member of the given rescue."""
        return self.is_rescue() and rescue_id is not None and self.rescue_id == rescue_id

    def promote_to_rescue(self, rescue_id: uuid.UUID) -> None:
        """Link the user to a rescue and give them the rescue role."""
        self.role = UserRole.RESCUE
        self.rescue_id = rescue_id

    def demote_to_user(self) -> None:
        """Remove rescue membership and revert to a regular user."""
        self.role = UserRole.USER
        self.rescue_id = None

    def clear_reset_token(self) -> None:
        """Invalidate any outstanding password reset token."""
        self.reset_token_hash = None
        self.reset_token_expires = None
