"""
Adoption application model for the adopt-core package.
"""

import enum
import uuid
from typing import TYPE_CHECKING, Any, Dict, Optional

from sqlalchemy import ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..database.types import JSONType, enum_type
from .base import BaseModel

if TYPE_CHECKING:
    from .pet import Pet
    from .user import User


class ApplicationStatus(enum.Enum):
    """Canonical adoption application statuses."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    UNSUCCESSFUL = "unsuccessful"

    @classmethod
    def parse(cls, value: Any) -> "ApplicationStatus":
        """
        Parse a status value, accepting the legacy review-screen aliases.

        ``approved`` maps to ACCEPTED and ``rejected`` to UNSUCCESSFUL.

        Raises:
            ValueError: If the value is not a known status or alias
        """
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        normalized = STATUS_ALIASES.get(normalized, normalized)
        return cls(normalized)


STATUS_ALIASES = {
    "approved": ApplicationStatus.ACCEPTED.value,
    "rejected": ApplicationStatus.UNSUCCESSFUL.value,
}


class Application(BaseModel):
    """Adoption application submitted by a user for a pet."""

    __tablename__ = "applications"

    def __init__(self, **kwargs: Any) -> None:
        """Initialize Application with default values."""
        if "status" not in kwargs:
            kwargs["status"] = ApplicationStatus.PENDING
        if "form_data" not in kwargs or kwargs["form_data"] is None:
            kwargs["form_data"] = {}

        super().__init__(**kwargs)

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Applicant",
    )

    pet_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("pets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Pet applied for",
    )

    status: Mapped[ApplicationStatus] = mapped_column(
        enum_type(ApplicationStatus, "application_status"),
        nullable=False,
        default=ApplicationStatus.PENDING,
        index=True,
        comment="Review status",
    )

    form_data: Mapped[Dict[str, Any]] = mapped_column(
        JSONType, nullable=False, default=dict, comment="Submitted application form"
    )

    user: Mapped["User"] = relationship("User")

    pet: Mapped[Optional["Pet"]] = relationship("Pet")

    __table_args__ = (Index("idx_applications_pet_status", "pet_id", "status"),)

    def __repr__(self) -> str:
        return f"<Application(id={self.id}, pet_id={self.pet_id}, status={self.status})>"
