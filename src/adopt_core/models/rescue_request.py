"""
Rescue request model for the adopt-core package.

A regular user asks to become a rescue. An admin approves or rejects the
request; approval creates the Rescue and promotes the user.
"""

import enum
import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..database.types import enum_type
from .base import BaseModel

if TYPE_CHECKING:
    from .user import User


class RescueRequestStatus(enum.Enum):
    """Review status of a rescue request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RescueRequest(BaseModel):
    """Request from a user to register a rescue."""

    __tablename__ = "rescue_requests"

    def __init__(self, **kwargs: Any) -> None:
        """Initialize RescueRequest with default values."""
        if "status" not in kwargs:
            kwargs["status"] = RescueRequestStatus.PENDING
        if "amount_paid" not in kwargs:
            kwargs["amount_paid"] = Decimal("0.00")

        super().__init__(**kwargs)

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Requesting user",
    )

    reason: Mapped[str] = mapped_column(Text, nullable=False, comment="Why")

    rescue_name: Mapped[str] = mapped_column(
        String(150), nullable=False, comment="Proposed rescue name"
    )

    rescue_location: Mapped[str] = mapped_column(
        String(255), nullable=False, comment="Proposed rescue location"
    )

    coupon_code: Mapped[Optional[str]] = mapped_column(
        String(50), nullable=True, comment="Coupon applied to the fee"
    )

    required_fee: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, comment="Fee after any coupon"
    )

    amount_paid: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0.00"), comment="Paid so far"
    )

    status: Mapped[RescueRequestStatus] = mapped_column(
        enum_type(RescueRequestStatus, "rescue_request_status"),
        nullable=False,
        default=RescueRequestStatus.PENDING,
        index=True,
        comment="Review status",
    )

    approval_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, comment="When it was reviewed"
    )

    admin_notes: Mapped[Optional[str]] = mapped_column(
        Text, nullable=True, comment="Reviewer notes"
    )

    rescue_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("rescues.id", ondelete="SET NULL"),
        nullable=True,
        comment="Rescue created on approval",
    )

    user: Mapped["User"] = relationship("User")

    def __repr__(self) -> str:
        return f"<RescueRequest(id={self.id}, status={self.status})>"

    @property
    def is_pending(self) -> bool:
        """Check if the request still awaits review."""
        return self.status == RescueRequestStatus.PENDING
