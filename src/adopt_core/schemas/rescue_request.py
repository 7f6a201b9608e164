"""
Rescue request Pydantic schemas.

A regular user asks to become a rescue; an admin approves or rejects.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.rescue_request import RescueRequestStatus
from ..utils.validation import sanitize_text
from .user import UserResponse


class RescueRequestCreate(BaseModel):
    """Schema for submitting a rescue request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    reason: str = Field(..., description="Why the user wants to run a rescue", min_length=1, max_length=1000)
    rescue_name: str = Field(..., min_length=1, max_length=150)
    rescue_location: str = Field(..., min_length=1, max_length=255)
    coupon_code: Optional[str] = Field(None, max_length=50)

    @field_validator("reason")
    @classmethod
    def strip_markup(cls, v: str) -> str:
        cleaned = sanitize_text(v)
        if not cleaned:
            raise ValueError("Reason cannot be empty")
        return cleaned

    @field_validator("coupon_code")
    @classmethod
    def blank_coupon_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else None


class RescueRequestReview(BaseModel):
    """Schema for an admin decision on a rescue request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    admin_notes: Optional[str] = Field(None, max_length=2000)


class RescueRequestResponse(BaseModel):
    """Schema for rescue request response data."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: UUID
    user_id: UUID
    reason: str
    rescue_name: str
    rescue_location: str
    coupon_code: Optional[str] = None
    required_fee: Decimal
    amount_paid: Decimal
    status: RescueRequestStatus
    approval_date: Optional[datetime] = None
    admin_notes: Optional[str] = None
    rescue_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime
    user: Optional[UserResponse] = None
