"""
Coupon code Pydantic schemas.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models.coupon import CouponAppliesTo, DiscountType

MAX_PERCENTAGE = Decimal("100")


def _normalize_code(v: str) -> str:
    code = v.strip().upper()
    if not code.replace("-", "").replace("_", "").isalnum():
        raise ValueError("Coupon code may only contain letters, digits, '-' and '_'")
    return code


class CouponCreate(BaseModel):
    """Schema for creating a coupon code (admin)."""

    model_config = ConfigDict(use_enum_values=True, str_strip_whitespace=True)

    code: str = Field(..., description="Unique code", min_length=1, max_length=50)
    discount_type: DiscountType = Field(..., description="percentage or fixed_amount")
    value: Decimal = Field(..., description="Percent or currency amount", gt=0, decimal_places=2)
    applies_to: CouponAppliesTo = Field(..., description="Where the code can be used")
    max_uses: Optional[int] = Field(None, description="Usage cap; unlimited if omitted", ge=1)
    expiry_date: Optional[datetime] = Field(None, description="Expiry instant")

    @field_validator("code")
    @classmethod
    def validate_code(cls, v: str) -> str:
        """Codes are stored upper-cased."""
        return _normalize_code(v)

    @model_validator(mode="after")
    def validate_percentage(self) -> "CouponCreate":
        """A percentage discount cannot exceed 100."""
        if (
            self.discount_type == DiscountType.PERCENTAGE.value
            and self.value > MAX_PERCENTAGE
        ):
            raise ValueError("Percentage discount cannot exceed 100")
        return self


class CouponUpdate(BaseModel):
    """Schema for partially updating a coupon code (admin)."""

    model_config = ConfigDict(use_enum_values=True)

    discount_type: Optional[DiscountType] = None
    value: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    applies_to: Optional[CouponAppliesTo] = None
    max_uses: Optional[int] = Field(None, ge=1)
    expiry_date: Optional[datetime] = None
    is_active: Optional[bool] = None


class CouponResponse(BaseModel):
    """Schema for coupon response data."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: UUID
    code: str
    discount_type: DiscountType
    value: Decimal
    applies_to: CouponAppliesTo
    max_uses: Optional[int] = None
    times_used: int
    expiry_date: Optional[datetime] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class DiscountBreakdown(BaseModel):
    """How a coupon changes a fee."""

    original_fee: Decimal
    discount_applied: Decimal
    final_fee: Decimal
    discount_percentage: Decimal


class CouponValidationResponse(BaseModel):
    """Result of validating a coupon code."""

    valid: bool
    message: Optional[str] = None
    coupon: Optional[CouponResponse] = None
    discount: Optional[DiscountBreakdown] = None
