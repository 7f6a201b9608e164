"""
Coupon code model for the adopt-core package.

Coupons discount either the one-off rescue registration fee or the pet
promotion fee. Evaluation rules live in ``adopt_core.services.coupons``.
"""

import enum
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from ..database.types import enum_type
from .base import BaseModel


class DiscountType(enum.Enum):
    """How a coupon's value is applied to a fee."""

    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"


class CouponAppliesTo(enum.Enum):
    """Fee context a coupon may be redeemed against."""

    RESCUE_FEE = "rescue_fee"
    PROMOTION = "promotion"


class CouponCode(BaseModel):
    """Discount coupon with optional usage cap and expiry."""

    __tablename__ = "coupon_codes"

    def __init__(self, **kwargs: Any) -> None:
        """Initialize CouponCode with default values."""
        if "is_active" not in kwargs:
            kwargs["is_active"] = True
        if "times_used" not in kwargs:
            kwargs["times_used"] = 0
        if "code" in kwargs and kwargs["code"]:
            kwargs["code"] = kwargs["code"].strip().upper()

        super().__init__(**kwargs)

    code: Mapped[str] = mapped_column(
        String(50), nullable=False, unique=True, comment="Upper-case coupon code"
    )

    discount_type: Mapped[DiscountType] = mapped_column(
        enum_type(DiscountType, "discount_type"),
        nullable=False,
        comment="percentage or fixed_amount",
    )

    value: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, comment="Percent (0-100) or currency amount"
    )

    applies_to: Mapped[CouponAppliesTo] = mapped_column(
        enum_type(CouponAppliesTo, "coupon_applies_to"),
        nullable=False,
        comment="Fee context the coupon can be used for",
    )

    max_uses: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True, comment="Usage cap, unlimited when null"
    )

    times_used: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, comment="Successful redemptions"
    )

    expiry_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, comment="Expiry, never when null"
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, comment="Manually enabled flag"
    )

    __table_args__ = (
        CheckConstraint("value >= 0", name="ck_coupon_codes_value_non_negative"),
        CheckConstraint("times_used >= 0", name="ck_coupon_codes_times_used"),
        CheckConstraint(
            "max_uses IS NULL OR max_uses > 0", name="ck_coupon_codes_max_uses"
        ),
    )

    def __repr__(self) -> str:
        return f"<CouponCode(code='{self.code}', type={self.discount_type})>"

    @property
    def uses_remaining(self) -> Optional[int]:
        """Remaining redemptions, or None when unlimited."""
        if self.max_uses is None:
            return None
        return max(0, self.max_uses - (self.times_used or 0))
