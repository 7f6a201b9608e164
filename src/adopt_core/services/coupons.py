"""
Coupon evaluation, redemption and management.

``evaluate_coupon`` is a pure function: it decides whether a coupon may
be used in a context and what it does to a fee. ``CouponService`` wraps
it with database lookups, the capped atomic redemption and the admin
CRUD operations.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import BusinessRuleException, NotFoundException, ValidationException
from ..models.coupon import CouponAppliesTo, CouponCode, DiscountType
from ..schemas.coupon import CouponCreate, CouponUpdate
from ..utils.datetime_utils import get_current_utc, is_in_past
from .audit import AuditAction, AuditService, RequestContext
from .pagination import Page, paginate

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
HUNDRED = Decimal("100")

INVALID_CODE = "Invalid coupon code"
INACTIVE_CODE = "Coupon code is inactive"
EXPIRED_CODE = "Coupon code has expired"
USAGE_EXCEEDED = "Coupon code usage limit exceeded"
WRONG_CONTEXT = {
    CouponAppliesTo.PROMOTION: "Coupon code is not valid for promotions",
    CouponAppliesTo.RESCUE_FEE: "Coupon code is not valid for rescue fees",
}


def to_money(value) -> Decimal:
    """Quantize an amount to cents."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def normalize_code(code: str) -> str:
    return code.strip().upper()


@dataclass(frozen=True)
class CouponEvaluation:
    """Outcome of checking a coupon against a fee."""

    valid: bool
    original_fee: Decimal
    final_fee: Decimal
    discount_applied: Decimal = Decimal("0.00")
    message: Optional[str] = None
    coupon: Optional[CouponCode] = None
    not_found: bool = False

    @property
    def is_free(self) -> bool:
        return self.final_fee == 0

    @property
    def discount_percentage(self) -> Decimal:
        """Discount as a percentage of the original fee, one decimal place."""
        if not self.original_fee:
            return Decimal("0.0")
        return (self.discount_applied / self.original_fee * HUNDRED).quantize(
            Decimal("0.1"), rounding=ROUND_HALF_UP
        )

    def breakdown(self) -> dict:
        return {
            "original_fee": self.original_fee,
            "discount_applied": self.discount_applied,
            "final_fee": self.final_fee,
            "discount_percentage": self.discount_percentage,
        }


def _rejected(base_fee: Decimal, message: str, coupon=None, not_found=False) -> CouponEvaluation:
    return CouponEvaluation(
        valid=False,
        original_fee=base_fee,
        final_fee=base_fee,
        message=message,
        coupon=coupon,
        not_found=not_found,
    )


def evaluate_coupon(
    coupon: Optional[CouponCode],
    applies_to: CouponAppliesTo,
    base_fee: Decimal,
    now: Optional[datetime] = None,
) -> CouponEvaluation:
    """
    Evaluate a coupon for a fee.

    Checks run in order: existence, active flag, expiry, usage cap and
    context. The discount is clamped so the final fee stays within
    ``[0, base_fee]``.
    """
    base_fee = to_money(base_fee)

    if coupon is None:
        return _rejected(base_fee, INVALID_CODE, not_found=True)
    if not coupon.is_active:
        return _rejected(base_fee, INACTIVE_CODE, coupon)
    if coupon.expiry_date is not None and is_in_past(coupon.expiry_date, now):
        return _rejected(base_fee, EXPIRED_CODE, coupon)
    if coupon.max_uses is not None and coupon.times_used >= coupon.max_uses:
        return _rejected(base_fee, USAGE_EXCEEDED, coupon)
    applies_to = CouponAppliesTo(applies_to)
    if CouponAppliesTo(coupon.applies_to) != applies_to:
        return _rejected(base_fee, WRONG_CONTEXT[applies_to], coupon)

    value = Decimal(str(coupon.value))
    if DiscountType(coupon.discount_type) == DiscountType.PERCENTAGE:
        discount = base_fee * value / HUNDRED
    else:
        discount = value
    discount = to_money(min(max(discount, Decimal("0")), base_fee))

    return CouponEvaluation(
        valid=True,
        original_fee=base_fee,
        final_fee=base_fee - discount,
        discount_applied=discount,
        coupon=coupon,
    )


class CouponService:
    """Database-backed coupon operations."""

    @staticmethod
    async def get_by_code(session: AsyncSession, code: str) -> Optional[CouponCode]:
        result = await session.execute(
            select(CouponCode).where(CouponCode.code == normalize_code(code))
        )
        return result.scalar_one_or_none()

    @classmethod
    async def evaluate(
        cls,
        session: AsyncSession,
        code: str,
        applies_to: CouponAppliesTo,
        base_fee: Decimal,
    ) -> CouponEvaluation:
        """Look up a code and evaluate it for a fee."""
        coupon = await cls.get_by_code(session, code)
        return evaluate_coupon(coupon, applies_to, base_fee, now=get_current_utc())

    @staticmethod
    async def redeem(session: AsyncSession, coupon: CouponCode) -> None:
        """
        Count one use of a coupon.

        The increment is a single conditional UPDATE, so concurrent
        redemptions cannot push ``times_used`` past ``max_uses``.

        Raises:
            BusinessRuleException: If the cap was reached in the meantime
        """
        stmt = (
            update(CouponCode)
            .where(
                CouponCode.id == coupon.id,
                CouponCode.is_active.is_(True),
                or_(
                    CouponCode.max_uses.is_(None),
                    CouponCode.times_used < CouponCode.max_uses,
                ),
            )
            .values(times_used=CouponCode.times_used + 1)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        if result.rowcount != 1:
            raise BusinessRuleException(USAGE_EXCEEDED, rule_name="coupon_usage_cap")
        await session.refresh(coupon, ["times_used", "updated_at"])
        logger.info(f"Redeemed coupon {coupon.code} ({coupon.times_used} uses)")

    @staticmethod
    async def list_coupons(
        session: AsyncSession,
        is_active: Optional[bool] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page:
        stmt = select(CouponCode)
        if is_active is not None:
            stmt = stmt.where(CouponCode.is_active.is_(is_active))
        stmt = stmt.order_by(CouponCode.created_at.desc(), CouponCode.id)
        return await paginate(session, stmt, page, limit)

    @classmethod
    async def get_or_404(cls, session: AsyncSession, code: str) -> CouponCode:
        coupon = await cls.get_by_code(session, code)
        if coupon is None:
            raise NotFoundException("Coupon code not found", entity_type="coupon_code", entity_id=code)
        return coupon

    @classmethod
    async def create_coupon(
        cls,
        session: AsyncSession,
        data: CouponCreate,
        actor_id: Optional[uuid.UUID] = None,
        context: Optional[RequestContext] = None,
    ) -> CouponCode:
        """
        Create a coupon. New codes start active and unused.

        Raises:
            ValidationException: If the code already exists
        """
        if await cls.get_by_code(session, data.code) is not None:
            raise ValidationException("Coupon code already exists", field="code", value=data.code)

        coupon = CouponCode(
            code=data.code,
            discount_type=DiscountType(data.discount_type),
            value=data.value,
            applies_to=CouponAppliesTo(data.applies_to),
            max_uses=data.max_uses,
            expiry_date=data.expiry_date,
        )
        session.add(coupon)
        await session.flush()
        await AuditService.log(
            session,
            AuditAction.COUPON_CREATED,
            user_id=actor_id,
            entity_type="coupon_code",
            entity_id=coupon.id,
            details={"code": coupon.code},
            context=context,
        )
        logger.info(f"Created coupon {coupon.code}")
        return coupon

    @classmethod
    async def update_coupon(
        cls,
        session: AsyncSession,
        code: str,
        data: CouponUpdate,
        actor_id: Optional[uuid.UUID] = None,
        context: Optional[RequestContext] = None,
    ) -> CouponCode:
        """Partially update a coupon by code."""
        coupon = await cls.get_or_404(session, code)
        changes = data.model_dump(exclude_unset=True)
        if "discount_type" in changes:
            changes["discount_type"] = DiscountType(changes["discount_type"])
        if "applies_to" in changes:
            changes["applies_to"] = CouponAppliesTo(changes["applies_to"])

        new_type = changes.get("discount_type", coupon.discount_type)
        new_value = changes.get("value", coupon.value)
        if new_type == DiscountType.PERCENTAGE and new_value > HUNDRED:
            raise ValidationException("Percentage discount cannot exceed 100", field="value")

        changed = coupon.update_fields(**changes)
        await session.flush()
        await AuditService.log(
            session,
            AuditAction.COUPON_UPDATED,
            user_id=actor_id,
            entity_type="coupon_code",
            entity_id=coupon.id,
            details={"code": coupon.code, "changed_fields": sorted(changed)},
            context=context,
        )
        return coupon

    @classmethod
    async def delete_coupon(
        cls,
        session: AsyncSession,
        code: str,
        actor_id: Optional[uuid.UUID] = None,
        context: Optional[RequestContext] = None,
    ) -> None:
        coupon = await cls.get_or_404(session, code)
        coupon_id, coupon_code = coupon.id, coupon.code
        await session.delete(coupon)
        await session.flush()
        await AuditService.log(
            session,
            AuditAction.COUPON_DELETED,
            user_id=actor_id,
            entity_type="coupon_code",
            entity_id=coupon_id,
            details={"code": coupon_code},
            context=context,
        )
        logger.info(f"Deleted coupon {coupon_code}")
