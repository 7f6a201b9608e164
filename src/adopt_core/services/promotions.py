"""
Paid and free pet promotions.

A rescue pays a flat promotion fee, optionally discounted by a
``promotion`` coupon, to have one of its pets listed first. A coupon
that brings the fee to zero skips the payment gateway entirely.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import (
    BusinessRuleException,
    NotFoundException,
    PaymentException,
    TransactionException,
    ValidationException,
    format_validation_errors,
)
from ..models.coupon import CouponAppliesTo
from ..models.pet import Pet
from ..models.transaction import Transaction, TransactionKind, TransactionStatus
from ..models.user import User
from ..schemas.promotion import PromotionRequest
from ..utils.config import AppSettings
from .access import require_rescue
from .audit import AuditAction, AuditService, RequestContext
from .coupons import CouponEvaluation, CouponService, to_money
from .payments import FREE_PROMOTION_GATEWAY, PaymentGateway, new_gateway_reference

logger = logging.getLogger(__name__)

PET_NOT_OWNED = "Pet not found or not owned by your rescue"
CARD_REQUIRED = "Card details are required for paid promotions"


@dataclass
class PromotionOutcome:
    """Result of a completed promotion purchase."""

    pet: Pet
    transaction: Transaction
    evaluation: Optional[CouponEvaluation]
    message: str

    @property
    def is_free(self) -> bool:
        return self.transaction.kind == TransactionKind.FREE_PROMOTION


class PromotionService:
    """Runs the promotion purchase flow."""

    def __init__(self, settings: AppSettings, gateway: PaymentGateway):
        self.settings = settings
        self.gateway = gateway

    async def promote_pet(
        self,
        session: AsyncSession,
        user: User,
        pet_id: uuid.UUID,
        request: PromotionRequest,
        context: Optional[RequestContext] = None,
    ) -> PromotionOutcome:
        """
        Promote one of the caller's pets.

        Raises:
            AuthorizationException: If the caller is not a rescue user
            NotFoundException: If the pet is missing or owned by another rescue
            BusinessRuleException: If the pet is adopted or already promoted
            ValidationException: If the coupon or card details are invalid
            PaymentException: If the gateway declines the charge
        """
        rescue_id = require_rescue(user)
        result = await session.execute(
            select(Pet).where(Pet.id == pet_id, Pet.rescue_id == rescue_id)
        )
        pet = result.scalar_one_or_none()
        if pet is None:
            raise NotFoundException(PET_NOT_OWNED, entity_type="pet", entity_id=pet_id)
        if pet.is_adopted:
            raise BusinessRuleException("Cannot promote an adopted pet", rule_name="promotion")
        if pet.is_promoted:
            raise BusinessRuleException("Pet is already promoted", rule_name="promotion")

        base_fee = to_money(self.settings.promotion_fee)
        evaluation: Optional[CouponEvaluation] = None
        final_fee = base_fee
        if request.coupon_code:
            evaluation = await CouponService.evaluate(
                session, request.coupon_code, CouponAppliesTo.PROMOTION, base_fee
            )
            if not evaluation.valid:
                raise ValidationException(evaluation.message, field="coupon_code")
            final_fee = evaluation.final_fee

        is_free = final_fee == 0
        card = None
        if not is_free:
            if not request.has_card_details():
                raise ValidationException(CARD_REQUIRED)
            try:
                card = request.card_details()
            except ValidationError as e:
                raise ValidationException(
                    "Invalid card details",
                    validation_errors=format_validation_errors(e.errors()),
                )

        # The coupon use is claimed before any money moves, so a lost race
        # fails here instead of after the charge.
        claim = await session.begin_nested() if evaluation is not None else None
        try:
            if evaluation is not None:
                await CouponService.redeem(session, evaluation.coupon)
            if is_free:
                gateway_name = FREE_PROMOTION_GATEWAY
                gateway_reference = new_gateway_reference("free_promo")
                kind = TransactionKind.FREE_PROMOTION
            else:
                charge = await self.gateway.charge(
                    final_fee, self.settings.currency, card, f"Promotion for pet {pet.id}"
                )
                if not charge.succeeded:
                    logger.warning(f"Promotion charge for pet {pet.id} failed: {charge.message}")
                    raise PaymentException(
                        charge.message or "Payment failed", gateway=charge.gateway
                    )
                gateway_name = charge.gateway
                gateway_reference = charge.gateway_transaction_id
                kind = TransactionKind.SALE
        except Exception:
            if claim is not None and claim.is_active:
                await claim.rollback()
                await session.refresh(evaluation.coupon, ["times_used"])
            raise
        if claim is not None:
            await claim.commit()

        coupon_used = None
        if evaluation is not None:
            coupon = evaluation.coupon
            coupon_used = {
                "code": coupon.code,
                "discount_type": coupon.discount_type.value,
                "value": str(coupon.value),
                "discount_applied": str(evaluation.discount_applied),
            }

        transaction = Transaction(
            amount=final_fee,
            currency=self.settings.currency,
            status=TransactionStatus.SUCCESS,
            kind=kind,
            gateway=gateway_name,
            gateway_transaction_id=gateway_reference,
            user_id=user.id,
            rescue_id=rescue_id,
            payment_details={
                "cardholder_name": card.cardholder_name if card else None,
                "card_last4": card.last4 if card else None,
                "promotion_type": "pet_promotion",
                "pet_id": str(pet.id),
                "pet_name": pet.name,
                "rescue_id": str(rescue_id),
                "original_fee": str(base_fee),
                "discount_applied": str(base_fee - final_fee),
                "coupon_used": coupon_used,
                "is_free": is_free,
            },
        )
        session.add(transaction)

        pet.is_promoted = True
        try:
            await session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Could not record promotion of pet {pet.id} ({gateway_reference}): {e}")
            raise TransactionException(
                "Failed to record promotion", operation="promote_pet", original_error=e
            )
        await session.refresh(pet, ["rescue"])

        await AuditService.log(
            session,
            AuditAction.PET_PROMOTION_PURCHASED,
            user_id=user.id,
            entity_type="pet",
            entity_id=pet.id,
            details={
                "pet_name": pet.name,
                "amount": str(final_fee),
                "coupon_code": coupon_used["code"] if coupon_used else None,
                "is_free": is_free,
            },
            context=context,
        )

        logger.info(f"Pet {pet.id} promoted by rescue {rescue_id} for {final_fee}")
        message = (
            f"Pet promoted successfully with {coupon_used['code']} coupon!"
            if coupon_used
            else "Pet promoted successfully!"
        )
        return PromotionOutcome(pet=pet, transaction=transaction, evaluation=evaluation, message=message)
