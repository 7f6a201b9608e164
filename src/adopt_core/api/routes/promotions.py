"""
Coupon validation, promotion purchase and transaction history.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ...models.coupon import CouponAppliesTo
from ...models.transaction import TransactionKind, TransactionStatus
from ...models.user import User
from ...schemas.common import ADMIN_PAGE_SIZE
from ...schemas.coupon import CouponResponse, CouponValidationResponse, DiscountBreakdown
from ...schemas.promotion import PromotionRequest, PromotionResponse, TransactionResponse
from ...services.access import present_pet, require_rescue
from ...services.audit import RequestContext
from ...services.coupons import CouponService, to_money
from ...services.payments import PaymentGateway
from ...services.promotions import PromotionService
from ...services.transactions import TransactionService
from ...utils.config import AppSettings
from ..dependencies import (
    get_current_user,
    get_db_session,
    get_payment_gateway,
    get_request_context,
    get_settings,
)
from ..params import Pagination, page_params

router = APIRouter(prefix="/promotions", tags=["promotions"])


@router.get("/coupons/{code}/validate", response_model=CouponValidationResponse)
async def validate_coupon(
    code: str,
    applies_to: CouponAppliesTo = Query(CouponAppliesTo.PROMOTION),
    session: AsyncSession = Depends(get_db_session),
    settings: AppSettings = Depends(get_settings),
):
    """Check a coupon against the current fee without redeeming it."""
    base_fee = (
        settings.promotion_fee if applies_to == CouponAppliesTo.PROMOTION else settings.rescue_fee
    )
    evaluation = await CouponService.evaluate(session, code, applies_to, to_money(base_fee))
    if not evaluation.valid:
        return JSONResponse(
            status_code=404 if evaluation.not_found else 400,
            content={"valid": False, "message": evaluation.message},
        )
    return CouponValidationResponse(
        valid=True,
        coupon=CouponResponse.model_validate(evaluation.coupon),
        discount=DiscountBreakdown(**evaluation.breakdown()),
    )


@router.post("/pets/{pet_id}", response_model=PromotionResponse)
async def promote_pet(
    pet_id: uuid.UUID,
    data: PromotionRequest,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    settings: AppSettings = Depends(get_settings),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    context: RequestContext = Depends(get_request_context),
):
    outcome = await PromotionService(settings, gateway).promote_pet(
        session, user, pet_id, data, context
    )
    await session.commit()
    return PromotionResponse(
        message=outcome.message,
        pet=present_pet(outcome.pet, user),
        transaction=TransactionResponse.model_validate(outcome.transaction),
        is_free=outcome.is_free,
    )


@router.get("/transactions")
async def list_transactions(
    status: Optional[TransactionStatus] = Query(None),
    kind: Optional[TransactionKind] = Query(None),
    year: Optional[int] = Query(None, ge=2000, le=9999),
    month: Optional[int] = Query(None),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    paging: Pagination = Depends(page_params(ADMIN_PAGE_SIZE)),
):
    """Admins see every transaction, rescue users their own rescue's."""
    rescue_id = None if user.is_admin() else require_rescue(user)
    page = await TransactionService.list_transactions(
        session, rescue_id, status, kind, year, month, paging.page, paging.limit
    )
    return page.to_response(TransactionResponse.model_validate)
