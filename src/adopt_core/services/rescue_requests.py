"""
Requests from regular users to become a rescue, and their admin review.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..exceptions import (
    AuthorizationException,
    BusinessRuleException,
    NotFoundException,
    ValidationException,
)
from ..models.coupon import CouponAppliesTo
from ..models.rescue import Rescue
from ..models.rescue_request import RescueRequest, RescueRequestStatus
from ..models.user import User, UserRole
from ..schemas.rescue_request import RescueRequestCreate
from ..utils.config import AppSettings
from ..utils.datetime_utils import get_current_utc
from .audit import AuditAction, AuditService, RequestContext
from .coupons import CouponService, to_money
from .pagination import Page, paginate

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_NOTES = "No notes provided"
NOT_PENDING = "Request is not pending"


class RescueRequestService:
    """Rescue request workflow."""

    @staticmethod
    async def load(session: AsyncSession, request_id: uuid.UUID) -> RescueRequest:
        result = await session.execute(
            select(RescueRequest)
            .where(RescueRequest.id == request_id)
            .options(selectinload(RescueRequest.user))
            .execution_options(populate_existing=True)
        )
        request = result.scalar_one_or_none()
        if request is None:
            raise NotFoundException(
                "Rescue request not found", entity_type="rescue_request", entity_id=request_id
            )
        return request

    @classmethod
    async def submit(
        cls,
        session: AsyncSession,
        user: User,
        data: RescueRequestCreate,
        settings: AppSettings,
        context: Optional[RequestContext] = None,
    ) -> RescueRequest:
        """
        Submit a request to run a rescue.

        The fee is ``settings.rescue_fee`` less any valid rescue-fee coupon,
        which is redeemed on submission.

        Raises:
            AuthorizationException: If the user is not a regular user
            BusinessRuleException: If they already have a pending request
            ValidationException: If the coupon cannot be used
        """
        if user.role != UserRole.USER:
            raise AuthorizationException("Only regular users can request to become a rescue")

        pending = await session.scalar(
            select(RescueRequest.id).where(
                RescueRequest.user_id == user.id,
                RescueRequest.status == RescueRequestStatus.PENDING,
            )
        )
        if pending is not None:
            raise BusinessRuleException(
                "You already have a pending rescue request",
                rule_name="single_pending_rescue_request",
            )

        required_fee = to_money(settings.rescue_fee)
        evaluation = None
        if data.coupon_code:
            evaluation = await CouponService.evaluate(
                session, data.coupon_code, CouponAppliesTo.RESCUE_FEE, required_fee
            )
            if not evaluation.valid:
                raise ValidationException(evaluation.message, field="coupon_code")
            required_fee = evaluation.final_fee

        request = RescueRequest(
            user_id=user.id,
            reason=data.reason,
            rescue_name=data.rescue_name,
            rescue_location=data.rescue_location,
            coupon_code=data.coupon_code,
            required_fee=required_fee,
        )
        session.add(request)
        await session.flush()
        if evaluation is not None:
            await CouponService.redeem(session, evaluation.coupon)

        await AuditService.log(
            session,
            AuditAction.RESCUE_REQUEST_SUBMITTED,
            user_id=user.id,
            entity_type="rescue_request",
            entity_id=request.id,
            details={
                "rescue_name": request.rescue_name,
                "required_fee": str(required_fee),
                "coupon_code": data.coupon_code,
            },
            context=context,
        )
        logger.info(f"Rescue request {request.id} submitted by user {user.id}")
        return await cls.load(session, request.id)

    @staticmethod
    async def list_for_user(
        session: AsyncSession, user_id: uuid.UUID, page: int = 1, limit: int = 10
    ) -> Page:
        stmt = (
            select(RescueRequest)
            .where(RescueRequest.user_id == user_id)
            .options(selectinload(RescueRequest.user))
            .order_by(RescueRequest.created_at.desc(), RescueRequest.id)
        )
        return await paginate(session, stmt, page, limit)

    @staticmethod
    async def list_requests(
        session: AsyncSession,
        status: Optional[RescueRequestStatus] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page:
        """List all requests for review, newest first."""
        stmt = select(RescueRequest).options(selectinload(RescueRequest.user))
        if status is not None:
            stmt = stmt.where(RescueRequest.status == RescueRequestStatus(status))
        stmt = stmt.order_by(RescueRequest.created_at.desc(), RescueRequest.id)
        return await paginate(session, stmt, page, limit)

    @classmethod
    async def get_for_viewer(
        cls, session: AsyncSession, user: User, request_id: uuid.UUID
    ) -> RescueRequest:
        request = await cls.load(session, request_id)
        if request.user_id != user.id and not user.is_admin():
            raise AuthorizationException("You do not have permission to view this request")
        return request

    @classmethod
    async def withdraw(
        cls, session: AsyncSession, user: User, request_id: uuid.UUID
    ) -> None:
        """
        Delete a request. Applicants may only withdraw their own pending
        requests; admins may delete any.
        """
        request = await cls.get_for_viewer(session, user, request_id)
        if not user.is_admin() and not request.is_pending:
            raise BusinessRuleException(NOT_PENDING, rule_name="rescue_request_pending")
        await session.delete(request)
        await session.flush()

    @classmethod
    async def _review(
        cls, session: AsyncSession, request_id: uuid.UUID, admin_notes: Optional[str]
    ) -> RescueRequest:
        request = await cls.load(session, request_id)
        if not request.is_pending:
            raise BusinessRuleException(NOT_PENDING, rule_name="rescue_request_pending")
        request.admin_notes = admin_notes or DEFAULT_ADMIN_NOTES
        request.approval_date = get_current_utc()
        return request

    @classmethod
    async def approve(
        cls,
        session: AsyncSession,
        admin: User,
        request_id: uuid.UUID,
        admin_notes: Optional[str] = None,
        context: Optional[RequestContext] = None,
    ) -> RescueRequest:
        """
        Approve a pending request: create the rescue, then link and promote
        the requesting user.

        Raises:
            BusinessRuleException: If the request was already reviewed
        """
        request = await cls._review(session, request_id, admin_notes)
        applicant = request.user

        rescue = Rescue(
            name=request.rescue_name,
            location=request.rescue_location,
            contact_email=applicant.email,
            description="",
        )
        session.add(rescue)
        await session.flush()

        applicant.promote_to_rescue(rescue.id)
        request.rescue_id = rescue.id
        request.status = RescueRequestStatus.APPROVED
        await session.flush()

        await AuditService.log(
            session,
            AuditAction.RESCUE_REQUEST_APPROVED,
            user_id=admin.id,
            entity_type="rescue_request",
            entity_id=request.id,
            details={"rescue_id": str(rescue.id), "applicant_id": str(applicant.id)},
            context=context,
        )
        logger.info(f"Rescue request {request.id} approved, rescue {rescue.id} created")
        return request

    @classmethod
    async def reject(
        cls,
        session: AsyncSession,
        admin: User,
        request_id: uuid.UUID,
        admin_notes: Optional[str] = None,
        context: Optional[RequestContext] = None,
    ) -> RescueRequest:
        """
        Raises:
            BusinessRuleException: If the request was already reviewed
        """
        request = await cls._review(session, request_id, admin_notes)
        request.status = RescueRequestStatus.REJECTED
        await session.flush()

        await AuditService.log(
            session,
            AuditAction.RESCUE_REQUEST_REJECTED,
            user_id=admin.id,
            entity_type="rescue_request",
            entity_id=request.id,
            details={"applicant_id": str(request.user_id)},
            context=context,
        )
        return request
