"""
Admin console endpoints.

Every route here requires the admin role and pages 20 items by default.
"""

import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...models.application import ApplicationStatus
from ...models.rescue_request import RescueRequestStatus
from ...models.transaction import TransactionKind, TransactionStatus
from ...models.user import User, UserRole
from ...schemas.application import ApplicationResponse
from ...schemas.audit_log import AuditLogResponse
from ...schemas.common import ADMIN_PAGE_SIZE, MessageResponse
from ...schemas.coupon import CouponCreate, CouponResponse, CouponUpdate
from ...schemas.pet import PetStaffResponse
from ...schemas.promotion import TransactionResponse
from ...schemas.rescue import RescueCreate, RescueResponse, RescueUpdate
from ...schemas.rescue_request import RescueRequestResponse, RescueRequestReview
from ...schemas.user import AdminUserUpdate, UserResponse
from ...services.applications import ApplicationService
from ...services.audit import AuditService, RequestContext
from ...services.coupons import CouponService
from ...services.pet_query import search_pets
from ...services.rescue_requests import RescueRequestService
from ...services.rescues import RescueService
from ...services.transactions import TransactionService
from ...services.users import UserService
from ..dependencies import get_current_admin, get_db_session, get_request_context
from ..params import Pagination, application_status_param, page_params, pet_query_from_request

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(get_current_admin)])

admin_page = page_params(ADMIN_PAGE_SIZE)


# Users


@router.get("/users")
async def list_users(
    search: Optional[str] = Query(None, max_length=100),
    role: Optional[UserRole] = Query(None),
    session: AsyncSession = Depends(get_db_session),
    paging: Pagination = Depends(admin_page),
):
    page = await UserService.list_users(session, search, role, paging.page, paging.limit)
    return page.to_response(UserResponse.model_validate)


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(user_id: uuid.UUID, session: AsyncSession = Depends(get_db_session)):
    return await UserService.get_user(session, user_id)


@router.put("/users/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: uuid.UUID,
    data: AdminUserUpdate,
    session: AsyncSession = Depends(get_db_session),
    admin: User = Depends(get_current_admin),
    context: RequestContext = Depends(get_request_context),
):
    user = await UserService.admin_update_user(session, admin, user_id, data, context)
    await session.commit()
    return user


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: uuid.UUID,
    session: AsyncSession = Depends(get_db_session),
    admin: User = Depends(get_current_admin),
    context: RequestContext = Depends(get_request_context),
) -> Response:
    await UserService.delete_user(session, admin, user_id, context)
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Rescues


@router.get("/rescues")
async def list_rescues(
    search: Optional[str] = Query(None, max_length=100),
    session: AsyncSession = Depends(get_db_session),
    paging: Pagination = Depends(admin_page),
):
    page = await RescueService.list_rescues(session, search, paging.page, paging.limit)
    return page.to_response(RescueResponse.model_validate)


@router.get("/rescues/{rescue_id}", response_model=RescueResponse)
async def get_rescue(rescue_id: uuid.UUID, session: AsyncSession = Depends(get_db_session)):
    return await RescueService.get_rescue(session, rescue_id)


@router.post("/rescues", response_model=RescueResponse, status_code=status.HTTP_201_CREATED)
async def create_rescue(
    data: RescueCreate,
    session: AsyncSession = Depends(get_db_session),
    admin: User = Depends(get_current_admin),
    context: RequestContext = Depends(get_request_context),
):
    rescue = await RescueService.create_rescue(session, admin, data, context)
    await session.commit()
    return rescue


@router.put("/rescues/{rescue_id}", response_model=RescueResponse)
async def update_rescue(
    rescue_id: uuid.UUID,
    data: RescueUpdate,
    session: AsyncSession = Depends(get_db_session),
    admin: User = Depends(get_current_admin),
    context: RequestContext = Depends(get_request_context),
):
    rescue = await RescueService.update_rescue(session, admin, rescue_id, data, context)
    await session.commit()
    return rescue


@router.delete("/rescues/{rescue_id}", response_model=MessageResponse)
async def delete_rescue(
    rescue_id: uuid.UUID,
    session: AsyncSession = Depends(get_db_session),
    admin: User = Depends(get_current_admin),
    context: RequestContext = Depends(get_request_context),
):
    await RescueService.delete_rescue(session, admin, rescue_id, context)
    await session.commit()
    return MessageResponse(message="Rescue deleted and all users demoted to regular users.")


# Pets


@router.get("/pets")
async def list_pets(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
    admin: User = Depends(get_current_admin),
):
    query = pet_query_from_request(request)
    page = await search_pets(session, query, admin)
    return page.to_response(PetStaffResponse.model_validate)


# Applications


@router.get("/applications")
async def list_applications(
    status_filter: Optional[ApplicationStatus] = Depends(application_status_param),
    session: AsyncSession = Depends(get_db_session),
    admin: User = Depends(get_current_admin),
    paging: Pagination = Depends(admin_page),
):
    page = await ApplicationService.list_for_viewer(
        session, admin, status_filter, paging.page, paging.limit
    )
    return page.to_response(ApplicationResponse.model_validate)


@router.get("/applications/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: uuid.UUID, session: AsyncSession = Depends(get_db_session)
):
    return await ApplicationService.load(session, application_id)


# Transactions


@router.get("/transactions")
async def list_transactions(
    status_filter: Optional[TransactionStatus] = Query(None, alias="status"),
    kind: Optional[TransactionKind] = Query(None),
    year: Optional[int] = Query(None, ge=2000, le=9999),
    month: Optional[int] = Query(None),
    rescue_id: Optional[uuid.UUID] = Query(None),
    session: AsyncSession = Depends(get_db_session),
    paging: Pagination = Depends(admin_page),
):
    page = await TransactionService.list_transactions(
        session, rescue_id, status_filter, kind, year, month, paging.page, paging.limit
    )
    return page.to_response(TransactionResponse.model_validate)


@router.get("/transactions/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: uuid.UUID, session: AsyncSession = Depends(get_db_session)
):
    return await TransactionService.get_transaction(session, transaction_id)


# Rescue requests


@router.get("/rescue-requests")
async def list_rescue_requests(
    status_filter: Optional[RescueRequestStatus] = Query(None, alias="status"),
    session: AsyncSession = Depends(get_db_session),
    paging: Pagination = Depends(admin_page),
):
    page = await RescueRequestService.list_requests(
        session, status_filter, paging.page, paging.limit
    )
    return page.to_response(RescueRequestResponse.model_validate)


@router.get("/rescue-requests/{request_id}", response_model=RescueRequestResponse)
async def get_rescue_request(
    request_id: uuid.UUID, session: AsyncSession = Depends(get_db_session)
):
    return await RescueRequestService.load(session, request_id)


@router.put("/rescue-requests/{request_id}/approve", response_model=RescueRequestResponse)
async def approve_rescue_request(
    request_id: uuid.UUID,
    review: Optional[RescueRequestReview] = Body(None),
    session: AsyncSession = Depends(get_db_session),
    admin: User = Depends(get_current_admin),
    context: RequestContext = Depends(get_request_context),
):
    notes = review.admin_notes if review else None
    request = await RescueRequestService.approve(session, admin, request_id, notes, context)
    await session.commit()
    return request


@router.put("/rescue-requests/{request_id}/reject", response_model=RescueRequestResponse)
async def reject_rescue_request(
    request_id: uuid.UUID,
    review: Optional[RescueRequestReview] = Body(None),
    session: AsyncSession = Depends(get_db_session),
    admin: User = Depends(get_current_admin),
    context: RequestContext = Depends(get_request_context),
):
    notes = review.admin_notes if review else None
    request = await RescueRequestService.reject(session, admin, request_id, notes, context)
    await session.commit()
    return request


# Coupon codes


@router.get("/coupon-codes")
async def list_coupons(
    is_active: Optional[bool] = Query(None),
    session: AsyncSession = Depends(get_db_session),
    paging: Pagination = Depends(admin_page),
):
    page = await CouponService.list_coupons(session, is_active, paging.page, paging.limit)
    return page.to_response(CouponResponse.model_validate)


@router.get("/coupon-codes/{code}", response_model=CouponResponse)
async def get_coupon(code: str, session: AsyncSession = Depends(get_db_session)):
    return await CouponService.get_or_404(session, code)


@router.post("/coupon-codes", response_model=CouponResponse, status_code=status.HTTP_201_CREATED)
async def create_coupon(
    data: CouponCreate,
    session: AsyncSession = Depends(get_db_session),
    admin: User = Depends(get_current_admin),
    context: RequestContext = Depends(get_request_context),
):
    coupon = await CouponService.create_coupon(session, data, admin.id, context)
    await session.commit()
    return coupon


@router.put("/coupon-codes/{code}", response_model=CouponResponse)
async def update_coupon(
    code: str,
    data: CouponUpdate,
    session: AsyncSession = Depends(get_db_session),
    admin: User = Depends(get_current_admin),
    context: RequestContext = Depends(get_request_context),
):
    coupon = await CouponService.update_coupon(session, code, data, admin.id, context)
    await session.commit()
    return coupon


@router.delete("/coupon-codes/{code}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_coupon(
    code: str,
    session: AsyncSession = Depends(get_db_session),
    admin: User = Depends(get_current_admin),
    context: RequestContext = Depends(get_request_context),
) -> Response:
    await CouponService.delete_coupon(session, code, admin.id, context)
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Audit logs


@router.get("/logs")
async def list_logs(
    action: Optional[str] = Query(None),
    entity_type: Optional[str] = Query(None),
    user_id: Optional[uuid.UUID] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    session: AsyncSession = Depends(get_db_session),
    paging: Pagination = Depends(admin_page),
):
    page = await AuditService.list_logs(
        session, action, entity_type, user_id, start_date, end_date, paging.page, paging.limit
    )
    return page.to_response(AuditLogResponse.model_validate)
