"""
Endpoints for users asking to become a rescue.
"""

import uuid

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...models.user import User
from ...schemas.common import DEFAULT_PAGE_SIZE
from ...schemas.rescue_request import RescueRequestCreate, RescueRequestResponse
from ...services.audit import RequestContext
from ...services.rescue_requests import RescueRequestService
from ...utils.config import AppSettings
from ..dependencies import get_current_user, get_db_session, get_request_context, get_settings
from ..params import Pagination, page_params

router = APIRouter(prefix="/rescue-requests", tags=["rescue-requests"])


@router.post("", response_model=RescueRequestResponse, status_code=status.HTTP_201_CREATED)
async def submit_rescue_request(
    data: RescueRequestCreate,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    settings: AppSettings = Depends(get_settings),
    context: RequestContext = Depends(get_request_context),
):
    request = await RescueRequestService.submit(session, user, data, settings, context)
    await session.commit()
    return request


@router.get("/me")
async def my_rescue_requests(
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    paging: Pagination = Depends(page_params(DEFAULT_PAGE_SIZE)),
):
    page = await RescueRequestService.list_for_user(session, user.id, paging.page, paging.limit)
    return page.to_response(RescueRequestResponse.model_validate)


@router.get("/{request_id}", response_model=RescueRequestResponse)
async def get_rescue_request(
    request_id: uuid.UUID,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
):
    return await RescueRequestService.get_for_viewer(session, user, request_id)


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
async def withdraw_rescue_request(
    request_id: uuid.UUID,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> Response:
    await RescueRequestService.withdraw(session, user, request_id)
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
