"""
Adoption application endpoints.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...models.application import ApplicationStatus
from ...models.user import User
from ...schemas.application import (
    ApplicationCreate,
    ApplicationDetailsUpdate,
    ApplicationResponse,
    ApplicationStatusUpdate,
)
from ...schemas.common import ADMIN_PAGE_SIZE
from ...services.applications import ApplicationService
from ...services.audit import RequestContext
from ..dependencies import get_current_user, get_db_session, get_request_context
from ..params import Pagination, application_status_param, page_params

router = APIRouter(prefix="/applications", tags=["applications"])


@router.post("", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
async def submit_application(
    data: ApplicationCreate,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    context: RequestContext = Depends(get_request_context),
):
    application = await ApplicationService.submit(session, user, data, context)
    await session.commit()
    return application


@router.get("")
async def list_applications(
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    status_filter: Optional[ApplicationStatus] = Depends(application_status_param),
    paging: Pagination = Depends(page_params(ADMIN_PAGE_SIZE)),
):
    page = await ApplicationService.list_for_viewer(
        session, user, status_filter, paging.page, paging.limit
    )
    return page.to_response(ApplicationResponse.model_validate)


@router.get("/pet/{pet_id}")
async def list_pet_applications(
    pet_id: uuid.UUID,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    paging: Pagination = Depends(page_params(ADMIN_PAGE_SIZE)),
):
    page = await ApplicationService.list_for_pet(session, user, pet_id, paging.page, paging.limit)
    return page.to_response(ApplicationResponse.model_validate)


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: uuid.UUID,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
):
    return await ApplicationService.get_for_viewer(session, user, application_id)


@router.patch("/{application_id}/status", response_model=ApplicationResponse)
async def update_application_status(
    application_id: uuid.UUID,
    data: ApplicationStatusUpdate,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    context: RequestContext = Depends(get_request_context),
):
    application = await ApplicationService.update_status(
        session, user, application_id, data.status, context
    )
    await session.commit()
    return application


@router.put("/{application_id}", response_model=ApplicationResponse)
async def update_application_details(
    application_id: uuid.UUID,
    data: ApplicationDetailsUpdate,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    context: RequestContext = Depends(get_request_context),
):
    application = await ApplicationService.update_details(
        session, user, application_id, data.additional_details, context
    )
    await session.commit()
    return application


@router.delete("/{application_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_application(
    application_id: uuid.UUID,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    context: RequestContext = Depends(get_request_context),
) -> Response:
    await ApplicationService.delete(session, user, application_id, context)
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
