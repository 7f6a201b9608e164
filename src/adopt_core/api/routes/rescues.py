"""
Public rescue directory and the ``/rescues/me`` self-service routes.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...models.application import ApplicationStatus
from ...models.user import User
from ...schemas.application import ApplicationResponse, ApplicationStatusUpdate
from ...schemas.common import ADMIN_PAGE_SIZE, DEFAULT_PAGE_SIZE
from ...schemas.pet import PetCreate, PetUpdate
from ...schemas.rescue import RescueResponse, RescueUpdate
from ...schemas.user import UserResponse
from ...services.access import ensure_can_manage_pet, present_pet, require_rescue
from ...services.applications import ApplicationService
from ...services.audit import RequestContext
from ...services.pet_query import search_pets
from ...services.pets import PetService
from ...services.rescues import RescueService
from ..dependencies import (
    get_current_user,
    get_db_session,
    get_optional_user,
    get_request_context,
)
from ..params import Pagination, application_status_param, page_params, pet_query_from_request
from .pets import parse_if_match

router = APIRouter(prefix="/rescues", tags=["rescues"])


# /rescues/me must be registered before /rescues/{rescue_id}


@router.get("/me", response_model=RescueResponse)
async def get_my_rescue(
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
):
    return await RescueService.get_rescue(session, require_rescue(user))


@router.put("/me", response_model=RescueResponse)
async def update_my_rescue(
    data: RescueUpdate,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    context: RequestContext = Depends(get_request_context),
):
    rescue = await RescueService.update_rescue(session, user, require_rescue(user), data, context)
    await session.commit()
    return rescue


@router.get("/me/pets")
async def list_my_pets(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
):
    query = pet_query_from_request(request, rescue_id=require_rescue(user))
    page = await search_pets(session, query, user)
    return page.to_response(lambda pet: present_pet(pet, user))


@router.get("/me/pets/{pet_id}")
async def get_my_pet(
    pet_id: uuid.UUID,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
):
    require_rescue(user)
    pet = await PetService.get_pet(session, pet_id)
    ensure_can_manage_pet(user, pet)
    return present_pet(pet, user)


@router.post("/me/pets", status_code=status.HTTP_201_CREATED)
async def create_my_pet(
    data: PetCreate,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    context: RequestContext = Depends(get_request_context),
):
    require_rescue(user)
    pet = await PetService.create_pet(session, user, data, context)
    await session.commit()
    return present_pet(pet, user)


@router.put("/me/pets/{pet_id}")
async def update_my_pet(
    pet_id: uuid.UUID,
    data: PetUpdate,
    if_match: Optional[str] = Header(None),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    context: RequestContext = Depends(get_request_context),
):
    require_rescue(user)
    pet = await PetService.update_pet(
        session, user, pet_id, data, expected_version=parse_if_match(if_match), context=context
    )
    await session.commit()
    return present_pet(pet, user)


@router.delete("/me/pets/{pet_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_my_pet(
    pet_id: uuid.UUID,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    context: RequestContext = Depends(get_request_context),
) -> Response:
    require_rescue(user)
    await PetService.delete_pet(session, user, pet_id, context)
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me/pets/{pet_id}/applications")
async def list_my_pet_applications(
    pet_id: uuid.UUID,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    paging: Pagination = Depends(page_params(ADMIN_PAGE_SIZE)),
):
    require_rescue(user)
    page = await ApplicationService.list_for_pet(session, user, pet_id, paging.page, paging.limit)
    return page.to_response(ApplicationResponse.model_validate)


@router.get("/me/applications")
async def list_my_applications(
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    status_filter: Optional[ApplicationStatus] = Depends(application_status_param),
    paging: Pagination = Depends(page_params(ADMIN_PAGE_SIZE)),
):
    require_rescue(user)
    page = await ApplicationService.list_for_viewer(
        session, user, status_filter, paging.page, paging.limit
    )
    return page.to_response(ApplicationResponse.model_validate)


@router.put("/me/applications/{application_id}", response_model=ApplicationResponse)
async def review_application(
    application_id: uuid.UUID,
    data: ApplicationStatusUpdate,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    context: RequestContext = Depends(get_request_context),
):
    require_rescue(user)
    application = await ApplicationService.update_status(
        session, user, application_id, data.status, context
    )
    await session.commit()
    return application


@router.get("/me/users", response_model=List[UserResponse])
async def list_my_rescue_users(
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
):
    return await RescueService.list_members(session, require_rescue(user))


@router.delete("/me/users/{user_id}", response_model=UserResponse)
async def remove_rescue_user(
    user_id: uuid.UUID,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    context: RequestContext = Depends(get_request_context),
):
    member = await RescueService.remove_member(session, user, user_id, context)
    await session.commit()
    return member


@router.get("")
async def list_rescues(
    search: Optional[str] = Query(None, max_length=100),
    session: AsyncSession = Depends(get_db_session),
    paging: Pagination = Depends(page_params(DEFAULT_PAGE_SIZE)),
):
    page = await RescueService.list_rescues(session, search, paging.page, paging.limit)
    return page.to_response(RescueResponse.model_validate)


@router.get("/{rescue_id}", response_model=RescueResponse)
async def get_rescue(
    rescue_id: uuid.UUID,
    session: AsyncSession = Depends(get_db_session),
):
    return await RescueService.get_rescue(session, rescue_id)


@router.get("/{rescue_id}/pets")
async def list_rescue_pets(
    rescue_id: uuid.UUID,
    request: Request,
    session: AsyncSession = Depends(get_db_session),
    viewer: Optional[User] = Depends(get_optional_user),
):
    await RescueService.get_rescue(session, rescue_id)
    query = pet_query_from_request(request, rescue_id=rescue_id)
    page = await search_pets(session, query, viewer)
    return page.to_response(lambda pet: present_pet(pet, viewer))
