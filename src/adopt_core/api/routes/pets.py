"""
Pet listing and CRUD endpoints.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...exceptions import ValidationException
from ...models.user import User
from ...schemas.pet import PetCreate, PetUpdate
from ...services.access import present_pet
from ...services.audit import RequestContext
from ...services.pet_query import search_pets
from ...services.pets import PetService
from ..dependencies import get_current_user, get_db_session, get_optional_user, get_request_context
from ..params import pet_query_from_request

router = APIRouter(prefix="/pets", tags=["pets"])


def parse_if_match(value: Optional[str]) -> Optional[int]:
    """Read a pet version from an ``If-Match`` header such as ``"3"`` or ``W/"3"``."""
    if value is None:
        return None
    tag = value.strip()
    if tag.startswith("W/"):
        tag = tag[2:]
    tag = tag.strip('"')
    if not tag.isdigit():
        raise ValidationException("If-Match must carry the pet version", field="If-Match", value=value)
    return int(tag)


@router.get("")
async def list_pets(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
    viewer: Optional[User] = Depends(get_optional_user),
):
    query = pet_query_from_request(request)
    page = await search_pets(session, query, viewer)
    return page.to_response(lambda pet: present_pet(pet, viewer))


@router.get("/{pet_id}")
async def get_pet(
    pet_id: uuid.UUID,
    session: AsyncSession = Depends(get_db_session),
    viewer: Optional[User] = Depends(get_optional_user),
):
    pet = await PetService.get_pet(session, pet_id)
    return present_pet(pet, viewer)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_pet(
    data: PetCreate,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    context: RequestContext = Depends(get_request_context),
):
    pet = await PetService.create_pet(session, user, data, context)
    await session.commit()
    return present_pet(pet, user)


@router.put("/{pet_id}")
async def update_pet(
    pet_id: uuid.UUID,
    data: PetUpdate,
    response: Response,
    if_match: Optional[str] = Header(None),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    context: RequestContext = Depends(get_request_context),
):
    pet = await PetService.update_pet(
        session, user, pet_id, data, expected_version=parse_if_match(if_match), context=context
    )
    await session.commit()
    response.headers["ETag"] = f'"{pet.version}"'
    return present_pet(pet, user)


@router.delete("/{pet_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pet(
    pet_id: uuid.UUID,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    context: RequestContext = Depends(get_request_context),
) -> Response:
    await PetService.delete_pet(session, user, pet_id, context)
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
