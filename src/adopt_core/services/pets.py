"""
Pet CRUD operations with ownership checks and optimistic concurrency.
"""

import logging
import uuid
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.exc import StaleDataError

from ..exceptions import (
    AuthorizationException,
    ConflictException,
    NotFoundException,
    ValidationException,
)
from ..models.pet import Pet, PetSize, PetSpecies, generate_reference_number
from ..models.rescue import Rescue
from ..models.user import User
from ..schemas.pet import PetCreate, PetUpdate
from .access import ensure_can_manage_pet, require_rescue_or_admin
from .audit import AuditAction, AuditService, RequestContext

logger = logging.getLogger(__name__)

REFERENCE_ATTEMPTS = 5


class PetService:
    """Create, read, update and delete pets."""

    @staticmethod
    async def get_pet(session: AsyncSession, pet_id: uuid.UUID) -> Pet:
        """
        Load a pet with its rescue.

        Raises:
            NotFoundException: If no pet has this id
        """
        result = await session.execute(
            select(Pet).where(Pet.id == pet_id).options(selectinload(Pet.rescue))
        )
        pet = result.scalar_one_or_none()
        if pet is None:
            raise NotFoundException("Pet not found", entity_type="pet", entity_id=pet_id)
        return pet

    @staticmethod
    async def _unique_reference(session: AsyncSession) -> str:
        for _ in range(REFERENCE_ATTEMPTS):
            reference = generate_reference_number()
            taken = await session.scalar(
                select(Pet.id).where(Pet.reference_number == reference)
            )
            if taken is None:
                return reference
        raise ConflictException("Could not allocate a unique reference number")

    @staticmethod
    async def _resolve_rescue(
        session: AsyncSession, user: User, requested: Optional[uuid.UUID]
    ) -> uuid.UUID:
        if not user.is_admin():
            if requested is not None and requested != user.rescue_id:
                raise AuthorizationException("You can only add pets to your own rescue")
            return user.rescue_id

        if requested is None:
            raise ValidationException("rescue_id is required", field="rescue_id")
        if await session.get(Rescue, requested) is None:
            raise NotFoundException("Rescue not found", entity_type="rescue", entity_id=requested)
        return requested

    @classmethod
    async def create_pet(
        cls,
        session: AsyncSession,
        user: User,
        data: PetCreate,
        context: Optional[RequestContext] = None,
    ) -> Pet:
        """
        List a new pet.

        Raises:
            AuthorizationException: If the user is not a rescue or admin, or
                targets another rescue
        """
        require_rescue_or_admin(user)
        rescue_id = await cls._resolve_rescue(session, user, data.rescue_id)

        pet = Pet(
            reference_number=await cls._unique_reference(session),
            name=data.name,
            species=PetSpecies(data.species),
            age=data.age,
            size=PetSize(data.size),
            description=data.description,
            image_url=data.image_url,
            gallery=list(data.gallery),
            rescue_id=rescue_id,
            internal_notes=data.internal_notes,
        )
        session.add(pet)
        await session.flush()
        await session.refresh(pet, ["rescue"])

        await AuditService.log(
            session,
            AuditAction.PET_CREATED,
            user_id=user.id,
            entity_type="pet",
            entity_id=pet.id,
            details={"name": pet.name, "reference_number": pet.reference_number},
            context=context,
        )
        logger.info(f"Pet {pet.reference_number} listed by rescue {rescue_id}")
        return pet

    @classmethod
    async def update_pet(
        cls,
        session: AsyncSession,
        user: User,
        pet_id: uuid.UUID,
        data: PetUpdate,
        expected_version: Optional[int] = None,
        context: Optional[RequestContext] = None,
    ) -> Pet:
        """
        Update a pet.

        ``data.version`` or ``expected_version`` (from ``If-Match``) must
        match the stored version when given.

        Raises:
            AuthorizationException: If the user does not own the pet, or a
                rescue user tries to change the promotion flag
            ConflictException: If the pet changed since the client read it
        """
        pet = await cls.get_pet(session, pet_id)
        ensure_can_manage_pet(user, pet)

        changes: Dict[str, Any] = data.changes()
        if "is_promoted" in changes and not user.is_admin():
            raise AuthorizationException("Only admins can change promotion status")

        expected = data.version if data.version is not None else expected_version
        if expected is not None and expected != pet.version:
            raise ConflictException(
                "Pet was modified by another request", current_version=pet.version
            )

        if "species" in changes:
            changes["species"] = PetSpecies(changes["species"])
        if "size" in changes:
            changes["size"] = PetSize(changes["size"])
        for required in ("name", "species", "age", "size", "description", "gallery"):
            if required in changes and changes[required] is None:
                raise ValidationException(f"{required} cannot be null", field=required)

        changed = pet.update_fields(**changes)
        try:
            await session.flush()
        except StaleDataError:
            raise ConflictException("Pet was modified by another request")

        if changed:
            await AuditService.log(
                session,
                AuditAction.PET_UPDATED,
                user_id=user.id,
                entity_type="pet",
                entity_id=pet.id,
                details={"name": pet.name, "changed_fields": sorted(changed)},
                context=context,
            )
        return pet

    @classmethod
    async def delete_pet(
        cls,
        session: AsyncSession,
        user: User,
        pet_id: uuid.UUID,
        context: Optional[RequestContext] = None,
    ) -> None:
        """Delete a pet owned by the user's rescue (or any pet, for admins)."""
        pet = await cls.get_pet(session, pet_id)
        ensure_can_manage_pet(user, pet)
        name = pet.name

        await session.delete(pet)
        try:
            await session.flush()
        except StaleDataError:
            raise ConflictException("Pet was modified by another request")

        await AuditService.log(
            session,
            AuditAction.PET_DELETED,
            user_id=user.id,
            entity_type="pet",
            entity_id=pet_id,
            details={"name": name},
            context=context,
        )
        logger.info(f"Pet {pet_id} deleted by user {user.id}")
