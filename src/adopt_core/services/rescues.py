"""
Rescue organisations: public directory, self-service profile and admin
management.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import (
    AuthorizationException,
    BusinessRuleException,
    NotFoundException,
    ValidationException,
)
from ..models.pet import Pet
from ..models.rescue import Rescue
from ..models.user import User, UserRole
from ..schemas.rescue import RescueCreate, RescueUpdate
from .access import require_rescue
from .audit import AuditAction, AuditService, RequestContext
from .pagination import Page, paginate
from .pet_query import LIKE_ESCAPE, escape_like

logger = logging.getLogger(__name__)


class RescueService:
    """Rescue operations."""

    @staticmethod
    async def list_rescues(
        session: AsyncSession, search: Optional[str] = None, page: int = 1, limit: int = 10
    ) -> Page:
        """List rescues by name, optionally searching name and location."""
        stmt = select(Rescue)
        if search:
            pattern = f"%{escape_like(search)}%"
            stmt = stmt.where(
                or_(
                    Rescue.name.ilike(pattern, escape=LIKE_ESCAPE),
                    Rescue.location.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
        stmt = stmt.order_by(Rescue.name, Rescue.id)
        return await paginate(session, stmt, page, limit)

    @staticmethod
    async def get_rescue(session: AsyncSession, rescue_id: uuid.UUID) -> Rescue:
        rescue = await session.get(Rescue, rescue_id)
        if rescue is None:
            raise NotFoundException("Rescue not found", entity_type="rescue", entity_id=rescue_id)
        return rescue

    @staticmethod
    async def list_members(session: AsyncSession, rescue_id: uuid.UUID) -> list:
        result = await session.execute(
            select(User).where(User.rescue_id == rescue_id).order_by(User.username)
        )
        return list(result.scalars().all())

    @classmethod
    async def create_rescue(
        cls,
        session: AsyncSession,
        admin: User,
        data: RescueCreate,
        context: Optional[RequestContext] = None,
    ) -> Rescue:
        """
        Create a rescue, optionally linking a regular user as its first member.

        Raises:
            NotFoundException: If ``user_id`` does not exist
            ValidationException: If that user is not a plain user
        """
        member: Optional[User] = None
        if data.user_id is not None:
            member = await session.get(User, data.user_id)
            if member is None:
                raise NotFoundException("User not found", entity_type="user", entity_id=data.user_id)
            if member.role != UserRole.USER:
                raise ValidationException("User is not a regular user", field="user_id")
            if member.rescue_id is not None:
                raise ValidationException("User is already associated with a rescue", field="user_id")

        rescue = Rescue(**data.model_dump(exclude={"user_id"}))
        session.add(rescue)
        await session.flush()
        if member is not None:
            member.promote_to_rescue(rescue.id)
            await session.flush()

        await AuditService.log(
            session,
            AuditAction.RESCUE_CREATED,
            user_id=admin.id,
            entity_type="rescue",
            entity_id=rescue.id,
            details={
                "name": rescue.name,
                "linked_user_id": str(member.id) if member else None,
            },
            context=context,
        )
        logger.info(f"Rescue {rescue.name} created")
        return rescue

    @classmethod
    async def update_rescue(
        cls,
        session: AsyncSession,
        actor: User,
        rescue_id: uuid.UUID,
        data: RescueUpdate,
        context: Optional[RequestContext] = None,
    ) -> Rescue:
        """
        Update a rescue profile. Admins may update any rescue, rescue users
        only their own.
        """
        if not actor.is_admin() and not actor.belongs_to_rescue(rescue_id):
            raise AuthorizationException("You can only update your own rescue")
        rescue = await cls.get_rescue(session, rescue_id)

        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items()
                   if v is not None or k in ("website_url", "logo_url", "registration_number")}
        changed = rescue.update_fields(**changes)
        await session.flush()

        await AuditService.log(
            session,
            AuditAction.RESCUE_UPDATED,
            user_id=actor.id,
            entity_type="rescue",
            entity_id=rescue.id,
            details={"changed_fields": sorted(changed)},
            context=context,
        )
        return rescue

    @classmethod
    async def delete_rescue(
        cls,
        session: AsyncSession,
        admin: User,
        rescue_id: uuid.UUID,
        context: Optional[RequestContext] = None,
    ) -> None:
        """Delete a rescue, demoting its members and removing its pets."""
        rescue = await cls.get_rescue(session, rescue_id)
        name = rescue.name

        demoted = await session.execute(
            update(User)
            .where(User.rescue_id == rescue_id)
            .values(role=UserRole.USER, rescue_id=None)
            .execution_options(synchronize_session="fetch")
        )
        pet_count = await session.scalar(
            select(func.count()).select_from(Pet).where(Pet.rescue_id == rescue_id)
        )
        await session.delete(rescue)
        await session.flush()

        await AuditService.log(
            session,
            AuditAction.RESCUE_DELETED,
            user_id=admin.id,
            entity_type="rescue",
            entity_id=rescue_id,
            details={
                "name": name,
                "demoted_users": demoted.rowcount,
                "deleted_pets": pet_count,
            },
            context=context,
        )
        logger.info(f"Rescue {name} deleted with {pet_count} pets")

    @classmethod
    async def remove_member(
        cls,
        session: AsyncSession,
        actor: User,
        user_id: uuid.UUID,
        context: Optional[RequestContext] = None,
    ) -> User:
        """
        Remove a user from the actor's rescue and demote them.

        Raises:
            NotFoundException: If the user is not in the actor's rescue
            BusinessRuleException: If they are the rescue's last member
        """
        rescue_id = require_rescue(actor)
        member = await session.scalar(
            select(User).where(User.id == user_id, User.rescue_id == rescue_id)
        )
        if member is None:
            raise NotFoundException("User not found in this rescue", entity_type="user", entity_id=user_id)

        members = await session.scalar(
            select(func.count()).select_from(User).where(User.rescue_id == rescue_id)
        )
        if members <= 1:
            raise BusinessRuleException(
                "Cannot remove the last user from the rescue", rule_name="rescue_has_member"
            )

        previous_role = UserRole(member.role).value
        member.demote_to_user()
        await session.flush()

        await AuditService.log(
            session,
            AuditAction.RESCUE_USER_REMOVED,
            user_id=actor.id,
            entity_type="user",
            entity_id=member.id,
            details={
                "rescue_id": str(rescue_id),
                "previous_role": previous_role,
                "new_role": UserRole.USER.value,
            },
            context=context,
        )
        return member
