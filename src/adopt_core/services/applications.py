"""
Adoption applications: submission, role-scoped listing and review.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..exceptions import AuthorizationException, BusinessRuleException, NotFoundException
from ..models.application import Application, ApplicationStatus
from ..models.pet import Pet
from ..models.user import User
from ..schemas.application import ApplicationCreate
from .access import can_manage_pet, ensure_can_manage_pet, require_admin
from .audit import AuditAction, AuditService, RequestContext
from .pagination import Page, paginate
from .pets import PetService

logger = logging.getLogger(__name__)


def _with_relations(stmt: Select) -> Select:
    return stmt.options(
        selectinload(Application.pet).selectinload(Pet.rescue),
        selectinload(Application.user),
    )


class ApplicationService:
    """Adoption application workflow."""

    @staticmethod
    async def submit(
        session: AsyncSession,
        user: User,
        data: ApplicationCreate,
        context: Optional[RequestContext] = None,
    ) -> Application:
        """
        Submit an application for an available pet.

        Raises:
            NotFoundException: If the pet does not exist
            BusinessRuleException: If the pet is adopted or the user
                already has a pending application for it
        """
        pet = await PetService.get_pet(session, data.pet_id)
        if pet.is_adopted:
            raise BusinessRuleException("This pet has already been adopted", rule_name="pet_available")

        existing = await session.scalar(
            select(Application.id).where(
                Application.user_id == user.id,
                Application.pet_id == pet.id,
                Application.status == ApplicationStatus.PENDING,
            )
        )
        if existing is not None:
            raise BusinessRuleException(
                "You already have a pending application for this pet",
                rule_name="single_pending_application",
            )

        application = Application(
            user_id=user.id,
            pet_id=pet.id,
            status=ApplicationStatus.PENDING,
            form_data=data.form_data.model_dump(mode="json"),
        )
        session.add(application)
        await session.flush()

        await AuditService.log(
            session,
            AuditAction.APPLICATION_SUBMITTED,
            user_id=user.id,
            entity_type="application",
            entity_id=application.id,
            details={"pet_id": str(pet.id), "pet_name": pet.name},
            context=context,
        )
        logger.info(f"Application {application.id} submitted for pet {pet.id}")
        return await ApplicationService.load(session, application.id)

    @staticmethod
    async def load(session: AsyncSession, application_id: uuid.UUID) -> Application:
        """
        Load an application with its pet and applicant.

        Raises:
            NotFoundException: If it does not exist
        """
        result = await session.execute(
            _with_relations(select(Application).where(Application.id == application_id))
            .execution_options(populate_existing=True)
        )
        application = result.scalar_one_or_none()
        if application is None:
            raise NotFoundException(
                "Application not found", entity_type="application", entity_id=application_id
            )
        return application

    @staticmethod
    async def list_for_viewer(
        session: AsyncSession,
        user: User,
        status: Optional[ApplicationStatus] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page:
        """
        List applications visible to the user, newest first.

        Admins see every application, rescue users those for their
        rescue's pets, everyone else their own.
        """
        stmt = select(Application)
        if user.is_admin():
            pass
        elif user.is_rescue():
            stmt = stmt.join(Pet, Application.pet_id == Pet.id).where(
                Pet.rescue_id == user.rescue_id
            )
        else:
            stmt = stmt.where(Application.user_id == user.id)

        if status is not None:
            stmt = stmt.where(Application.status == ApplicationStatus.parse(status))
        stmt = _with_relations(stmt.order_by(Application.created_at.desc(), Application.id))
        return await paginate(session, stmt, page, limit)

    @staticmethod
    async def list_for_user(
        session: AsyncSession, user_id: uuid.UUID, page: int = 1, limit: int = 20
    ) -> Page:
        stmt = _with_relations(
            select(Application)
            .where(Application.user_id == user_id)
            .order_by(Application.created_at.desc(), Application.id)
        )
        return await paginate(session, stmt, page, limit)

    @staticmethod
    async def list_for_pet(
        session: AsyncSession, user: User, pet_id: uuid.UUID, page: int = 1, limit: int = 20
    ) -> Page:
        """
        Raises:
            AuthorizationException: If the user neither owns the pet nor is an admin
        """
        pet = await PetService.get_pet(session, pet_id)
        ensure_can_manage_pet(user, pet)
        stmt = _with_relations(
            select(Application)
            .where(Application.pet_id == pet_id)
            .order_by(Application.created_at.desc(), Application.id)
        )
        return await paginate(session, stmt, page, limit)

    @classmethod
    async def get_for_viewer(
        cls, session: AsyncSession, user: User, application_id: uuid.UUID
    ) -> Application:
        """
        Raises:
            AuthorizationException: If the user is not the applicant, the
                owning rescue or an admin
        """
        application = await cls.load(session, application_id)
        if application.user_id != user.id and not can_manage_pet(user, application.pet):
            raise AuthorizationException("You do not have permission to view this application")
        return application

    @classmethod
    async def update_status(
        cls,
        session: AsyncSession,
        user: User,
        application_id: uuid.UUID,
        status: ApplicationStatus,
        context: Optional[RequestContext] = None,
    ) -> Application:
        """
        Accept or reject an application.

        Raises:
            AuthorizationException: If the user does not own the pet
        """
        application = await cls.load(session, application_id)
        if not can_manage_pet(user, application.pet):
            raise AuthorizationException(
                "You do not have permission to update this application"
            )

        status = ApplicationStatus.parse(status)
        application.status = status
        await session.flush()

        if status != ApplicationStatus.PENDING:
            action = (
                AuditAction.APPLICATION_APPROVED
                if status == ApplicationStatus.ACCEPTED
                else AuditAction.APPLICATION_REJECTED
            )
            await AuditService.log(
                session,
                action,
                user_id=user.id,
                entity_type="application",
                entity_id=application.id,
                details={"pet_id": str(application.pet_id), "status": status.value},
                context=context,
            )
        return application

    @classmethod
    async def update_details(
        cls,
        session: AsyncSession,
        user: User,
        application_id: uuid.UUID,
        additional_details: str,
        context: Optional[RequestContext] = None,
    ) -> Application:
        """
        Let the applicant add details after submission.

        Raises:
            AuthorizationException: If the user is not the applicant
        """
        application = await cls.load(session, application_id)
        if application.user_id != user.id:
            raise AuthorizationException("You are not authorized to update this application")

        form_data = dict(application.form_data or {})
        form_data["additional_details"] = additional_details
        application.form_data = form_data
        await session.flush()

        await AuditService.log(
            session,
            AuditAction.APPLICATION_UPDATED,
            user_id=user.id,
            entity_type="application",
            entity_id=application.id,
            details={"changed_fields": ["additional_details"]},
            context=context,
        )
        return application

    @classmethod
    async def delete(
        cls,
        session: AsyncSession,
        user: User,
        application_id: uuid.UUID,
        context: Optional[RequestContext] = None,
    ) -> None:
        """Admin-only removal of an application."""
        require_admin(user)
        application = await cls.load(session, application_id)
        await session.delete(application)
        await session.flush()

        await AuditService.log(
            session,
            AuditAction.APPLICATION_DELETED,
            user_id=user.id,
            entity_type="application",
            entity_id=application_id,
            context=context,
        )
