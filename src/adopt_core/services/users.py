"""
User accounts: registration, login, profile, password reset and admin
management.

Passwords and reset tokens are only ever stored as bcrypt hashes, and
neither reaches a log line or an audit record.
"""

import logging
import uuid
from typing import Optional, Tuple

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import (
    AuthenticationException,
    BusinessRuleException,
    NotFoundException,
    ValidationException,
)
from ..models.rescue import Rescue
from ..models.user import User, UserRole
from ..schemas.user import AdminUserUpdate, UserRegister, UserUpdate
from ..utils.config import AppSettings
from ..utils.datetime_utils import get_current_utc, hours_from_now, is_in_past
from .audit import AuditAction, AuditService, RequestContext
from .auth import create_access_token, generate_reset_token, hash_password, verify_password
from .pagination import Page, paginate
from .pet_query import LIKE_ESCAPE, escape_like

logger = logging.getLogger(__name__)

DUPLICATE_ACCOUNT = "Username or email already exists"
INVALID_CREDENTIALS = "Invalid credentials"
INVALID_RESET_TOKEN = "Invalid or expired reset token"
RESET_REQUESTED = "If an account exists for that email, a reset link has been sent"


class UserService:
    """Account operations."""

    @staticmethod
    async def get_user(session: AsyncSession, user_id: uuid.UUID) -> User:
        user = await session.get(User, user_id)
        if user is None:
            raise NotFoundException("User not found", entity_type="user", entity_id=user_id)
        return user

    @staticmethod
    async def get_by_email(session: AsyncSession, email: str) -> Optional[User]:
        result = await session.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    @staticmethod
    async def _ensure_unique(
        session: AsyncSession,
        username: Optional[str],
        email: Optional[str],
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        clauses = []
        if username:
            clauses.append(User.username == username)
        if email:
            clauses.append(User.email == email.lower())
        if not clauses:
            return
        stmt = select(User.id).where(or_(*clauses))
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        if await session.scalar(stmt.limit(1)) is not None:
            raise ValidationException(DUPLICATE_ACCOUNT)

    @classmethod
    async def register(
        cls,
        session: AsyncSession,
        data: UserRegister,
        settings: AppSettings,
        context: Optional[RequestContext] = None,
    ) -> Tuple[User, str]:
        """
        Create a regular user account and issue a token.

        Raises:
            ValidationException: If the username or email is taken
        """
        await cls._ensure_unique(session, data.username, data.email)

        user = User(
            username=data.username,
            email=data.email,
            password_hash=hash_password(data.password, rounds=settings.bcrypt_rounds),
            role=UserRole.USER,
            profile_info=dict(data.profile_info),
        )
        session.add(user)
        await session.flush()

        await AuditService.log(
            session,
            AuditAction.USER_CREATED,
            user_id=user.id,
            entity_type="user",
            entity_id=user.id,
            details={"username": user.username, "role": user.role.value},
            context=context,
        )
        logger.info(f"Registered user {user.username}")
        return user, create_access_token(user, settings)

    @classmethod
    async def login(
        cls,
        session: AsyncSession,
        email: str,
        password: str,
        settings: AppSettings,
        context: Optional[RequestContext] = None,
    ) -> Tuple[User, str]:
        """
        Authenticate by email and password.

        Raises:
            AuthenticationException: If the credentials do not match
        """
        user = await cls.get_by_email(session, email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Failed login attempt")
            raise AuthenticationException(INVALID_CREDENTIALS)

        user.last_login = get_current_utc()
        await session.flush()
        await AuditService.log(
            session,
            AuditAction.LOGIN,
            user_id=user.id,
            entity_type="user",
            entity_id=user.id,
            context=context,
        )
        return user, create_access_token(user, settings)

    @classmethod
    async def update_profile(
        cls,
        session: AsyncSession,
        user: User,
        data: UserUpdate,
        settings: AppSettings,
        context: Optional[RequestContext] = None,
    ) -> User:
        """
        Update the signed-in user's own profile.

        Raises:
            ValidationException: If the new username/email is taken or the
                current password is wrong
        """
        await cls._ensure_unique(session, data.username, data.email, exclude_id=user.id)

        password_changed = False
        if data.password is not None:
            if not verify_password(data.current_password or "", user.password_hash):
                raise ValidationException("Current password is incorrect", field="current_password")
            user.password_hash = hash_password(data.password, rounds=settings.bcrypt_rounds)
            password_changed = True

        changes = data.model_dump(
            exclude_unset=True, exclude={"password", "current_password"}
        )
        changes = {k: v for k, v in changes.items() if v is not None}
        changed = user.update_fields(**changes)
        await session.flush()

        await AuditService.log(
            session,
            AuditAction.USER_UPDATED,
            user_id=user.id,
            entity_type="user",
            entity_id=user.id,
            details={"changed_fields": sorted(changed), "password_changed": password_changed},
            context=context,
        )
        return user

    @classmethod
    async def request_password_reset(
        cls,
        session: AsyncSession,
        email: str,
        settings: AppSettings,
        context: Optional[RequestContext] = None,
    ) -> Optional[str]:
        """
        Start a password reset.

        Unknown emails are accepted silently so the endpoint cannot be used
        to discover accounts.

        Returns:
            The plain token when the account exists and tokens are exposed
            by configuration, otherwise None
        """
        user = await cls.get_by_email(session, email)
        if user is None:
            return None

        token = generate_reset_token()
        user.reset_token_hash = hash_password(token, rounds=settings.bcrypt_rounds)
        user.reset_token_expires = hours_from_now(settings.password_reset_expiration_hours)
        await session.flush()

        await AuditService.log(
            session,
            AuditAction.PASSWORD_RESET_REQUESTED,
            user_id=user.id,
            entity_type="user",
            entity_id=user.id,
            context=context,
        )
        return token if settings.expose_reset_tokens else None

    @classmethod
    async def reset_password(
        cls,
        session: AsyncSession,
        email: str,
        token: str,
        new_password: str,
        settings: AppSettings,
        context: Optional[RequestContext] = None,
    ) -> User:
        """
        Complete a password reset and invalidate the token.

        Raises:
            ValidationException: If the token is wrong or expired
        """
        user = await cls.get_by_email(session, email)
        if (
            user is None
            or not user.reset_token_hash
            or is_in_past(user.reset_token_expires)
            or not verify_password(token, user.reset_token_hash)
        ):
            raise ValidationException(INVALID_RESET_TOKEN, field="token")

        user.password_hash = hash_password(new_password, rounds=settings.bcrypt_rounds)
        user.clear_reset_token()
        await session.flush()

        await AuditService.log(
            session,
            AuditAction.PASSWORD_RESET_COMPLETED,
            user_id=user.id,
            entity_type="user",
            entity_id=user.id,
            context=context,
        )
        return user

    @staticmethod
    async def list_users(
        session: AsyncSession,
        search: Optional[str] = None,
        role: Optional[UserRole] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page:
        """List users, optionally searching username/email and filtering by role."""
        stmt = select(User)
        if search:
            pattern = f"%{escape_like(search)}%"
            stmt = stmt.where(
                or_(
                    User.username.ilike(pattern, escape=LIKE_ESCAPE),
                    User.email.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
        if role is not None:
            stmt = stmt.where(User.role == UserRole(role))
        stmt = stmt.order_by(User.created_at.desc(), User.id)
        return await paginate(session, stmt, page, limit)

    @classmethod
    async def admin_update_user(
        cls,
        session: AsyncSession,
        admin: User,
        user_id: uuid.UUID,
        data: AdminUserUpdate,
        context: Optional[RequestContext] = None,
    ) -> User:
        """
        Update another user's role, rescue link, username or email.

        Raises:
            ValidationException: If the result would be inconsistent
            NotFoundException: If the user or rescue does not exist
        """
        user = await cls.get_user(session, user_id)
        await cls._ensure_unique(session, data.username, data.email, exclude_id=user.id)

        changes = data.model_dump(exclude_unset=True)
        if changes.get("rescue_id") is not None:
            if await session.get(Rescue, changes["rescue_id"]) is None:
                raise NotFoundException("Rescue not found", entity_type="rescue")
        if "role" in changes and changes["role"] is not None:
            changes["role"] = UserRole(changes["role"])
            if changes["role"] == UserRole.USER and "rescue_id" not in changes:
                changes["rescue_id"] = None

        new_role = changes.get("role", user.role)
        new_rescue = changes.get("rescue_id", user.rescue_id)
        if new_role == UserRole.RESCUE and new_rescue is None:
            raise ValidationException("Rescue users must be linked to a rescue", field="rescue_id")

        changes = {k: v for k, v in changes.items() if v is not None or k == "rescue_id"}
        changed = user.update_fields(**changes)
        await session.flush()

        await AuditService.log(
            session,
            AuditAction.USER_UPDATED,
            user_id=admin.id,
            entity_type="user",
            entity_id=user.id,
            details={"changed_fields": sorted(changed), "by_admin": True},
            context=context,
        )
        return user

    @classmethod
    async def delete_user(
        cls,
        session: AsyncSession,
        admin: User,
        user_id: uuid.UUID,
        context: Optional[RequestContext] = None,
    ) -> None:
        """
        Raises:
            BusinessRuleException: If an admin tries to delete themselves
        """
        if admin.id == user_id:
            raise BusinessRuleException("You cannot delete your own account", rule_name="self_delete")
        user = await cls.get_user(session, user_id)
        username = user.username

        await session.delete(user)
        await session.flush()
        await AuditService.log(
            session,
            AuditAction.USER_DELETED,
            user_id=admin.id,
            entity_type="user",
            entity_id=user_id,
            details={"username": username},
            context=context,
        )
        logger.info(f"User {username} deleted by admin {admin.id}")
