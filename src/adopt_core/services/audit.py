"""
Audit trail writer and query helpers.

Audit writes share the caller's transaction but run inside a SAVEPOINT,
so a failed audit insert is rolled back on its own and the main
operation carries on.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.audit_log import AuditLog
from ..utils.datetime_utils import ensure_utc
from .pagination import Page, paginate

logger = logging.getLogger(__name__)

# Keys that must never reach the audit table
REDACTED_KEYS = frozenset(
    {"password", "current_password", "new_password", "password_hash", "token",
     "reset_token", "card_number", "cvv"}
)


class AuditAction:
    """Audit action names."""

    LOGIN = "login"
    USER_CREATED = "user_created"
    USER_UPDATED = "user_updated"
    USER_DELETED = "user_deleted"
    PASSWORD_RESET_REQUESTED = "password_reset_requested"
    PASSWORD_RESET_COMPLETED = "password_reset_completed"
    PET_CREATED = "pet_created"
    PET_UPDATED = "pet_updated"
    PET_DELETED = "pet_deleted"
    PET_PROMOTION_PURCHASED = "pet_promotion_purchased"
    APPLICATION_SUBMITTED = "application_submitted"
    APPLICATION_UPDATED = "application_updated"
    APPLICATION_APPROVED = "application_approved"
    APPLICATION_REJECTED = "application_rejected"
    APPLICATION_DELETED = "application_deleted"
    RESCUE_CREATED = "rescue_created"
    RESCUE_UPDATED = "rescue_updated"
    RESCUE_DELETED = "rescue_deleted"
    RESCUE_USER_REMOVED = "user_removed_from_rescue"
    RESCUE_REQUEST_SUBMITTED = "rescue_request_submitted"
    RESCUE_REQUEST_APPROVED = "rescue_request_approved"
    RESCUE_REQUEST_REJECTED = "rescue_request_rejected"
    COUPON_CREATED = "coupon_created"
    COUPON_UPDATED = "coupon_updated"
    COUPON_DELETED = "coupon_deleted"


@dataclass(frozen=True)
class RequestContext:
    """Client details recorded alongside audit events."""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


def redact(details: Dict[str, Any]) -> Dict[str, Any]:
    """Drop secret-bearing keys from audit details, recursively."""
    cleaned: Dict[str, Any] = {}
    for key, value in details.items():
        if key in REDACTED_KEYS:
            continue
        cleaned[key] = redact(value) if isinstance(value, dict) else value
    return cleaned


class AuditService:
    """Records and lists audit events."""

    @staticmethod
    async def log(
        session: AsyncSession,
        action: str,
        user_id: Optional[uuid.UUID] = None,
        entity_type: Optional[str] = None,
        entity_id: Any = None,
        details: Optional[Dict[str, Any]] = None,
        context: Optional[RequestContext] = None,
    ) -> Optional[AuditLog]:
        """
        Record an audit event.

        Returns:
            The stored entry, or None if the write failed
        """
        context = context or RequestContext()
        entry = AuditLog(
            action=action,
            user_id=user_id,
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            details=redact(details or {}),
            ip_address=context.ip_address,
            user_agent=(context.user_agent or "")[:500] or None,
        )
        # Pending work belongs to the caller; flush it outside the savepoint
        await session.flush()
        try:
            async with session.begin_nested():
                session.add(entry)
        except SQLAlchemyError as e:
            logger.error(f"Failed to write audit event {action}: {e}")
            return None
        return entry

    @staticmethod
    async def list_logs(
        session: AsyncSession,
        action: Optional[str] = None,
        entity_type: Optional[str] = None,
        user_id: Optional[uuid.UUID] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page:
        """List audit events, newest first."""
        stmt = select(AuditLog)
        if action:
            stmt = stmt.where(AuditLog.action == action)
        if entity_type:
            stmt = stmt.where(AuditLog.entity_type == entity_type)
        if user_id:
            stmt = stmt.where(AuditLog.user_id == user_id)
        if start_date:
            stmt = stmt.where(AuditLog.created_at >= ensure_utc(start_date))
        if end_date:
            stmt = stmt.where(AuditLog.created_at <= ensure_utc(end_date))
        stmt = stmt.order_by(AuditLog.created_at.desc(), AuditLog.id)
        return await paginate(session, stmt, page, limit)
