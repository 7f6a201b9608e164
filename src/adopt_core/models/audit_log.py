"""
Audit log model for the adopt-core package.

Rows are append-only: nothing in the package updates or deletes them.
"""

import uuid
from typing import Any, Dict, Optional

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ..database.types import JSONType
from .base import BaseModel


class AuditLog(BaseModel):
    """Single audited action."""

    __tablename__ = "audit_logs"

    def __init__(self, **kwargs: Any) -> None:
        """Initialize AuditLog with default values."""
        if "details" not in kwargs or kwargs["details"] is None:
            kwargs["details"] = {}

        super().__init__(**kwargs)

    action: Mapped[str] = mapped_column(
        String(100), nullable=False, index=True, comment="Action name, e.g. pet_created"
    )

    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        nullable=True, index=True, comment="Acting user, null for anonymous"
    )

    entity_type: Mapped[Optional[str]] = mapped_column(
        String(50), nullable=True, index=True, comment="Affected entity type"
    )

    entity_id: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, comment="Affected entity identifier"
    )

    details: Mapped[Dict[str, Any]] = mapped_column(
        JSONType, nullable=False, default=dict, comment="Action-specific details"
    )

    ip_address: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, comment="Client IP address"
    )

    user_agent: Mapped[Optional[str]] = mapped_column(
        String(500), nullable=True, comment="Client user agent"
    )

    __table_args__ = (Index("idx_audit_logs_created", "created_at"),)

    def __repr__(self) -> str:
        return f"<AuditLog(action='{self.action}', entity={self.entity_type})>"
