"""
Payment transaction model for the adopt-core package.
"""

import enum
import uuid
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy import ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from ..database.types import JSONType, enum_type
from .base import BaseModel


class TransactionStatus(enum.Enum):
    """Gateway outcome of a transaction."""

    SUCCESS = "success"
    PENDING = "pending"
    FAILURE = "failure"
    ERROR = "error"


class TransactionKind(enum.Enum):
    """What the transaction was for."""

    SALE = "sale"
    REFUND = "refund"
    FEE = "fee"
    FREE_PROMOTION = "free_promotion"


class Transaction(BaseModel):
    """
    Recorded payment.

    ``payment_details`` holds the last four card digits at most; full card
    numbers and CVVs are never persisted.
    """

    __tablename__ = "transactions"

    def __init__(self, **kwargs: Any) -> None:
        """Initialize Transaction with default values."""
        if "currency" not in kwargs:
            kwargs["currency"] = "USD"
        if "payment_details" not in kwargs or kwargs["payment_details"] is None:
            kwargs["payment_details"] = {}

        super().__init__(**kwargs)

    amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, comment="Amount charged"
    )

    currency: Mapped[str] = mapped_column(
        String(3), nullable=False, default="USD", comment="ISO 4217 currency"
    )

    status: Mapped[TransactionStatus] = mapped_column(
        enum_type(TransactionStatus, "transaction_status"),
        nullable=False,
        index=True,
        comment="Gateway outcome",
    )

    kind: Mapped[TransactionKind] = mapped_column(
        enum_type(TransactionKind, "transaction_kind"),
        nullable=False,
        index=True,
        comment="Transaction kind",
    )

    gateway: Mapped[str] = mapped_column(
        String(50), nullable=False, comment="Gateway that processed the payment"
    )

    gateway_transaction_id: Mapped[str] = mapped_column(
        String(100), nullable=False, unique=True, comment="Gateway reference"
    )

    payment_details: Mapped[Dict[str, Any]] = mapped_column(
        JSONType, nullable=False, default=dict, comment="Non-sensitive payment data"
    )

    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="User who paid",
    )

    rescue_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("rescues.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="Rescue the payment relates to",
    )

    __table_args__ = (Index("idx_transactions_created", "created_at"),)

    def __repr__(self) -> str:
        return (
            f"<Transaction(id={self.id}, kind={self.kind}, amount={self.amount})>"
        )
