"""
Transaction queries for rescues and admins.
"""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import NotFoundException, ValidationException
from ..models.transaction import Transaction, TransactionKind, TransactionStatus
from ..utils.datetime_utils import month_window
from .pagination import Page, paginate


class TransactionService:
    """Read access to recorded transactions."""

    @staticmethod
    async def list_transactions(
        session: AsyncSession,
        rescue_id: Optional[uuid.UUID] = None,
        status: Optional[TransactionStatus] = None,
        kind: Optional[TransactionKind] = None,
        year: Optional[int] = None,
        month: Optional[int] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page:
        """
        List transactions newest first.

        ``year`` alone selects a calendar year; with ``month`` it selects
        that month.

        Raises:
            ValidationException: If a month is given without a year or is out of range
        """
        stmt = select(Transaction)
        if rescue_id is not None:
            stmt = stmt.where(Transaction.rescue_id == rescue_id)
        if status is not None:
            stmt = stmt.where(Transaction.status == TransactionStatus(status))
        if kind is not None:
            stmt = stmt.where(Transaction.kind == TransactionKind(kind))
        if month is not None and year is None:
            raise ValidationException("A month filter requires a year", field="month")
        if year is not None:
            try:
                start, end = month_window(year, month)
            except ValueError as e:
                raise ValidationException(str(e), field="month", value=month)
            stmt = stmt.where(Transaction.created_at >= start, Transaction.created_at < end)

        stmt = stmt.order_by(Transaction.created_at.desc(), Transaction.id)
        return await paginate(session, stmt, page, limit)

    @staticmethod
    async def get_transaction(session: AsyncSession, transaction_id: uuid.UUID) -> Transaction:
        transaction = await session.get(Transaction, transaction_id)
        if transaction is None:
            raise NotFoundException(
                "Transaction not found", entity_type="transaction", entity_id=transaction_id
            )
        return transaction
