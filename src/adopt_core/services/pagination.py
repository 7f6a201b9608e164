"""
Offset pagination over SQLAlchemy select statements.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.common import MAX_PAGE_SIZE, PaginationMeta


@dataclass
class Page:
    """One page of ORM results plus pagination metadata."""

    items: List[Any] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10

    @property
    def meta(self) -> PaginationMeta:
        return PaginationMeta.build(self.total, self.page, self.limit)

    def to_response(self, serializer: Callable[[Any], Any]) -> dict:
        """Render as ``{"data": [...], "pagination": {...}}``."""
        return {
            "data": [serializer(item) for item in self.items],
            "pagination": self.meta,
        }


def clamp_page(page: Optional[int], limit: Optional[int], default_limit: int) -> Tuple[int, int]:
    """Normalize page/limit the way every list endpoint does."""
    page = max(1, page or 1)
    limit = limit or default_limit
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    return page, limit


async def count_rows(session: AsyncSession, stmt: Select) -> int:
    """Count the rows a select would return, ignoring its ordering."""
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    return (await session.execute(count_stmt)).scalar_one()


async def paginate(session: AsyncSession, stmt: Select, page: int, limit: int) -> Page:
    """
    Execute a select with offset pagination.

    An out-of-range page yields an empty item list with the real total.
    """
    page, limit = clamp_page(page, limit, limit)
    total = await count_rows(session, stmt)
    items: List[Any] = []
    if total and (page - 1) * limit < total:
        result = await session.execute(stmt.offset((page - 1) * limit).limit(limit))
        items = list(result.scalars().unique().all())
    return Page(items=items, total=total, page=page, limit=limit)
