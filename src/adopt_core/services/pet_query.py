"""
Pet listing query builder.

Turns a validated ``PetQuery`` into a SQLAlchemy select with filters,
ordering and pagination, applying the adopted-pet visibility rule for
the current viewer.
"""

import logging
from typing import List, Optional

from sqlalchemy import ColumnElement, Select, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models.pet import Pet
from ..models.user import User
from ..schemas.pet import PetQuery, PetSortField, SortOrder
from .access import can_view_adopted
from .pagination import Page, paginate

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    PetSortField.DATE_LISTED: Pet.date_listed,
    PetSortField.AGE: Pet.age,
    PetSortField.NAME: Pet.name,
}

LIKE_ESCAPE = "\\"


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


def build_pet_filters(query: PetQuery, viewer: Optional[User] = None) -> List[ColumnElement]:
    """Build the WHERE clauses for a pet listing."""
    filters: List[ColumnElement] = []

    if query.species:
        filters.append(Pet.species.in_(query.species))
    if query.size:
        filters.append(Pet.size.in_(query.size))
    if query.applies_min_age:
        filters.append(Pet.age >= query.min_age)
    if query.applies_max_age:
        filters.append(Pet.age <= query.max_age)
    if query.search:
        pattern = f"%{escape_like(query.search)}%"
        filters.append(
            or_(
                Pet.name.ilike(pattern, escape=LIKE_ESCAPE),
                Pet.description.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
    if query.rescue_id is not None:
        filters.append(Pet.rescue_id == query.rescue_id)

    if not (query.show_adopted and can_view_adopted(viewer, query.rescue_id)):
        filters.append(Pet.is_adopted.is_(False))

    return filters


def build_pet_query(query: PetQuery, viewer: Optional[User] = None) -> Select:
    """
    Build the full listing select: filters, ordering and eager loads.

    Promoted pets come first when ``promoted_first`` is set; ties are
    always broken by primary key so pages are stable.
    """
    column = SORT_COLUMNS[query.sort]
    ordering = [column.asc() if query.order == SortOrder.ASC else column.desc()]
    if query.promoted_first:
        ordering.insert(0, Pet.is_promoted.desc())
    ordering.append(Pet.id.asc())

    return (
        select(Pet)
        .where(*build_pet_filters(query, viewer))
        .options(selectinload(Pet.rescue))
        .order_by(*ordering)
    )


async def search_pets(
    session: AsyncSession, query: PetQuery, viewer: Optional[User] = None
) -> Page:
    """Run a pet listing and return one page of results."""
    stmt = build_pet_query(query, viewer)
    page = await paginate(session, stmt, query.page, query.limit)
    logger.debug(
        f"Pet search returned {len(page.items)} of {page.total} "
        f"(page {page.page}, limit {page.limit})"
    )
    return page
