"""
Shared Pydantic schemas: pagination envelopes and simple messages.
"""

import math
from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10
ADMIN_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class PaginationMeta(BaseModel):
    """Pagination metadata returned with every list response."""

    total: int = Field(..., description="Total matching items", ge=0)
    total_pages: int = Field(..., description="Number of pages", ge=0)
    current_page: int = Field(..., description="1-based page number", ge=1)
    limit: int = Field(..., description="Page size", ge=1)
    has_next_page: bool = Field(..., description="Whether a later page exists")
    has_previous_page: bool = Field(..., description="Whether an earlier page exists")

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "PaginationMeta":
        """Compute pagination metadata for a result set."""
        total_pages = math.ceil(total / limit) if total else 0
        return cls(
            total=total,
            total_pages=total_pages,
            current_page=page,
            limit=limit,
            has_next_page=page < total_pages,
            has_previous_page=page > 1,
        )


class PaginatedResponse(BaseModel, Generic[T]):
    """Schema for paginated list responses."""

    model_config = ConfigDict(from_attributes=True)

    data: List[T] = Field(default_factory=list, description="Items on this page")
    pagination: PaginationMeta


class MessageResponse(BaseModel):
    """Schema for plain acknowledgement responses."""

    success: bool = True
    message: str
