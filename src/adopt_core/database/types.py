"""
Database-agnostic column types for adopt-core.

This module provides column types that work across different database backends,
particularly for handling JSON data and enums in both PostgreSQL and SQLite.
"""

import enum
from typing import Any, Type

from sqlalchemy import JSON, Enum, TypeDecorator
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.engine import Dialect
from sqlalchemy.sql.type_api import TypeEngine


class JSONType(TypeDecorator):
    """
    Database-agnostic JSON column type.

    Uses JSONB for PostgreSQL and JSON for other databases (like SQLite).
    Values are copied on bind so later in-place edits of the caller's
    dict or list never leak into the persisted row.
    """

    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect: Dialect) -> TypeEngine[Any]:
        """Load the appropriate JSON type based on the database dialect."""
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSONB())
        else:
            return dialect.type_descriptor(JSON())

    def process_bind_param(self, value: Any, dialect: Dialect) -> Any:
        """Process value when storing to database."""
        if value is None:
            return None
        if isinstance(value, dict):
            return dict(value)
        if isinstance(value, (list, tuple)):
            return list(value)
        return value


def enum_type(enum_cls: Type[enum.Enum], name: str) -> Enum:
    """
    Build an Enum column type that persists member values, not names.

    Args:
        enum_cls: Python enum class whose values are lowercase strings
        name: Database type name (used by PostgreSQL CREATE TYPE)

    Returns:
        Configured SQLAlchemy Enum type
    """
    return Enum(
        enum_cls,
        name=name,
        values_callable=lambda members: [member.value for member in members],
        validate_strings=True,
    )
