"""
Database connection, session management, and migration utilities.

This module provides async SQLAlchemy engine configuration, session management,
column types and migration utilities for the adoption platform.
"""

from .connection import (
    check_connection,
    close_engine,
    create_engine,
    create_engine_from_config,
    wait_for_database,
)
from .session import SessionManager
from .types import JSONType, enum_type

__all__ = [
    # Connection utilities
    "create_engine",
    "create_engine_from_config",
    "check_connection",
    "close_engine",
    "wait_for_database",
    # Session management
    "SessionManager",
    # Column types
    "JSONType",
    "enum_type",
]
