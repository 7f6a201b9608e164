"""
Utility functions and helper modules.

This module provides common utility functions for datetime handling,
validation, configuration management, and other shared functionality.
"""

from .config import (
    AppSettings,
    ConfigError,
    DatabaseConfig,
    DatabaseURLValidator,
    EnvironmentConfig,
    LoggingConfigurator,
    LogLevel,
)
from .datetime_utils import (
    ensure_utc,
    get_current_utc,
    hours_from_now,
    is_in_past,
    month_window,
)
from .validation import (
    card_expiry_valid,
    cvv_valid,
    digits_only,
    is_valid_username,
    luhn_checksum_valid,
    sanitize_string,
    sanitize_text,
    strip_html,
)

__all__ = [
    # DateTime utilities
    "get_current_utc",
    "ensure_utc",
    "is_in_past",
    "hours_from_now",
    "month_window",
    # Validation utilities
    "sanitize_string",
    "sanitize_text",
    "strip_html",
    "is_valid_username",
    "digits_only",
    "luhn_checksum_valid",
    "card_expiry_valid",
    "cvv_valid",
    # Configuration utilities
    "ConfigError",
    "LogLevel",
    "EnvironmentConfig",
    "DatabaseURLValidator",
    "DatabaseConfig",
    "LoggingConfigurator",
    "AppSettings",
]
