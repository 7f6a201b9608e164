"""
Custom exceptions for the adopt-core package.

This module contains custom exception classes for error handling
throughout the adoption platform.
"""

from .core_exceptions import (
    AdoptCoreException,
    AuthenticationException,
    AuthorizationException,
    BusinessRuleException,
    ConfigurationException,
    ConflictException,
    ConnectionException,
    DatabaseConfigException,
    DatabaseException,
    MigrationException,
    NotFoundException,
    PaymentException,
    TransactionException,
    ValidationException,
    create_error_response,
    format_validation_errors,
)

__all__ = [
    # Base exception
    "AdoptCoreException",
    # Database exceptions
    "DatabaseException",
    "ConnectionException",
    "TransactionException",
    "MigrationException",
    # Validation exceptions
    "ValidationException",
    "BusinessRuleException",
    # Access and state exceptions
    "NotFoundException",
    "AuthenticationException",
    "AuthorizationException",
    "ConflictException",
    "PaymentException",
    # Configuration exceptions
    "ConfigurationException",
    "DatabaseConfigException",
    # Utility functions
    "format_validation_errors",
    "create_error_response",
]
