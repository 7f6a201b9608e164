"""
Exception hierarchy for the adoption platform.

Every exception carries the HTTP status the API answers with, so route
handlers raise domain errors and never build responses themselves. The
API turns them into the ``{"success": false, "error": {...}}`` envelope
through ``create_error_response``.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse, urlunparse

SENSITIVE_CONFIG_KEYS = ("password", "secret", "key", "token", "credential")


class AdoptCoreException(Exception):
    """
    Base class for all adopt-core errors.

    Attributes:
        message: Human-readable message, shown to API clients
        error_code: Machine-readable code; defaults to the class name
        details: Extra context, included in the envelope unless it is a
            database error
        status_code: HTTP status the API responds with
    """

    status_code = 500

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def log_error(
        self, logger: Optional[logging.Logger] = None, level: int = logging.ERROR
    ) -> None:
        """Log the message, attaching type, code and details as ``exception_data``."""
        logger = logger or logging.getLogger(__name__)
        logger.log(
            level,
            f"{self.error_code}: {self.message}",
            extra={
                "exception_data": {
                    "error_type": self.__class__.__name__,
                    "error_code": self.error_code,
                    "details": self.details,
                }
            },
        )

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class DatabaseException(AdoptCoreException):
    """A database operation failed. Details stay server-side."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message, error_code, details)
        self.original_error = original_error
        if original_error is not None:
            self.details.setdefault("original_error", str(original_error))


class ConnectionException(DatabaseException):
    """The database could not be reached."""

    def __init__(
        self,
        message: str = "Database connection failed",
        database_url: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {}
        if database_url:
            details["database_url"] = self._strip_credentials(database_url)
        super().__init__(message, "DATABASE_CONNECTION_ERROR", details, original_error)

    @staticmethod
    def _strip_credentials(url: str) -> str:
        parsed = urlparse(url)
        if not parsed.hostname:
            return url
        netloc = f"{parsed.hostname}:{parsed.port}" if parsed.port else parsed.hostname
        return urlunparse(parsed._replace(netloc=netloc))


class TransactionException(DatabaseException):
    def __init__(
        self,
        message: str = "Database transaction failed",
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {"operation": operation} if operation else {}
        super().__init__(message, "DATABASE_TRANSACTION_ERROR", details, original_error)


class MigrationException(DatabaseException):
    """Alembic failed to move the schema to the requested revision."""

    def __init__(
        self,
        message: str = "Database migration failed",
        migration_version: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {"migration_version": migration_version} if migration_version else {}
        super().__init__(message, "DATABASE_MIGRATION_ERROR", details, original_error)


class ValidationException(AdoptCoreException):
    """
    Input was rejected.

    ``validation_errors`` maps field paths to lists of messages, as built
    by ``format_validation_errors``.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        value: Optional[Any] = None,
        validation_errors: Optional[Dict[str, Any]] = None,
    ):
        details: Dict[str, Any] = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        if validation_errors:
            details["validation_errors"] = validation_errors
        super().__init__(message, "VALIDATION_ERROR", details)


class BusinessRuleException(ValidationException):
    """Well-formed input that breaks a marketplace rule, e.g. promoting an adopted pet."""

    def __init__(
        self,
        message: str = "Business rule validation failed",
        rule_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.error_code = "BUSINESS_RULE_ERROR"
        if rule_name:
            self.details["rule_name"] = rule_name
        if context:
            self.details["context"] = context


class NotFoundException(AdoptCoreException):
    status_code = 404

    def __init__(
        self,
        message: str = "Resource not found",
        entity_type: Optional[str] = None,
        entity_id: Optional[Any] = None,
    ):
        details = {}
        if entity_type:
            details["entity_type"] = entity_type
        if entity_id is not None:
            details["entity_id"] = str(entity_id)
        super().__init__(message, "NOT_FOUND", details)


class AuthenticationException(AdoptCoreException):
    """Missing, expired or invalid credentials."""

    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(AdoptCoreException):
    """The caller's role or rescue does not permit the action."""

    status_code = 403

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        required_role: Optional[str] = None,
    ):
        details = {"required_role": required_role} if required_role else {}
        super().__init__(message, "AUTHORIZATION_ERROR", details)


class ConflictException(AdoptCoreException):
    """A write lost a race, e.g. a pet edited with a stale version."""

    status_code = 409

    def __init__(
        self,
        message: str = "Resource was modified by another request",
        current_version: Optional[int] = None,
    ):
        details = {"current_version": current_version} if current_version is not None else {}
        super().__init__(message, "CONFLICT", details)


class PaymentException(AdoptCoreException):
    """The gateway declined or failed a charge."""

    status_code = 402

    def __init__(
        self,
        message: str = "Payment failed",
        gateway: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {}
        if gateway:
            details["gateway"] = gateway
        if original_error:
            details["original_error"] = str(original_error)
        super().__init__(message, "PAYMENT_ERROR", details)


class ConfigurationException(AdoptCoreException):
    """
    A setting is missing or invalid.

    Values of keys that look secret are replaced with ``[REDACTED]``, and
    so is any value given without a key.
    """

    def __init__(
        self,
        message: str = "Configuration error",
        config_key: Optional[str] = None,
        config_value: Optional[str] = None,
    ):
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_value:
            details["config_value"] = self._redact(config_key, config_value)
        super().__init__(message, "CONFIGURATION_ERROR", details)

    @staticmethod
    def _redact(key: Optional[str], value: str) -> str:
        if not key or any(word in key.lower() for word in SENSITIVE_CONFIG_KEYS):
            return "[REDACTED]"
        return value


class DatabaseConfigException(ConfigurationException):
    def __init__(
        self,
        message: str = "Database configuration error",
        config_key: Optional[str] = None,
        config_value: Optional[str] = None,
    ):
        super().__init__(message, config_key, config_value)
        self.error_code = "DATABASE_CONFIG_ERROR"


_LOCATION_PREFIXES = ("body", "query", "path", "header")


def format_validation_errors(errors: List[Dict[str, Any]]) -> Dict[str, List[str]]:
    """
    Group pydantic/FastAPI errors by dotted field path.

    FastAPI's location prefix (``body``, ``query``...) is dropped, pydantic's
    "Value error, " prefix is stripped, and missing fields read
    "This field is required".
    """
    grouped: Dict[str, List[str]] = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", [])]
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]

        kind = error.get("type", "unknown")
        message = error.get("msg", "Validation error")
        if kind == "value_error":
            message = message.removeprefix("Value error, ")
        elif kind == "missing":
            message = "This field is required"

        grouped.setdefault(".".join(loc) or "root", []).append(message)
    return grouped


def create_error_response(exception: AdoptCoreException) -> Dict[str, Any]:
    """Render ``exception`` in the API error envelope."""
    error: Dict[str, Any] = {
        "type": exception.__class__.__name__,
        "code": exception.error_code,
        "message": exception.message,
    }
    # Database internals never leave the process
    if exception.details and not isinstance(exception, DatabaseException):
        error["details"] = exception.details
    return {"success": False, "error": error}
