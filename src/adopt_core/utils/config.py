"""
Configuration management utilities.

Typed environment lookups, database URL validation, logging setup and
the ``AppSettings`` object shared by the API, the upload service and the
CLI. Settings are read once at startup and passed around explicitly.
"""

import logging
import logging.config
import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union
from urllib.parse import urlparse

from ..exceptions import ConfigurationException

DEFAULT_JWT_SECRET = "change-me-in-production"  # nosec B105
DEVELOPMENT_ENVIRONMENTS = ("development", "test", "testing")
DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./adopt_core.db"

T = TypeVar("T")


class ConfigError(ConfigurationException):
    pass


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentConfig:
    """
    Typed access to environment variables.

    Every getter returns ``default`` when the variable is unset and raises
    ``ConfigError`` when it is unset but ``required``, or set to something
    that does not convert.
    """

    TRUTHY = ("true", "1", "yes", "on", "enabled")

    @staticmethod
    def _lookup(
        key: str,
        default: Optional[T],
        required: bool,
        convert: Callable[[str], T],
        kind: Optional[str] = None,
    ) -> Optional[T]:
        raw = os.getenv(key)
        if raw is None:
            if required:
                raise ConfigError(f"Required environment variable '{key}' is not set", config_key=key)
            return default
        try:
            return convert(raw)
        except (ValueError, InvalidOperation):
            raise ConfigError(
                f"Environment variable '{key}' must be {kind}, got: {raw}",
                config_key=key,
                config_value=raw,
            )

    @staticmethod
    def get_str(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
        return EnvironmentConfig._lookup(key, default, required, str)

    @staticmethod
    def get_int(key: str, default: Optional[int] = None, required: bool = False) -> Optional[int]:
        return EnvironmentConfig._lookup(key, default, required, int, "an integer")

    @staticmethod
    def get_decimal(
        key: str, default: Optional[Decimal] = None, required: bool = False
    ) -> Optional[Decimal]:
        """Money amounts such as PROMOTION_FEE."""
        return EnvironmentConfig._lookup(key, default, required, Decimal, "a decimal")

    @staticmethod
    def get_bool(key: str, default: Optional[bool] = None, required: bool = False) -> Optional[bool]:
        return EnvironmentConfig._lookup(
            key, default, required, lambda raw: raw.lower() in EnvironmentConfig.TRUTHY
        )

    @staticmethod
    def get_list(
        key: str,
        separator: str = ",",
        default: Optional[List[str]] = None,
        required: bool = False,
    ) -> List[str]:
        """Split on ``separator``, dropping blanks."""
        value = EnvironmentConfig._lookup(
            key,
            default,
            required,
            lambda raw: [item.strip() for item in raw.split(separator) if item.strip()],
        )
        return value or []


class DatabaseURLValidator:
    """Accepts PostgreSQL and SQLite URLs, sync or async driver."""

    SUPPORTED_SCHEMES = ("postgresql", "postgresql+asyncpg", "sqlite", "sqlite+aiosqlite")

    @classmethod
    def validate_url(cls, url: str) -> None:
        """
        Raises:
            ConfigError: If the scheme is missing or unsupported, or a
                PostgreSQL URL lacks a host or database name
        """
        if not url:
            raise ConfigError("Database URL cannot be empty")

        parsed = urlparse(url)
        if not parsed.scheme:
            raise ConfigError("Database URL must include a scheme (e.g., postgresql+asyncpg://)")
        if parsed.scheme not in cls.SUPPORTED_SCHEMES:
            raise ConfigError(
                f"Unsupported database driver '{parsed.scheme}'. "
                f"Supported: {', '.join(cls.SUPPORTED_SCHEMES)}"
            )
        if parsed.scheme.startswith("sqlite"):
            return
        if not parsed.hostname:
            raise ConfigError("Database URL must include a hostname")
        if not parsed.path.lstrip("/"):
            raise ConfigError("Database URL must include a database name")


# Plain driver names are swapped for their asyncio counterparts
_ASYNC_DRIVERS = {"postgresql://": "postgresql+asyncpg://", "sqlite://": "sqlite+aiosqlite://"}


@dataclass
class DatabaseConfig:
    """Engine settings. ``url`` is validated and upgraded to an async driver."""

    url: str
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 3600
    echo: bool = False

    def __post_init__(self) -> None:
        DatabaseURLValidator.validate_url(self.url)
        for plain, asynchronous in _ASYNC_DRIVERS.items():
            if self.url.startswith(plain):
                self.url = asynchronous + self.url[len(plain):]
                break

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @classmethod
    def from_environment(cls) -> "DatabaseConfig":
        """``DATABASE_URL`` plus the ``DB_POOL_*`` and ``DB_ECHO`` knobs."""
        return cls(
            url=EnvironmentConfig.get_str("DATABASE_URL", DEFAULT_DATABASE_URL),
            pool_size=EnvironmentConfig.get_int("DB_POOL_SIZE", 5),
            max_overflow=EnvironmentConfig.get_int("DB_MAX_OVERFLOW", 10),
            pool_timeout=EnvironmentConfig.get_int("DB_POOL_TIMEOUT", 30),
            pool_recycle=EnvironmentConfig.get_int("DB_POOL_RECYCLE", 3600),
            echo=EnvironmentConfig.get_bool("DB_ECHO", False),
        )


class LoggingConfigurator:
    """Utility class for configuring logging."""

    DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    DETAILED_FORMAT = (
        "%(asctime)s - %(name)s - %(levelname)s - %(module)s - %(funcName)s - %(message)s"
    )

    @staticmethod
    def configure_basic_logging(
        level: Union[str, LogLevel] = LogLevel.INFO,
        format_string: Optional[str] = None,
        log_file: Optional[str] = None,
    ) -> None:
        """
        Configure basic logging for the application.

        Args:
            level: Logging level
            format_string: Custom format string
            log_file: Optional log file path
        """
        if isinstance(level, LogLevel):
            level = level.value

        basic_config_args: Dict[str, Any] = {
            "level": level,
            "format": format_string or LoggingConfigurator.DEFAULT_FORMAT,
            "datefmt": "%Y-%m-%d %H:%M:%S",
        }
        if log_file:
            basic_config_args["filename"] = log_file
            basic_config_args["filemode"] = "a"

        logging.basicConfig(**basic_config_args)

    @staticmethod
    def configure_structured_logging(
        config_dict: Optional[Dict[str, Any]] = None,
        config_file: Optional[str] = None,
        level: Union[str, LogLevel] = LogLevel.INFO,
    ) -> None:
        """
        Configure structured logging using a dictionary or file.

        Args:
            config_dict: Logging configuration dictionary
            config_file: Path to logging configuration file
            level: Level for the adopt_core logger when using the default config
        """
        if isinstance(level, LogLevel):
            level = level.value

        if config_file and Path(config_file).exists():
            logging.config.fileConfig(config_file)
        elif config_dict:
            logging.config.dictConfig(config_dict)
        else:
            default_config = {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "standard": {"format": LoggingConfigurator.DEFAULT_FORMAT},
                    "detailed": {"format": LoggingConfigurator.DETAILED_FORMAT},
                },
                "handlers": {
                    "console": {
                        "class": "logging.StreamHandler",
                        "level": level,
                        "formatter": "standard",
                        "stream": "ext://sys.stdout",
                    }
                },
                "loggers": {
                    "adopt_core": {
                        "level": level,
                        "handlers": ["console"],
                        "propagate": False,
                    }
                },
                "root": {"level": "WARNING", "handlers": ["console"]},
            }
            logging.config.dictConfig(default_config)

    @staticmethod
    def configure_from_environment() -> None:
        """
        Configure logging from LOG_LEVEL, LOG_FORMAT and LOG_CONFIG_FILE.

        LOG_FORMAT=structured selects the dictConfig setup, anything else
        falls back to basic logging.
        """
        level = (EnvironmentConfig.get_str("LOG_LEVEL", "INFO") or "INFO").upper()
        if level not in LogLevel.__members__:
            raise ConfigError(
                f"Invalid LOG_LEVEL '{level}'", config_key="LOG_LEVEL", config_value=level
            )

        log_format = EnvironmentConfig.get_str("LOG_FORMAT", "basic")
        if log_format == "structured":
            LoggingConfigurator.configure_structured_logging(
                config_file=EnvironmentConfig.get_str("LOG_CONFIG_FILE"),
                level=level,
            )
        else:
            LoggingConfigurator.configure_basic_logging(
                level=level, log_file=EnvironmentConfig.get_str("LOG_FILE")
            )


@dataclass
class AppSettings:
    """Application settings for the API, the upload service and the CLI."""

    app_name: str = "adopt-core"
    api_prefix: str = "/api/v1"
    environment: str = "development"
    debug: bool = False
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_expiration_hours: int = 24
    bcrypt_rounds: int = 12
    password_reset_expiration_hours: int = 1
    expose_reset_tokens: bool = False
    promotion_fee: Decimal = Decimal("5.00")
    rescue_fee: Decimal = Decimal("50.00")
    currency: str = "USD"
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:5173"])
    upload_dir: str = "uploads"
    upload_public_url: str = "http://localhost:4000"
    upload_max_bytes: int = 5 * 1024 * 1024

    def __post_init__(self) -> None:
        if self.environment not in DEVELOPMENT_ENVIRONMENTS and (
            not self.jwt_secret or self.jwt_secret == DEFAULT_JWT_SECRET
        ):
            raise ConfigError(
                "JWT_SECRET must be set outside development",
                config_key="JWT_SECRET",
            )
        if self.jwt_expiration_hours <= 0:
            raise ConfigError("JWT_EXPIRATION_HOURS must be positive")
        if not 4 <= self.bcrypt_rounds <= 31:
            raise ConfigError("BCRYPT_ROUNDS must be between 4 and 31")
        if self.promotion_fee < 0 or self.rescue_fee < 0:
            raise ConfigError("Fees must not be negative")
        self.upload_public_url = self.upload_public_url.rstrip("/")

    @property
    def is_development(self) -> bool:
        """Whether the app runs in a development-like environment."""
        return self.environment in DEVELOPMENT_ENVIRONMENTS

    @classmethod
    def from_environment(cls) -> "AppSettings":
        """Build settings from environment variables."""
        return cls(
            app_name=EnvironmentConfig.get_str("APP_NAME", "adopt-core"),
            api_prefix=EnvironmentConfig.get_str("API_PREFIX", "/api/v1"),
            environment=EnvironmentConfig.get_str("ENVIRONMENT", "development"),
            debug=EnvironmentConfig.get_bool("DEBUG", False),
            jwt_secret=EnvironmentConfig.get_str("JWT_SECRET", DEFAULT_JWT_SECRET),
            jwt_algorithm=EnvironmentConfig.get_str("JWT_ALGORITHM", "HS256"),
            jwt_expiration_hours=EnvironmentConfig.get_int("JWT_EXPIRATION_HOURS", 24),
            bcrypt_rounds=EnvironmentConfig.get_int("BCRYPT_ROUNDS", 12),
            password_reset_expiration_hours=EnvironmentConfig.get_int(
                "PASSWORD_RESET_EXPIRATION_HOURS", 1
            ),
            expose_reset_tokens=EnvironmentConfig.get_bool("EXPOSE_RESET_TOKENS", False),
            promotion_fee=EnvironmentConfig.get_decimal("PROMOTION_FEE", Decimal("5.00")),
            rescue_fee=EnvironmentConfig.get_decimal("RESCUE_FEE", Decimal("50.00")),
            currency=EnvironmentConfig.get_str("CURRENCY", "USD"),
            cors_origins=EnvironmentConfig.get_list(
                "CORS_ORIGINS", default=["http://localhost:5173"]
            ),
            upload_dir=EnvironmentConfig.get_str("UPLOAD_DIR", "uploads"),
            upload_public_url=EnvironmentConfig.get_str(
                "UPLOAD_PUBLIC_URL", "http://localhost:4000"
            ),
            upload_max_bytes=EnvironmentConfig.get_int(
                "UPLOAD_MAX_BYTES", 5 * 1024 * 1024
            ),
        )

