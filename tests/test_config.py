"""
Tests for environment handling, database settings and application settings.
"""

import logging
from decimal import Decimal

import pytest

from adopt_core.utils.config import (
    DEFAULT_JWT_SECRET,
    AppSettings,
    ConfigError,
    DatabaseConfig,
    DatabaseURLValidator,
    EnvironmentConfig,
    LoggingConfigurator,
)


class TestEnvironmentConfig:
    """Test typed environment lookups."""

    def test_str_required(self, monkeypatch):
        monkeypatch.delenv("ADOPT_TEST_VALUE", raising=False)

        assert EnvironmentConfig.get_str("ADOPT_TEST_VALUE", "fallback") == "fallback"
        with pytest.raises(ConfigError):
            EnvironmentConfig.get_str("ADOPT_TEST_VALUE", required=True)

    def test_int(self, monkeypatch):
        monkeypatch.setenv("ADOPT_TEST_VALUE", "42")
        assert EnvironmentConfig.get_int("ADOPT_TEST_VALUE") == 42

        monkeypatch.setenv("ADOPT_TEST_VALUE", "forty-two")
        with pytest.raises(ConfigError) as exc_info:
            EnvironmentConfig.get_int("ADOPT_TEST_VALUE")
        assert exc_info.value.details == {"config_key": "ADOPT_TEST_VALUE", "config_value": "forty-two"}

    def test_decimal(self, monkeypatch):
        monkeypatch.setenv("ADOPT_TEST_VALUE", "7.50")
        assert EnvironmentConfig.get_decimal("ADOPT_TEST_VALUE") == Decimal("7.50")

        monkeypatch.setenv("ADOPT_TEST_VALUE", "cheap")
        with pytest.raises(ConfigError):
            EnvironmentConfig.get_decimal("ADOPT_TEST_VALUE")

    @pytest.mark.parametrize("raw, expected", [("true", True), ("1", True), ("on", True), ("no", False)])
    def test_bool(self, monkeypatch, raw, expected):
        monkeypatch.setenv("ADOPT_TEST_VALUE", raw)
        assert EnvironmentConfig.get_bool("ADOPT_TEST_VALUE") is expected

    def test_list(self, monkeypatch):
        monkeypatch.setenv("ADOPT_TEST_VALUE", "http://a.test, http://b.test,,")
        assert EnvironmentConfig.get_list("ADOPT_TEST_VALUE") == ["http://a.test", "http://b.test"]

        monkeypatch.delenv("ADOPT_TEST_VALUE")
        assert EnvironmentConfig.get_list("ADOPT_TEST_VALUE") == []


class TestDatabaseConfig:
    """Test database URL handling."""

    def test_drivers_are_upgraded_to_async(self):
        assert DatabaseConfig("postgresql://u:p@db/adopt").url == "postgresql+asyncpg://u:p@db/adopt"
        assert DatabaseConfig("sqlite:///./dev.db").url == "sqlite+aiosqlite:///./dev.db"
        assert DatabaseConfig("sqlite:///./dev.db").is_sqlite

    @pytest.mark.parametrize(
        "url",
        ["", "localhost/adopt", "mysql://u@db/adopt", "postgresql+asyncpg:///adopt", "postgresql://db"],
    )
    def test_invalid_urls(self, url):
        with pytest.raises(ConfigError):
            DatabaseURLValidator.validate_url(url)

    def test_default_url(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)

        assert DatabaseConfig.from_environment().url == "sqlite+aiosqlite:///./adopt_core.db"

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://u@db/adopt")
        monkeypatch.setenv("DB_POOL_SIZE", "7")

        config = DatabaseConfig.from_environment()

        assert config.url.startswith("postgresql+asyncpg://")
        assert config.pool_size == 7


class TestAppSettings:
    """Test application settings."""

    def test_defaults(self):
        settings = AppSettings()

        assert settings.api_prefix == "/api/v1"
        assert settings.promotion_fee == Decimal("5.00")
        assert settings.rescue_fee == Decimal("50.00")
        assert settings.currency == "USD"
        assert settings.is_development

    def test_production_needs_secret(self):
        with pytest.raises(ConfigError):
            AppSettings(environment="production")
        with pytest.raises(ConfigError):
            AppSettings(environment="production", jwt_secret=DEFAULT_JWT_SECRET)

        assert not AppSettings(environment="production", jwt_secret="real-secret").is_development

    @pytest.mark.parametrize(
        "overrides",
        [{"bcrypt_rounds": 3}, {"jwt_expiration_hours": 0}, {"promotion_fee": Decimal("-1")}],
    )
    def test_rejects_bad_values(self, overrides):
        with pytest.raises(ConfigError):
            AppSettings(**overrides)

    def test_upload_url_trailing_slash(self):
        assert AppSettings(upload_public_url="http://cdn.test/").upload_public_url == "http://cdn.test"

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "staging")
        monkeypatch.setenv("JWT_SECRET", "staging-secret")
        monkeypatch.setenv("PROMOTION_FEE", "7.50")
        monkeypatch.setenv("CORS_ORIGINS", "https://adopt.test,https://admin.adopt.test")
        monkeypatch.setenv("EXPOSE_RESET_TOKENS", "true")

        settings = AppSettings.from_environment()

        assert settings.environment == "staging"
        assert settings.promotion_fee == Decimal("7.50")
        assert settings.cors_origins == ["https://adopt.test", "https://admin.adopt.test"]
        assert settings.expose_reset_tokens is True


class TestLoggingConfigurator:
    """Test logging setup from the environment."""

    def test_invalid_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")

        with pytest.raises(ConfigError):
            LoggingConfigurator.configure_from_environment()

    def test_structured_config(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("LOG_FORMAT", "structured")
        package_logger = logging.getLogger("adopt_core")
        root = logging.getLogger()
        saved = (package_logger.level, package_logger.propagate, list(package_logger.handlers))
        saved_root = (root.level, list(root.handlers))

        try:
            LoggingConfigurator.configure_from_environment()
            assert package_logger.level == logging.DEBUG
            assert package_logger.propagate is False
        finally:
            package_logger.setLevel(saved[0])
            package_logger.propagate = saved[1]
            package_logger.handlers[:] = saved[2]
            root.setLevel(saved_root[0])
            root.handlers[:] = saved_root[1]
