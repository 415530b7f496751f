"""
Unit tests for application settings.
"""

from pydantic import ValidationError
import pytest

from flowgraph.config import app_config
from flowgraph.config.app_config import Settings, get_settings, reload_settings

STRONG_KEY = "Xk9#mP2$vL7qR4nW8zT1yB6cF3hJ5dG0"


class TestDefaults:
    """Test default values."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.PORT == 4000
        assert settings.DATA_PATH == "./data"
        assert settings.JWT_ALGORITHM == "HS256"
        assert settings.JWT_EXPIRY_SECONDS == 86400
        assert settings.JWT_LEEWAY_SECONDS == 0
        assert settings.API_PREFIX == "/api"
        assert settings.GRAPHQL_PATH == "/graphql"

    def test_development_exposes_details(self):
        settings = Settings(_env_file=None, ENVIRONMENT="development")

        assert settings.is_development is True
        assert settings.expose_error_details is True
        assert settings.graphql_ide_enabled is True

    def test_test_environment_hides_details(self):
        settings = Settings(_env_file=None, ENVIRONMENT="test")

        assert settings.expose_error_details is False

    def test_debug_exposes_details(self):
        assert Settings(_env_file=None, ENVIRONMENT="test", DEBUG=True).expose_error_details is True

    def test_graphql_ide_override(self):
        assert Settings(_env_file=None, GRAPHQL_IDE_ENABLED=False).graphql_ide_enabled is False


class TestValidation:
    """Test setting validators."""

    def test_environment_is_normalised(self):
        assert Settings(_env_file=None, ENVIRONMENT="STAGING").ENVIRONMENT == "staging"

    def test_invalid_environment(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, ENVIRONMENT="qa")

    def test_log_level_is_normalised(self):
        assert Settings(_env_file=None, LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, LOG_LEVEL="verbose")

    def test_expiry_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, JWT_EXPIRY_SECONDS=0)

    def test_comma_separated_lists(self):
        settings = Settings(_env_file=None, CORS_ORIGINS="http://a.test, http://b.test", ALLOWED_HOSTS="a.test,")

        assert settings.CORS_ORIGINS == ["http://a.test", "http://b.test"]
        assert settings.ALLOWED_HOSTS == ["a.test"]

    def test_cors_origins_default_to_none(self):
        assert Settings(_env_file=None).CORS_ORIGINS == []


class TestProductionSecurity:
    """Test production secret checks."""

    def test_rejects_dev_secret(self):
        with pytest.raises(ValidationError, match="not dev default"):
            Settings(_env_file=None, ENVIRONMENT="production")

    def test_rejects_short_secret(self):
        with pytest.raises(ValidationError, match="at least 32 characters"):
            Settings(_env_file=None, ENVIRONMENT="production", JWT_SECRET_KEY="Short#Key1")

    def test_rejects_repeated_characters(self):
        with pytest.raises(ValidationError, match="low entropy"):
            Settings(_env_file=None, ENVIRONMENT="production", JWT_SECRET_KEY="ab" * 20)

    def test_rejects_sequential_key(self):
        with pytest.raises(ValidationError, match="sequential"):
            Settings(_env_file=None, ENVIRONMENT="production", JWT_SECRET_KEY="abcdefghijklmnopqrstuvwxyz0123456789ABCD")

    def test_accepts_strong_secret(self):
        settings = Settings(_env_file=None, ENVIRONMENT="production", JWT_SECRET_KEY=STRONG_KEY)

        assert settings.is_production is True
        assert settings.expose_error_details is False
        assert settings.graphql_ide_enabled is False


class TestGlobalSettings:
    """Test the cached settings instance."""

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_reload_reads_environment(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("PORT", "4100")

        reloaded = reload_settings()

        assert reloaded is not first
        assert reloaded.PORT == 4100
        assert app_config._settings is reloaded
