"""
Unit tests for backend/settings.py
"""

import pytest
from pydantic import ValidationError

from backend.settings import Settings, get_settings

pytestmark = pytest.mark.unit


# Environment variables that CI might set which we need to clear for default tests
CI_ENV_VARS = [
    "ENVIRONMENT",
    "LOG_LEVEL",
    "API_BASE_URL",
    "REQUEST_TIMEOUT_SECONDS",
    "AUTH_TOKEN",
    "SENTRY_DSN",
    "REPORT_PAGE_HEIGHT",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Clear CI environment variables to test true defaults."""
    for var in CI_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


class TestSettingsDefaults:
    """Test that Settings applies correct defaults."""

    def test_environment_default(self, clean_env):
        """Test that environment defaults to development."""
        settings = Settings(_env_file=None)
        assert settings.environment == "development"

    def test_api_defaults(self, clean_env):
        """Test the default API root, timeout and token."""
        settings = Settings(_env_file=None)
        assert settings.api_base_url == "https://my-pt-book-app-backend.vercel.app/api"
        assert settings.request_timeout_seconds == 30.0
        assert settings.auth_token is None

    def test_observability_defaults(self, clean_env):
        """Test the default log level and Sentry DSN."""
        settings = Settings(_env_file=None)
        assert settings.sentry_dsn is None
        assert settings.log_level == "INFO"

    def test_layout_config_defaults(self, clean_env):
        """Test that the default layout matches the report geometry."""
        layout = Settings(_env_file=None).layout_config()
        assert layout.page_height == 692
        assert layout.first_page_reserved == 220
        assert layout.exercise_row_height == 30


class TestSettingsFromEnvironment:
    """Test that Settings reads environment variables."""

    def test_reads_env_vars(self, clean_env, monkeypatch):
        """Test that API settings come from environment variables."""
        monkeypatch.setenv("API_BASE_URL", "http://localhost:5000/api")
        monkeypatch.setenv("AUTH_TOKEN", "abc")
        monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "2.5")

        settings = Settings(_env_file=None)

        assert settings.api_base_url == "http://localhost:5000/api"
        assert settings.auth_token == "abc"
        assert settings.request_timeout_seconds == 2.5

    def test_env_vars_are_case_insensitive(self, clean_env, monkeypatch):
        """Test that lowercase variable names are accepted."""
        monkeypatch.setenv("environment", "STAGING")
        settings = Settings(_env_file=None)
        assert settings.environment == "staging"

    def test_report_layout_from_env(self, clean_env, monkeypatch):
        """Test that report geometry comes from environment variables."""
        monkeypatch.setenv("REPORT_PAGE_HEIGHT", "500")
        assert Settings(_env_file=None).layout_config().page_height == 500


class TestSettingsValidation:
    """Test validators."""

    def test_invalid_environment_rejected(self, clean_env):
        """Test that an unknown environment is rejected."""
        with pytest.raises(ValidationError):
            Settings(environment="qa", _env_file=None)

    def test_invalid_log_level_rejected(self, clean_env):
        """Test that an unknown log level is rejected."""
        with pytest.raises(ValidationError):
            Settings(log_level="LOUD", _env_file=None)

    def test_log_level_normalized(self, clean_env):
        """Test that the log level is uppercased."""
        assert Settings(log_level="debug", _env_file=None).log_level == "DEBUG"

    def test_non_positive_timeout_rejected(self, clean_env):
        """Test that a zero timeout is rejected."""
        with pytest.raises(ValidationError):
            Settings(request_timeout_seconds=0, _env_file=None)

    def test_layout_that_cannot_fit_rejected(self, clean_env):
        """Test that a page too short for a header chain is rejected."""
        settings = Settings(report_page_height=50, _env_file=None)
        with pytest.raises(ValueError):
            settings.layout_config()


class TestHelperProperties:
    """Test environment helper properties."""

    def test_is_production(self, clean_env):
        """Test is_production for production and test."""
        assert Settings(environment="production", _env_file=None).is_production is True
        assert Settings(environment="test", _env_file=None).is_production is False

    def test_is_test(self, clean_env):
        """Test is_test for the test environment."""
        assert Settings(environment="test", _env_file=None).is_test is True


class TestGetSettings:
    """Test the cached settings accessor."""

    def test_get_settings_is_cached(self, clean_env):
        """Test that get_settings() returns the same instance."""
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()
