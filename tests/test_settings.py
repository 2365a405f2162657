"""Tests for environment-driven configuration."""

import pytest
from decimal import Decimal

from pydantic import ValidationError

from focusfi.config import (
    ApiSettings,
    AppSettings,
    SupabaseSettings,
    get_settings,
    normalize_url,
    validate_all_settings,
)


ENV_VARS = [
    "API_BASE_URL",
    "API_ENVIRONMENT",
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "FORECASTED_INCOME",
    "KEEP_UNSYNCED",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestNormalizeUrl:
    """Tests for URL normalization."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("localhost:4243", "http://localhost:4243"),
            ("  api.example.com  ", "http://api.example.com"),
            ("https://api.example.com", "https://api.example.com"),
            ("", ""),
            ("   ", ""),
        ],
    )
    def test_normalize(self, value, expected):
        """Test scheme insertion and trimming."""
        assert normalize_url(value, "http") == expected


class TestApiSettings:
    """Tests for the backend base URL."""

    def test_development_default(self):
        """Test the development host."""
        assert ApiSettings().base_url == "http://localhost:4243/api"

    def test_production_default(self, monkeypatch):
        """Test the production host and scheme."""
        monkeypatch.setenv("API_ENVIRONMENT", "production")
        assert ApiSettings().base_url == "https://api.yourfinanceapp.com/api"

    def test_host_override_without_scheme(self, monkeypatch):
        """Test that a bare host gets the environment's scheme and loses trailing slashes."""
        monkeypatch.setenv("API_BASE_URL", "finance.local:8080/")
        assert ApiSettings().base_url == "http://finance.local:8080/api"

    def test_host_override_with_scheme(self, monkeypatch):
        """Test that an explicit scheme is kept."""
        monkeypatch.setenv("API_ENVIRONMENT", "production")
        monkeypatch.setenv("API_BASE_URL", "http://staging.example.com")
        assert ApiSettings().base_url == "http://staging.example.com/api"

    def test_unknown_environment(self, monkeypatch):
        """Test that only development and production are accepted."""
        monkeypatch.setenv("API_ENVIRONMENT", "staging")
        with pytest.raises(ValidationError):
            ApiSettings()


class TestSupabaseSettings:
    """Tests for the auth settings."""

    def test_url_gets_https(self, monkeypatch):
        """Test scheme insertion and trailing slash removal."""
        monkeypatch.setenv("SUPABASE_URL", "abc.supabase.co/")
        monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
        assert SupabaseSettings().url == "https://abc.supabase.co"

    def test_missing_key(self, monkeypatch):
        """Test that the anon key is required."""
        monkeypatch.setenv("SUPABASE_URL", "https://abc.supabase.co")
        with pytest.raises(ValidationError):
            SupabaseSettings()


class TestAppSettings:
    """Tests for the dashboard and sync defaults."""

    def test_defaults(self):
        """Test the default forecasts and sync policy."""
        settings = AppSettings()
        assert settings.forecasted_income == Decimal("10000")
        assert settings.forecasted_expenses == Decimal("8000")
        assert settings.keep_unsynced is True

    def test_from_env(self, monkeypatch):
        """Test overrides from the environment."""
        monkeypatch.setenv("FORECASTED_INCOME", "1234.50")
        monkeypatch.setenv("KEEP_UNSYNCED", "false")
        settings = AppSettings()
        assert settings.forecasted_income == Decimal("1234.50")
        assert settings.keep_unsynced is False


class TestValidateAllSettings:
    """Tests for the settings health check."""

    def test_missing_supabase_is_reported(self):
        """Test that a failing group is reported with its error."""
        results = validate_all_settings()
        assert results["api"] is True
        assert results["storage"] is True
        assert results["app"] is True
        assert results["supabase"] is False
        assert "supabase_error" in results

    def test_all_valid(self, monkeypatch):
        """Test a fully configured environment."""
        monkeypatch.setenv("SUPABASE_URL", "abc.supabase.co")
        monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
        results = validate_all_settings()
        assert all(results[name] for name in ("api", "supabase", "storage", "app"))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
