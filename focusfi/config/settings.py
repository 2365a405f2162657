"""
Configuration Management for FocusFi

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from decimal import Decimal
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Default backend hosts per environment
DEFAULT_API_HOSTS = {
    "development": "http://localhost:4243",
    "production": "https://api.yourfinanceapp.com",
}


def normalize_url(value: str, default_scheme: str) -> str:
    """Trim a URL and add a scheme when one is missing."""
    trimmed = value.strip()
    if not trimmed:
        return ""
    if "://" in trimmed:
        return trimmed
    return f"{default_scheme}://{trimmed}"


class ApiSettings(BaseSettings):
    """Remote finance backend configuration."""

    model_config = SettingsConfigDict(
        env_prefix="API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    environment: str = Field(
        default="development",
        pattern="^(development|production)$",
        description="Which default backend host to use"
    )
    base_host: Optional[str] = Field(
        default=None,
        validation_alias="API_BASE_URL",
        description="Backend host; overrides the environment default"
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Per-request timeout"
    )

    @property
    def scheme(self) -> str:
        return "https" if self.environment == "production" else "http"

    @property
    def base_url(self) -> str:
        """
        Fully-qualified API root.

        Adds a scheme when missing, strips trailing slashes and
        appends the `/api` prefix the backend mounts its routes under.
        """
        host = self.base_host or DEFAULT_API_HOSTS[self.environment]
        normalized = normalize_url(host, self.scheme)
        if not normalized:
            return ""
        return f"{normalized.rstrip('/')}/api"


class SupabaseSettings(BaseSettings):
    """Supabase authentication configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SUPABASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    url: str = Field(
        ...,
        description="Supabase project URL"
    )
    anon_key: str = Field(
        ...,
        min_length=1,
        description="Supabase anon/public key"
    )

    @field_validator('url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Add https:// when the scheme is omitted."""
        normalized = normalize_url(v, "https")
        if not normalized:
            raise ValueError("SUPABASE_URL must not be empty")
        return normalized.rstrip("/")


class StorageSettings(BaseSettings):
    """Local storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FOCUSFI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    db_path: str = Field(
        default="focusfi.db",
        description="Path to the local SQLite database"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Dashboard defaults
    forecasted_income: Decimal = Field(
        default=Decimal("10000"),
        ge=0,
        description="Default income forecast for the progress bar"
    )
    forecasted_expenses: Decimal = Field(
        default=Decimal("8000"),
        ge=0,
        description="Default expense forecast for the progress bar"
    )

    # Sync behaviour
    keep_unsynced: bool = Field(
        default=True,
        description="Keep locally created transactions when syncing"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def api(self) -> ApiSettings:
        return ApiSettings()

    @property
    def supabase(self) -> SupabaseSettings:
        return SupabaseSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    `<name>_error` entry for every group that failed.
    """
    results = {}

    settings = get_settings()

    groups = {
        "api": lambda: settings.api,
        "supabase": lambda: settings.supabase,
        "storage": lambda: settings.storage,
        "app": lambda: settings.app,
    }

    for name, load in groups.items():
        try:
            loaded = load()
            if name == "api" and not loaded.base_url:
                raise ValueError("API base URL is empty")
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
