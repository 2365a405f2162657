"""Configuration package."""

from focusfi.config.settings import (
    ApiSettings,
    AppSettings,
    Settings,
    StorageSettings,
    SupabaseSettings,
    get_settings,
    normalize_url,
    validate_all_settings,
)

__all__ = [
    "ApiSettings",
    "AppSettings",
    "Settings",
    "StorageSettings",
    "SupabaseSettings",
    "get_settings",
    "normalize_url",
    "validate_all_settings",
]
