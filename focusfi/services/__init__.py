"""Services package."""

from focusfi.services.api import APIClient, APIError, describe_api_error
from focusfi.services.auth import (
    AuthError,
    AuthProvider,
    NotSignedInError,
    StaticTokenAuth,
    SupabaseAuthService,
)
from focusfi.services.remote import AccountService, TransactionService
from focusfi.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemoryStorage,
    LocalStorageInterface,
    NotFoundError,
    SQLiteAuditStorage,
    SQLiteDatabase,
    SQLiteStorage,
    StorageConnectionError,
    StorageError,
)

__all__ = [
    # Backend API
    "APIClient",
    "APIError",
    "describe_api_error",
    # Auth
    "AuthError",
    "AuthProvider",
    "NotSignedInError",
    "StaticTokenAuth",
    "SupabaseAuthService",
    # Remote services
    "AccountService",
    "TransactionService",
    # Storage services
    "AuditStorageInterface",
    "InMemoryAuditStorage",
    "InMemoryStorage",
    "LocalStorageInterface",
    "NotFoundError",
    "SQLiteAuditStorage",
    "SQLiteDatabase",
    "SQLiteStorage",
    "StorageConnectionError",
    "StorageError",
]
