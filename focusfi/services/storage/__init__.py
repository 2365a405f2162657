"""
Storage Services Package

Provides the storage abstraction and its SQLite and in-memory
implementations.
"""

from focusfi.services.storage.interface import (
    AuditStorageInterface,
    LocalStorageInterface,
    NotFoundError,
    StorageConnectionError,
    StorageError,
)
from focusfi.services.storage.memory import InMemoryAuditStorage, InMemoryStorage
from focusfi.services.storage.sqlite_storage import (
    SQLiteAuditStorage,
    SQLiteDatabase,
    SQLiteStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "LocalStorageInterface",
    # Implementations
    "InMemoryAuditStorage",
    "InMemoryStorage",
    "SQLiteAuditStorage",
    "SQLiteDatabase",
    "SQLiteStorage",
    # Exceptions
    "NotFoundError",
    "StorageConnectionError",
    "StorageError",
]
