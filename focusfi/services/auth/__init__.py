"""
Auth Services Package

Provides the token source the API client depends on.
"""

from focusfi.services.auth.interface import (
    AuthError,
    AuthProvider,
    NotSignedInError,
    StaticTokenAuth,
)
from focusfi.services.auth.supabase_auth import Session, SupabaseAuthService

__all__ = [
    # Interface
    "AuthProvider",
    "StaticTokenAuth",
    # Exceptions
    "AuthError",
    "NotSignedInError",
    # Supabase implementation
    "Session",
    "SupabaseAuthService",
]
