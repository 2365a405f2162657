"""
Abstract Auth Interface

DESIGN DECISION: The API client only needs two things from the auth
layer: the current access token, and a way to refresh it. Keeping that
behind an interface lets us:
1. Use Supabase in the app
2. Use a fixed token in scripts and tests
3. Swap identity providers without touching the API client
"""

from abc import ABC, abstractmethod


class AuthError(Exception):
    """Base exception for authentication failures."""
    pass


class NotSignedInError(AuthError):
    """There is no session to read a token from."""
    pass


class AuthProvider(ABC):
    """Source of bearer tokens for backend requests."""

    @abstractmethod
    async def get_access_token(self) -> str:
        """
        Return the current access token.

        Raises:
            AuthError: If there is no usable session
        """
        pass

    @abstractmethod
    async def refresh_session(self) -> str:
        """
        Refresh the session and return the new access token.

        Raises:
            AuthError: If the session cannot be refreshed
        """
        pass


class StaticTokenAuth(AuthProvider):
    """
    Auth provider with a fixed token.

    Refreshing is a no-op that returns the same token, so a 401 from
    the backend still ends in an unauthorized error after one replay.
    """

    def __init__(self, token: str):
        self._token = token

    async def get_access_token(self) -> str:
        if not self._token:
            raise NotSignedInError("No access token configured")
        return self._token

    async def refresh_session(self) -> str:
        return await self.get_access_token()
