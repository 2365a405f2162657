"""
Supabase Authentication

Talks to the Supabase auth (GoTrue) REST endpoints directly with httpx:
- password sign-in
- refresh-token exchange
- sign-out

Sign-up and password reset are handled by the Supabase dashboard /
web flow, not by this app.
"""

from typing import Optional

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from focusfi.config import SupabaseSettings, get_settings
from focusfi.services.auth.interface import AuthError, AuthProvider, NotSignedInError


logger = structlog.get_logger(__name__)


class Session(BaseModel):
    """The subset of a GoTrue token response we keep."""

    access_token: str
    refresh_token: str
    expires_in: Optional[int] = None
    user: dict = {}

    @property
    def email(self) -> Optional[str]:
        return self.user.get("email")


class SupabaseAuthService(AuthProvider):
    """
    Supabase-backed session holder.

    The session lives in memory only; every app start requires an
    explicit sign-in.
    """

    def __init__(
        self,
        settings: Optional[SupabaseSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        self._settings = settings or get_settings().supabase
        self._transport = transport
        self._timeout = timeout or get_settings().api.request_timeout_seconds
        self._session: Optional[Session] = None

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    @property
    def current_user_email(self) -> Optional[str]:
        return self._session.email if self._session else None

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=f"{self._settings.url}/auth/v1",
            headers={
                "apikey": self._settings.anon_key,
                "Content-Type": "application/json",
            },
            timeout=self._timeout,
            transport=self._transport,
        )

    async def _token_grant(self, grant_type: str, payload: dict) -> Session:
        try:
            async with self._client() as client:
                response = await client.post(
                    "/token",
                    params={"grant_type": grant_type},
                    json=payload,
                )
        except httpx.HTTPError as e:
            raise AuthError(f"Could not reach authentication service: {e}") from e

        if response.status_code != 200:
            raise AuthError(self._error_message(response))

        try:
            return Session.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise AuthError(f"Unexpected authentication response: {e}") from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return f"Authentication failed ({response.status_code})"
        for key in ("error_description", "msg", "message", "error"):
            if isinstance(body, dict) and body.get(key):
                return str(body[key])
        return f"Authentication failed ({response.status_code})"

    async def sign_in(self, email: str, password: str) -> None:
        """Sign in with email and password."""
        self._session = await self._token_grant(
            "password",
            {"email": email, "password": password},
        )
        logger.info("signed_in", email=self._session.email)

    async def get_access_token(self) -> str:
        if self._session is None:
            raise NotSignedInError("Not signed in")
        return self._session.access_token

    async def refresh_session(self) -> str:
        if self._session is None:
            raise NotSignedInError("Not signed in")
        self._session = await self._token_grant(
            "refresh_token",
            {"refresh_token": self._session.refresh_token},
        )
        logger.info("session_refreshed")
        return self._session.access_token

    async def sign_out(self) -> None:
        """
        Revoke the session server-side and forget it locally.

        The local session is dropped even when the server call fails.
        """
        if self._session is None:
            return
        token = self._session.access_token
        self._session = None
        try:
            async with self._client() as client:
                response = await client.post(
                    "/logout",
                    headers={"Authorization": f"Bearer {token}"},
                )
        except httpx.HTTPError as e:
            raise AuthError(f"Could not reach authentication service: {e}") from e
        if response.status_code >= 400:
            raise AuthError(self._error_message(response))
        logger.info("signed_out")
