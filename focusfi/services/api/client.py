"""
Backend API Client

Thin async HTTP client for the finance backend, built on httpx.

This client handles:
1. Building URLs from the configured base URL and an endpoint path
2. Attaching the bearer token from the auth provider
3. Replaying a request ONCE after refreshing the token on a 401
4. Decoding 2xx bodies into pydantic models
5. Mapping every other outcome onto the closed APIError taxonomy

IMPORTANT: This client never retries anything except the single
post-refresh replay. Transient failures surface as NetworkError and the
user decides whether to try again.
"""

from enum import Enum
from typing import Any, Optional, Union

import httpx
import structlog
from pydantic import BaseModel, TypeAdapter, ValidationError

from focusfi.config import get_settings
from focusfi.models.remote import APIErrorBody
from focusfi.services.api.errors import (
    DecodingError,
    ForbiddenError,
    InvalidURLError,
    NetworkError,
    NoDataError,
    NotFoundError,
    ServerError,
    UnauthorizedError,
    UnknownAPIError,
    field_path_of,
)
from focusfi.services.auth import AuthError, AuthProvider


logger = structlog.get_logger(__name__)

RESPONSE_PREVIEW_CHARS = 500


class HTTPMethod(str, Enum):
    """HTTP methods supported by the API."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"


def encode_body(body: Union[BaseModel, dict, list, None]) -> Any:
    """
    Serialize a request body to JSON-ready data.

    Models are dumped with their wire aliases and without unset
    optionals; dates become `YYYY-MM-DD`.
    """
    if body is None:
        return None
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json", by_alias=True, exclude_none=True)
    return body


class APIClient:
    """
    Authenticated client for the finance backend.

    One httpx.AsyncClient is opened per call, so the client is safe to
    use from short-lived event loops (the Streamlit shell creates a new
    loop for every action).
    """

    def __init__(
        self,
        auth: AuthProvider,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            auth: Source of bearer tokens
            base_url: API root; defaults to the configured `API_BASE_URL`
            timeout: Per-request timeout in seconds (default 30)
            transport: Custom httpx transport (used by tests)
        """
        api_settings = get_settings().api
        self._auth = auth
        self._base_url = base_url if base_url is not None else api_settings.base_url
        self._timeout = timeout or api_settings.request_timeout_seconds
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    # -------------------------------------------------------------------------
    # Request methods
    # -------------------------------------------------------------------------

    async def get(
        self,
        endpoint: str,
        response_type: Any,
        params: Optional[dict[str, str]] = None,
    ) -> Any:
        """Make an authenticated GET request."""
        return await self.request(HTTPMethod.GET, endpoint, response_type, params=params)

    async def post(self, endpoint: str, body: Any, response_type: Any) -> Any:
        """Make an authenticated POST request."""
        return await self.request(HTTPMethod.POST, endpoint, response_type, body=body)

    async def put(self, endpoint: str, body: Any, response_type: Any) -> Any:
        """Make an authenticated PUT request."""
        return await self.request(HTTPMethod.PUT, endpoint, response_type, body=body)

    async def delete(self, endpoint: str, response_type: Any) -> Any:
        """Make an authenticated DELETE request."""
        return await self.request(HTTPMethod.DELETE, endpoint, response_type)

    async def request(
        self,
        method: HTTPMethod,
        endpoint: str,
        response_type: Any,
        params: Optional[dict[str, str]] = None,
        body: Any = None,
    ) -> Any:
        """
        Send a request and decode the response.

        Args:
            method: HTTP method
            endpoint: Path below the base URL, e.g. `/transactions/42`
            response_type: Pydantic model (or `list[Model]`) to decode into;
                None to ignore the body
            params: Query parameters
            body: Request body (pydantic model or plain JSON data)

        Raises:
            APIError: One of the taxonomy subclasses, always
        """
        url = self._build_url(endpoint)
        payload = encode_body(body)

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                token = await self._access_token()
                response = await self._send(client, method, url, token, params, payload)

                if response.status_code == 401:
                    # One refresh, one replay. A second 401 is final.
                    try:
                        token = await self._auth.refresh_session()
                    except AuthError as e:
                        logger.warning("token_refresh_failed", endpoint=endpoint, error=str(e))
                        raise UnauthorizedError() from e
                    response = await self._send(client, method, url, token, params, payload)
        except httpx.TransportError as e:
            logger.error("network_error", method=method.value, endpoint=endpoint, error=str(e))
            raise NetworkError(e) from e
        except httpx.HTTPError as e:
            logger.error("http_error", method=method.value, endpoint=endpoint, error=str(e))
            raise UnknownAPIError(e) from e

        return self._handle_response(response, endpoint, response_type)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _build_url(self, endpoint: str) -> httpx.URL:
        raw = f"{self._base_url}{endpoint}"
        try:
            url = httpx.URL(raw)
        except httpx.InvalidURL as e:
            raise InvalidURLError(raw) from e
        if url.scheme not in ("http", "https") or not url.host:
            raise InvalidURLError(raw)
        return url

    async def _access_token(self) -> str:
        try:
            return await self._auth.get_access_token()
        except AuthError as e:
            raise UnauthorizedError() from e

    async def _send(
        self,
        client: httpx.AsyncClient,
        method: HTTPMethod,
        url: httpx.URL,
        token: str,
        params: Optional[dict[str, str]],
        payload: Any,
    ) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        return await client.request(
            method.value,
            url,
            headers=headers,
            params=params or None,
            json=payload,
        )

    def _handle_response(
        self,
        response: httpx.Response,
        endpoint: str,
        response_type: Any,
    ) -> Any:
        status = response.status_code

        if 200 <= status < 300:
            return self._decode(response, endpoint, response_type)
        if status == 401:
            raise UnauthorizedError()
        if status == 403:
            raise ForbiddenError()
        if status == 404:
            raise NotFoundError()

        message = None
        try:
            message = APIErrorBody.model_validate_json(response.content).error
        except ValidationError:
            pass
        logger.error("server_error", endpoint=endpoint, status_code=status, message=message)
        raise ServerError(status, message)

    def _decode(self, response: httpx.Response, endpoint: str, response_type: Any) -> Any:
        if response_type is None:
            return None
        if not response.content:
            raise NoDataError()

        try:
            return TypeAdapter(response_type).validate_json(response.content)
        except ValidationError as e:
            field_path = field_path_of(e)
            logger.error(
                "decoding_error",
                endpoint=endpoint,
                field_path=field_path,
                errors=e.errors(include_url=False)[:5],
                response_preview=response.text[:RESPONSE_PREVIEW_CHARS],
            )
            raise DecodingError(e, field_path) from e
