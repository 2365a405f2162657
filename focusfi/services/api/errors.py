"""
API Error Taxonomy

Every failure of a backend call is reported as exactly one of these
exceptions. Callers catch `APIError` and show `str(error)` to the user.

The set is closed: the client never lets an httpx or pydantic
exception escape unwrapped.
"""

from typing import Optional

from pydantic import ValidationError


class APIError(Exception):
    """Base exception for backend API errors."""
    pass


class InvalidURLError(APIError):
    """The configured base URL and endpoint do not form a valid URL."""

    def __init__(self, url: str):
        self.url = url
        super().__init__("Invalid URL")


class NoDataError(APIError):
    """The backend answered with an empty body where data was expected."""

    def __init__(self):
        super().__init__("No data received")


class DecodingError(APIError):
    """The response body did not have the expected shape."""

    def __init__(self, cause: Exception, field_path: Optional[str] = None):
        self.cause = cause
        self.field_path = field_path
        super().__init__(f"Failed to decode response: {describe_decoding_cause(cause)}")


class NetworkError(APIError):
    """Transport-level failure: DNS, connection refused, timeout, ..."""

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"Network error: {cause}")


class UnauthorizedError(APIError):
    """No valid session, even after one refresh."""

    def __init__(self):
        super().__init__("Unauthorized - please sign in again")


class ForbiddenError(APIError):
    def __init__(self):
        super().__init__("Access forbidden")


class NotFoundError(APIError):
    def __init__(self):
        super().__init__("Resource not found")


class ServerError(APIError):
    """Any other non-2xx status."""

    def __init__(self, status_code: int, message: Optional[str] = None):
        self.status_code = status_code
        self.message = message
        super().__init__(f"Server error ({status_code}): {message or 'Unknown error'}")


class UnknownAPIError(APIError):
    """Anything the client could not classify."""

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"Unknown error: {cause}")


def field_path_of(error: ValidationError) -> Optional[str]:
    """Dotted location of the first validation error, e.g. `0.amount`."""
    errors = error.errors()
    if not errors:
        return None
    loc = errors[0].get("loc", ())
    if not loc:
        return None
    return ".".join(str(part) for part in loc)


def describe_decoding_cause(cause: Exception) -> str:
    if isinstance(cause, ValidationError):
        errors = cause.errors()
        if errors:
            first = errors[0]
            path = field_path_of(cause)
            if first.get("type") == "missing":
                return f"Missing key: {path}"
            if path:
                return f"Invalid value at '{path}': {first.get('msg')}"
            return str(first.get("msg"))
    return str(cause)


def describe_api_error(error: Exception) -> str:
    """
    Human-readable message for display.

    Decoding errors mention the offending field so the user (or a bug
    report) points straight at the bad backend data.
    """
    if isinstance(error, DecodingError):
        return describe_decoding_cause(error.cause)
    return str(error)
