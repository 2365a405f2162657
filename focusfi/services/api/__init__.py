"""
Backend API Package

The authenticated HTTP client and the closed error taxonomy it raises.
"""

from focusfi.services.api.client import APIClient, HTTPMethod, encode_body
from focusfi.services.api.errors import (
    APIError,
    DecodingError,
    ForbiddenError,
    InvalidURLError,
    NetworkError,
    NoDataError,
    NotFoundError,
    ServerError,
    UnauthorizedError,
    UnknownAPIError,
    describe_api_error,
)

__all__ = [
    # Client
    "APIClient",
    "HTTPMethod",
    "encode_body",
    # Errors
    "APIError",
    "DecodingError",
    "ForbiddenError",
    "InvalidURLError",
    "NetworkError",
    "NoDataError",
    "NotFoundError",
    "ServerError",
    "UnauthorizedError",
    "UnknownAPIError",
    "describe_api_error",
]
