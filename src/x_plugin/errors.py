"""
Exception hierarchy for the X plugin.

Every error raised by this package derives from XPluginError so callers
can catch the whole family at a tool boundary.

- ConfigurationError: credentials missing or initialization failed
- ValidationError: tool input rejected before any network call
- XAPIError and subclasses: the X API answered with a non-2xx status, or
  with a 2xx body that is not the expected JSON object
- TransportError: the request never produced an HTTP response
- OAuth2Error: the OAuth 2.0 token endpoint refused or failed
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any


class XPluginError(Exception):
    """Base exception for X plugin errors."""

    pass


class ConfigurationError(XPluginError):
    """Raised when mandatory credentials are missing or cannot be verified."""

    pass


class ValidationError(XPluginError):
    """
    Raised when tool input is invalid.

    Attributes:
        field: Name of the offending parameter, if a single one is to blame
    """

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class UnimplementedOperationError(XPluginError):
    """Raised by catalog operations that exist but are not backed by the API client."""

    pass


class TransportError(XPluginError):
    """Raised when the HTTP request fails before a response is received."""

    pass


class XAPIError(XPluginError):
    """
    The X API returned a non-2xx response.

    Attributes:
        status: HTTP status code
        body: Decoded JSON body, or raw text when the body is not JSON
    """

    def __init__(self, status: int, body: Any, message: str | None = None):
        self.status = status
        self.body = body
        super().__init__(message or f"X API error: {status} - {body}")


class AuthenticationError(XAPIError):
    """HTTP 401: invalid or expired credentials."""

    pass


class PermissionDeniedError(XAPIError):
    """HTTP 403: credentials are valid but lack the required access level."""

    pass


class NotFoundError(XAPIError):
    """HTTP 404: the requested resource does not exist."""

    pass


class RateLimitError(XAPIError):
    """
    HTTP 429: rate limit exceeded.

    Attributes:
        reset_at: When the rate-limit window resets, if the API said so
    """

    def __init__(
        self,
        status: int,
        body: Any,
        message: str | None = None,
        reset_at: datetime | None = None,
    ):
        super().__init__(status, body, message)
        self.reset_at = reset_at

    @classmethod
    def reset_from_header(cls, value: str | None) -> datetime | None:
        """Parse an ``x-rate-limit-reset`` header (epoch seconds)."""
        if not value:
            return None
        try:
            return datetime.fromtimestamp(int(value), UTC)
        except (TypeError, ValueError, OverflowError):
            return None


class OAuth2Error(XPluginError):
    """
    OAuth 2.0 token request failed.

    Attributes:
        error: OAuth2 error code (e.g., 'invalid_client')
        description: Human-readable error description
        status_code: HTTP status code from the token endpoint (0 if none)
    """

    def __init__(self, error: str, description: str = "", status_code: int = 0):
        self.error = error
        self.description = description
        self.status_code = status_code
        super().__init__(f"{error}: {description}" if description else error)
