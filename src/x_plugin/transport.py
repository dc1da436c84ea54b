"""
HTTP transport for the X API.

XTransport signs each request, sends it with ``httpx.AsyncClient`` and
turns non-2xx responses into classified XAPIError subclasses. The error
always carries the HTTP status and decoded body.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import httpx

from .auth import RequestSigner
from .config import XConfig
from .errors import (
    AuthenticationError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitError,
    TransportError,
    XAPIError,
)

logger = logging.getLogger(__name__)


class ApiVersion(str, Enum):
    """X API generations and their base URLs."""

    V1_1 = "https://api.twitter.com/1.1"
    V2 = "https://api.twitter.com/2"
    UPLOAD = "https://upload.twitter.com/1.1"

    @property
    def base_url(self) -> str:
        return self.value


@dataclass
class MultipartForm:
    """
    A multipart/form-data request body.

    Attributes:
        files: Field name -> (filename, content, content_type)
        data: Plain form fields sent alongside the files
    """

    files: dict[str, tuple[str, bytes, str]]
    data: dict[str, str] = field(default_factory=dict)


def _decode_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class XTransport:
    """
    Authenticated request layer for X API v1.1 and v2.

    Example:
        async with XTransport(config) as transport:
            data = await transport.request("GET", "/users/by/username/jack")
    """

    def __init__(
        self,
        config: XConfig,
        signer: RequestSigner | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Args:
            config: Plugin configuration
            signer: Request signer (built from config if omitted)
            http_client: Shared client; the transport only closes clients it created

        Raises:
            ConfigurationError: If the API key or secret is missing
        """
        config.require_api_credentials()
        self._config = config
        self._signer = signer or RequestSigner(config)
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=config.request_timeout)

    @property
    def signer(self) -> RequestSigner:
        return self._signer

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> XTransport:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        api_version: ApiVersion = ApiVersion.V2,
        body: Any = None,
    ) -> dict[str, Any] | None:
        """
        Make an authenticated request to the X API.

        Args:
            method: HTTP method
            endpoint: Path below the version base URL (e.g. "/tweets")
            params: Query parameters, used for GET only
            api_version: Which API generation to call
            body: JSON-serializable payload, or a MultipartForm (non-GET only)

        Returns:
            Decoded JSON object (or None for empty bodies)

        Raises:
            AuthenticationError: HTTP 401
            PermissionDeniedError: HTTP 403
            NotFoundError: HTTP 404
            RateLimitError: HTTP 429
            XAPIError: Any other non-2xx status, or a 2xx body that is not a JSON object
            TransportError: Network failure
        """
        method = method.upper()
        url = f"{api_version.base_url}{endpoint}"
        query = {k: str(v) for k, v in (params or {}).items()} if method == "GET" else {}

        if api_version is ApiVersion.V2 and method == "POST" and not self._config.has_user_context:
            logger.warning("POST requests to v2 API may require user access token")

        headers = await self._signer.authorize(
            self._http,
            method,
            url,
            query,
            bearer_eligible=api_version is ApiVersion.V2 and method == "GET",
        )
        headers["Accept"] = "application/json"

        kwargs: dict[str, Any] = {"headers": headers}
        if query:
            kwargs["params"] = query
        if method != "GET" and body is not None:
            if isinstance(body, MultipartForm):
                kwargs["files"] = body.files
                if body.data:
                    kwargs["data"] = body.data
            else:
                kwargs["json"] = body

        logger.debug(f"{method} {url}")
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Request error: {method} {url}: {e}")
            raise TransportError(f"X API request failed: {e}") from e

        return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> dict[str, Any] | None:
        status = response.status_code
        extra = {"event": "x_api_error", "status_code": status}
        if response.is_success:
            if not response.content:
                return None
            body = _decode_body(response)
            if body is not None and not isinstance(body, dict):
                logger.error(f"Unexpected X API response body (HTTP {status})", extra=extra)
                raise XAPIError(status, body, f"Unexpected X API response: {status} - {body}")
            return body

        body = _decode_body(response)
        message = f"X API error: {status} - {body}"

        if status == 401:
            logger.error(
                "Authentication error - check X API credentials and token validity", extra=extra
            )
            raise AuthenticationError(status, body, message)
        if status == 403:
            logger.error(
                "Permission error - your X app may not have the required access level",
                extra=extra,
            )
            raise PermissionDeniedError(status, body, message)
        if status == 404:
            logger.info("Resource not found", extra=extra)
            raise NotFoundError(status, body, message)
        if status == 429:
            reset_at = RateLimitError.reset_from_header(response.headers.get("x-rate-limit-reset"))
            reset = reset_at.isoformat() if reset_at else "unknown"
            logger.warning(f"Rate limit exceeded (resets at {reset})", extra=extra)
            raise RateLimitError(status, body, message, reset_at=reset_at)

        logger.error(f"API error {status}: {body}", extra=extra)
        raise XAPIError(status, body, message)
