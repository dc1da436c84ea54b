"""
OAuth 2.0 client-credentials (app-only) tokens for the X API v2.

This module defines:
- OAuth2Token: an access token with expiry metadata
- OAuth2Config: token endpoint, client credentials and scopes
- ClientCredentialsProvider: obtains and caches bearer tokens
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx

from ..errors import OAuth2Error

logger = logging.getLogger(__name__)

X_OAUTH2_TOKEN_URL = "https://api.twitter.com/2/oauth2/token"


@dataclass
class OAuth2Token:
    """
    Represents an OAuth2 token with metadata.

    Attributes:
        access_token: The access token string
        token_type: Token type (usually "bearer")
        expires_at: When the token expires
        scope: Granted scopes (space-separated)
        raw_response: Original token response from server
    """

    access_token: str
    token_type: str = "Bearer"
    expires_at: datetime | None = None
    scope: str | None = None
    raw_response: dict[str, Any] = field(default_factory=dict)

    @property
    def is_expired(self) -> bool:
        """
        Check if token is expired.

        Uses a 5-minute buffer to account for clock skew and
        request latency.
        """
        if self.expires_at is None:
            return False
        buffer = timedelta(minutes=5)
        return datetime.now(UTC) >= (self.expires_at - buffer)

    @property
    def authorization(self) -> str:
        return f"Bearer {self.access_token}"

    @classmethod
    def from_token_response(cls, data: dict[str, Any]) -> OAuth2Token:
        """
        Create OAuth2Token from a token endpoint response.

        Raises:
            OAuth2Error: If the response carries no access_token
        """
        access_token = data.get("access_token")
        if not access_token:
            raise OAuth2Error("invalid_response", "Token response did not include access_token")

        expires_at = None
        if "expires_in" in data:
            expires_at = datetime.now(UTC) + timedelta(seconds=int(data["expires_in"]))

        return cls(
            access_token=access_token,
            token_type=data.get("token_type", "Bearer"),
            expires_at=expires_at,
            scope=data.get("scope"),
            raw_response=data,
        )


@dataclass
class OAuth2Config:
    """
    Configuration for the client-credentials grant.

    Attributes:
        client_id: OAuth2 client ID
        client_secret: OAuth2 client secret
        token_url: Token endpoint
        scopes: Scopes to request
        extra_token_params: Additional form fields sent with the token request
    """

    client_id: str
    client_secret: str
    token_url: str = X_OAUTH2_TOKEN_URL
    scopes: list[str] = field(default_factory=lambda: ["tweet.read", "users.read"])
    extra_token_params: dict[str, str] = field(
        default_factory=lambda: {"client_type": "service_client"}
    )

    def __post_init__(self) -> None:
        if not self.client_id or not self.client_secret:
            raise ValueError("client_id and client_secret are required")
        if not self.token_url:
            raise ValueError("token_url is required")


class ClientCredentialsProvider:
    """
    Obtains bearer tokens with the client-credentials grant.

    A token is reused until it is within five minutes of expiry. Tokens
    returned without ``expires_in`` are reused until ``invalidate()``.

    Example:
        provider = ClientCredentialsProvider(OAuth2Config(client_id, client_secret))
        token = await provider.get_token(http_client)
        headers = {"Authorization": token.authorization}
    """

    def __init__(self, config: OAuth2Config):
        self.config = config
        self._token: OAuth2Token | None = None

    @property
    def cached_token(self) -> OAuth2Token | None:
        return self._token

    def invalidate(self) -> None:
        """Drop the cached token so the next call requests a new one."""
        self._token = None

    async def get_token(self, http: httpx.AsyncClient) -> OAuth2Token:
        """
        Return a valid bearer token, requesting a new one if needed.

        Raises:
            OAuth2Error: If the token endpoint fails or returns no token
        """
        if self._token is not None and not self._token.is_expired:
            return self._token
        self._token = await self._token_request(http)
        return self._token

    async def _token_request(self, http: httpx.AsyncClient) -> OAuth2Token:
        data = {
            "grant_type": "client_credentials",
            "client_id": self.config.client_id,
            **self.config.extra_token_params,
        }
        if self.config.scopes:
            data["scope"] = " ".join(self.config.scopes)

        try:
            response = await http.post(
                self.config.token_url,
                data=data,
                auth=(self.config.client_id, self.config.client_secret),
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            raise OAuth2Error("request_failed", str(e)) from e

        try:
            response_data = response.json()
        except ValueError:
            response_data = {}

        if not response.is_success or "error" in response_data:
            error = response_data.get("error", "unknown_error")
            description = response_data.get("error_description", response.text)
            raise OAuth2Error(
                error=error, description=description, status_code=response.status_code
            )

        token = OAuth2Token.from_token_response(response_data)
        logger.debug(f"Obtained OAuth 2.0 token (scope={token.scope})")
        return token
