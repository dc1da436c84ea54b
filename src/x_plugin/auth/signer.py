"""
Per-request authorization: OAuth 2.0 bearer first, OAuth 1.0a otherwise.

When client credentials are configured and the request is a v2 read (GET),
the signer asks the token endpoint for an app-only bearer token. If that
fails it falls back to an OAuth 1.0a signature, logging a structured
``oauth2_fallback`` event. The fallback can be disabled with
``XConfig.oauth2_fallback = False``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

import httpx

from ..config import XConfig
from ..errors import AuthenticationError, OAuth2Error
from .oauth1 import OAuth1Signer
from .oauth2 import ClientCredentialsProvider, OAuth2Config

logger = logging.getLogger(__name__)


class RequestSigner:
    """
    Chooses the auth scheme for each request and returns the auth header.

    Attributes:
        fallback_count: Number of times OAuth 2.0 failed and OAuth 1.0a was used
    """

    def __init__(self, config: XConfig):
        config.require_api_credentials()
        self._config = config
        self._oauth1 = OAuth1Signer(
            api_key=config.api_key_value,
            api_secret=config.api_secret_value,
            access_token=config.access_token_value,
            access_secret=config.access_secret_value,
        )
        self._oauth2: ClientCredentialsProvider | None = None
        if config.has_client_credentials:
            self._oauth2 = ClientCredentialsProvider(
                OAuth2Config(
                    client_id=config.client_id_value,
                    client_secret=config.client_secret_value,
                    scopes=list(config.oauth2_scopes),
                )
            )
        self.fallback_count = 0

    @property
    def oauth1(self) -> OAuth1Signer:
        return self._oauth1

    @property
    def oauth2(self) -> ClientCredentialsProvider | None:
        return self._oauth2

    async def authorize(
        self,
        http: httpx.AsyncClient,
        method: str,
        url: str,
        query_params: Mapping[str, object] | None = None,
        *,
        bearer_eligible: bool = False,
    ) -> dict[str, str]:
        """
        Build the Authorization header for one request.

        Args:
            http: Client used for the token request
            method: HTTP method
            url: Request URL without query string
            query_params: Query parameters (GET only) to include in the OAuth 1.0a signature
            bearer_eligible: Whether the endpoint accepts an app-only bearer token

        Returns:
            Headers dict with the Authorization entry

        Raises:
            AuthenticationError: If OAuth 2.0 fails and fallback is disabled
        """
        if self._oauth2 is not None and bearer_eligible:
            try:
                token = await self._oauth2.get_token(http)
                return {"Authorization": token.authorization}
            except OAuth2Error as e:
                if not self._config.oauth2_fallback:
                    logger.error(f"OAuth 2.0 token request failed and fallback is disabled: {e}")
                    raise AuthenticationError(
                        e.status_code,
                        {"error": e.error, "error_description": e.description},
                        f"OAuth 2.0 authentication failed: {e}",
                    ) from e
                self.fallback_count += 1
                logger.warning(
                    "Error getting OAuth 2.0 token, falling back to OAuth 1.0a",
                    extra={
                        "event": "oauth2_fallback",
                        "oauth2_error": e.error,
                        "status_code": e.status_code,
                        "url": url,
                    },
                )

        return {"Authorization": self._oauth1.sign(method, url, query_params)}
