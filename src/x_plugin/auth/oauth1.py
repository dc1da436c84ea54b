"""OAuth 1.0a HMAC-SHA1 request signing."""

from __future__ import annotations

import base64
import hashlib
import hmac
import time
import urllib.parse
import uuid
from collections.abc import Mapping


def percent_encode(value: object) -> str:
    """RFC 3986 percent-encoding (unreserved characters only are left as-is)."""
    return urllib.parse.quote(str(value), safe="~")


def generate_nonce() -> str:
    """Fresh random base64 nonce."""
    return base64.b64encode(uuid.uuid4().bytes).decode("ascii")


class OAuth1Signer:
    """
    Builds ``Authorization: OAuth ...`` header values.

    The signing steps are exposed individually (``param_string``,
    ``signature_base_string``, ``signature``) so they can be checked with a
    fixed nonce and timestamp.
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        access_token: str | None = None,
        access_secret: str | None = None,
    ):
        self._api_key = api_key
        self._api_secret = api_secret
        self._access_token = access_token
        self._access_secret = access_secret

    def oauth_params(
        self, nonce: str | None = None, timestamp: str | None = None
    ) -> dict[str, str]:
        """Standard OAuth protocol parameters for one request."""
        params = {
            "oauth_consumer_key": self._api_key,
            "oauth_nonce": nonce or generate_nonce(),
            "oauth_signature_method": "HMAC-SHA1",
            "oauth_timestamp": timestamp or str(int(time.time())),
            "oauth_version": "1.0",
        }
        if self._access_token:
            params["oauth_token"] = self._access_token
        return params

    @staticmethod
    def param_string(params: Mapping[str, object]) -> str:
        """Percent-encode, sort by key and join as ``k=v&k=v``."""
        encoded = sorted((percent_encode(k), percent_encode(v)) for k, v in params.items())
        return "&".join(f"{k}={v}" for k, v in encoded)

    @classmethod
    def signature_base_string(cls, method: str, url: str, params: Mapping[str, object]) -> str:
        return "&".join(
            [
                method.upper(),
                percent_encode(url),
                percent_encode(cls.param_string(params)),
            ]
        )

    @property
    def signing_key(self) -> str:
        return f"{percent_encode(self._api_secret)}&{percent_encode(self._access_secret or '')}"

    def signature(self, method: str, url: str, params: Mapping[str, object]) -> str:
        """HMAC-SHA1 over the signature base string, base64-encoded."""
        base_string = self.signature_base_string(method, url, params)
        digest = hmac.new(
            self.signing_key.encode("utf-8"),
            base_string.encode("utf-8"),
            hashlib.sha1,
        ).digest()
        return base64.b64encode(digest).decode("utf-8")

    def sign(
        self,
        method: str,
        url: str,
        query_params: Mapping[str, object] | None = None,
        *,
        nonce: str | None = None,
        timestamp: str | None = None,
    ) -> str:
        """
        Build the OAuth 1.0a Authorization header value.

        Args:
            method: HTTP method
            url: Request URL without query string
            query_params: Query parameters; only pass these for GET requests
            nonce: Override the random nonce
            timestamp: Override the current Unix timestamp

        Returns:
            Header value starting with ``OAuth ``
        """
        oauth_params = self.oauth_params(nonce=nonce, timestamp=timestamp)
        all_params: dict[str, object] = {**(query_params or {}), **oauth_params}
        oauth_params["oauth_signature"] = self.signature(method, url, all_params)

        header_parts = [
            f'{percent_encode(k)}="{percent_encode(v)}"' for k, v in sorted(oauth_params.items())
        ]
        return "OAuth " + ", ".join(header_parts)
