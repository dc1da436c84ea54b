"""
Plugin configuration and the environment adapter that builds it.

XConfig is immutable. Nothing in the package reads the environment on
its own; callers that want env-based configuration call
``XConfig.from_env()`` explicitly.

Environment variables:
    X_API_KEY, X_API_SECRET_KEY          consumer key/secret (required)
    X_ACCESS_TOKEN, X_ACCESS_TOKEN_SECRET user context (required to write)
    X_CLIENT_ID, X_CLIENT_SECRET         OAuth 2.0 client credentials
    X_CACHE_TWEET_SECONDS                TTL for tweet reads (0 disables)
    X_CACHE_PROFILE_SECONDS              TTL for profile reads (0 disables)
    X_OAUTH2_FALLBACK                    "false" to disable OAuth 1.0a fallback
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import dotenv_values
from pydantic import BaseModel, Field, SecretStr

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# Field name -> environment variable
ENV_MAPPING: dict[str, str] = {
    "api_key": "X_API_KEY",
    "api_secret": "X_API_SECRET_KEY",
    "access_token": "X_ACCESS_TOKEN",
    "access_secret": "X_ACCESS_TOKEN_SECRET",
    "client_id": "X_CLIENT_ID",
    "client_secret": "X_CLIENT_SECRET",
    "cache_tweet_seconds": "X_CACHE_TWEET_SECONDS",
    "cache_profile_seconds": "X_CACHE_PROFILE_SECONDS",
    "oauth2_fallback": "X_OAUTH2_FALLBACK",
}

_FALSE_VALUES = {"0", "false", "no", "off"}


def _secret_value(secret: SecretStr | None) -> str | None:
    if secret is None:
        return None
    value = secret.get_secret_value()
    return value or None


class XConfig(BaseModel):
    """
    Credentials and options for the X plugin.

    Attributes:
        api_key: Consumer (API) key, mandatory for every call
        api_secret: Consumer (API) secret, mandatory for every call
        access_token: User access token, needed for write operations
        access_secret: User access token secret, needed for write operations
        client_id: OAuth 2.0 client id, enables the bearer-token path
        client_secret: OAuth 2.0 client secret
        cache_tweet_seconds: TTL for cached tweet reads, 0 disables caching
        cache_profile_seconds: TTL for cached profile reads, 0 disables caching
        oauth2_fallback: Fall back to OAuth 1.0a when the OAuth 2.0 token request fails
        oauth2_scopes: Scopes requested with the client-credentials grant
        resolve_referenced_authors: Attribute retweeted/quoted statuses to their
            own author instead of the viewing tweet's author
        verify_on_init: Perform a test profile lookup during ``XPlugin.init()``
        request_timeout: httpx timeout in seconds
    """

    api_key: SecretStr | None = None
    api_secret: SecretStr | None = None
    access_token: SecretStr | None = None
    access_secret: SecretStr | None = None
    client_id: SecretStr | None = None
    client_secret: SecretStr | None = None

    cache_tweet_seconds: int = Field(default=0, ge=0)
    cache_profile_seconds: int = Field(default=0, ge=0)

    oauth2_fallback: bool = True
    oauth2_scopes: list[str] = Field(default_factory=lambda: ["tweet.read", "users.read"])
    resolve_referenced_authors: bool = False
    verify_on_init: bool = True
    request_timeout: float = Field(default=30.0, gt=0)

    model_config = {"frozen": True}

    @classmethod
    def from_env(cls, dotenv_path: Path | None = None, **overrides) -> XConfig:
        """
        Build a config from environment variables and an optional .env file.

        Values in ``os.environ`` take precedence over the .env file, and
        explicit keyword overrides take precedence over both.

        Args:
            dotenv_path: .env file to read (defaults to ./.env if it exists)
            **overrides: Field values that win over the environment

        Returns:
            XConfig instance
        """
        path = dotenv_path or Path.cwd() / ".env"
        file_values = dotenv_values(path) if path.exists() else {}

        values: dict[str, object] = {}
        for field_name, env_var in ENV_MAPPING.items():
            raw = os.environ.get(env_var) or file_values.get(env_var)
            if raw is None or raw == "":
                continue
            if field_name == "oauth2_fallback":
                values[field_name] = raw.strip().lower() not in _FALSE_VALUES
            else:
                values[field_name] = raw

        values.update(overrides)
        return cls(**values)

    # --- Accessors ---

    @property
    def api_key_value(self) -> str | None:
        return _secret_value(self.api_key)

    @property
    def api_secret_value(self) -> str | None:
        return _secret_value(self.api_secret)

    @property
    def access_token_value(self) -> str | None:
        return _secret_value(self.access_token)

    @property
    def access_secret_value(self) -> str | None:
        return _secret_value(self.access_secret)

    @property
    def client_id_value(self) -> str | None:
        return _secret_value(self.client_id)

    @property
    def client_secret_value(self) -> str | None:
        return _secret_value(self.client_secret)

    @property
    def has_api_credentials(self) -> bool:
        return bool(self.api_key_value and self.api_secret_value)

    @property
    def has_user_context(self) -> bool:
        """True when both the user access token and secret are set (write access)."""
        return bool(self.access_token_value and self.access_secret_value)

    @property
    def has_client_credentials(self) -> bool:
        """True when OAuth 2.0 client credentials are set."""
        return bool(self.client_id_value and self.client_secret_value)

    def missing_api_credentials(self) -> list[str]:
        """Environment variable names of the missing mandatory credentials."""
        missing = []
        if not self.api_key_value:
            missing.append(ENV_MAPPING["api_key"])
        if not self.api_secret_value:
            missing.append(ENV_MAPPING["api_secret"])
        return missing

    def require_api_credentials(self) -> None:
        """
        Raise if the consumer key or secret is missing.

        Raises:
            ConfigurationError: If X_API_KEY or X_API_SECRET_KEY is not set
        """
        missing = self.missing_api_credentials()
        if missing:
            raise ConfigurationError(
                f"X API key and secret are required (missing: {', '.join(missing)})"
            )
