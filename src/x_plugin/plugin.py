"""
X plugin: the tool façade agents call.

XPlugin owns the catalog of X tools, initializes the API client lazily
on first use, validates tool input and shapes results:

- read tools return Profile / Tweet records, or None / [] when nothing is found
- write tools return ``{"success": ..., "id": ..., ...}`` envelopes and never
  raise for API failures
- ValidationError always propagates, for reads and writes alike

Usage:
    plugin = XPlugin(XConfig.from_env())
    result = await plugin.execute("x_send_tweet", {"text": "hello"})
"""

from __future__ import annotations

import logging
import mimetypes
from enum import Enum
from typing import Any, assert_never

import httpx

from .client import XClient
from .config import XConfig
from .errors import ConfigurationError, UnimplementedOperationError, ValidationError, XPluginError
from .models import MediaFile, PollSpec, Profile, Tweet
from .tools import (
    FUNCTION_DEFINITIONS,
    Tool,
    ToolKind,
    to_tool_parameters,
    validate_params,
)

logger = logging.getLogger(__name__)

# Handle used for the credential check during init
VERIFY_USERNAME = "X"


class PluginState(str, Enum):
    """Lifecycle of an XPlugin instance."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


class XPlugin:
    """
    X integration for AI agents.

    Attributes:
        name: Plugin name
        description: Plugin description
        version: Plugin version
    """

    name = "x"
    description = "X integration for AI agents"
    version = "1.0.0"

    def __init__(self, config: XConfig, http_client: httpx.AsyncClient | None = None):
        """
        Args:
            config: Plugin configuration (see ``XConfig.from_env`` for env-based setup)
            http_client: Optional shared httpx client handed to the API client
        """
        self._config = config
        self._http_client = http_client
        self._client: XClient | None = None
        self._state = PluginState.UNINITIALIZED
        self._tools: dict[str, Tool] = {}
        self._function_definitions: dict[str, dict[str, Any]] = {}
        self._build_tools()

    @property
    def state(self) -> PluginState:
        return self._state

    @property
    def client(self) -> XClient | None:
        return self._client

    @property
    def config(self) -> XConfig:
        return self._config

    # --- Lifecycle ---

    async def init(self) -> None:
        """
        Create the API client and verify the credentials.

        Raises:
            ConfigurationError: If the API key/secret is missing or the
                verification call fails; the plugin returns to UNINITIALIZED
                unless a concurrent init already succeeded
        """
        if self._state is PluginState.READY and self._client is not None:
            return

        self._state = PluginState.INITIALIZING
        client: XClient | None = None
        try:
            if not self._config.has_api_credentials:
                logger.error("Missing required API key and/or secret")
                logger.error("Ensure X_API_KEY and X_API_SECRET_KEY are set")
            self._config.require_api_credentials()

            if not self._config.has_user_context:
                logger.warning(
                    "Missing X user access token and/or secret; "
                    "write operations (tweet, retweet, like) will fail"
                )
            if not self._config.has_client_credentials:
                logger.info("No X client ID/secret; OAuth 2.0 authentication is not available")

            client = XClient(self._config, http_client=self._http_client)

            if self._config.verify_on_init:
                logger.info("Verifying X API credentials...")
                await client.get_profile(VERIFY_USERNAME)
                logger.info("Successfully connected to X API with read permissions")
        except ConfigurationError:
            await self._abort_init(client)
            raise
        except Exception as e:
            await self._abort_init(client)
            logger.error(f"Failed to verify X API credentials: {e}")
            raise ConfigurationError(f"X API initialization failed: {e}") from e
        except BaseException:
            await self._abort_init(client)
            raise

        if self._client is not None:
            # A concurrent init finished first; keep its client.
            await client.aclose()
        else:
            self._client = client
        self._state = PluginState.READY

        self._build_tools()
        logger.info(
            f"X plugin registered {len(self._tools)} tools: {', '.join(self._tools)}"
        )

    async def _abort_init(self, client: XClient | None) -> None:
        if client is not None:
            await client.aclose()
        # A concurrent init may already have succeeded
        if self._client is None:
            self._state = PluginState.UNINITIALIZED

    async def aclose(self) -> None:
        """Close the API client's HTTP resources."""
        if self._client is not None:
            await self._client.aclose()

    async def _ensure_client(self) -> XClient:
        if self._client is None:
            await self.init()
        if self._client is None:
            raise ConfigurationError("X client not initialized")
        return self._client

    # --- Registry ---

    def _build_tools(self) -> None:
        for kind, definition in FUNCTION_DEFINITIONS.items():
            self._function_definitions[definition["name"]] = definition
            self._tools[definition["name"]] = Tool(
                name=definition["name"],
                description=definition["description"],
                parameters=to_tool_parameters(definition["parameters"]),
                execute=self._executor(kind),
            )

    def _executor(self, kind: ToolKind):
        async def execute(params: dict[str, Any]) -> Any:
            return await self.execute(kind, params)

        return execute

    def get_tools(self) -> list[Tool]:
        """All registered tools, in registration order."""
        return list(self._tools.values())

    def get_tool(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def register_tool(self, tool: Tool) -> None:
        """Add or replace a tool."""
        self._tools[tool.name] = tool

    def remove_tool(self, name: str) -> bool:
        """Remove a tool by name; returns whether it existed."""
        self._function_definitions.pop(name, None)
        return self._tools.pop(name, None) is not None

    def get_function_definitions(self) -> list[dict[str, Any]]:
        """OpenAI-style function definitions for the catalog tools still registered."""
        return list(self._function_definitions.values())

    # --- Dispatch ---

    async def execute(self, tool: ToolKind | str, params: dict[str, Any] | None = None) -> Any:
        """
        Run a catalog tool by kind or name.

        Raises:
            ValidationError: Unknown tool, missing required parameter or bad value
            ConfigurationError: The client could not be initialized
        """
        try:
            kind = ToolKind(tool)
        except ValueError as e:
            raise ValidationError(f"Unknown tool: {tool}") from e

        # Input errors surface before the lazy init touches the network
        params = validate_params(kind, params)
        await self._ensure_client()
        logger.debug(f"Running tool {kind.value}")

        match kind:
            case ToolKind.GET_PROFILE:
                result = await self.get_profile(params)
            case ToolKind.GET_TWEETS:
                result = await self.get_tweets(params)
            case ToolKind.GET_TWEET:
                result = await self.get_tweet(params)
            case ToolKind.SEARCH_TWEETS:
                result = await self.search_tweets(params)
            case ToolKind.SEND_TWEET:
                result = await self.send_tweet(params)
            case ToolKind.SEND_TWEET_WITH_POLL:
                result = await self.send_tweet_with_poll(params)
            case ToolKind.RETWEET:
                result = await self.retweet(params)
            case ToolKind.LIKE_TWEET:
                result = await self.like_tweet(params)
            case ToolKind.GET_TRENDS:
                result = await self.get_trends(params)
            case _:
                assert_never(kind)

        logger.debug(f"Tool {kind.value} completed execution")
        return result

    # --- Read operations ---

    async def get_profile(self, params: dict[str, Any]) -> Profile | None:
        params = validate_params(ToolKind.GET_PROFILE, params)
        client = await self._ensure_client()
        return await client.get_profile(params["username"])

    async def get_tweets(self, params: dict[str, Any]) -> list[Tweet]:
        params = validate_params(ToolKind.GET_TWEETS, params)
        client = await self._ensure_client()
        return await client.get_tweets(params["username"], params["limit"])

    async def get_tweet(self, params: dict[str, Any]) -> Tweet | None:
        params = validate_params(ToolKind.GET_TWEET, params)
        client = await self._ensure_client()
        return await client.get_tweet(params["id"])

    async def search_tweets(self, params: dict[str, Any]) -> list[Tweet]:
        params = validate_params(ToolKind.SEARCH_TWEETS, params)
        client = await self._ensure_client()
        return await client.search_tweets(params["query"], params["limit"], params["mode"])

    async def get_trends(self, params: dict[str, Any] | None = None) -> list[str]:
        await self._ensure_client()
        raise UnimplementedOperationError("Trends are not implemented in the X API client")

    # --- Write operations ---
    # Anything but a ValidationError is reported in the envelope.

    async def send_tweet(self, params: dict[str, Any]) -> dict[str, Any]:
        params = validate_params(ToolKind.SEND_TWEET, params)
        text = params["text"]
        in_reply_to = params.get("in_reply_to")
        media = [
            MediaFile(path=path, content_type=mimetypes.guess_type(path)[0] or "image/jpeg")
            for path in params.get("media") or []
        ]
        client = await self._ensure_client()

        logger.info(f"Sending tweet{f' as reply to {in_reply_to}' if in_reply_to else ''}")
        try:
            tweet_id = await client.send_tweet(text, in_reply_to, media or None)
        except ValidationError:
            raise
        except XPluginError as e:
            logger.error(f"Error posting tweet: {e}")
            return {"success": False, "error": str(e), "text": text}
        except Exception as e:
            logger.exception(f"Unexpected error posting tweet: {e}")
            return {"success": False, "error": str(e), "text": text}

        if tweet_id:
            return {"success": True, "id": tweet_id, "text": text}

        logger.warning("No tweet ID returned from X API; the tweet may not have been posted")
        return {
            "success": True,
            "id": None,
            "text": text,
            "note": "Tweet may have been posted but no ID was returned - please check X directly",
        }

    async def send_tweet_with_poll(self, params: dict[str, Any]) -> dict[str, Any]:
        params = validate_params(ToolKind.SEND_TWEET_WITH_POLL, params)
        text = params["text"]
        options = [
            params[f"poll_option_{i}"] for i in range(1, 5) if params.get(f"poll_option_{i}")
        ]
        poll = PollSpec(options=options, duration_minutes=params["duration_minutes"])
        client = await self._ensure_client()

        logger.info("Sending tweet with poll")
        try:
            tweet_id = await client.send_tweet_with_poll(text, poll)
        except ValidationError:
            raise
        except XPluginError as e:
            logger.error(f"Error posting tweet with poll: {e}")
            return {"success": False, "error": str(e), "text": text}
        except Exception as e:
            logger.exception(f"Unexpected error posting tweet with poll: {e}")
            return {"success": False, "error": str(e), "text": text}

        result = {"success": True, "id": tweet_id, "text": text, "poll_options": options}
        if not tweet_id:
            logger.warning("No tweet ID returned from X API for poll tweet")
            result["note"] = "Tweet with poll may have been posted but no ID was returned"
        return result

    async def retweet(self, params: dict[str, Any]) -> dict[str, Any]:
        params = validate_params(ToolKind.RETWEET, params)
        tweet_id = params["id"]
        client = await self._ensure_client()

        logger.info(f"Attempting to retweet tweet with ID: {tweet_id}")
        try:
            success = await client.retweet(tweet_id)
        except ValidationError:
            raise
        except XPluginError as e:
            logger.error(f"Error retweeting tweet {tweet_id}: {e}")
            return {"success": False, "id": tweet_id, "error": str(e)}
        except Exception as e:
            logger.exception(f"Unexpected error retweeting tweet {tweet_id}: {e}")
            return {"success": False, "id": tweet_id, "error": str(e)}

        if not success:
            logger.warning(f"Failed to retweet tweet {tweet_id}")
            return {"success": False, "id": tweet_id, "note": "Retweet API call failed"}
        return {"success": True, "id": tweet_id}

    async def like_tweet(self, params: dict[str, Any]) -> dict[str, Any]:
        params = validate_params(ToolKind.LIKE_TWEET, params)
        tweet_id = params["id"]
        client = await self._ensure_client()

        logger.info(f"Attempting to like tweet with ID: {tweet_id}")
        try:
            success = await client.like_tweet(tweet_id)
        except ValidationError:
            raise
        except XPluginError as e:
            logger.error(f"Error liking tweet {tweet_id}: {e}")
            return {"success": False, "id": tweet_id, "error": str(e)}
        except Exception as e:
            logger.exception(f"Unexpected error liking tweet {tweet_id}: {e}")
            return {"success": False, "id": tweet_id, "error": str(e)}

        if not success:
            logger.warning(f"Failed to like tweet {tweet_id}")
            return {"success": False, "id": tweet_id, "note": "Like API call failed"}
        return {"success": True, "id": tweet_id}
