"""
Expose the X plugin's tools on a FastMCP server.

Usage:
    from fastmcp import FastMCP
    from x_plugin import XConfig, XPlugin
    from x_plugin.mcp_server import register_tools

    mcp = FastMCP("x")
    register_tools(mcp, XPlugin(XConfig.from_env()))
    mcp.run()

Every tool returns a dict. Plugin errors are reported as
``{"error": ...}`` instead of raising into the MCP runtime.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from fastmcp import FastMCP
from pydantic import BaseModel

from .errors import ValidationError, XPluginError
from .plugin import XPlugin
from .tools import FUNCTION_DEFINITIONS, ToolKind

logger = logging.getLogger(__name__)


def to_jsonable(value: Any) -> Any:
    """Dump pydantic records (and lists of them) to JSON-compatible data."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [to_jsonable(item) for item in value]
    return value


def _description(kind: ToolKind) -> str:
    return FUNCTION_DEFINITIONS[kind]["description"]


def register_tools(mcp: FastMCP, plugin: XPlugin) -> list[str]:
    """
    Register the X catalog with an MCP server.

    Returns:
        Names of the registered tools, in catalog order
    """

    async def _run(
        kind: ToolKind,
        params: dict[str, Any],
        shape: Callable[[Any], dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        # Drop unset optionals so catalog defaults apply
        params = {k: v for k, v in params.items() if v is not None}
        try:
            result = await plugin.execute(kind, params)
        except ValidationError as e:
            return {"error": str(e), "field": e.field}
        except XPluginError as e:
            logger.error(f"Error executing tool {kind.value}: {e}")
            return {"error": str(e)}
        return shape(result) if shape else result

    def _register(kind: ToolKind, fn: Callable[..., Awaitable[dict[str, Any]]]) -> None:
        mcp.tool(name=kind.value, description=_description(kind))(fn)

    async def x_get_profile(username: str) -> dict:
        """Get an X user profile by username (without the @ symbol)."""
        return await _run(
            ToolKind.GET_PROFILE,
            {"username": username},
            lambda profile: {"profile": to_jsonable(profile)},
        )

    async def x_get_tweets(username: str, limit: int = 10) -> dict:
        """Get recent tweets from an X user."""
        return await _run(
            ToolKind.GET_TWEETS,
            {"username": username, "limit": limit},
            lambda tweets: {"tweets": to_jsonable(tweets)},
        )

    async def x_get_tweet(id: str) -> dict:
        """Get a specific tweet by ID."""
        return await _run(
            ToolKind.GET_TWEET,
            {"id": id},
            lambda tweet: {"tweet": to_jsonable(tweet)},
        )

    async def x_search_tweets(query: str, limit: int = 10, mode: str = "latest") -> dict:
        """Search for tweets (mode: latest, top, people, photos or videos)."""
        return await _run(
            ToolKind.SEARCH_TWEETS,
            {"query": query, "limit": limit, "mode": mode},
            lambda tweets: {"tweets": to_jsonable(tweets)},
        )

    async def x_send_tweet(
        text: str,
        in_reply_to: str | None = None,
        media: list[str] | None = None,
    ) -> dict:
        """Send a new tweet (max 280 characters), optionally as a reply or with media files."""
        return await _run(
            ToolKind.SEND_TWEET,
            {"text": text, "in_reply_to": in_reply_to, "media": media},
        )

    async def x_send_tweet_with_poll(
        text: str,
        poll_option_1: str,
        poll_option_2: str,
        duration_minutes: int = 1440,
        poll_option_3: str | None = None,
        poll_option_4: str | None = None,
    ) -> dict:
        """Send a new tweet with a 2-4 option poll lasting 5-10080 minutes."""
        return await _run(
            ToolKind.SEND_TWEET_WITH_POLL,
            {
                "text": text,
                "poll_option_1": poll_option_1,
                "poll_option_2": poll_option_2,
                "poll_option_3": poll_option_3,
                "poll_option_4": poll_option_4,
                "duration_minutes": duration_minutes,
            },
        )

    async def x_retweet(id: str) -> dict:
        """Retweet a tweet."""
        return await _run(ToolKind.RETWEET, {"id": id})

    async def x_like_tweet(id: str) -> dict:
        """Like a tweet."""
        return await _run(ToolKind.LIKE_TWEET, {"id": id})

    async def x_get_trends(woeid: int = 1) -> dict:
        """Get current X trends (not available: always returns an error)."""
        return await _run(ToolKind.GET_TRENDS, {"woeid": woeid})

    handlers: dict[ToolKind, Callable[..., Awaitable[dict[str, Any]]]] = {
        ToolKind.GET_PROFILE: x_get_profile,
        ToolKind.GET_TWEETS: x_get_tweets,
        ToolKind.GET_TWEET: x_get_tweet,
        ToolKind.SEARCH_TWEETS: x_search_tweets,
        ToolKind.SEND_TWEET: x_send_tweet,
        ToolKind.SEND_TWEET_WITH_POLL: x_send_tweet_with_poll,
        ToolKind.RETWEET: x_retweet,
        ToolKind.LIKE_TWEET: x_like_tweet,
        ToolKind.GET_TRENDS: x_get_trends,
    }
    for kind in ToolKind:
        _register(kind, handlers[kind])

    return [kind.value for kind in ToolKind]
