"""
Static tool catalog for the X plugin.

Each catalog entry is an OpenAI-style function definition (JSON schema
parameters). ``ToolKind`` names every entry so dispatch can match on it
exhaustively, and ``validate_params`` checks caller input against the
schema before anything touches the network.
"""

from __future__ import annotations

import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .errors import ValidationError


class ToolKind(str, Enum):
    """Every operation in the catalog; the value is the tool name."""

    GET_PROFILE = "x_get_profile"
    GET_TWEETS = "x_get_tweets"
    GET_TWEET = "x_get_tweet"
    SEARCH_TWEETS = "x_search_tweets"
    SEND_TWEET = "x_send_tweet"
    SEND_TWEET_WITH_POLL = "x_send_tweet_with_poll"
    RETWEET = "x_retweet"
    LIKE_TWEET = "x_like_tweet"
    GET_TRENDS = "x_get_trends"


_USERNAME = {
    "type": "string",
    "pattern": "^[A-Za-z0-9_]{1,15}$",
}
_TWEET_ID = {
    "type": "string",
    "pattern": "^[0-9]+$",
}
_LIMIT = {
    "type": "integer",
    "description": "The maximum number of tweets to return",
    "minimum": 1,
    "maximum": 100,
    "default": 10,
}
_TWEET_TEXT = {
    "type": "string",
    "description": "The tweet text content",
    "minLength": 1,
    "maxLength": 280,
}


def _poll_option(ordinal: str, required: bool) -> dict[str, Any]:
    return {
        "type": "string",
        "description": f"{ordinal} poll option ({'required' if required else 'optional'})",
        "minLength": 1,
        "maxLength": 25,
    }


FUNCTION_DEFINITIONS: dict[ToolKind, dict[str, Any]] = {
    ToolKind.GET_PROFILE: {
        "name": ToolKind.GET_PROFILE.value,
        "description": "Get an X user profile by username",
        "parameters": {
            "type": "object",
            "properties": {
                "username": {
                    **_USERNAME,
                    "description": "The X username to get the profile for (without the @ symbol)",
                },
            },
            "required": ["username"],
        },
    },
    ToolKind.GET_TWEETS: {
        "name": ToolKind.GET_TWEETS.value,
        "description": "Get recent tweets from an X user",
        "parameters": {
            "type": "object",
            "properties": {
                "username": {
                    **_USERNAME,
                    "description": "The X username to get tweets from (without the @ symbol)",
                },
                "limit": _LIMIT,
            },
            "required": ["username"],
        },
    },
    ToolKind.GET_TWEET: {
        "name": ToolKind.GET_TWEET.value,
        "description": "Get a specific tweet by ID",
        "parameters": {
            "type": "object",
            "properties": {
                "id": {**_TWEET_ID, "description": "The ID of the tweet to retrieve"},
            },
            "required": ["id"],
        },
    },
    ToolKind.SEARCH_TWEETS: {
        "name": ToolKind.SEARCH_TWEETS.value,
        "description": "Search for tweets by keyword",
        "parameters": {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "The search query",
                    "minLength": 1,
                    "maxLength": 500,
                },
                "limit": _LIMIT,
                "mode": {
                    "type": "string",
                    "enum": ["latest", "top", "people", "photos", "videos"],
                    "description": "The search mode to use",
                    "default": "latest",
                },
            },
            "required": ["query"],
        },
    },
    ToolKind.SEND_TWEET: {
        "name": ToolKind.SEND_TWEET.value,
        "description": "Send a new tweet",
        "parameters": {
            "type": "object",
            "properties": {
                "text": _TWEET_TEXT,
                "in_reply_to": {
                    **_TWEET_ID,
                    "description": "The ID of the tweet to reply to (optional)",
                },
                "media": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Local file paths of images or videos to attach (optional)",
                    "maxItems": 4,
                },
            },
            "required": ["text"],
        },
    },
    ToolKind.SEND_TWEET_WITH_POLL: {
        "name": ToolKind.SEND_TWEET_WITH_POLL.value,
        "description": "Send a new tweet with a poll",
        "parameters": {
            "type": "object",
            "properties": {
                "text": _TWEET_TEXT,
                "poll_option_1": _poll_option("First", True),
                "poll_option_2": _poll_option("Second", True),
                "poll_option_3": _poll_option("Third", False),
                "poll_option_4": _poll_option("Fourth", False),
                "duration_minutes": {
                    "type": "integer",
                    "description": "The duration of the poll in minutes (5-10080)",
                    "minimum": 5,
                    "maximum": 10080,
                    "default": 1440,
                },
            },
            "required": ["text", "poll_option_1", "poll_option_2", "duration_minutes"],
        },
    },
    ToolKind.RETWEET: {
        "name": ToolKind.RETWEET.value,
        "description": "Retweet a tweet",
        "parameters": {
            "type": "object",
            "properties": {
                "id": {**_TWEET_ID, "description": "The ID of the tweet to retweet"},
            },
            "required": ["id"],
        },
    },
    ToolKind.LIKE_TWEET: {
        "name": ToolKind.LIKE_TWEET.value,
        "description": "Like a tweet",
        "parameters": {
            "type": "object",
            "properties": {
                "id": {**_TWEET_ID, "description": "The ID of the tweet to like"},
            },
            "required": ["id"],
        },
    },
    ToolKind.GET_TRENDS: {
        "name": ToolKind.GET_TRENDS.value,
        "description": "Get current X trends",
        "parameters": {
            "type": "object",
            "properties": {
                "woeid": {
                    "type": "integer",
                    "description": "The Yahoo! Where On Earth ID of the location to get trends "
                    "for (default: 1 for worldwide)",
                    "default": 1,
                },
            },
            "required": [],
        },
    },
}


@dataclass
class ToolParameter:
    """A flattened parameter schema entry."""

    name: str
    type: str
    description: str
    required: bool = False
    default: Any = None


@dataclass
class Tool:
    """
    A named, independently invocable operation.

    Attributes:
        name: Tool name (e.g. "x_get_profile")
        description: Human-readable description
        parameters: Flattened parameter schema
        execute: Coroutine function taking the parameter dict
    """

    name: str
    description: str
    parameters: list[ToolParameter]
    execute: Callable[[dict[str, Any]], Awaitable[Any]]


def to_tool_parameters(schema: dict[str, Any] | None) -> list[ToolParameter]:
    """
    Flatten a JSON-schema ``parameters`` object into ToolParameter entries.

    Enum values are appended to the description since ToolParameter has no
    enum field.
    """
    if not schema or not schema.get("properties"):
        return []

    required = set(schema.get("required") or [])
    result = []
    for name, prop in schema["properties"].items():
        description = prop.get("description") or f"Parameter {name}"
        if prop.get("enum"):
            description = f"{description} (Allowed values: {', '.join(prop['enum'])})"
        result.append(
            ToolParameter(
                name=name,
                type=prop.get("type", "string"),
                description=description,
                required=name in required,
                default=prop.get("default"),
            )
        )
    return result


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _coerce(name: str, value: Any, prop: dict[str, Any]) -> Any:
    expected = prop.get("type")

    if expected == "integer":
        if isinstance(value, bool):
            raise ValidationError(f"Parameter '{name}' must be an integer", field=name)
        if isinstance(value, str) and re.fullmatch(r"-?\d+", value.strip()):
            value = int(value.strip())
        elif isinstance(value, float) and value.is_integer():
            value = int(value)
        if not isinstance(value, int):
            raise ValidationError(f"Parameter '{name}' must be an integer", field=name)
        if "minimum" in prop and value < prop["minimum"]:
            raise ValidationError(
                f"Parameter '{name}' must be at least {prop['minimum']}", field=name
            )
        if "maximum" in prop and value > prop["maximum"]:
            raise ValidationError(
                f"Parameter '{name}' must be at most {prop['maximum']}", field=name
            )
        return value

    if expected == "string":
        if isinstance(value, int | float) and not isinstance(value, bool):
            value = str(value)
        if not isinstance(value, str):
            raise ValidationError(f"Parameter '{name}' must be a string", field=name)
        if "minLength" in prop and len(value) < prop["minLength"]:
            raise ValidationError(f"Parameter '{name}' is too short", field=name)
        if "maxLength" in prop and len(value) > prop["maxLength"]:
            raise ValidationError(
                f"Parameter '{name}' exceeds {prop['maxLength']} characters ({len(value)} chars)",
                field=name,
            )
        if prop.get("enum") and value not in prop["enum"]:
            raise ValidationError(
                f"Parameter '{name}' must be one of: {', '.join(prop['enum'])}", field=name
            )
        if "pattern" in prop and not re.fullmatch(prop["pattern"], value):
            raise ValidationError(f"Parameter '{name}' has an invalid format", field=name)
        return value

    if expected == "array":
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list | tuple):
            raise ValidationError(f"Parameter '{name}' must be an array", field=name)
        if "maxItems" in prop and len(value) > prop["maxItems"]:
            raise ValidationError(
                f"Parameter '{name}' accepts at most {prop['maxItems']} items", field=name
            )
        return list(value)

    return value


def validate_params(kind: ToolKind, params: dict[str, Any] | None) -> dict[str, Any]:
    """
    Check tool input against the catalog schema.

    Returns a new dict with defaults applied and integer/string values
    coerced. Unknown parameters are passed through untouched.

    Raises:
        ValidationError: If a required parameter is missing or a value is
            out of range; ``field`` names the parameter
    """
    schema = FUNCTION_DEFINITIONS[kind]["parameters"]
    properties = schema.get("properties", {})
    params = dict(params or {})

    for name in schema.get("required", []):
        if _is_missing(params.get(name)):
            raise ValidationError(f"Parameter '{name}' is required for {kind.value}", field=name)

    result = dict(params)
    for name, prop in properties.items():
        value = params.get(name)
        if _is_missing(value):
            result.pop(name, None)
            if "default" in prop:
                result[name] = prop["default"]
            continue
        result[name] = _coerce(name, value, prop)
    return result
