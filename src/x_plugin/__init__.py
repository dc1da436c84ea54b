"""
X (formerly Twitter) plugin for AI agents.

Provides:
- XPlugin: tool catalog with lazy init, validation and result envelopes
- XClient: async X API client (profiles, tweets, search, posting, polls,
  likes, retweets, media upload)
- XConfig: immutable configuration with an explicit environment adapter

Example:
    >>> from x_plugin import XConfig, XPlugin
    >>> plugin = XPlugin(XConfig.from_env())
    >>> profile = await plugin.execute("x_get_profile", {"username": "jack"})
"""

from .client import XClient
from .config import XConfig
from .errors import (
    AuthenticationError,
    ConfigurationError,
    NotFoundError,
    OAuth2Error,
    PermissionDeniedError,
    RateLimitError,
    TransportError,
    UnimplementedOperationError,
    ValidationError,
    XAPIError,
    XPluginError,
)
from .models import Media, MediaFile, PollSpec, Profile, ReferencedStatus, SearchMode, Tweet
from .normalizer import normalize_profile, normalize_tweets
from .plugin import PluginState, XPlugin
from .tools import Tool, ToolKind, ToolParameter
from .transport import ApiVersion, MultipartForm, XTransport

__version__ = "1.0.0"

__all__ = [
    # Plugin
    "XPlugin",
    "PluginState",
    "Tool",
    "ToolKind",
    "ToolParameter",
    # Client
    "XClient",
    "XConfig",
    "XTransport",
    "ApiVersion",
    "MultipartForm",
    # Normalization
    "normalize_tweets",
    "normalize_profile",
    # Types
    "Profile",
    "Tweet",
    "Media",
    "ReferencedStatus",
    "SearchMode",
    "MediaFile",
    "PollSpec",
    # Errors
    "XPluginError",
    "ConfigurationError",
    "ValidationError",
    "XAPIError",
    "AuthenticationError",
    "PermissionDeniedError",
    "NotFoundError",
    "RateLimitError",
    "TransportError",
    "OAuth2Error",
    "UnimplementedOperationError",
]
