"""
X (Twitter) API client.

Read operations use API v2 and go through the normalizer; profile and
tweet reads are cached when the config enables it. Write operations
require OAuth 1.0a user context (access token and secret).
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .cache import TTLCache
from .config import XConfig
from .errors import ConfigurationError, NotFoundError, ValidationError, XAPIError, XPluginError
from .models import TWEET_MAX_LENGTH, MediaFile, PollSpec, Profile, SearchMode, Tweet
from .normalizer import normalize_profile, normalize_tweets
from .transport import ApiVersion, MultipartForm, XTransport

logger = logging.getLogger(__name__)

USER_FIELDS = "description,profile_image_url,public_metrics,verified,created_at,location,url"
TWEET_FIELDS = "created_at,public_metrics,entities,referenced_tweets,author_id"
TWEET_EXPANSIONS = (
    "attachments.media_keys,referenced_tweets.id,referenced_tweets.id.author_id,author_id"
)
MEDIA_FIELDS = "url,preview_image_url,type"
INCLUDED_USER_FIELDS = "username,name,profile_image_url"

# Endpoint-imposed bounds on max_results
USER_TWEETS_MIN_RESULTS = 5
SEARCH_MIN_RESULTS = 10
MAX_RESULTS = 100

_SEARCH_QUERY_SUFFIX = {
    SearchMode.PHOTOS: " has:images",
    SearchMode.VIDEOS: " has:videos",
    # The v2 API has no people search; verified authors are the closest filter.
    SearchMode.PEOPLE: " is:verified",
}


def _tweet_lookup_params() -> dict[str, str]:
    return {
        "tweet.fields": TWEET_FIELDS,
        "expansions": TWEET_EXPANSIONS,
        "media.fields": MEDIA_FIELDS,
        "user.fields": INCLUDED_USER_FIELDS,
    }


def _data_value(response: dict[str, Any] | None, key: str, default: Any = None) -> Any:
    data = (response or {}).get("data")
    if not isinstance(data, dict):
        return default
    return data.get(key, default)


def _clamp(limit: int, floor: int) -> int:
    return max(floor, min(int(limit), MAX_RESULTS))


def validate_tweet_text(text: str | None) -> str:
    """
    Check tweet text before posting.

    Raises:
        ValidationError: If the text is empty or longer than 280 characters
    """
    if not text or not text.strip():
        raise ValidationError("Tweet text is required", field="text")
    if len(text) > TWEET_MAX_LENGTH:
        raise ValidationError(
            f"Tweet text exceeds {TWEET_MAX_LENGTH} characters ({len(text)} chars)",
            field="text",
        )
    return text


class XClient:
    """
    Domain operations over the X API.

    Example:
        async with XClient(XConfig.from_env()) as client:
            profile = await client.get_profile("jack")
            tweets = await client.search_tweets("python", limit=20)
    """

    def __init__(
        self,
        config: XConfig,
        transport: XTransport | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Raises:
            ConfigurationError: If the API key or secret is missing
        """
        self._config = config
        self._transport = transport or XTransport(config, http_client=http_client)
        self._profile_cache = TTLCache(config.cache_profile_seconds)
        self._tweet_cache = TTLCache(config.cache_tweet_seconds)
        self._user_id: str | None = None

    @property
    def transport(self) -> XTransport:
        return self._transport

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def __aenter__(self) -> XClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # --- Reads ---

    async def get_profile(self, username: str) -> Profile | None:
        """Get a user profile by username, or None if the user does not exist."""
        key = ("profile", username.lower())
        hit, cached = self._profile_cache.get(key)
        if hit:
            return cached

        try:
            response = await self._transport.request(
                "GET",
                f"/users/by/username/{username}",
                {"user.fields": USER_FIELDS},
            )
        except NotFoundError:
            return None
        except XPluginError as e:
            logger.error(f"Error fetching X profile {username}: {e}")
            raise

        profile = normalize_profile(response, username)
        self._profile_cache.set(key, profile)
        return profile

    async def get_tweets(self, username: str, limit: int = 10) -> list[Tweet]:
        """Get recent tweets from a user; empty when the user does not exist."""
        key = ("tweets", username.lower(), limit)
        hit, cached = self._tweet_cache.get(key)
        if hit:
            return cached

        user = await self.get_profile(username)
        if user is None:
            logger.info(f"User {username} not found")
            return []

        params = {
            "max_results": _clamp(limit, USER_TWEETS_MIN_RESULTS),
            **_tweet_lookup_params(),
        }
        try:
            response = await self._transport.request("GET", f"/users/{user.id}/tweets", params)
        except NotFoundError:
            return []

        tweets = self._normalize(response)[:limit]
        self._tweet_cache.set(key, tweets)
        return tweets

    async def get_tweet(self, tweet_id: str) -> Tweet | None:
        """Get a tweet by ID, or None if it does not exist."""
        key = ("tweet", tweet_id)
        hit, cached = self._tweet_cache.get(key)
        if hit:
            return cached

        try:
            response = await self._transport.request(
                "GET", f"/tweets/{tweet_id}", _tweet_lookup_params()
            )
        except NotFoundError:
            return None

        tweets = self._normalize(response)
        tweet = tweets[0] if tweets else None
        self._tweet_cache.set(key, tweet)
        return tweet

    async def search_tweets(
        self,
        query: str,
        limit: int = 10,
        mode: SearchMode | str = SearchMode.LATEST,
    ) -> list[Tweet]:
        """
        Search recent tweets.

        Args:
            query: Search query (X search operators allowed)
            limit: Maximum number of tweets to return (1-100)
            mode: latest, top, people, photos or videos

        Raises:
            ValidationError: If mode is not a known SearchMode
        """
        try:
            mode = SearchMode(mode)
        except ValueError as e:
            allowed = ", ".join(m.value for m in SearchMode)
            raise ValidationError(
                f"Invalid search mode {mode!r} (allowed: {allowed})", field="mode"
            ) from e

        key = ("search", query, limit, mode.value)
        hit, cached = self._tweet_cache.get(key)
        if hit:
            return cached

        params = {
            "query": query + _SEARCH_QUERY_SUFFIX.get(mode, ""),
            "max_results": _clamp(limit, SEARCH_MIN_RESULTS),
            "sort_order": "relevancy" if mode is SearchMode.TOP else "recency",
            **_tweet_lookup_params(),
        }
        response = await self._transport.request("GET", "/tweets/search/recent", params)

        tweets = self._normalize(response)[:limit]
        self._tweet_cache.set(key, tweets)
        return tweets

    def _normalize(self, response: dict[str, Any] | None) -> list[Tweet]:
        return normalize_tweets(
            response,
            resolve_referenced_authors=self._config.resolve_referenced_authors,
        )

    # --- Writes ---

    def _require_user_context(self) -> None:
        if not self._config.has_user_context:
            raise ConfigurationError(
                "X access token and secret are required for write operations "
                "(set X_ACCESS_TOKEN and X_ACCESS_TOKEN_SECRET)"
            )

    async def send_tweet(
        self,
        text: str,
        in_reply_to: str | None = None,
        media: list[MediaFile] | None = None,
    ) -> str | None:
        """
        Post a tweet.

        Media files are uploaded first; a file that fails to upload is
        skipped and the tweet is posted with whatever succeeded.

        Returns:
            The new tweet ID, or None if the API response carried none
        """
        validate_tweet_text(text)
        self._require_user_context()

        payload: dict[str, Any] = {"text": text}
        if in_reply_to:
            payload["reply"] = {"in_reply_to_tweet_id": in_reply_to}

        if media:
            media_ids = []
            for file in media:
                media_id = await self.upload_media(file)
                if media_id:
                    media_ids.append(media_id)
            if media_ids:
                payload["media"] = {"media_ids": media_ids}

        response = await self._transport.request("POST", "/tweets", body=payload)
        tweet_id = _data_value(response, "id")
        if tweet_id:
            logger.info(f"Tweet successfully posted with ID: {tweet_id}")
        else:
            logger.warning("Could not extract tweet ID from response")
        return tweet_id

    async def upload_media(self, file: MediaFile) -> str | None:
        """Upload a media file; returns its media ID or None on failure."""
        try:
            filename, content, content_type = file.read()
            response = await self._transport.request(
                "POST",
                "/media/upload.json",
                api_version=ApiVersion.UPLOAD,
                body=MultipartForm(files={"media": (filename, content, content_type)}),
            )
        except (XPluginError, OSError) as e:
            logger.error(f"Error uploading media: {e}")
            return None
        return (response or {}).get("media_id_string")

    async def send_tweet_with_poll(self, text: str, poll: PollSpec) -> str | None:
        """Post a tweet with a poll; returns the new tweet ID or None."""
        validate_tweet_text(text)
        self._require_user_context()

        payload = {"text": text, "poll": poll.to_payload()}
        response = await self._transport.request("POST", "/tweets", body=payload)
        tweet_id = _data_value(response, "id")
        if tweet_id:
            logger.info(f"Tweet with poll successfully posted with ID: {tweet_id}")
        return tweet_id

    async def authenticated_user_id(self) -> str:
        """
        ID of the user owning the access token (resolved once, then cached).

        Raises:
            XAPIError: If the credential check answers without a user id
        """
        if self._user_id is None:
            response = await self._transport.request(
                "GET",
                "/account/verify_credentials.json",
                {"skip_status": "true", "include_entities": "false"},
                api_version=ApiVersion.V1_1,
            )
            user_id = (response or {}).get("id_str")
            if not user_id:
                logger.error("X credential check returned no user id")
                raise XAPIError(
                    200, response, f"X credential check returned no user id: {response}"
                )
            self._user_id = str(user_id)
        return self._user_id

    async def retweet(self, tweet_id: str) -> bool:
        """Retweet a tweet as the authenticated user."""
        self._require_user_context()
        user_id = await self.authenticated_user_id()
        response = await self._transport.request(
            "POST", f"/users/{user_id}/retweets", body={"tweet_id": tweet_id}
        )
        return bool(_data_value(response, "retweeted", True))

    async def like_tweet(self, tweet_id: str) -> bool:
        """Like a tweet as the authenticated user."""
        self._require_user_context()
        user_id = await self.authenticated_user_id()
        response = await self._transport.request(
            "POST", f"/users/{user_id}/likes", body={"tweet_id": tweet_id}
        )
        return bool(_data_value(response, "liked", True))
