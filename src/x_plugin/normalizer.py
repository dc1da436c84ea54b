"""
Flatten X API v2 expansion payloads into Tweet and Profile records.

A v2 response carries primary entities under ``data`` and the entities
they reference in side tables under ``includes`` (``media``, ``tweets``,
``users``). Normalization resolves those references inline and never
raises on a missing side-table entry.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from .models import Media, Profile, ReferencedStatus, Tweet

UNKNOWN_USERNAME = "unknown"
UNKNOWN_DISPLAY_NAME = "Unknown User"


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _index(items: list[dict[str, Any]] | None, key: str) -> dict[str, dict[str, Any]]:
    return {item[key]: item for item in items or [] if isinstance(item, dict) and key in item}


def normalize_tweets(
    response: dict[str, Any] | None,
    *,
    resolve_referenced_authors: bool = False,
) -> list[Tweet]:
    """
    Convert a v2 tweet response into Tweet records, preserving input order.

    Args:
        response: Raw response with ``data`` (object or list) and optional ``includes``
        resolve_referenced_authors: Attribute retweeted/quoted statuses to the
            referenced tweet's own author. By default they carry the primary
            tweet's username.

    Returns:
        List of Tweet (empty when the response has no data)
    """
    if not response or not response.get("data"):
        return []

    data = response["data"]
    tweet_data = data if isinstance(data, list) else [data]

    includes = response.get("includes") or {}
    media_map = _index(includes.get("media"), "media_key")
    ref_tweet_map = _index(includes.get("tweets"), "id")
    user_map = _index(includes.get("users"), "id")

    tweets: list[Tweet] = []
    for tweet in tweet_data:
        if not isinstance(tweet, dict) or "id" not in tweet:
            continue
        user = user_map.get(tweet.get("author_id"))
        username = user.get("username", UNKNOWN_USERNAME) if user else UNKNOWN_USERNAME
        display_name = user.get("name", UNKNOWN_DISPLAY_NAME) if user else UNKNOWN_DISPLAY_NAME
        profile_image_url = user.get("profile_image_url", "") if user else ""

        media_items = []
        for media_key in (tweet.get("attachments") or {}).get("media_keys") or []:
            media = media_map.get(media_key)
            if media is None:
                continue
            media_items.append(
                Media(
                    type=media.get("type", ""),
                    url=media.get("url") or media.get("preview_image_url") or "",
                )
            )

        retweeted_status = None
        quoted_status = None
        in_reply_to_status_id = None
        for ref in tweet.get("referenced_tweets") or []:
            ref_type = ref.get("type")
            if ref_type == "replied_to":
                in_reply_to_status_id = ref.get("id")
                continue

            ref_tweet = ref_tweet_map.get(ref.get("id"))
            if ref_tweet is None:
                continue

            ref_username = username
            if resolve_referenced_authors:
                ref_user = user_map.get(ref_tweet.get("author_id")) or {}
                ref_username = ref_user.get("username", UNKNOWN_USERNAME)

            status = ReferencedStatus(
                id=ref_tweet["id"],
                text=ref_tweet.get("text", ""),
                username=ref_username,
            )
            if ref_type == "retweeted":
                retweeted_status = status
            elif ref_type == "quoted":
                quoted_status = status

        metrics = tweet.get("public_metrics") or {}
        tweets.append(
            Tweet(
                id=tweet["id"],
                text=tweet.get("text", ""),
                username=username,
                display_name=display_name,
                profile_image_url=profile_image_url,
                created_at=_parse_datetime(tweet.get("created_at")),
                like_count=metrics.get("like_count", 0),
                retweet_count=metrics.get("retweet_count", 0),
                reply_count=metrics.get("reply_count", 0),
                media=media_items,
                retweeted_status=retweeted_status,
                quoted_status=quoted_status,
                in_reply_to_status_id=in_reply_to_status_id,
            )
        )

    return tweets


def normalize_profile(response: dict[str, Any] | None, username: str) -> Profile | None:
    """
    Convert a v2 user lookup response into a Profile.

    The returned username is the one the caller asked for.
    """
    user = (response or {}).get("data")
    if not isinstance(user, dict) or "id" not in user:
        return None

    metrics = user.get("public_metrics") or {}
    return Profile(
        id=user["id"],
        username=username,
        display_name=user.get("name", ""),
        bio=user.get("description") or "",
        location=user.get("location") or "",
        url=user.get("url") or "",
        followers_count=metrics.get("followers_count", 0),
        following_count=metrics.get("following_count", 0),
        tweet_count=metrics.get("tweet_count", 0),
        verified=bool(user.get("verified", False)),
        profile_image_url=user.get("profile_image_url") or "",
        created_at=_parse_datetime(user.get("created_at")) or datetime.now(UTC),
    )
