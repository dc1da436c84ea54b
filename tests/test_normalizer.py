"""Tests for expansion payload normalization."""

from __future__ import annotations

from datetime import UTC, datetime

from conftest import user_payload
from x_plugin.normalizer import normalize_profile, normalize_tweets


def _response_with_retweet() -> dict:
    return {
        "data": [
            {
                "id": "1",
                "text": "RT @bob: original",
                "author_id": "u1",
                "created_at": "2024-05-01T12:00:00.000Z",
                "public_metrics": {"like_count": 3, "retweet_count": 2, "reply_count": 1},
                "referenced_tweets": [{"type": "retweeted", "id": "100"}],
            },
            {
                "id": "2",
                "text": "second",
                "author_id": "u1",
                "attachments": {"media_keys": ["3_1", "3_missing"]},
            },
        ],
        "includes": {
            "users": [{"id": "u1", "username": "alice", "name": "Alice"}],
            "tweets": [{"id": "100", "text": "original", "author_id": "u2"}],
            "media": [{"media_key": "3_1", "type": "photo", "url": "https://pbs.twimg.com/1.jpg"}],
        },
    }


class TestNormalizeTweets:
    def test_no_includes(self):
        tweets = normalize_tweets({"data": [{"id": "1", "text": "hello"}]})

        assert len(tweets) == 1
        tweet = tweets[0]
        assert tweet.username == "unknown"
        assert tweet.display_name == "Unknown User"
        assert tweet.profile_image_url == ""
        assert tweet.media == []
        assert tweet.retweeted_status is None
        assert tweet.quoted_status is None
        assert tweet.in_reply_to_status_id is None
        assert tweet.like_count == 0

    def test_empty_or_missing_data(self):
        assert normalize_tweets(None) == []
        assert normalize_tweets({}) == []
        assert normalize_tweets({"meta": {"result_count": 0}}) == []

    def test_single_object(self):
        tweets = normalize_tweets({"data": {"id": "9", "text": "solo"}})
        assert [t.id for t in tweets] == ["9"]

    def test_retweeted_status_uses_primary_author(self):
        tweets = normalize_tweets(_response_with_retweet())

        assert [t.id for t in tweets] == ["1", "2"]
        first = tweets[0]
        assert first.username == "alice"
        assert first.display_name == "Alice"
        assert first.retweeted_status is not None
        assert first.retweeted_status.id == "100"
        assert first.retweeted_status.text == "original"
        assert first.retweeted_status.username == "alice"
        assert first.like_count == 3
        assert first.retweet_count == 2
        assert first.reply_count == 1
        assert first.created_at == datetime(2024, 5, 1, 12, 0, tzinfo=UTC)

    def test_referenced_author_resolution(self):
        response = _response_with_retweet()
        response["includes"]["users"].append({"id": "u2", "username": "bob", "name": "Bob"})

        tweets = normalize_tweets(response, resolve_referenced_authors=True)
        assert tweets[0].retweeted_status.username == "bob"

    def test_referenced_author_unresolved(self):
        tweets = normalize_tweets(_response_with_retweet(), resolve_referenced_authors=True)
        assert tweets[0].retweeted_status.username == "unknown"

    def test_missing_media_keys_dropped(self):
        tweets = normalize_tweets(_response_with_retweet())
        media = tweets[1].media
        assert len(media) == 1
        assert media[0].type == "photo"
        assert media[0].url == "https://pbs.twimg.com/1.jpg"

    def test_media_preview_url_fallback(self):
        response = {
            "data": [{"id": "1", "text": "v", "attachments": {"media_keys": ["7_1"]}}],
            "includes": {
                "media": [
                    {
                        "media_key": "7_1",
                        "type": "video",
                        "preview_image_url": "https://pbs.twimg.com/preview.jpg",
                    }
                ]
            },
        }
        assert normalize_tweets(response)[0].media[0].url == "https://pbs.twimg.com/preview.jpg"

    def test_quoted_and_reply(self):
        response = {
            "data": [
                {
                    "id": "1",
                    "text": "quote and reply",
                    "referenced_tweets": [
                        {"type": "quoted", "id": "50"},
                        {"type": "replied_to", "id": "60"},
                    ],
                }
            ],
            "includes": {"tweets": [{"id": "50", "text": "quoted text"}]},
        }
        tweet = normalize_tweets(response)[0]
        assert tweet.quoted_status.text == "quoted text"
        assert tweet.quoted_status.username == "unknown"
        assert tweet.in_reply_to_status_id == "60"
        assert tweet.retweeted_status is None

    def test_unresolved_reference_left_unset(self):
        response = {
            "data": [
                {"id": "1", "text": "t", "referenced_tweets": [{"type": "retweeted", "id": "404"}]}
            ],
            "includes": {"tweets": []},
        }
        assert normalize_tweets(response)[0].retweeted_status is None

    def test_order_preserved_without_dedup(self):
        response = {"data": [{"id": "3", "text": "c"}, {"id": "1", "text": "a"}, {"id": "3", "text": "c"}]}
        assert [t.id for t in normalize_tweets(response)] == ["3", "1", "3"]


class TestNormalizeProfile:
    def test_profile(self):
        profile = normalize_profile(user_payload(), "Alice_")

        assert profile.id == "u1"
        assert profile.username == "Alice_"
        assert profile.display_name == "Alice"
        assert profile.bio == "bio"
        assert profile.verified is True
        assert profile.followers_count == 10
        assert profile.following_count == 20
        assert profile.tweet_count == 30
        assert profile.location == "Earth"
        assert profile.url == "https://example.com"
        assert profile.created_at == datetime(2020, 1, 2, 3, 4, 5, tzinfo=UTC)

    def test_sparse_profile_defaults(self):
        profile = normalize_profile({"data": {"id": "1", "name": "N"}}, "n")
        assert profile.bio == ""
        assert profile.followers_count == 0
        assert profile.verified is False
        assert profile.created_at is not None

    def test_missing_data(self):
        assert normalize_profile({"errors": [{"title": "Not Found Error"}]}, "ghost") is None
        assert normalize_profile(None, "ghost") is None

    def test_profile_without_id(self):
        assert normalize_profile({"data": {"name": "no id"}}, "ghost") is None


def test_malformed_tweet_entries_skipped():
    response = {"data": [{"text": "no id"}, "junk", {"id": "2", "text": "ok"}]}
    assert [t.id for t in normalize_tweets(response)] == ["2"]
