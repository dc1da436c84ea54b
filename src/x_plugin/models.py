"""
Domain records returned by the X client.

Profiles and tweets are pydantic models so tool results can be dumped to
JSON with ``model_dump(mode="json")``. Poll specs and upload files are
plain dataclasses validated at construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from .errors import ValidationError

POLL_MIN_OPTIONS = 2
POLL_MAX_OPTIONS = 4
POLL_MIN_DURATION_MINUTES = 5
POLL_MAX_DURATION_MINUTES = 10080  # 7 days
POLL_OPTION_MAX_LENGTH = 25
TWEET_MAX_LENGTH = 280


def _utc_now() -> datetime:
    return datetime.now(UTC)


class SearchMode(str, Enum):
    """How ``search_tweets`` shapes the query."""

    TOP = "top"
    LATEST = "latest"
    PEOPLE = "people"
    PHOTOS = "photos"
    VIDEOS = "videos"


class Media(BaseModel):
    """A media attachment resolved from ``includes.media``."""

    type: str
    url: str = ""


class ReferencedStatus(BaseModel):
    """Reduced view of a retweeted or quoted tweet."""

    id: str
    text: str
    username: str


class Profile(BaseModel):
    """An X user profile."""

    id: str
    username: str
    display_name: str
    bio: str = ""
    verified: bool = False
    profile_image_url: str = ""
    followers_count: int = 0
    following_count: int = 0
    tweet_count: int = 0
    created_at: datetime = Field(default_factory=_utc_now)
    location: str = ""
    url: str = ""


class Tweet(BaseModel):
    """A tweet with its expansions resolved inline."""

    id: str
    text: str
    username: str
    display_name: str | None = None
    profile_image_url: str | None = None
    created_at: datetime | None = None
    like_count: int = 0
    retweet_count: int = 0
    reply_count: int = 0
    media: list[Media] = Field(default_factory=list)
    retweeted_status: ReferencedStatus | None = None
    quoted_status: ReferencedStatus | None = None
    in_reply_to_status_id: str | None = None


@dataclass(frozen=True)
class PollSpec:
    """
    Poll attached to a new tweet.

    Raises ValidationError on construction when the option count is outside
    2-4, an option is empty or too long, or the duration is outside 5-10080
    minutes.
    """

    options: list[str]
    duration_minutes: int = 1440

    def __post_init__(self) -> None:
        if not self.options or not (POLL_MIN_OPTIONS <= len(self.options) <= POLL_MAX_OPTIONS):
            raise ValidationError(
                f"Poll must have between {POLL_MIN_OPTIONS} and {POLL_MAX_OPTIONS} options",
                field="options",
            )
        for option in self.options:
            if not option or not option.strip():
                raise ValidationError("Poll options cannot be empty", field="options")
            if len(option) > POLL_OPTION_MAX_LENGTH:
                raise ValidationError(
                    f"Poll option exceeds {POLL_OPTION_MAX_LENGTH} characters: {option!r}",
                    field="options",
                )
        if isinstance(self.duration_minutes, bool) or not isinstance(self.duration_minutes, int):
            raise ValidationError("Poll duration must be an integer", field="duration_minutes")
        if not (POLL_MIN_DURATION_MINUTES <= self.duration_minutes <= POLL_MAX_DURATION_MINUTES):
            raise ValidationError(
                f"Poll duration must be between {POLL_MIN_DURATION_MINUTES} and "
                f"{POLL_MAX_DURATION_MINUTES} minutes",
                field="duration_minutes",
            )

    def to_payload(self) -> dict:
        return {"options": list(self.options), "duration_minutes": self.duration_minutes}


@dataclass
class MediaFile:
    """
    A file to upload before posting a tweet.

    Either ``path`` or ``content`` must be provided.
    """

    path: Path | str | None = None
    content: bytes | None = None
    filename: str | None = None
    content_type: str = "image/jpeg"

    def read(self) -> tuple[str, bytes, str]:
        """
        Return ``(filename, bytes, content_type)`` for a multipart upload.

        Raises:
            ValidationError: If neither path nor content is set
            OSError: If the file cannot be read
        """
        if self.path is not None:
            path = Path(self.path)
            return self.filename or path.name, path.read_bytes(), self.content_type
        if self.content is not None:
            return self.filename or "media.jpg", self.content, self.content_type
        raise ValidationError("Either file path or content must be provided", field="media")
