"""
Per-source records: the lingua franca between adapters and the merge engine.

Hey future me - every adapter MUST hand out these records, never raw JSON!
They are immutable (frozen) on purpose: a record is created fresh per fetch,
folded into a CompositeEntity by the merge engine, and then thrown away.

Malformed upstream data does NOT raise here. Missing artist/song becomes "",
non-numeric metrics become 0. A single broken record must never take the whole
aggregation down - the matcher treats empty keys as "no match possible".

Flow: Source API JSON → *DTO.from_payload() → MergeEngine → CompositeEntity
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any


class SourceType(str, Enum):
    """Which kind of source contributed data."""

    CATALOG = "catalog"
    SOCIAL = "social"
    WEB = "web"
    MANUAL = "manual"
    FALLBACK = "fallback"


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _as_int(value: Any) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number):
        return 0
    return int(number)


def _as_float(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _as_tags(value: Any) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(item) for item in value if item)


# Hey future me - catalog APIs send release dates in THREE precisions:
# "2024", "2024-03" and "2024-03-15" (plus full ISO timestamps from our own
# override file). Missing month/day default to 1. Anything unparseable → None,
# which the scorer treats as "no recency bonus".
def parse_release_date(value: Any) -> date | None:
    """Parse a catalog release date of year, month or day precision.

    Args:
        value: "YYYY", "YYYY-MM", "YYYY-MM-DD", an ISO timestamp, or a date

    Returns:
        Parsed date or None if missing/invalid
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = _as_str(value)
    if not text:
        return None
    try:
        if len(text) == 4:
            return date(int(text), 1, 1)
        if len(text) == 7:
            year, month = text.split("-")
            return date(int(year), int(month), 1)
        if len(text) == 10:
            return date.fromisoformat(text)
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


@dataclass(frozen=True)
class CatalogTrackDTO:
    """A track record from the streaming catalog (highest-priority source)."""

    id: str
    title: str
    artist: str
    album: str = ""
    release_date: date | None = None
    image_url: str | None = None
    external_url: str | None = None
    popularity: int = 0  # 0-100
    genre: str = "Afrobeats"
    source_name: str = "spotify"

    @property
    def source_type(self) -> SourceType:
        return SourceType.CATALOG

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "CatalogTrackDTO":
        """Build from the flat catalog shape used by the override file.

        Accepts both `name`/`title` and `spotifyUrl`/`externalUrl` spellings.
        """
        popularity = _as_int(payload.get("popularity"))
        return cls(
            id=_as_str(payload.get("id")),
            title=_as_str(payload.get("name") or payload.get("title")),
            artist=_as_str(payload.get("artist")),
            album=_as_str(payload.get("album")),
            release_date=parse_release_date(payload.get("releaseDate")),
            image_url=_as_str(payload.get("imageUrl")) or None,
            external_url=_as_str(payload.get("externalUrl") or payload.get("spotifyUrl")) or None,
            popularity=max(0, min(100, popularity)),
            genre=_as_str(payload.get("genre")) or "Afrobeats",
        )


@dataclass(frozen=True)
class SocialMentionDTO:
    """One platform's mention metrics for a song (Twitter, TikTok, ...)."""

    platform: str
    artist: str
    song: str
    mentions: int = 0
    engagement: int = 0
    sentiment: float = 0.0  # 0-1
    hashtags: tuple[str, ...] = field(default_factory=tuple)
    trending_score: int = 0

    @property
    def source_type(self) -> SourceType:
        return SourceType.SOCIAL

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "SocialMentionDTO":
        """Build from a social feed item, tolerating missing fields."""
        return cls(
            platform=_as_str(payload.get("platform") or payload.get("source")),
            artist=_as_str(payload.get("artist")),
            song=_as_str(payload.get("song")),
            mentions=_as_int(payload.get("mentions")),
            engagement=_as_int(payload.get("engagement")),
            sentiment=_as_float(payload.get("sentiment")),
            hashtags=_as_tags(payload.get("hashtags") or payload.get("keywords")),
            trending_score=_as_int(payload.get("trendingScore")),
        )


@dataclass(frozen=True)
class WebMentionDTO:
    """A web-press mention (blog post, review, radio chart entry)."""

    source: str
    artist: str
    song: str
    mentions: int = 1
    sentiment: float = 0.0  # 0-1
    relevance_score: float = 0.0  # 0-100
    category: str = ""
    title: str = ""
    url: str | None = None
    published_at: str | None = None

    @property
    def source_type(self) -> SourceType:
        return SourceType.WEB

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "WebMentionDTO":
        """Build from a web-press feed item, tolerating missing fields.

        Hey future me - scraped articles don't carry a mention count; each
        article IS one mention, so `mentions` defaults to 1.
        """
        mentions = payload.get("mentions")
        return cls(
            source=_as_str(payload.get("source") or payload.get("platform")),
            artist=_as_str(payload.get("artist")),
            song=_as_str(payload.get("song")),
            mentions=1 if mentions is None else _as_int(mentions),
            sentiment=_as_float(payload.get("sentiment")),
            relevance_score=_as_float(payload.get("relevanceScore")),
            category=_as_str(payload.get("category")),
            title=_as_str(payload.get("title")),
            url=payload.get("url") or None,
            published_at=payload.get("publishedDate") or None,
        )


SourceRecord = CatalogTrackDTO | SocialMentionDTO | WebMentionDTO


__all__ = [
    "SourceType",
    "SourceRecord",
    "CatalogTrackDTO",
    "SocialMentionDTO",
    "WebMentionDTO",
    "parse_release_date",
]
