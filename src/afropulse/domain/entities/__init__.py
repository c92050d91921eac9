"""
Aggregation entities: metric buckets, the CompositeEntity and the ranked result.

Hey future me - the CompositeEntity replaced a loosely-typed dict that the old
merge code kept bolting fields onto. Each source gets ONE typed bucket and an
empty bucket is all zeros BY TYPE, so the scorer never has to ask "is this
field there?". A missing bucket just contributes 0 to every formula.

Lifecycle:
    created lazily on first contribution for a key (catalog seeds first)
    → mutated in place by later sources (bucket overwrite, last write wins)
    → scored → deduplicated/ranked → handed to renderers. Never persisted.
"""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import Enum

from afropulse.domain.dtos import CatalogTrackDTO, SourceType


@dataclass(frozen=True)
class CatalogBucket:
    """Catalog metrics plus the derived catalog buzz score."""

    popularity: int = 0
    release_date: date | None = None
    days_since_release: int | None = None
    artist_prominence: int = 0
    buzz_score: int = 0


@dataclass(frozen=True)
class SocialBucket:
    """Social metrics aggregated across platforms for one song."""

    total_mentions: int = 0
    total_engagement: int = 0
    avg_sentiment: float = 0.0
    platforms: tuple[str, ...] = ()
    hashtags: tuple[str, ...] = ()
    max_trending_score: int = 0
    buzz_score: int = 0


@dataclass(frozen=True)
class WebBucket:
    """Web-press metrics aggregated across outlets for one song."""

    mention_count: int = 0
    avg_sentiment: float = 0.0
    avg_relevance: float = 0.0
    sources: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()
    buzz_score: int = 0


@dataclass(frozen=True)
class SourceAggregate:
    """One song's metrics from a single non-catalog source, pre-aggregated.

    Hey future me - social/web feeds report the same song once PER PLATFORM.
    We fold those into one aggregate per song before merging, so every source
    contributes at most one record per distinct song.
    """

    artist: str
    song: str
    source_type: SourceType
    bucket: SocialBucket | WebBucket

    @property
    def reach_names(self) -> tuple[str, ...]:
        """Platforms / outlets named by this aggregate (for cross-platform reach)."""
        if isinstance(self.bucket, SocialBucket):
            return self.bucket.platforms
        return self.bucket.sources

    @property
    def buzz_score(self) -> int:
        return self.bucket.buzz_score


@dataclass
class CompositeEntity:
    """The per-song aggregation unit.

    `key` is computed ONCE from the record that created the entity and never
    changes afterwards, even if a later source matched through the fuzzy tiers.
    """

    key: str
    id: str
    name: str
    artist: str
    origin: SourceType
    album: str = ""
    release_date: date | None = None
    image_url: str | None = None
    external_url: str | None = None
    genre: str = "Afrobeats"

    catalog: CatalogBucket = field(default_factory=CatalogBucket)
    social: SocialBucket = field(default_factory=SocialBucket)
    web: WebBucket = field(default_factory=WebBucket)

    # Distinct contributing sources/platforms in first-seen order
    platforms: list[str] = field(default_factory=list)

    overall_score: int = 0
    trending_velocity: int = 0
    is_fallback: bool = False

    @classmethod
    def from_catalog(
        cls, key: str, track: CatalogTrackDTO, bucket: CatalogBucket
    ) -> "CompositeEntity":
        """Seed an entity from a catalog record."""
        entity = cls(
            key=key,
            id=track.id or f"catalog-{key}",
            name=track.title,
            artist=track.artist,
            origin=SourceType.CATALOG,
            album=track.album,
            release_date=track.release_date,
            image_url=track.image_url,
            external_url=track.external_url,
            genre=track.genre,
            catalog=bucket,
        )
        entity.add_platforms([track.source_name])
        return entity

    @classmethod
    def from_aggregate(cls, key: str, aggregate: SourceAggregate) -> "CompositeEntity":
        """Create an entity for a social/web song the catalog never returned.

        All other buckets stay at their all-zero defaults.
        """
        label = "Social Buzz" if aggregate.source_type is SourceType.SOCIAL else "Web Buzz"
        entity = cls(
            key=key,
            id=f"{aggregate.source_type.value}-buzz-{key}",
            name=aggregate.song,
            artist=aggregate.artist,
            origin=aggregate.source_type,
            album=label,
        )
        entity.apply_aggregate(aggregate)
        return entity

    def apply_aggregate(self, aggregate: SourceAggregate) -> None:
        """Overwrite this source's bucket (last write wins) and widen reach."""
        if isinstance(aggregate.bucket, SocialBucket):
            self.social = aggregate.bucket
        else:
            self.web = aggregate.bucket
        self.add_platforms(aggregate.reach_names)

    def add_platforms(self, names: "list[str] | tuple[str, ...]") -> None:
        seen = {p.lower() for p in self.platforms}
        for name in names:
            if name and name.lower() not in seen:
                self.platforms.append(name)
                seen.add(name.lower())

    @property
    def cross_platform_reach(self) -> int:
        return len(self.platforms)

    @property
    def artist_key(self) -> str:
        """Grouping key for one-per-artist dedup (lower-cased, trimmed)."""
        return self.artist.lower().strip()


class DataSource(str, Enum):
    """Where a ranked result set came from."""

    COMPREHENSIVE = "comprehensive"
    CATALOG_ONLY = "catalog_only"
    CATALOG_WITH_FALLBACK = "catalog_with_fallback"
    MANUAL_SELECTION = "manual_selection"
    SOCIAL = "social"
    WEB = "web"
    FALLBACK = "fallback"


@dataclass
class RankedResultSet:
    """Ordered, size-bounded output of one aggregation run.

    Hey future me - entities are strictly non-increasing by overall_score and
    carry at most one entry per artist. Computed fresh per request, never cached.
    """

    entities: list[CompositeEntity] = field(default_factory=list)
    data_source: DataSource = DataSource.COMPREHENSIVE
    fallback_used: bool = False

    source_counts: dict[str, int] = field(default_factory=dict)
    """Records received per adapter before merge."""

    errors: dict[str, str] = field(default_factory=dict)
    """Adapter name -> error message for adapters that failed."""

    total_before_dedup: int = 0
    generated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def no_live_data(self) -> bool:
        """True when nothing real made it into the result (fallback-only)."""
        return all(entity.is_fallback for entity in self.entities)

    def __len__(self) -> int:
        return len(self.entities)


__all__ = [
    "CatalogBucket",
    "SocialBucket",
    "WebBucket",
    "SourceAggregate",
    "CompositeEntity",
    "DataSource",
    "RankedResultSet",
]
