"""API schemas for buzz rankings and selected releases.

Hey future me - the JSON surface is camelCase (releaseDate, overallScore ...)
because the dashboard pages consuming it were written against that shape.
Python side stays snake_case; the alias generator does the translation and
FastAPI serializes by alias.
"""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from afropulse.application.services.buzz_aggregation_service import SourceBuzzResult
from afropulse.domain.entities import (
    CatalogBucket,
    CompositeEntity,
    RankedResultSet,
    SocialBucket,
    SourceAggregate,
    WebBucket,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CatalogBucketSchema(CamelModel):
    popularity: int = 0
    release_date: date | None = None
    days_since_release: int | None = None
    artist_prominence: int = 0
    buzz_score: int = 0

    @classmethod
    def from_bucket(cls, bucket: CatalogBucket) -> "CatalogBucketSchema":
        return cls(
            popularity=bucket.popularity,
            release_date=bucket.release_date,
            days_since_release=bucket.days_since_release,
            artist_prominence=bucket.artist_prominence,
            buzz_score=bucket.buzz_score,
        )


class SocialBucketSchema(CamelModel):
    total_mentions: int = 0
    total_engagement: int = 0
    avg_sentiment: float = 0.0
    platforms: list[str] = Field(default_factory=list)
    hashtags: list[str] = Field(default_factory=list)
    max_trending_score: int = 0
    buzz_score: int = 0

    @classmethod
    def from_bucket(cls, bucket: SocialBucket) -> "SocialBucketSchema":
        return cls(
            total_mentions=bucket.total_mentions,
            total_engagement=bucket.total_engagement,
            avg_sentiment=bucket.avg_sentiment,
            platforms=list(bucket.platforms),
            hashtags=list(bucket.hashtags),
            max_trending_score=bucket.max_trending_score,
            buzz_score=bucket.buzz_score,
        )


class WebBucketSchema(CamelModel):
    mention_count: int = 0
    avg_sentiment: float = 0.0
    avg_relevance: float = 0.0
    sources: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    buzz_score: int = 0

    @classmethod
    def from_bucket(cls, bucket: WebBucket) -> "WebBucketSchema":
        return cls(
            mention_count=bucket.mention_count,
            avg_sentiment=bucket.avg_sentiment,
            avg_relevance=bucket.avg_relevance,
            sources=list(bucket.sources),
            categories=list(bucket.categories),
            buzz_score=bucket.buzz_score,
        )


class BucketsSchema(CamelModel):
    """Per-source metric buckets of one song."""

    catalog: CatalogBucketSchema
    social: SocialBucketSchema
    web: WebBucketSchema


class BuzzSongSchema(CamelModel):
    """One ranked song."""

    id: str
    name: str
    artist: str
    album: str = ""
    release_date: date | None = None
    image_url: str | None = None
    external_url: str | None = None
    genre: str = "Afrobeats"
    overall_score: int = Field(..., description="Composite score used for ranking")
    cross_platform_reach: int = Field(0, description="Distinct contributing platforms")
    trending_velocity: int = Field(0, description="Informational, not used for ranking")
    platforms: list[str] = Field(default_factory=list)
    source: str = Field(..., description="Source that created the entry")
    is_fallback: bool = False
    buckets: BucketsSchema

    @classmethod
    def from_entity(cls, entity: CompositeEntity) -> "BuzzSongSchema":
        return cls(
            id=entity.id,
            name=entity.name,
            artist=entity.artist,
            album=entity.album,
            release_date=entity.release_date,
            image_url=entity.image_url,
            external_url=entity.external_url,
            genre=entity.genre,
            overall_score=entity.overall_score,
            cross_platform_reach=entity.cross_platform_reach,
            trending_velocity=entity.trending_velocity,
            platforms=list(entity.platforms),
            source=entity.origin.value,
            is_fallback=entity.is_fallback,
            buckets=BucketsSchema(
                catalog=CatalogBucketSchema.from_bucket(entity.catalog),
                social=SocialBucketSchema.from_bucket(entity.social),
                web=WebBucketSchema.from_bucket(entity.web),
            ),
        )


class BuzzRankingResponse(CamelModel):
    """Ranked result set plus run metadata."""

    songs: list[BuzzSongSchema]
    total: int
    data_source: str
    fallback_used: bool
    no_live_data: bool
    source_counts: dict[str, int] = Field(default_factory=dict)
    errors: dict[str, str] = Field(default_factory=dict)
    total_before_dedup: int = 0
    last_updated: datetime

    @classmethod
    def from_result(cls, result: RankedResultSet) -> "BuzzRankingResponse":
        return cls(
            songs=[BuzzSongSchema.from_entity(entity) for entity in result.entities],
            total=len(result),
            data_source=result.data_source.value,
            fallback_used=result.fallback_used,
            no_live_data=result.no_live_data,
            source_counts=result.source_counts,
            errors=result.errors,
            total_before_dedup=result.total_before_dedup,
            last_updated=result.generated_at,
        )


class SourceBuzzItemSchema(CamelModel):
    """One song in a single-source ranking."""

    artist: str
    song: str
    buzz_score: int
    social: SocialBucketSchema | None = None
    web: WebBucketSchema | None = None

    @classmethod
    def from_aggregate(cls, aggregate: SourceAggregate) -> "SourceBuzzItemSchema":
        bucket = aggregate.bucket
        return cls(
            artist=aggregate.artist,
            song=aggregate.song,
            buzz_score=aggregate.buzz_score,
            social=SocialBucketSchema.from_bucket(bucket) if isinstance(bucket, SocialBucket) else None,
            web=WebBucketSchema.from_bucket(bucket) if isinstance(bucket, WebBucket) else None,
        )


class SourceBuzzResponse(CamelModel):
    """Single-source (social or web) ranking."""

    source: str
    items: list[SourceBuzzItemSchema]
    total: int
    top_hashtags: list[str] = Field(default_factory=list)
    source_counts: dict[str, int] = Field(default_factory=dict)
    errors: dict[str, str] = Field(default_factory=dict)
    last_updated: datetime

    @classmethod
    def from_result(cls, result: SourceBuzzResult) -> "SourceBuzzResponse":
        return cls(
            source=result.source_type.value,
            items=[SourceBuzzItemSchema.from_aggregate(item) for item in result.items],
            total=len(result),
            top_hashtags=result.top_hashtags,
            source_counts=result.source_counts,
            errors=result.errors,
            last_updated=result.generated_at,
        )


class SelectedReleasesRequest(BaseModel):
    """Replace the curated list."""

    songs: list[dict[str, Any]]


class SelectedReleasesResponse(CamelModel):
    songs: list[dict[str, Any]]
    count: int
    source: str
    timestamp: datetime


class MessageResponse(CamelModel):
    message: str
    count: int | None = None
    timestamp: datetime
