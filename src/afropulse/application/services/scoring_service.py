"""Scoring Engine: per-source sub-scores, composite score, trending velocity.

Hey future me - ALL the weights live here as named constants. If product wants
"social matters more", change a constant, not a formula buried in a route.

Formulas (round = half-up, like JS Math.round):

    catalog buzz = round(popularity*0.4 + recency*0.3 + prominence*0.3)  clamped 0..100
        recency    = max(0, 100 - days_since_release/365*100)
        prominence = 100 if top artist else 70
    social buzz  = round(mentions/1000*0.3 + engagement/10000*0.4 + sentiment*100*0.3)
    web buzz     = round(mention_count*20*0.4 + avg_relevance*0.4 + sentiment*100*0.2)
    overall      = round(catalog popularity*0.3 + social buzz*0.4 + web buzz*0.3)
    velocity     = round(mentions/100*0.5 + web mentions*10*0.3 + social sentiment*100*0.2)

Only the catalog buzz score is clamped. Everything else is a plain weighted sum.
Any NaN/inf that sneaks in (e.g. from a 0/0 average) becomes 0 BEFORE it can
reach the ranker's sort key.
"""

import logging
import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace
from datetime import UTC, date, datetime
from enum import Enum

from afropulse.domain.dtos import CatalogTrackDTO
from afropulse.domain.entities import (
    CatalogBucket,
    CompositeEntity,
    SocialBucket,
    SourceAggregate,
    WebBucket,
)
from afropulse.domain.value_objects.genre import TOP_ARTISTS, is_top_artist

logger = logging.getLogger(__name__)

# Catalog buzz
POPULARITY_WEIGHT = 0.4
RECENCY_WEIGHT = 0.3
PROMINENCE_WEIGHT = 0.3
TOP_ARTIST_PROMINENCE = 100
DEFAULT_PROMINENCE = 70
RECENCY_WINDOW_DAYS = 365

# Social buzz
SOCIAL_MENTIONS_DIVISOR = 1000
SOCIAL_MENTIONS_WEIGHT = 0.3
SOCIAL_ENGAGEMENT_DIVISOR = 10000
SOCIAL_ENGAGEMENT_WEIGHT = 0.4
SOCIAL_SENTIMENT_WEIGHT = 0.3

# Web buzz
WEB_MENTION_MULTIPLIER = 20
WEB_MENTION_WEIGHT = 0.4
WEB_RELEVANCE_WEIGHT = 0.4
WEB_SENTIMENT_WEIGHT = 0.2

# Overall
OVERALL_CATALOG_WEIGHT = 0.3
OVERALL_SOCIAL_WEIGHT = 0.4
OVERALL_WEB_WEIGHT = 0.3

# Velocity
VELOCITY_MENTIONS_DIVISOR = 100
VELOCITY_MENTIONS_WEIGHT = 0.5
VELOCITY_WEB_MULTIPLIER = 10
VELOCITY_WEB_WEIGHT = 0.3
VELOCITY_SENTIMENT_WEIGHT = 0.2


def round_half_up(value: float) -> int:
    """Round .5 up (not banker's rounding); non-finite input yields 0."""
    if not math.isfinite(value):
        return 0
    return math.floor(value + 0.5)


def safe_ratio(numerator: float, denominator: float) -> float:
    """numerator / denominator, or 0.0 when the denominator is zero."""
    if not denominator:
        return 0.0
    result = numerator / denominator
    return result if math.isfinite(result) else 0.0


def recency_score(days_since_release: int | None) -> float:
    """100 on release day, linearly down to 0 after a year. Unknown date → 0.

    Future release dates give more than 100 here; the clamp on the catalog buzz
    score keeps the final value in range.
    """
    if days_since_release is None:
        return 0.0
    return max(0.0, 100 - (days_since_release / RECENCY_WINDOW_DAYS) * 100)


def social_buzz_score(total_mentions: float, total_engagement: float, avg_sentiment: float) -> int:
    return round_half_up(
        (total_mentions / SOCIAL_MENTIONS_DIVISOR) * SOCIAL_MENTIONS_WEIGHT
        + (total_engagement / SOCIAL_ENGAGEMENT_DIVISOR) * SOCIAL_ENGAGEMENT_WEIGHT
        + avg_sentiment * 100 * SOCIAL_SENTIMENT_WEIGHT
    )


def web_buzz_score(mention_count: float, avg_relevance: float, avg_sentiment: float) -> int:
    return round_half_up(
        (mention_count * WEB_MENTION_MULTIPLIER) * WEB_MENTION_WEIGHT
        + avg_relevance * WEB_RELEVANCE_WEIGHT
        + avg_sentiment * 100 * WEB_SENTIMENT_WEIGHT
    )


class ScoringMode(str, Enum):
    """How overall_score is derived for ranking."""

    COMPREHENSIVE = "comprehensive"  # weighted catalog + social + web
    CATALOG_ONLY = "catalog_only"  # catalog buzz score only


class ScoringEngine:
    """Computes bucket scores and per-entity composite scores.

    Hey future me - `today` is injectable so tests don't depend on the real date.
    Recency is day-granular: a track released yesterday is 1 day old no matter
    what time it is.
    """

    def __init__(
        self,
        top_artists: Sequence[str] = TOP_ARTISTS,
        today: Callable[[], date] | None = None,
    ) -> None:
        self._top_artists = tuple(top_artists)
        self._today = today or (lambda: datetime.now(UTC).date())

    def catalog_bucket(self, track: CatalogTrackDTO) -> CatalogBucket:
        """Build the catalog bucket (incl. clamped buzz score) for one track."""
        days: int | None = None
        if track.release_date is not None:
            days = (self._today() - track.release_date).days

        prominence = (
            TOP_ARTIST_PROMINENCE
            if is_top_artist(track.artist, self._top_artists)
            else DEFAULT_PROMINENCE
        )
        raw = (
            track.popularity * POPULARITY_WEIGHT
            + recency_score(days) * RECENCY_WEIGHT
            + prominence * PROMINENCE_WEIGHT
        )
        return CatalogBucket(
            popularity=track.popularity,
            release_date=track.release_date,
            days_since_release=days,
            artist_prominence=prominence,
            buzz_score=max(0, min(100, round_half_up(raw))),
        )

    def score_aggregate(self, aggregate: SourceAggregate) -> SourceAggregate:
        """Return a copy of a social/web aggregate with its buzz score filled in."""
        bucket = aggregate.bucket
        if isinstance(bucket, SocialBucket):
            score = social_buzz_score(
                bucket.total_mentions, bucket.total_engagement, bucket.avg_sentiment
            )
        elif isinstance(bucket, WebBucket):
            score = web_buzz_score(bucket.mention_count, bucket.avg_relevance, bucket.avg_sentiment)
        else:
            raise TypeError(f"Unsupported bucket type: {type(bucket).__name__}")
        return replace(aggregate, bucket=replace(bucket, buzz_score=score))

    def overall_score(self, entity: CompositeEntity) -> int:
        # Missing buckets are all zeros by type, so they just add 0
        return round_half_up(
            entity.catalog.popularity * OVERALL_CATALOG_WEIGHT
            + entity.social.buzz_score * OVERALL_SOCIAL_WEIGHT
            + entity.web.buzz_score * OVERALL_WEB_WEIGHT
        )

    def trending_velocity(self, entity: CompositeEntity) -> int:
        return round_half_up(
            (entity.social.total_mentions / VELOCITY_MENTIONS_DIVISOR) * VELOCITY_MENTIONS_WEIGHT
            + (entity.web.mention_count * VELOCITY_WEB_MULTIPLIER) * VELOCITY_WEB_WEIGHT
            + entity.social.avg_sentiment * 100 * VELOCITY_SENTIMENT_WEIGHT
        )

    def score_entity(
        self, entity: CompositeEntity, mode: ScoringMode = ScoringMode.COMPREHENSIVE
    ) -> CompositeEntity:
        """Set overall_score and trending_velocity in place; returns the entity."""
        if mode is ScoringMode.CATALOG_ONLY:
            entity.overall_score = entity.catalog.buzz_score
        else:
            entity.overall_score = self.overall_score(entity)
        entity.trending_velocity = self.trending_velocity(entity)
        return entity

    def score_entities(
        self,
        entities: Iterable[CompositeEntity],
        mode: ScoringMode = ScoringMode.COMPREHENSIVE,
    ) -> list[CompositeEntity]:
        scored = [self.score_entity(entity, mode) for entity in entities]
        logger.debug("Scored %d entities (%s)", len(scored), mode.value)
        return scored


__all__ = [
    "ScoringEngine",
    "ScoringMode",
    "recency_score",
    "round_half_up",
    "safe_ratio",
    "social_buzz_score",
    "web_buzz_score",
]
