"""Merge Engine: fold per-source records into CompositeEntities.

Hey future me - THIS IS WHERE CROSS-SOURCE IDENTITY IS DECIDED!

Two steps:

1. Pre-aggregation (aggregate_social / aggregate_web): social and web feeds
   report one row PER PLATFORM for the same song. Rows are grouped by
   normalized (artist, song) into one SourceAggregate per song, so each source
   hands the merge at most one record per distinct song.

2. Merge (MergeEngine.merge): catalog tracks seed the entity map, then every
   other source is folded in following the declared `source_priority`:

       catalog ──seed──▶ {key: entity}
       web     ──match (index, then find_best_match)──▶ apply or create
       social  ──match (index, then find_best_match)──▶ apply or create

   Entities are only ever created or updated, never deleted. A bucket that
   gets a second contribution from the same source is overwritten (last write wins).

Known limitation (kept on purpose, see register_aliases): when a record matches
through the fuzzy tiers, its own key is NOT remembered, so a third source using
that record's exact spelling can end up as a separate entity. Turn on
`register_aliases` to remember it.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TypeVar

from afropulse.application.services.scoring_service import safe_ratio
from afropulse.domain.dtos import CatalogTrackDTO, SocialMentionDTO, SourceType, WebMentionDTO
from afropulse.domain.entities import (
    CatalogBucket,
    CompositeEntity,
    SocialBucket,
    SourceAggregate,
    WebBucket,
)
from afropulse.domain.exceptions import ValidationError
from afropulse.domain.value_objects.song_matching import (
    find_best_match,
    is_empty_key,
    normalize_key,
)

logger = logging.getLogger(__name__)

R = TypeVar("R", SocialMentionDTO, WebMentionDTO)

DEFAULT_SOURCE_PRIORITY: tuple[SourceType, ...] = (
    SourceType.CATALOG,
    SourceType.WEB,
    SourceType.SOCIAL,
)


def _union(values: Iterable[str]) -> tuple[str, ...]:
    """Distinct non-empty values in first-seen order (case-insensitive)."""
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if value and value.lower() not in seen:
            seen.add(value.lower())
            result.append(value)
    return tuple(result)


def _mean(values: Iterable[float]) -> float:
    items = list(values)
    return safe_ratio(sum(items), len(items))


def _group_by_key(records: Iterable[R]) -> dict[str, list[R]]:
    groups: dict[str, list[R]] = {}
    skipped = 0
    for record in records:
        key = normalize_key(record.artist, record.song)
        if is_empty_key(key):
            skipped += 1
            continue
        groups.setdefault(key, []).append(record)
    if skipped:
        logger.debug("Skipped %d records without artist and song", skipped)
    return groups


def aggregate_social(records: Iterable[SocialMentionDTO]) -> list[SourceAggregate]:
    """Fold per-platform social rows into one aggregate per song (buzz score 0).

    Mentions and engagement are summed, sentiment averaged over rows, hashtags
    and platforms unioned, trending score maxed. Display artist/song come from
    the first row seen.
    """
    aggregates: list[SourceAggregate] = []
    for group in _group_by_key(records).values():
        first = group[0]
        bucket = SocialBucket(
            total_mentions=sum(row.mentions for row in group),
            total_engagement=sum(row.engagement for row in group),
            avg_sentiment=_mean(row.sentiment for row in group),
            platforms=_union(row.platform for row in group),
            hashtags=_union(tag for row in group for tag in row.hashtags),
            max_trending_score=max(row.trending_score for row in group),
        )
        aggregates.append(SourceAggregate(first.artist, first.song, SourceType.SOCIAL, bucket))
    return aggregates


def aggregate_web(records: Iterable[WebMentionDTO]) -> list[SourceAggregate]:
    """Fold per-outlet web rows into one aggregate per song (buzz score 0).

    mention_count sums each row's mentions (1 per article by default);
    sentiment and relevance are averaged over rows.
    """
    aggregates: list[SourceAggregate] = []
    for group in _group_by_key(records).values():
        first = group[0]
        bucket = WebBucket(
            mention_count=sum(row.mentions for row in group),
            avg_sentiment=_mean(row.sentiment for row in group),
            avg_relevance=_mean(row.relevance_score for row in group),
            sources=_union(row.source for row in group),
            categories=_union(row.category for row in group),
        )
        aggregates.append(SourceAggregate(first.artist, first.song, SourceType.WEB, bucket))
    return aggregates


@dataclass
class MergeConfig:
    """Declared merge order and alias behaviour."""

    source_priority: Sequence[SourceType] = field(
        default_factory=lambda: list(DEFAULT_SOURCE_PRIORITY)
    )
    register_aliases: bool = False

    def __post_init__(self) -> None:
        priority = list(self.source_priority)
        if not priority or priority[0] is not SourceType.CATALOG:
            raise ValidationError("source_priority must start with the catalog source")
        if len(set(priority)) != len(priority):
            raise ValidationError("source_priority must not contain duplicates")
        self.source_priority = priority


@dataclass
class CatalogEntry:
    """A catalog track together with its scored bucket."""

    track: CatalogTrackDTO
    bucket: CatalogBucket


class MergeEngine:
    """Folds catalog entries and per-source aggregates into CompositeEntities.

    Single-threaded and synchronous: it only runs after every fetch settled.
    A fresh engine state is used per merge() call, nothing leaks between runs.
    """

    def __init__(self, config: MergeConfig | None = None) -> None:
        self.config = config or MergeConfig()

    def merge(
        self,
        catalog: Sequence[CatalogEntry],
        aggregates: Mapping[SourceType, Sequence[SourceAggregate]] | None = None,
    ) -> list[CompositeEntity]:
        """Build the entity map.

        Args:
            catalog: Scored catalog tracks (seed the map, in order)
            aggregates: Pre-aggregated, scored records per non-catalog source

        Returns:
            Entities in insertion order (catalog-seeded first)
        """
        aggregates = aggregates or {}
        entities: dict[str, CompositeEntity] = {}
        # key → entity; same as `entities` unless aliases are registered
        index: dict[str, CompositeEntity] = {}

        self._seed_catalog(catalog, entities, index)

        for source in self.config.source_priority[1:]:
            matched = created = 0
            for aggregate in aggregates.get(source, ()):
                outcome = self._fold(aggregate, entities, index)
                if outcome is True:
                    matched += 1
                elif outcome is False:
                    created += 1
            if matched or created:
                logger.debug(
                    "Merged %s: %d matched, %d new entities", source.value, matched, created
                )

        unknown = set(aggregates) - set(self.config.source_priority)
        if unknown:
            logger.warning(
                "Ignoring aggregates of sources missing from source_priority: %s",
                sorted(s.value for s in unknown),
            )

        return list(entities.values())

    # Hey future me - catalog search + playlists can return the same song twice
    # under different ids (single vs album version). Keep ONE entity per key and
    # let the bucket with the higher buzz score win; display fields stay first-seen.
    def _seed_catalog(
        self,
        catalog: Sequence[CatalogEntry],
        entities: dict[str, CompositeEntity],
        index: dict[str, CompositeEntity],
    ) -> None:
        for entry in catalog:
            key = normalize_key(entry.track.artist, entry.track.title)
            if is_empty_key(key):
                logger.debug("Skipping catalog track %s without artist and title", entry.track.id)
                continue
            existing = entities.get(key)
            if existing is None:
                entity = CompositeEntity.from_catalog(key, entry.track, entry.bucket)
                entities[key] = entity
                index[key] = entity
            elif entry.bucket.buzz_score > existing.catalog.buzz_score:
                existing.catalog = entry.bucket

    def _fold(
        self,
        aggregate: SourceAggregate,
        entities: dict[str, CompositeEntity],
        index: dict[str, CompositeEntity],
    ) -> bool | None:
        """Apply one aggregate.

        Returns:
            True if it matched an existing entity, False if it created one,
            None if it carried neither artist nor song
        """
        key = normalize_key(aggregate.artist, aggregate.song)
        if is_empty_key(key):
            return None

        target = index.get(key) or find_best_match(
            aggregate.artist, aggregate.song, entities.values()
        )
        if target is not None:
            target.apply_aggregate(aggregate)
            if self.config.register_aliases and key not in index:
                index[key] = target
            logger.debug("Matched %s record %r onto %r", aggregate.source_type.value, key, target.key)
            return True

        entity = CompositeEntity.from_aggregate(key, aggregate)
        entities[key] = entity
        index[key] = entity
        return False


__all__ = [
    "CatalogEntry",
    "MergeConfig",
    "MergeEngine",
    "aggregate_social",
    "aggregate_web",
]
