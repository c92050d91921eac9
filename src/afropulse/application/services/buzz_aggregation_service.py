"""Buzz aggregation service - the pipeline orchestrator.

Hey future me - THIS IS THE ENTRY POINT FOR EVERY BUZZ LIST!

    ┌───────────┐ ┌───────────┐ ┌───────────┐
    │  catalog  │ │    web    │ │  social   │   fetch_records() in parallel,
    └─────┬─────┘ └─────┬─────┘ └─────┬─────┘   each bounded by a timeout
          │             │             │
          │      aggregate_web  aggregate_social   (one record per song)
          ▼             ▼             ▼
    ┌─────────────────────────────────────────┐
    │ MergeEngine (catalog seeds, then        │
    │ source_priority order)                  │
    └────────────────────┬────────────────────┘
                         ▼
               ScoringEngine.score_entities
                         ▼
               BuzzRanker.rank (dedup, sort, truncate, pad*)
                         ▼
                  RankedResultSet

* The catalog-only path pads sparse results. The comprehensive path pads only
  when nothing live survived at all.

Failure model: a failing or slow adapter is logged, recorded in
`result.errors[adapter.name]` and contributes nothing. The pipeline NEVER raises
because of upstream data. Cancellation is different: asyncio.CancelledError is
not an Exception, so it passes straight through and gather() cancels the other
fetches. Merge only starts after every fetch settled.
"""

import asyncio
import logging
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from afropulse.application.services.merge_service import (
    CatalogEntry,
    MergeEngine,
    aggregate_social,
    aggregate_web,
)
from afropulse.application.services.ranking_service import BuzzRanker, rank_by_score
from afropulse.application.services.scoring_service import ScoringEngine, ScoringMode
from afropulse.application.services.selected_releases_service import SelectedReleasesService
from afropulse.domain.dtos import CatalogTrackDTO, SocialMentionDTO, SourceType, WebMentionDTO
from afropulse.domain.entities import (
    CompositeEntity,
    DataSource,
    RankedResultSet,
    SocialBucket,
    SourceAggregate,
)
from afropulse.domain.exceptions import ValidationError
from afropulse.domain.ports import ISourceAdapter

logger = logging.getLogger(__name__)

TOP_HASHTAG_LIMIT = 10


@dataclass
class FetchOutcome:
    """Everything the adapters delivered in one run."""

    records: dict[str, list[Any]] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def source_counts(self) -> dict[str, int]:
        return {name: len(records) for name, records in self.records.items()}


@dataclass
class SourceBuzzResult:
    """Per-source ranking (social-only or web-only)."""

    source_type: SourceType
    items: list[SourceAggregate] = field(default_factory=list)
    top_hashtags: list[str] = field(default_factory=list)
    source_counts: dict[str, int] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)
    generated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __len__(self) -> int:
        return len(self.items)


def top_hashtags(items: Sequence[SourceAggregate], limit: int = TOP_HASHTAG_LIMIT) -> list[str]:
    """Most frequent hashtags across ranked social items (ties: first seen)."""
    counts: Counter[str] = Counter()
    for item in items:
        if isinstance(item.bucket, SocialBucket):
            counts.update(item.bucket.hashtags)
    return [tag for tag, _ in counts.most_common(limit)]


class BuzzAggregationService:
    """Runs the fetch → merge → score → rank pipeline over a set of adapters."""

    def __init__(
        self,
        adapters: Sequence[ISourceAdapter],
        scoring: ScoringEngine | None = None,
        merge: MergeEngine | None = None,
        ranker: BuzzRanker | None = None,
        selected_releases: SelectedReleasesService | None = None,
        adapter_timeout: float = 15.0,
    ) -> None:
        """
        Args:
            adapters: Source adapters (names must be unique)
            scoring: Scoring engine (default weights, real date)
            merge: Merge engine (default priority catalog → web → social)
            ranker: Ranker (default 20 results, padding on)
            selected_releases: Manual override for the catalog-only path
            adapter_timeout: Seconds before a single adapter counts as failed

        Raises:
            ValidationError: On duplicate adapter names or a non-positive timeout
        """
        names = [adapter.name for adapter in adapters]
        if len(set(names)) != len(names):
            raise ValidationError(f"Adapter names must be unique, got {names}")
        if adapter_timeout <= 0:
            raise ValidationError("adapter_timeout must be positive")

        self._adapters = list(adapters)
        self.scoring = scoring or ScoringEngine()
        self.merge = merge or MergeEngine()
        self.ranker = ranker or BuzzRanker()
        self._selected_releases = selected_releases
        self._adapter_timeout = adapter_timeout

    def _adapters_for(self, *source_types: SourceType) -> list[ISourceAdapter]:
        return [adapter for adapter in self._adapters if adapter.source_type in source_types]

    # -------------------------------------------------------------------------
    # Fetching
    # -------------------------------------------------------------------------

    async def _fetch_one(self, adapter: ISourceAdapter) -> tuple[list[Any], str | None]:
        try:
            records = await asyncio.wait_for(adapter.fetch_records(), self._adapter_timeout)
        except TimeoutError:
            message = f"timed out after {self._adapter_timeout:g}s"
            logger.warning("Adapter %s %s", adapter.name, message)
            return [], message
        except Exception as e:
            logger.warning("Adapter %s failed: %s", adapter.name, e, exc_info=True)
            return [], str(e) or type(e).__name__
        return list(records), None

    async def fetch_all(self, adapters: Sequence[ISourceAdapter]) -> FetchOutcome:
        """Fetch every adapter concurrently; failures become empty contributions."""
        results = await asyncio.gather(*(self._fetch_one(adapter) for adapter in adapters))

        outcome = FetchOutcome()
        for adapter, (records, error) in zip(adapters, results, strict=True):
            outcome.records[adapter.name] = records
            if error is not None:
                outcome.errors[adapter.name] = error
        return outcome

    def _records_of(
        self, outcome: FetchOutcome, adapters: Sequence[ISourceAdapter], source_type: SourceType
    ) -> list[Any]:
        return [
            record
            for adapter in adapters
            if adapter.source_type is source_type
            for record in outcome.records.get(adapter.name, [])
        ]

    # -------------------------------------------------------------------------
    # Pipeline steps
    # -------------------------------------------------------------------------

    def _catalog_entries(self, tracks: Sequence[CatalogTrackDTO]) -> list[CatalogEntry]:
        return [CatalogEntry(track, self.scoring.catalog_bucket(track)) for track in tracks]

    def _social_aggregates(self, records: Sequence[SocialMentionDTO]) -> list[SourceAggregate]:
        return [self.scoring.score_aggregate(agg) for agg in aggregate_social(records)]

    def _web_aggregates(self, records: Sequence[WebMentionDTO]) -> list[SourceAggregate]:
        return [self.scoring.score_aggregate(agg) for agg in aggregate_web(records)]

    def _build_result(
        self,
        ranked: list[CompositeEntity],
        live_source: DataSource,
        outcome: FetchOutcome,
        total_before_dedup: int,
    ) -> RankedResultSet:
        fallback_used = any(entity.is_fallback for entity in ranked)
        has_live = any(not entity.is_fallback for entity in ranked)

        data_source = live_source
        if not has_live:
            data_source = DataSource.FALLBACK
        elif fallback_used and live_source is DataSource.CATALOG_ONLY:
            data_source = DataSource.CATALOG_WITH_FALLBACK

        result = RankedResultSet(
            entities=ranked,
            data_source=data_source,
            fallback_used=fallback_used,
            source_counts=outcome.source_counts,
            errors=dict(outcome.errors),
            total_before_dedup=total_before_dedup,
        )
        logger.info(
            "Aggregation done: %d results (%s), counts=%s, failed=%s",
            len(result),
            data_source.value,
            result.source_counts,
            sorted(result.errors),
        )
        if result.no_live_data:
            logger.warning("No live buzz data available, serving fallback entries")
        return result

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    async def get_comprehensive_buzz(self) -> RankedResultSet:
        """Full pipeline over catalog, web and social sources."""
        outcome = await self.fetch_all(self._adapters)

        catalog = self._catalog_entries(self._records_of(outcome, self._adapters, SourceType.CATALOG))
        aggregates = {
            SourceType.SOCIAL: self._social_aggregates(
                self._records_of(outcome, self._adapters, SourceType.SOCIAL)
            ),
            SourceType.WEB: self._web_aggregates(
                self._records_of(outcome, self._adapters, SourceType.WEB)
            ),
        }

        entities = self.merge.merge(catalog, aggregates)
        self.scoring.score_entities(entities, ScoringMode.COMPREHENSIVE)
        # Live results are never mixed with placeholders here; padding only
        # stands in when no source delivered anything.
        ranked = self.ranker.rank(entities, pad=not entities)
        return self._build_result(ranked, DataSource.COMPREHENSIVE, outcome, len(entities))

    async def get_buzzing(self) -> RankedResultSet:
        """Catalog-only path; a non-empty manual selection replaces it entirely."""
        if self._selected_releases is not None:
            manual = self._selected_releases.as_entities(self.ranker.max_results)
            if manual:
                logger.info("Serving %d manually selected releases", len(manual))
                return RankedResultSet(
                    entities=manual,
                    data_source=DataSource.MANUAL_SELECTION,
                    source_counts={"manual": len(manual)},
                    total_before_dedup=len(manual),
                )

        adapters = self._adapters_for(SourceType.CATALOG)
        outcome = await self.fetch_all(adapters)
        catalog = self._catalog_entries(self._records_of(outcome, adapters, SourceType.CATALOG))

        entities = self.merge.merge(catalog)
        self.scoring.score_entities(entities, ScoringMode.CATALOG_ONLY)
        ranked = self.ranker.rank(entities)
        return self._build_result(ranked, DataSource.CATALOG_ONLY, outcome, len(entities))

    async def _source_buzz(self, source_type: SourceType) -> SourceBuzzResult:
        adapters = self._adapters_for(source_type)
        outcome = await self.fetch_all(adapters)
        records = self._records_of(outcome, adapters, source_type)

        if source_type is SourceType.SOCIAL:
            aggregates = self._social_aggregates(records)
        else:
            aggregates = self._web_aggregates(records)

        ranked = rank_by_score(
            aggregates,
            lambda agg: agg.artist,
            lambda agg: agg.buzz_score,
            self.ranker.max_results,
        )
        logger.info(
            "%s buzz: %d ranked of %d songs", source_type.value, len(ranked), len(aggregates)
        )
        return SourceBuzzResult(
            source_type=source_type,
            items=ranked,
            top_hashtags=top_hashtags(ranked) if source_type is SourceType.SOCIAL else [],
            source_counts=outcome.source_counts,
            errors=dict(outcome.errors),
        )

    async def get_social_buzz(self) -> SourceBuzzResult:
        """Social-only ranking (one per artist) plus the top hashtags."""
        return await self._source_buzz(SourceType.SOCIAL)

    async def get_web_buzz(self) -> SourceBuzzResult:
        """Web-press-only ranking (one per artist)."""
        return await self._source_buzz(SourceType.WEB)


__all__ = [
    "BuzzAggregationService",
    "FetchOutcome",
    "SourceBuzzResult",
    "top_hashtags",
]
