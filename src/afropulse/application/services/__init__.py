"""Application services: scoring, merge, ranking, orchestration, overrides."""

from afropulse.application.services.buzz_aggregation_service import (
    BuzzAggregationService,
    SourceBuzzResult,
)
from afropulse.application.services.merge_service import (
    CatalogEntry,
    MergeConfig,
    MergeEngine,
    aggregate_social,
    aggregate_web,
)
from afropulse.application.services.ranking_service import BuzzRanker
from afropulse.application.services.scoring_service import ScoringEngine, ScoringMode
from afropulse.application.services.selected_releases_service import SelectedReleasesService

__all__ = [
    "BuzzAggregationService",
    "BuzzRanker",
    "CatalogEntry",
    "MergeConfig",
    "MergeEngine",
    "ScoringEngine",
    "ScoringMode",
    "SelectedReleasesService",
    "SourceBuzzResult",
    "aggregate_social",
    "aggregate_web",
]
