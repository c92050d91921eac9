"""Deduplicator / Ranker: one entry per artist, sorted, size-bounded, padded.

Hey future me - the order of operations matters:

    group by artist key → keep best per group → sort desc → truncate → pad

Ties are resolved by ITERATION ORDER everywhere. The dedup keeps the first of
equal-score entities, and Python's sort is stable, so equal scores keep the
order in which their artist groups were first seen (catalog-seeded first).

Padding adds synthetic "fallback" entities when live data is too sparse. They
are flagged `is_fallback=True`, use ids like "fallback-buzz-3" numbered on from
the live entries, and never score above the last real entry, so the descending
order survives padding. The caller decides per path whether padding applies.
"""

import logging
import math
from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, date, datetime, timedelta
from typing import TypeVar

from afropulse.domain.dtos import SourceType
from afropulse.domain.entities import CatalogBucket, CompositeEntity
from afropulse.domain.exceptions import ValidationError
from afropulse.domain.value_objects.genre import GENRES
from afropulse.domain.value_objects.song_matching import normalize_artist_key

logger = logging.getLogger(__name__)

T = TypeVar("T")

FALLBACK_ARTISTS: tuple[str, ...] = (
    "Tyla",
    "Uncle Waffles",
    "Focalistic",
    "Kabza De Small",
    "DJ Maphorisa",
    "Mas Musiq",
    "Vigro Deep",
    "Major League DJz",
    "Mpura",
    "Busta 929",
    "Santi",
    "Lady Donli",
    "Cruel Santino",
    "Wavy The Creator",
    "Prettyboy D-O",
    "Nonso Amadi",
    "BOJ",
    "Odunsi",
    "Zamir",
    "Amaarae",
    "Tems",
    "Ayra Starr",
    "Rema",
    "Asake",
    "Fireboy DML",
    "Joeboy",
    "Omah Lay",
    "CKay",
    "Oxlade",
    "Kizz Daniel",
)

FALLBACK_SONGS: tuple[str, ...] = (
    "Trending Anthem",
    "Viral Sensation",
    "Buzzing Hit",
    "Hot Track",
    "Popular Jam",
    "Chart Climber",
    "Streaming Fire",
    "Buzz Generator",
    "Trending Wave",
    "Viral Beat",
    "Hot Melody",
    "Popular Rhythm",
    "Buzzing Vibe",
    "Trending Energy",
    "Viral Flow",
    "Hot Groove",
    "Popular Sound",
    "Buzzing Power",
    "Trending Soul",
    "Viral Magic",
    "Hot Spirit",
    "Popular Dream",
    "Buzzing Light",
    "Trending Hope",
    "Viral Joy",
    "Hot Peace",
    "Popular Life",
    "Buzzing Glory",
    "Trending Love",
    "Viral Freedom",
)

FALLBACK_TOP_SCORE = 80
FALLBACK_IMAGE_URL = "/placeholder.svg?height=300&width=300"
FALLBACK_EXTERNAL_URL = "https://open.spotify.com"


def validate_max_results(max_results: object) -> int:
    """Fail fast on a nonsensical result size (programmer error).

    Raises:
        ValidationError: If not a non-negative int (bools are rejected too)
    """
    if isinstance(max_results, bool) or not isinstance(max_results, int):
        raise ValidationError(f"max_results must be an integer, got {max_results!r}")
    if max_results < 0:
        raise ValidationError(f"max_results must not be negative, got {max_results}")
    return max_results


def sort_key_score(value: float) -> float:
    """Sort key that can't be corrupted by NaN: non-finite counts as 0."""
    return value if math.isfinite(value) else 0.0


def one_per_artist(
    items: Iterable[T],
    artist_of: Callable[[T], str],
    score_of: Callable[[T], float],
) -> list[T]:
    """Keep the highest-scoring item per normalized artist (first wins on ties).

    Result order is the order in which each artist group was first seen.
    """
    best: dict[str, T] = {}
    for item in items:
        key = normalize_artist_key(artist_of(item))
        current = best.get(key)
        if current is None or sort_key_score(score_of(item)) > sort_key_score(score_of(current)):
            best[key] = item
    return list(best.values())


def rank_by_score(
    items: Iterable[T],
    artist_of: Callable[[T], str],
    score_of: Callable[[T], float],
    limit: int,
) -> list[T]:
    """one_per_artist → stable sort descending → truncate to `limit`."""
    survivors = one_per_artist(items, artist_of, score_of)
    survivors.sort(key=lambda item: sort_key_score(score_of(item)), reverse=True)
    return survivors[:limit]


def build_fallback_entities(
    count: int,
    taken_artist_keys: Iterable[str] = (),
    ceiling: int = FALLBACK_TOP_SCORE,
    start_index: int = 0,
    today: date | None = None,
) -> list[CompositeEntity]:
    """Deterministic placeholder entities.

    Hey future me - artists already in the real result are SKIPPED, otherwise
    padding would break "one entry per artist". If the 30 built-in artists run
    out (huge max_results) we synthesize "Fallback Artist N" names.

    Args:
        count: How many placeholders to build
        taken_artist_keys: Normalized artist keys already present
        ceiling: Highest score a placeholder may carry
        start_index: Index offset for ids/names (ids are 1-based)
        today: Reference date for placeholder release dates

    Returns:
        Placeholders with non-increasing scores starting at min(ceiling, 80)
    """
    today = today or datetime.now(UTC).date()
    taken = set(taken_artist_keys)
    top = min(ceiling, FALLBACK_TOP_SCORE)
    artists = iter(
        [name for name in FALLBACK_ARTISTS if normalize_artist_key(name) not in taken]
    )

    entities: list[CompositeEntity] = []
    for offset in range(count):
        index = start_index + offset
        artist = next(artists, None)
        if artist is None:
            artist = f"Fallback Artist {index + 1}"
        score = max(min(top, 0), top - offset)
        entities.append(
            CompositeEntity(
                key=f"fallback-{index + 1}",
                id=f"fallback-buzz-{index + 1}",
                name=FALLBACK_SONGS[index % len(FALLBACK_SONGS)],
                artist=artist,
                origin=SourceType.FALLBACK,
                album=f"Buzzing Album {index + 1}",
                release_date=today - timedelta(days=index * 2),
                image_url=FALLBACK_IMAGE_URL,
                external_url=FALLBACK_EXTERNAL_URL,
                genre=GENRES[index % len(GENRES)],
                catalog=CatalogBucket(popularity=score, buzz_score=score),
                overall_score=score,
                is_fallback=True,
            )
        )
    return entities


class BuzzRanker:
    """Deduplicates, ranks and (optionally) pads CompositeEntities."""

    def __init__(
        self,
        max_results: int = 20,
        pad_with_fallback: bool = True,
        today: Callable[[], date] | None = None,
    ) -> None:
        """
        Args:
            max_results: Upper bound on output length
            pad_with_fallback: Top up sparse results with placeholders
            today: Date source for placeholder release dates

        Raises:
            ValidationError: If max_results is not a non-negative int
        """
        self.max_results = validate_max_results(max_results)
        self.pad_with_fallback = pad_with_fallback
        self._today = today or (lambda: datetime.now(UTC).date())

    def deduplicate(self, entities: Iterable[CompositeEntity]) -> list[CompositeEntity]:
        return one_per_artist(entities, lambda e: e.artist, lambda e: e.overall_score)

    def rank(
        self, entities: Sequence[CompositeEntity], pad: bool = True
    ) -> list[CompositeEntity]:
        """Dedup → sort → truncate → pad.

        Args:
            entities: Scored candidates
            pad: Whether this call may top up with placeholders. Padding only
                happens when both this and `pad_with_fallback` are set.
        """
        ranked = rank_by_score(
            entities, lambda e: e.artist, lambda e: e.overall_score, self.max_results
        )
        missing = self.max_results - len(ranked)
        if missing <= 0 or not (pad and self.pad_with_fallback):
            return ranked

        ceiling = ranked[-1].overall_score if ranked else FALLBACK_TOP_SCORE
        padding = build_fallback_entities(
            missing,
            taken_artist_keys=(entity.artist_key for entity in ranked),
            ceiling=ceiling,
            start_index=len(ranked),
            today=self._today(),
        )
        logger.info(
            "Padding %d live results with %d fallback entities", len(ranked), len(padding)
        )
        return ranked + padding


__all__ = [
    "BuzzRanker",
    "FALLBACK_ARTISTS",
    "FALLBACK_SONGS",
    "build_fallback_entities",
    "one_per_artist",
    "rank_by_score",
    "sort_key_score",
    "validate_max_results",
]
