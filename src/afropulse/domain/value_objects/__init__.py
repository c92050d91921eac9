"""Value objects: identity keys, fuzzy matching and genre rules."""

from afropulse.domain.value_objects.genre import (
    TOP_ARTISTS,
    categorize_genre,
    is_top_artist,
)
from afropulse.domain.value_objects.song_matching import (
    find_best_match,
    is_empty_key,
    normalize_artist_key,
    normalize_key,
    normalize_part,
)

__all__ = [
    "TOP_ARTISTS",
    "categorize_genre",
    "is_top_artist",
    "find_best_match",
    "is_empty_key",
    "normalize_artist_key",
    "normalize_key",
    "normalize_part",
]
