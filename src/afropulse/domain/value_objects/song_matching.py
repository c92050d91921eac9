"""Song identity keys and cheap cross-source fuzzy matching.

Hey future me - this module decides whether "Rema / Calm Down" from the catalog
and "rema / calm down" from a TikTok feed are the same work!

Sources disagree on case, punctuation and sometimes on the exact title
("Calm Down" vs "Calm Down (Remix)"). We normalize both fields down to
lowercase ASCII alphanumerics and then try three tiers, in order:

1. Exact normalized key ("rema-calmdown" == "rema-calmdown")
2. Artist substring ("burnaboy" in "burnaboyftdavido" or the other way round)
3. Song substring - ONLY when one side has no artist at all

This is NOT a similarity metric. No edit distance, no partial credit. The first
candidate (in iteration order) that satisfies the first successful tier wins.
False positives like two songs of the same artist collapsing into one entity
are accepted - candidate pools are small and curated (20-30 songs).

Examples:
    >>> normalize_key("Burna Boy", "Last Last")
    'burnaboy-lastlast'
    >>> normalize_key("burna-boy", "LAST LAST!")
    'burnaboy-lastlast'
"""

import re
from collections.abc import Iterable
from typing import Protocol, TypeVar

_NON_ALNUM = re.compile(r"[^a-z0-9]")


class MatchCandidate(Protocol):
    """Anything exposing artist + song name (CompositeEntity does)."""

    artist: str
    name: str


T = TypeVar("T", bound=MatchCandidate)


def normalize_part(value: str | None) -> str:
    """Lower-case, trim and drop every non [a-z0-9] character.

    Hey future me - accented letters are dropped too ("Alté" → "alt").
    That's deliberate: all sources drop them the same way, so keys still agree.
    """
    if not value:
        return ""
    return _NON_ALNUM.sub("", value.lower().strip())


def normalize_key(artist: str | None, song: str | None) -> str:
    """Build the identity key "<artist>-<song>". Pure, deterministic, total.

    Missing fields normalize to "" and still produce a key ("-" for both empty).
    """
    return f"{normalize_part(artist)}-{normalize_part(song)}"


def is_empty_key(key: str) -> bool:
    """A key with no artist AND no song can't match anything meaningfully."""
    return key.replace("-", "") == ""


def normalize_artist_key(artist: str | None) -> str:
    """Grouping key for one-per-artist dedup: lower-cased and trimmed only."""
    if not artist:
        return ""
    return artist.lower().strip()


def _contains_either_way(left: str, right: str) -> bool:
    if not left or not right:
        return False
    return left in right or right in left


def find_best_match(artist: str | None, song: str | None, candidates: Iterable[T]) -> T | None:
    """Find the first candidate denoting the same work as (artist, song).

    Args:
        artist: Artist name from the incoming record
        song: Song title from the incoming record
        candidates: Existing entities, scanned in iteration order

    Returns:
        First candidate of the first tier that matched, or None
    """
    target_artist = normalize_part(artist)
    target_song = normalize_part(song)
    target_key = f"{target_artist}-{target_song}"
    if is_empty_key(target_key):
        return None

    pool = list(candidates)
    normalized = [
        (candidate, normalize_part(candidate.artist), normalize_part(candidate.name))
        for candidate in pool
    ]

    # Tier 1: exact key
    for candidate, cand_artist, cand_song in normalized:
        if f"{cand_artist}-{cand_song}" == target_key:
            return candidate

    # Tier 2: artist substring (either direction)
    for candidate, cand_artist, _ in normalized:
        if _contains_either_way(target_artist, cand_artist):
            return candidate

    # Tier 3: song substring, but never across two known, different artists.
    # "Tyla / Water" must not swallow "Someone Else / Waterfall".
    for candidate, cand_artist, cand_song in normalized:
        if target_artist and cand_artist:
            continue
        if _contains_either_way(target_song, cand_song):
            return candidate

    return None


__all__ = [
    "MatchCandidate",
    "normalize_part",
    "normalize_key",
    "normalize_artist_key",
    "is_empty_key",
    "find_best_match",
]
