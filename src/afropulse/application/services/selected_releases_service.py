"""Selected releases: the manually curated override list.

Hey future me - when an admin picks songs by hand, those songs ARE the
"buzzing" list. The catalog-only path asks this service first and, if the list
is non-empty, skips fetch/merge/score entirely (pass-through, capped to max).
"""

import logging
import math
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import Any

from afropulse.domain.dtos import CatalogTrackDTO, SourceType
from afropulse.domain.entities import CatalogBucket, CompositeEntity
from afropulse.domain.exceptions import ValidationError
from afropulse.domain.ports import IRecordStore
from afropulse.domain.value_objects.song_matching import normalize_key

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(UTC)


# Hey future me - the admin UI posts whatever it likes. Everything is coerced
# here so a stored record can never break the response schema later.
def _text(value: Any, default: str | None) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return default
    return str(value).strip() or default


def _popularity(value: Any) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number):
        return 0
    return max(0, min(100, int(number)))


class SelectedReleasesService:
    """Read / replace / clear the curated song list."""

    def __init__(self, store: IRecordStore, clock: Callable[[], datetime] = _now) -> None:
        self._store = store
        self._clock = clock

    def get_all(self) -> list[dict[str, Any]]:
        return self._store.read_records()

    def normalize(self, songs: Sequence[Any]) -> list[dict[str, Any]]:
        """Fill in defaults for admin-submitted songs.

        Raises:
            ValidationError: If `songs` is not a list
        """
        if not isinstance(songs, list):
            raise ValidationError("Songs must be an array")

        now = self._clock()
        stamp = int(now.timestamp() * 1000)
        normalized: list[dict[str, Any]] = []
        for index, song in enumerate(songs):
            if not isinstance(song, dict):
                raise ValidationError(f"Song at position {index} must be an object")
            normalized.append(
                {
                    "id": _text(song.get("id"), f"selected-{stamp}-{index}"),
                    "name": _text(song.get("name"), "Unknown Track"),
                    "artist": _text(song.get("artist"), "Unknown Artist"),
                    "album": _text(song.get("album"), "Unknown Album"),
                    "releaseDate": _text(song.get("releaseDate"), now.isoformat()),
                    "spotifyUrl": _text(song.get("spotifyUrl"), "#"),
                    "imageUrl": _text(song.get("imageUrl"), None),
                    "genre": _text(song.get("genre"), "Afrobeats"),
                    "popularity": _popularity(song.get("popularity")),
                    "addedAt": now.isoformat(),
                    "addedBy": "admin",
                }
            )
        return normalized

    def replace(self, songs: Sequence[Any]) -> list[dict[str, Any]]:
        """Normalize and store `songs`, replacing the whole list."""
        normalized = self.normalize(songs)
        self._store.write_records(normalized)
        logger.info("Stored %d selected releases", len(normalized))
        return normalized

    def clear(self) -> None:
        self._store.write_records([])
        logger.info("Cleared selected releases")

    # Pass-through: stored order is kept and nothing is re-scored. overall_score
    # is just the stored popularity so the output has SOMETHING to show.
    def as_entities(self, limit: int) -> list[CompositeEntity]:
        """Map stored songs to entities (capped to `limit`)."""
        entities: list[CompositeEntity] = []
        for record in self.get_all()[:limit]:
            track = CatalogTrackDTO.from_payload(record)
            entity = CompositeEntity(
                key=normalize_key(track.artist, track.title),
                id=track.id,
                name=track.title,
                artist=track.artist,
                origin=SourceType.MANUAL,
                album=track.album,
                release_date=track.release_date,
                image_url=track.image_url,
                external_url=track.external_url,
                genre=track.genre,
                catalog=CatalogBucket(
                    popularity=track.popularity,
                    release_date=track.release_date,
                    buzz_score=track.popularity,
                ),
                overall_score=track.popularity,
            )
            entity.add_platforms(["manual"])
            entities.append(entity)
        return entities


__all__ = ["SelectedReleasesService"]
