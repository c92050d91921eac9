"""Catalog Source Adapter.

Hey future me - THIS WRAPS THE SPOTIFY CATALOG CLIENT!
The aggregation service never talks to SpotifyCatalogClient directly; it goes
through this adapter, which:
- Runs every configured search query and playlist
- Skips a single failing query/playlist (logged) instead of failing the source
- De-duplicates tracks by catalog id (first seen wins)
- Converts raw Spotify JSON to CatalogTrackDTO
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from afropulse.domain.dtos import CatalogTrackDTO, SourceType, parse_release_date
from afropulse.domain.exceptions import (
    ConfigurationError,
    ExternalServiceError,
    SourceUnavailableError,
)
from afropulse.domain.ports import ISourceAdapter
from afropulse.domain.value_objects.genre import categorize_genre

if TYPE_CHECKING:
    from afropulse.infrastructure.integrations.spotify_client import SpotifyCatalogClient

logger = logging.getLogger(__name__)


def map_catalog_track(raw: dict[str, Any]) -> CatalogTrackDTO:
    """Convert a raw Spotify track object to a CatalogTrackDTO.

    Only the FIRST artist becomes `artist` - that's the one-per-artist
    grouping key later on, so "Burna Boy, Ed Sheeran" groups under Burna Boy.
    """
    artists = raw.get("artists") or []
    first_artist = artists[0].get("name", "") if artists and isinstance(artists[0], dict) else ""
    album = raw.get("album") or {}
    images = album.get("images") or []
    image_url = images[0].get("url") if images and isinstance(images[0], dict) else None
    external_urls = raw.get("external_urls") or {}
    title = str(raw.get("name") or "")

    try:
        popularity = int(raw.get("popularity") or 0)
    except (TypeError, ValueError):
        popularity = 0

    return CatalogTrackDTO(
        id=str(raw.get("id") or ""),
        title=title,
        artist=str(first_artist or ""),
        album=str(album.get("name") or ""),
        release_date=parse_release_date(album.get("release_date")),
        image_url=image_url,
        external_url=external_urls.get("spotify"),
        popularity=max(0, min(100, popularity)),
        genre=categorize_genre(first_artist, title),
    )


class CatalogSourceAdapter(ISourceAdapter):
    """Source adapter for the streaming catalog (search + editorial playlists).

    Usage:
        adapter = CatalogSourceAdapter(client, settings.catalog.search_queries,
                                       settings.catalog.playlist_ids)
        tracks = await adapter.fetch_records()
    """

    def __init__(
        self,
        client: "SpotifyCatalogClient",
        search_queries: Sequence[str],
        playlist_ids: Sequence[str] = (),
        name: str = "catalog",
    ) -> None:
        """Initialize with a catalog client.

        Args:
            client: Rate-limited Spotify catalog client
            search_queries: Search queries run on every fetch
            playlist_ids: Editorial playlists whose tracks are added after search
            name: Adapter name used in logs and error maps
        """
        self._client = client
        self._search_queries = list(search_queries)
        self._playlist_ids = list(playlist_ids)
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def source_type(self) -> SourceType:
        return SourceType.CATALOG

    # Hey future me - queries/playlists run SEQUENTIALLY on purpose. They all share
    # one rate limiter anyway, and sequential order keeps "first seen wins" dedup
    # deterministic. Missing credentials fail the whole adapter (nothing would work);
    # a single bad query only loses that query. If EVERY request failed we raise so
    # the aggregation service records the error instead of silently reporting 0 tracks.
    async def fetch_records(self) -> list[CatalogTrackDTO]:
        """Fetch, de-duplicate and map catalog tracks.

        Raises:
            ConfigurationError: If catalog credentials are missing
            SourceUnavailableError: If every search and playlist request failed
        """
        raw_tracks: list[dict[str, Any]] = []
        failures: list[str] = []
        attempts = 0

        for query in self._search_queries:
            attempts += 1
            try:
                raw_tracks.extend(await self._client.search_tracks(query))
            except ConfigurationError:
                raise
            except ExternalServiceError as e:
                logger.warning("Catalog search %r failed: %s", query, e)
                failures.append(str(e))

        for playlist_id in self._playlist_ids:
            attempts += 1
            try:
                raw_tracks.extend(await self._client.get_playlist_tracks(playlist_id))
            except ConfigurationError:
                raise
            except ExternalServiceError as e:
                logger.warning("Catalog playlist %s failed: %s", playlist_id, e)
                failures.append(str(e))

        if attempts and len(failures) == attempts:
            raise SourceUnavailableError(self._name, failures[-1])

        seen_ids: set[str] = set()
        tracks: list[CatalogTrackDTO] = []
        for raw in raw_tracks:
            track_id = raw.get("id")
            if not track_id or track_id in seen_ids:
                continue
            seen_ids.add(track_id)
            tracks.append(map_catalog_track(raw))

        logger.info(
            "Catalog adapter %s fetched %d unique tracks (%d raw)",
            self._name,
            len(tracks),
            len(raw_tracks),
        )
        return tracks


__all__ = ["CatalogSourceAdapter", "map_catalog_track"]
