"""Social and web-press mention source adapters.

Hey future me - both sources look the same on the wire: a handful of JSON feed
URLs, each returning an array of {artist, song, metric...} records. The only
difference is which DTO the items become, so there's one base adapter and two
tiny subclasses.

Feeds are fetched concurrently. A failing feed is logged and skipped; the
adapter only fails as a whole if every configured feed failed.
"""

from __future__ import annotations

import asyncio
import logging
from abc import abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from afropulse.domain.dtos import SocialMentionDTO, SourceType, WebMentionDTO
from afropulse.domain.exceptions import ExternalServiceError, SourceUnavailableError
from afropulse.domain.ports import ISourceAdapter

if TYPE_CHECKING:
    from afropulse.infrastructure.integrations.mention_feed_client import MentionFeedClient

logger = logging.getLogger(__name__)


class MentionFeedSourceAdapter(ISourceAdapter):
    """Base adapter over one or more mention feeds."""

    def __init__(self, feeds: Sequence["MentionFeedClient"], name: str) -> None:
        self._feeds = list(feeds)
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @abstractmethod
    def map_record(self, payload: dict[str, Any]) -> Any:
        """Convert one raw feed item into this source's DTO."""
        pass

    async def _fetch_feed(self, feed: "MentionFeedClient") -> list[dict[str, Any]] | None:
        try:
            return await feed.fetch()
        except ExternalServiceError as e:
            logger.warning("Feed %s for %s failed: %s", feed.url, self._name, e)
            return None

    async def fetch_records(self) -> list[Any]:
        """Fetch every feed and map the items.

        Raises:
            SourceUnavailableError: If feeds are configured and all of them failed
        """
        if not self._feeds:
            logger.debug("No feeds configured for %s", self._name)
            return []

        results = await asyncio.gather(*(self._fetch_feed(feed) for feed in self._feeds))
        if all(result is None for result in results):
            raise SourceUnavailableError(self._name, "all feeds failed")

        records = [
            self.map_record(item)
            for result in results
            if result is not None
            for item in result
        ]
        logger.info("Adapter %s fetched %d records", self._name, len(records))
        return records


class SocialSourceAdapter(MentionFeedSourceAdapter):
    """Per-platform social mention counts (Twitter, TikTok, Instagram ...)."""

    def __init__(self, feeds: Sequence["MentionFeedClient"], name: str = "social") -> None:
        super().__init__(feeds, name)

    @property
    def source_type(self) -> SourceType:
        return SourceType.SOCIAL

    def map_record(self, payload: dict[str, Any]) -> SocialMentionDTO:
        return SocialMentionDTO.from_payload(payload)


class WebPressSourceAdapter(MentionFeedSourceAdapter):
    """Blog, review and radio mentions."""

    def __init__(self, feeds: Sequence["MentionFeedClient"], name: str = "web") -> None:
        super().__init__(feeds, name)

    @property
    def source_type(self) -> SourceType:
        return SourceType.WEB

    def map_record(self, payload: dict[str, Any]) -> WebMentionDTO:
        return WebMentionDTO.from_payload(payload)


__all__ = ["MentionFeedSourceAdapter", "SocialSourceAdapter", "WebPressSourceAdapter"]
