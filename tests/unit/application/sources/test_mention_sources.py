"""Tests for the social and web-press feed adapters."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from afropulse.application.sources import SocialSourceAdapter, WebPressSourceAdapter
from afropulse.domain.dtos import SocialMentionDTO, SourceType, WebMentionDTO
from afropulse.domain.exceptions import ExternalServiceError, SourceUnavailableError


def _feed(url: str, items=None, error: Exception | None = None) -> MagicMock:
    feed = MagicMock()
    feed.url = url
    feed.fetch = AsyncMock(return_value=items or [], side_effect=error)
    return feed


class TestSocialSourceAdapter:
    """Test the social mention adapter."""

    async def test_maps_items_from_every_feed(self) -> None:
        """Items of all feeds become SocialMentionDTOs in feed order."""
        adapter = SocialSourceAdapter(
            [
                _feed("https://a", [{"platform": "twitter", "artist": "Tyla", "song": "Water"}]),
                _feed("https://b", [{"platform": "tiktok", "artist": "Asake", "song": "Joha"}]),
            ]
        )

        records = await adapter.fetch_records()

        assert all(isinstance(r, SocialMentionDTO) for r in records)
        assert [r.platform for r in records] == ["twitter", "tiktok"]
        assert adapter.source_type is SourceType.SOCIAL
        assert adapter.name == "social"

    async def test_one_failing_feed_is_skipped(self) -> None:
        """Partial failure still returns the healthy feeds' items."""
        adapter = SocialSourceAdapter(
            [
                _feed("https://down", error=ExternalServiceError("503")),
                _feed("https://up", [{"artist": "Rema", "song": "Calm Down"}]),
            ]
        )

        records = await adapter.fetch_records()

        assert [r.artist for r in records] == ["Rema"]

    async def test_all_feeds_failing_raises(self) -> None:
        """The whole source is unavailable when nothing answered."""
        adapter = SocialSourceAdapter(
            [
                _feed("https://a", error=ExternalServiceError("503")),
                _feed("https://b", error=ExternalServiceError("timeout")),
            ]
        )

        with pytest.raises(SourceUnavailableError):
            await adapter.fetch_records()

    async def test_no_feeds_is_empty(self) -> None:
        """A disabled source just contributes nothing."""
        assert await SocialSourceAdapter([]).fetch_records() == []


class TestWebPressSourceAdapter:
    """Test the web-press adapter."""

    async def test_maps_to_web_mentions(self) -> None:
        """Articles become WebMentionDTOs with one mention each."""
        adapter = WebPressSourceAdapter(
            [_feed("https://press", [{"source": "Pulse", "artist": "Asake", "song": "Joha"}])],
            name="press",
        )

        [record] = await adapter.fetch_records()

        assert isinstance(record, WebMentionDTO)
        assert record.mentions == 1
        assert adapter.source_type is SourceType.WEB
        assert adapter.name == "press"
