"""Shared fixtures: fake source adapters, an in-memory record store, fixed dates."""

import asyncio
from collections.abc import Callable, Sequence
from datetime import date, timedelta
from typing import Any

import pytest

from afropulse.application.services import ScoringEngine
from afropulse.domain.dtos import (
    CatalogTrackDTO,
    SocialMentionDTO,
    SourceRecord,
    SourceType,
    WebMentionDTO,
)
from afropulse.domain.ports import IRecordStore, ISourceAdapter

TODAY = date(2025, 6, 1)


class FakeAdapter(ISourceAdapter):
    """Adapter returning canned records, raising, or stalling on demand."""

    def __init__(
        self,
        name: str,
        source_type: SourceType,
        records: Sequence[SourceRecord] = (),
        error: BaseException | None = None,
        delay: float = 0.0,
    ) -> None:
        self._name = name
        self._source_type = source_type
        self._records = list(records)
        self._error = error
        self._delay = delay
        self.calls = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def source_type(self) -> SourceType:
        return self._source_type

    async def fetch_records(self) -> list[SourceRecord]:
        self.calls += 1
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return list(self._records)


class InMemoryRecordStore(IRecordStore):
    def __init__(self, records: list[dict[str, Any]] | None = None) -> None:
        self.records = list(records or [])

    def read_records(self) -> list[dict[str, Any]]:
        return list(self.records)

    def write_records(self, records: list[dict[str, Any]]) -> None:
        self.records = list(records)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def scoring_engine() -> ScoringEngine:
    """Scoring engine pinned to a fixed date."""
    return ScoringEngine(today=lambda: TODAY)


@pytest.fixture
def make_adapter() -> Callable[..., FakeAdapter]:
    return FakeAdapter


@pytest.fixture
def record_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def catalog_track() -> Callable[..., CatalogTrackDTO]:
    """Factory for catalog tracks; release_days_ago is relative to TODAY."""

    def _make(
        artist: str,
        title: str,
        popularity: int = 50,
        release_days_ago: int | None = 30,
        track_id: str | None = None,
    ) -> CatalogTrackDTO:
        release = TODAY - timedelta(days=release_days_ago) if release_days_ago is not None else None
        return CatalogTrackDTO(
            id=track_id or f"{artist}-{title}".lower().replace(" ", "-"),
            title=title,
            artist=artist,
            album=f"{title} - Single",
            release_date=release,
            popularity=popularity,
        )

    return _make


@pytest.fixture
def social_mention() -> Callable[..., SocialMentionDTO]:
    def _make(
        artist: str,
        song: str,
        platform: str = "twitter",
        mentions: int = 1000,
        engagement: int = 10000,
        sentiment: float = 0.5,
        hashtags: tuple[str, ...] = (),
    ) -> SocialMentionDTO:
        return SocialMentionDTO(
            platform=platform,
            artist=artist,
            song=song,
            mentions=mentions,
            engagement=engagement,
            sentiment=sentiment,
            hashtags=hashtags,
        )

    return _make


@pytest.fixture
def web_mention() -> Callable[..., WebMentionDTO]:
    def _make(
        artist: str,
        song: str,
        source: str = "Pulse Nigeria",
        sentiment: float = 0.5,
        relevance: float = 50.0,
        category: str = "news",
    ) -> WebMentionDTO:
        return WebMentionDTO(
            source=source,
            artist=artist,
            song=song,
            sentiment=sentiment,
            relevance_score=relevance,
            category=category,
        )

    return _make
