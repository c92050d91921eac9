"""Tests for per-source pre-aggregation and the merge engine."""

from collections.abc import Callable
from dataclasses import replace

import pytest

from afropulse.application.services.merge_service import (
    CatalogEntry,
    MergeConfig,
    MergeEngine,
    aggregate_social,
    aggregate_web,
)
from afropulse.application.services.scoring_service import ScoringEngine
from afropulse.domain.dtos import (
    CatalogTrackDTO,
    SocialMentionDTO,
    SourceType,
    WebMentionDTO,
)
from afropulse.domain.entities import CatalogBucket, SocialBucket, SourceAggregate
from afropulse.domain.exceptions import ValidationError


@pytest.fixture
def entries(
    scoring_engine: ScoringEngine, catalog_track: Callable[..., CatalogTrackDTO]
) -> Callable[..., list[CatalogEntry]]:
    def _make(*tracks: CatalogTrackDTO) -> list[CatalogEntry]:
        return [CatalogEntry(track, scoring_engine.catalog_bucket(track)) for track in tracks]

    return _make


class TestAggregateSocial:
    """Test folding per-platform social rows."""

    def test_rows_of_same_song_are_combined(
        self, social_mention: Callable[..., SocialMentionDTO]
    ) -> None:
        """Sums, mean sentiment, unions and max trending score."""
        rows = [
            social_mention("Tyla", "Water", "twitter", 100, 1000, 0.8, ("#tyla", "#water")),
            social_mention("tyla", "WATER", "tiktok", 300, 5000, 0.4, ("#water", "#amapiano")),
            social_mention("Asake", "Joha", "twitter", 50, 500, 0.5),
        ]
        rows[0] = replace(rows[0], trending_score=90)
        rows[1] = replace(rows[1], trending_score=95)

        aggregates = aggregate_social(rows)

        assert [(a.artist, a.song) for a in aggregates] == [("Tyla", "Water"), ("Asake", "Joha")]
        water = aggregates[0].bucket
        assert isinstance(water, SocialBucket)
        assert water.total_mentions == 400
        assert water.total_engagement == 6000
        assert water.avg_sentiment == pytest.approx(0.6)
        assert water.platforms == ("twitter", "tiktok")
        assert water.hashtags == ("#tyla", "#water", "#amapiano")
        assert water.max_trending_score == 95
        assert water.buzz_score == 0

    def test_rows_without_artist_and_song_are_skipped(
        self, social_mention: Callable[..., SocialMentionDTO]
    ) -> None:
        """A row with neither field can't be attributed."""
        assert aggregate_social([social_mention("", "")]) == []


class TestAggregateWeb:
    """Test folding per-outlet web rows."""

    def test_rows_of_same_song_are_combined(
        self, web_mention: Callable[..., WebMentionDTO]
    ) -> None:
        """Mention count sums, relevance and sentiment are averaged."""
        aggregates = aggregate_web(
            [
                web_mention("Asake", "Joha", "Pulse", 0.9, 80, "review"),
                web_mention("Asake", "Joha", "NotJustOk", 0.5, 60, "news"),
            ]
        )

        assert len(aggregates) == 1
        bucket = aggregates[0].bucket
        assert bucket.mention_count == 2
        assert bucket.avg_relevance == pytest.approx(70)
        assert bucket.avg_sentiment == pytest.approx(0.7)
        assert bucket.sources == ("Pulse", "NotJustOk")
        assert bucket.categories == ("review", "news")

    def test_overflowing_average_falls_back_to_zero(
        self, web_mention: Callable[..., WebMentionDTO]
    ) -> None:
        """A relevance sum that overflows to inf averages to 0, not inf."""
        aggregates = aggregate_web(
            [
                web_mention("Asake", "Joha", "Pulse", 0.5, 1e308),
                web_mention("Asake", "Joha", "NotJustOk", 0.5, 1e308),
            ]
        )

        assert aggregates[0].bucket.avg_relevance == 0.0
        assert aggregates[0].bucket.avg_sentiment == pytest.approx(0.5)


class TestMergeConfig:
    """Test the declared source priority."""

    def test_catalog_must_come_first(self) -> None:
        """Catalog seeds identity, so it has to lead."""
        with pytest.raises(ValidationError):
            MergeConfig(source_priority=[SourceType.SOCIAL, SourceType.CATALOG])

    def test_no_duplicates(self) -> None:
        """Each source appears once."""
        with pytest.raises(ValidationError):
            MergeConfig(source_priority=[SourceType.CATALOG, SourceType.WEB, SourceType.WEB])


class TestMergeEngine:
    """Test folding sources into entities."""

    def test_exact_key_match_merges_into_one_entity(
        self,
        entries: Callable[..., list[CatalogEntry]],
        catalog_track: Callable[..., CatalogTrackDTO],
        social_mention: Callable[..., SocialMentionDTO],
        scoring_engine: ScoringEngine,
    ) -> None:
        """Rema / Calm Down from catalog and "rema / calm down" from social are one song."""
        catalog = entries(catalog_track("Rema", "Calm Down", 90, 10))
        social = [
            scoring_engine.score_aggregate(a)
            for a in aggregate_social(
                [social_mention("rema", "calm down", "twitter", 22100, 156000, 0.88)]
            )
        ]

        entities = MergeEngine().merge(catalog, {SourceType.SOCIAL: social})

        assert len(entities) == 1
        entity = entities[0]
        assert entity.catalog.popularity == 90
        assert entity.social.total_mentions == 22100
        assert entity.social.buzz_score == 39
        assert entity.platforms == ["spotify", "twitter"]
        assert entity.name == "Calm Down"

    def test_different_artists_with_overlapping_titles_stay_apart(
        self,
        entries: Callable[..., list[CatalogEntry]],
        catalog_track: Callable[..., CatalogTrackDTO],
        social_mention: Callable[..., SocialMentionDTO],
    ) -> None:
        """Tyla / Water and Someone Else / Waterfall are different songs."""
        catalog = entries(catalog_track("Tyla", "Water"))
        social = aggregate_social([social_mention("Someone Else", "Waterfall")])

        entities = MergeEngine().merge(catalog, {SourceType.SOCIAL: social})

        assert [e.key for e in entities] == ["tyla-water", "someoneelse-waterfall"]
        assert entities[0].social == SocialBucket()

    def test_record_without_artist_links_by_title(
        self,
        entries: Callable[..., list[CatalogEntry]],
        catalog_track: Callable[..., CatalogTrackDTO],
        web_mention: Callable[..., WebMentionDTO],
    ) -> None:
        """Tier 3 attaches an artist-less record to the right song."""
        catalog = entries(catalog_track("Tyla", "Water"))
        web = aggregate_web([web_mention("", "Water")])

        entities = MergeEngine().merge(catalog, {SourceType.WEB: web})

        assert len(entities) == 1
        assert entities[0].web.mention_count == 1

    def test_unmatched_record_creates_entity(
        self,
        entries: Callable[..., list[CatalogEntry]],
        catalog_track: Callable[..., CatalogTrackDTO],
        social_mention: Callable[..., SocialMentionDTO],
    ) -> None:
        """New songs from social get their own entity with empty catalog bucket."""
        catalog = entries(catalog_track("Rema", "Calm Down"))
        social = aggregate_social([social_mention("Kizz Daniel", "Buga", "tiktok")])

        entities = MergeEngine().merge(catalog, {SourceType.SOCIAL: social})

        new = entities[1]
        assert new.id == "social-buzz-kizzdaniel-buga"
        assert new.origin is SourceType.SOCIAL
        assert new.album == "Social Buzz"
        assert new.catalog == CatalogBucket()
        assert new.platforms == ["tiktok"]

    def test_later_record_of_same_source_overwrites_bucket(
        self,
        entries: Callable[..., list[CatalogEntry]],
        catalog_track: Callable[..., CatalogTrackDTO],
        social_mention: Callable[..., SocialMentionDTO],
    ) -> None:
        """Two songs matching the same entity via artist: last write wins."""
        catalog = entries(catalog_track("Burna Boy", "Last Last"))
        social = aggregate_social(
            [
                social_mention("Burna Boy", "City Boys", mentions=100),
                social_mention("Burna Boy", "Sittin On Top", mentions=700),
            ]
        )

        entities = MergeEngine().merge(catalog, {SourceType.SOCIAL: social})

        assert len(entities) == 1
        assert entities[0].social.total_mentions == 700

    def test_duplicate_catalog_tracks_keep_best_bucket(
        self,
        entries: Callable[..., list[CatalogEntry]],
        catalog_track: Callable[..., CatalogTrackDTO],
    ) -> None:
        """Same song twice from the catalog: one entity, higher buzz score kept."""
        catalog = entries(
            catalog_track("Asake", "Lonely At The Top", 40, 300, track_id="album-version"),
            catalog_track("Asake", "Lonely at the Top", 85, 20, track_id="single"),
        )

        entities = MergeEngine().merge(catalog)

        assert len(entities) == 1
        assert entities[0].id == "album-version"
        assert entities[0].catalog.popularity == 85

    def test_sources_are_folded_in_declared_priority(
        self,
        social_mention: Callable[..., SocialMentionDTO],
        web_mention: Callable[..., WebMentionDTO],
    ) -> None:
        """With web before social, the web record creates the entity."""
        aggregates: dict[SourceType, list[SourceAggregate]] = {
            SourceType.SOCIAL: aggregate_social([social_mention("Oxlade", "Ku Lo Sa")]),
            SourceType.WEB: aggregate_web([web_mention("Oxlade", "Ku Lo Sa")]),
        }

        web_first = MergeEngine().merge([], aggregates)
        social_first = MergeEngine(
            MergeConfig(source_priority=[SourceType.CATALOG, SourceType.SOCIAL, SourceType.WEB])
        ).merge([], aggregates)

        assert web_first[0].origin is SourceType.WEB
        assert web_first[0].album == "Web Buzz"
        assert social_first[0].origin is SourceType.SOCIAL
        assert len(web_first) == len(social_first) == 1

    def test_alias_registration_keeps_results_stable(
        self,
        entries: Callable[..., list[CatalogEntry]],
        catalog_track: Callable[..., CatalogTrackDTO],
        social_mention: Callable[..., SocialMentionDTO],
        web_mention: Callable[..., WebMentionDTO],
    ) -> None:
        """A fuzzy-matched spelling reused by a third source lands on the same entity."""
        catalog = entries(catalog_track("Burna Boy", "Last Last"))
        aggregates: dict[SourceType, list[SourceAggregate]] = {
            SourceType.WEB: aggregate_web([web_mention("Burna Boy ft. Ed Sheeran", "For My Hand")]),
            SourceType.SOCIAL: aggregate_social(
                [social_mention("Burna Boy ft. Ed Sheeran", "For My Hand")]
            ),
        }

        for register_aliases in (False, True):
            engine = MergeEngine(MergeConfig(register_aliases=register_aliases))
            entities = engine.merge(catalog, aggregates)
            assert len(entities) == 1
            assert entities[0].web.mention_count == 1
            assert entities[0].social.total_mentions == 1000

    def test_merge_does_not_leak_state_between_runs(
        self,
        entries: Callable[..., list[CatalogEntry]],
        catalog_track: Callable[..., CatalogTrackDTO],
    ) -> None:
        """Each call starts from an empty map."""
        engine = MergeEngine()
        engine.merge(entries(catalog_track("Rema", "Calm Down")))

        second = engine.merge(entries(catalog_track("Tems", "Free Mind")))

        assert [e.key for e in second] == ["tems-freemind"]
