"""Integration tests for the buzz and selected-releases endpoints."""

from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from afropulse.api.dependencies import get_buzz_service, get_selected_releases_service
from afropulse.config.settings import AggregationSettings, Settings, StorageSettings
from afropulse.domain.dtos import SourceType
from afropulse.domain.exceptions import ConfigurationError, ExternalServiceError
from afropulse.infrastructure.lifecycle import build_services
from afropulse.main import create_app

pytestmark = pytest.mark.integration


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        storage=StorageSettings(data_dir=tmp_path),
        aggregation=AggregationSettings(max_results=3),
    )


@pytest.fixture
def app(settings, make_adapter, catalog_track, social_mention) -> FastAPI:
    # Hey future me - no lifespan here: the real services are built from fake
    # adapters and injected through dependency_overrides, so nothing hits the network.
    buzz_service, selected_releases = build_services(
        settings,
        [
            make_adapter(
                "catalog",
                SourceType.CATALOG,
                [
                    catalog_track("Rema", "Calm Down", 90, 10),
                    catalog_track("Tems", "Free Mind", 60, 200),
                ],
            ),
            make_adapter(
                "social",
                SourceType.SOCIAL,
                [
                    social_mention("rema", "calm down", "twitter", 22100, 156000, 0.88, ("#rema",)),
                    social_mention("Tyla", "Water", "tiktok", 45000, 890000, 0.95, ("#tyla",)),
                ],
            ),
            make_adapter("web", SourceType.WEB, error=ExternalServiceError("press feed down")),
        ],
    )
    app = create_app(settings)
    app.dependency_overrides[get_buzz_service] = lambda: buzz_service
    app.dependency_overrides[get_selected_releases_service] = lambda: selected_releases
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


# Hey future me - the frontend reads camelCase keys, so this pins the wire shape.
def test_comprehensive_buzz_shape(client: TestClient) -> None:
    response = client.get("/api/buzz/comprehensive")
    assert response.status_code == 200

    payload = response.json()
    assert payload["dataSource"] == "comprehensive"
    assert payload["total"] == 3
    assert payload["errors"] == {"web": "press feed down"}
    assert payload["sourceCounts"] == {"catalog": 2, "social": 2, "web": 0}
    assert "lastUpdated" in payload

    top = payload["songs"][0]
    assert top["artist"] == "Rema"
    assert top["overallScore"] == 43
    assert top["platforms"] == ["spotify", "twitter"]
    assert top["buckets"]["social"]["totalMentions"] == 22100
    assert top["buckets"]["social"]["buzzScore"] == 39
    assert top["isFallback"] is False

    scores = [song["overallScore"] for song in payload["songs"]]
    assert scores == sorted(scores, reverse=True)


def test_buzzing_pads_sparse_catalog(client: TestClient) -> None:
    response = client.get("/api/buzz/buzzing")
    assert response.status_code == 200

    payload = response.json()
    assert payload["total"] == 3
    assert payload["dataSource"] == "catalog_with_fallback"
    assert payload["fallbackUsed"] is True
    assert [song["isFallback"] for song in payload["songs"]] == [False, False, True]


def test_social_buzz_with_hashtags(client: TestClient) -> None:
    response = client.get("/api/buzz/social")
    assert response.status_code == 200

    payload = response.json()
    assert payload["source"] == "social"
    assert [item["artist"] for item in payload["items"]] == ["Tyla", "rema"]
    assert payload["topHashtags"] == ["#tyla", "#rema"]
    assert payload["items"][0]["social"]["totalMentions"] == 45000


# Hey future me - a dead source is reported in `errors`, never as a failed request.
def test_web_buzz_with_dead_feed_is_still_200(client: TestClient) -> None:
    response = client.get("/api/buzz/web")
    assert response.status_code == 200

    payload = response.json()
    assert payload["items"] == []
    assert payload["errors"] == {"web": "press feed down"}


def test_selected_releases_lifecycle(client: TestClient, settings: Settings) -> None:
    assert client.get("/api/selected-releases").json()["source"] == "empty"

    response = client.post(
        "/api/selected-releases",
        json={"songs": [{"name": "Rush", "artist": "Ayra Starr", "popularity": 77}, {}]},
    )
    assert response.status_code == 200
    assert response.json()["count"] == 2
    assert settings.storage.selected_releases_path.exists()

    listed = client.get("/api/selected-releases").json()
    assert listed["source"] == "manual_selection"
    assert listed["count"] == 2
    assert listed["songs"][1]["name"] == "Unknown Track"

    # The manual selection replaces the catalog-only ranking
    buzzing = client.get("/api/buzz/buzzing").json()
    assert buzzing["dataSource"] == "manual_selection"
    assert [song["name"] for song in buzzing["songs"]] == ["Rush", "Unknown Track"]
    assert buzzing["songs"][0]["source"] == "manual"

    cleared = client.delete("/api/selected-releases")
    assert cleared.json()["message"] == "Selected releases cleared successfully"
    assert client.get("/api/selected-releases").json()["count"] == 0


def test_malformed_selected_release_does_not_break_buzzing(client: TestClient) -> None:
    response = client.post(
        "/api/selected-releases",
        json={"songs": [{"name": "Essence", "artist": "Wizkid", "imageUrl": 123}]},
    )
    assert response.status_code == 200

    buzzing = client.get("/api/buzz/buzzing")
    assert buzzing.status_code == 200
    assert buzzing.json()["songs"][0]["imageUrl"] == "123"


def test_selected_releases_rejects_non_list(client: TestClient) -> None:
    response = client.post("/api/selected-releases", json={"songs": "Rush"})
    assert response.status_code == 422


def test_configuration_error_maps_to_503(app: FastAPI, mocker) -> None:
    service = mocker.AsyncMock()
    service.get_comprehensive_buzz.side_effect = ConfigurationError(
        "Catalog credentials not configured"
    )
    app.dependency_overrides[get_buzz_service] = lambda: service

    response = TestClient(app).get("/api/buzz/comprehensive")

    assert response.status_code == 503
    assert response.json() == {"detail": "Catalog credentials not configured"}


# Hey future me - without the lifespan nothing is on app.state, so the real
# dependency answers 503 instead of crashing.
def test_missing_service_is_503(settings: Settings) -> None:
    response = TestClient(create_app(settings)).get("/api/buzz/comprehensive")
    assert response.status_code == 503


def test_health_after_startup(settings: Settings) -> None:
    with TestClient(create_app(settings)) as client:
        response = client.get("/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "healthy"
    assert payload["adapters"] == ["catalog"]
    assert payload["catalog_configured"] is False
