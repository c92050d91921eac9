"""Tests for the Spotify catalog client (httpx MockTransport, no network)."""

from collections.abc import Callable

import httpx
import pytest

from afropulse.config.settings import CatalogSettings
from afropulse.domain.exceptions import (
    ConfigurationError,
    ExternalServiceError,
    RateLimitExceededError,
)
from afropulse.infrastructure.integrations.spotify_client import SpotifyCatalogClient
from afropulse.infrastructure.rate_limiter import RateLimiter

TOKEN_URL = "https://accounts.spotify.com/api/token"


def _settings(**overrides) -> CatalogSettings:
    return CatalogSettings(client_id="id", client_secret="secret", **overrides)


def _token_response() -> httpx.Response:
    return httpx.Response(200, json={"access_token": "tok", "expires_in": 3600})


@pytest.fixture
def make_client() -> Callable[..., SpotifyCatalogClient]:
    def _make(handler, settings: CatalogSettings | None = None, clock=None) -> SpotifyCatalogClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        kwargs = {"clock": clock} if clock else {}
        return SpotifyCatalogClient(
            settings or _settings(), RateLimiter.per_minute(100), client=http, **kwargs
        )

    return _make


class TestAccessToken:
    """Test the client-credentials flow."""

    async def test_token_is_cached(self, make_client) -> None:
        """Two calls, one token request."""
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return _token_response()

        client = make_client(handler)

        assert await client.get_access_token() == "tok"
        assert await client.get_access_token() == "tok"
        assert len(calls) == 1
        assert calls[0].headers["Authorization"].startswith("Basic ")
        assert b"grant_type=client_credentials" in calls[0].content

    async def test_token_refreshed_after_expiry(self, make_client) -> None:
        """Past expiry minus margin, a new token is fetched."""
        now = [0.0]
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return _token_response()

        client = make_client(handler, clock=lambda: now[0])
        await client.get_access_token()
        now[0] = 3600.0
        await client.get_access_token()

        assert len(calls) == 2

    async def test_missing_credentials(self, make_client) -> None:
        """No id/secret is a configuration error, not a network call."""
        client = make_client(lambda r: _token_response(), settings=CatalogSettings())

        with pytest.raises(ConfigurationError):
            await client.get_access_token()

    async def test_rejected_credentials(self, make_client) -> None:
        """A 400 from the token endpoint is an upstream error."""
        client = make_client(lambda r: httpx.Response(400, json={"error": "invalid_client"}))

        with pytest.raises(ExternalServiceError) as exc_info:
            await client.get_access_token()

        assert exc_info.value.status_code == 400


class TestCatalogRequests:
    """Test search and playlist endpoints."""

    async def test_search_tracks(self, make_client) -> None:
        """Query, market and limit go out; items come back."""
        seen: dict[str, httpx.Request] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            if str(request.url) == TOKEN_URL:
                return _token_response()
            seen["search"] = request
            return httpx.Response(
                200, json={"tracks": {"items": [{"id": "a", "name": "Calm Down"}, None]}}
            )

        client = make_client(handler)
        items = await client.search_tracks("genre:afrobeats")

        assert items == [{"id": "a", "name": "Calm Down"}]
        request = seen["search"]
        assert request.url.path == "/v1/search"
        assert request.url.params["q"] == "genre:afrobeats"
        assert request.url.params["market"] == "NG"
        assert request.url.params["type"] == "track"
        assert request.headers["Authorization"] == "Bearer tok"

    async def test_playlist_tracks_unwrapped_and_filtered(self, make_client) -> None:
        """Null and id-less tracks are dropped."""

        def handler(request: httpx.Request) -> httpx.Response:
            if str(request.url) == TOKEN_URL:
                return _token_response()
            assert request.url.path == "/v1/playlists/pl1/tracks"
            return httpx.Response(
                200,
                json={
                    "items": [
                        {"track": {"id": "a", "name": "Rush"}},
                        {"track": None},
                        {"track": {"name": "local file"}},
                        None,
                    ]
                },
            )

        client = make_client(handler)

        assert await client.get_playlist_tracks("pl1") == [{"id": "a", "name": "Rush"}]

    async def test_429_raises_rate_limit_error(self, make_client) -> None:
        """No retry; Retry-After is surfaced."""

        def handler(request: httpx.Request) -> httpx.Response:
            if str(request.url) == TOKEN_URL:
                return _token_response()
            return httpx.Response(429, headers={"Retry-After": "7"})

        client = make_client(handler)

        with pytest.raises(RateLimitExceededError) as exc_info:
            await client.search_tracks("q")

        assert exc_info.value.retry_after == 7

    async def test_server_error(self, make_client) -> None:
        """5xx becomes ExternalServiceError with the status."""

        def handler(request: httpx.Request) -> httpx.Response:
            if str(request.url) == TOKEN_URL:
                return _token_response()
            return httpx.Response(503)

        client = make_client(handler)

        with pytest.raises(ExternalServiceError) as exc_info:
            await client.search_tracks("q")

        assert exc_info.value.status_code == 503

    async def test_transport_error(self, make_client) -> None:
        """Connection failures are wrapped."""

        def handler(request: httpx.Request) -> httpx.Response:
            if str(request.url) == TOKEN_URL:
                return _token_response()
            raise httpx.ConnectError("boom", request=request)

        client = make_client(handler)

        with pytest.raises(ExternalServiceError):
            await client.search_tracks("q")
