"""Spotify Web API client for the catalog source (client-credentials flow)."""

import base64
import logging
import time
from collections.abc import Callable
from typing import Any, cast

import httpx

from afropulse.config.settings import CatalogSettings
from afropulse.domain.exceptions import (
    ConfigurationError,
    ExternalServiceError,
    RateLimitExceededError,
)
from afropulse.infrastructure.integrations.http_pool import HttpClientPool
from afropulse.infrastructure.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class SpotifyCatalogClient:
    """HTTP client for the catalog endpoints we need: search + playlist tracks.

    No user auth here - app-level client credentials are enough for public
    search and editorial playlists.
    """

    # Refresh a bit before Spotify's expiry so we never send a stale token
    TOKEN_EXPIRY_MARGIN = 60.0

    # Hey future me, the rate limiter is PASSED IN (not a module global) so the
    # adapter, the tests and the app factory all decide which limiter is shared.
    # `client` is optional: production borrows the HttpClientPool, tests inject
    # an httpx.AsyncClient with a MockTransport.
    def __init__(
        self,
        settings: CatalogSettings,
        rate_limiter: RateLimiter,
        client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize catalog client.

        Args:
            settings: Catalog configuration settings
            rate_limiter: Token bucket shared by all catalog calls
            client: Optional pre-built HTTP client
            clock: Monotonic time source for token expiry
        """
        self.settings = settings
        self._rate_limiter = rate_limiter
        self._client = client
        self._clock = clock
        self._access_token: str | None = None
        self._token_expires_at: float = 0.0

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is not None:
            return self._client
        return await HttpClientPool.get_client()

    # Listen up, the token endpoint wants HTTP Basic auth with "id:secret" base64'd
    # and a form body, NOT JSON. Tokens live ~3600s; we cache until shortly before.
    async def get_access_token(self) -> str:
        """Get a cached or fresh client-credentials access token.

        Raises:
            ConfigurationError: If client id/secret are missing
            ExternalServiceError: If the token endpoint rejects us
        """
        if self._access_token and self._clock() < self._token_expires_at:
            return self._access_token

        if not self.settings.is_configured:
            raise ConfigurationError("Catalog credentials not configured")

        credentials = f"{self.settings.client_id}:{self.settings.client_secret}"
        encoded = base64.b64encode(credentials.encode()).decode()

        client = await self._get_client()
        try:
            response = await client.post(
                self.settings.token_url,
                headers={
                    "Authorization": f"Basic {encoded}",
                    "Content-Type": "application/x-www-form-urlencoded",
                },
                data={"grant_type": "client_credentials"},
            )
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Catalog auth request failed: {e}") from e

        if response.status_code != 200:
            raise ExternalServiceError(
                f"Catalog auth failed: {response.status_code}",
                status_code=response.status_code,
            )

        payload = response.json()
        self._access_token = cast(str, payload["access_token"])
        expires_in = float(payload.get("expires_in", 3600))
        self._token_expires_at = self._clock() + max(0.0, expires_in - self.TOKEN_EXPIRY_MARGIN)
        logger.debug("Catalog access token refreshed (expires in %.0fs)", expires_in)
        return self._access_token

    async def _api_request(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Make a rate-limited GET against the catalog API.

        Raises:
            RateLimitExceededError: On 429 (no retry)
            ExternalServiceError: On any other non-success status or bad body
        """
        token = await self.get_access_token()
        client = await self._get_client()
        url = f"{self.settings.api_base_url}{path}"

        async with self._rate_limiter:
            try:
                response = await client.get(
                    url,
                    params=params,
                    headers={"Authorization": f"Bearer {token}"},
                )
            except httpx.HTTPError as e:
                raise ExternalServiceError(f"Catalog request to {path} failed: {e}") from e

        if response.status_code == 429:
            retry_after_str = response.headers.get("Retry-After")
            retry_after = int(retry_after_str) if retry_after_str and retry_after_str.isdigit() else None
            raise RateLimitExceededError(
                f"Catalog rate limited. Retry after {retry_after or 'unknown'} seconds",
                retry_after=retry_after,
            )
        if response.status_code == 401:
            # Token revoked early - drop it so the next run fetches a new one
            self._access_token = None
        if response.status_code >= 400:
            raise ExternalServiceError(
                f"Catalog request to {path} failed: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return cast(dict[str, Any], response.json())
        except ValueError as e:
            raise ExternalServiceError(f"Catalog returned invalid JSON for {path}") from e

    async def search_tracks(self, query: str, limit: int | None = None) -> list[dict[str, Any]]:
        """
        Search tracks in the configured market.

        Args:
            query: Spotify search query (supports "genre:" and OR)
            limit: Max results (default from settings, max 50)

        Returns:
            Raw track objects
        """
        data = await self._api_request(
            "/search",
            params={
                "q": query,
                "type": "track",
                "market": self.settings.market,
                "limit": limit or self.settings.search_limit,
            },
        )
        tracks = data.get("tracks") or {}
        return [item for item in tracks.get("items") or [] if item]

    # Playlist items wrap the track ({"track": {...}}) and can contain null tracks
    # (removed/local files) - filter those out here so the adapter only sees real tracks.
    async def get_playlist_tracks(self, playlist_id: str) -> list[dict[str, Any]]:
        """
        Get the first page (50) of a playlist's tracks.

        Args:
            playlist_id: Spotify playlist ID

        Returns:
            Raw track objects
        """
        data = await self._api_request(
            f"/playlists/{playlist_id}/tracks",
            params={"market": self.settings.market, "limit": 50},
        )
        return [
            item["track"]
            for item in data.get("items") or []
            if item and item.get("track") and item["track"].get("id")
        ]
