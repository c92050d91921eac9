"""HTTP client for social / web-press mention feeds.

Hey future me - mention feeds are "dumb" JSON endpoints returning arrays of
{artist, song, metric...} records. Some return the bare array, others wrap it
(`{"socialBuzz": [...]}`, `{"buzzData": [...]}`). We unwrap the known envelopes
and hand raw dicts to the adapter - mapping to DTOs happens there.
"""

import logging
from typing import Any

import httpx

from afropulse.domain.exceptions import ExternalServiceError
from afropulse.infrastructure.integrations.http_pool import HttpClientPool

logger = logging.getLogger(__name__)

ENVELOPE_KEYS: tuple[str, ...] = (
    "records",
    "items",
    "data",
    "mentions",
    "socialBuzz",
    "buzzData",
    "webBuzz",
)


def unwrap_records(payload: Any) -> list[dict[str, Any]]:
    """Pull the record array out of a feed payload.

    Args:
        payload: Decoded JSON (list or enveloping dict)

    Returns:
        Only the dict items; anything else in the array is skipped

    Raises:
        ExternalServiceError: If no record array can be found
    """
    if isinstance(payload, dict):
        for key in ENVELOPE_KEYS:
            if isinstance(payload.get(key), list):
                payload = payload[key]
                break
        else:
            raise ExternalServiceError("Feed payload contains no record array")

    if not isinstance(payload, list):
        raise ExternalServiceError("Feed payload is not a list of records")

    records = [item for item in payload if isinstance(item, dict)]
    skipped = len(payload) - len(records)
    if skipped:
        logger.debug("Skipped %d non-object feed items", skipped)
    return records


class MentionFeedClient:
    """Fetches record arrays from a single mention feed URL."""

    def __init__(self, url: str, client: httpx.AsyncClient | None = None) -> None:
        """
        Args:
            url: Feed endpoint
            client: Optional pre-built HTTP client (tests); defaults to the shared pool
        """
        self.url = url
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is not None:
            return self._client
        return await HttpClientPool.get_client()

    async def fetch(self) -> list[dict[str, Any]]:
        """GET the feed and return its records.

        Raises:
            ExternalServiceError: On transport error, non-success status or bad JSON
        """
        client = await self._get_client()
        try:
            response = await client.get(self.url, headers={"Accept": "application/json"})
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Feed request to {self.url} failed: {e}") from e

        if response.status_code >= 400:
            raise ExternalServiceError(
                f"Feed {self.url} returned {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ExternalServiceError(f"Feed {self.url} returned invalid JSON") from e

        return unwrap_records(payload)
