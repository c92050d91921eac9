"""External service integrations."""

from afropulse.infrastructure.integrations.http_pool import HttpClientPool
from afropulse.infrastructure.integrations.mention_feed_client import MentionFeedClient
from afropulse.infrastructure.integrations.spotify_client import SpotifyCatalogClient

__all__ = ["HttpClientPool", "MentionFeedClient", "SpotifyCatalogClient"]
