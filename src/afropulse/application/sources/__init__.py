"""Source adapters: one per external source, all implementing ISourceAdapter."""

from afropulse.application.sources.catalog_source import CatalogSourceAdapter, map_catalog_track
from afropulse.application.sources.mention_sources import (
    MentionFeedSourceAdapter,
    SocialSourceAdapter,
    WebPressSourceAdapter,
)

__all__ = [
    "CatalogSourceAdapter",
    "MentionFeedSourceAdapter",
    "SocialSourceAdapter",
    "WebPressSourceAdapter",
    "map_catalog_track",
]
