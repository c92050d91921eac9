"""Configuration module for Afropulse."""

from .settings import (
    AggregationSettings,
    CatalogSettings,
    MentionFeedSettings,
    Settings,
    get_settings,
)

__all__ = [
    "AggregationSettings",
    "CatalogSettings",
    "MentionFeedSettings",
    "Settings",
    "get_settings",
]
