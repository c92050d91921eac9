"""Application lifecycle: wire adapters and services at startup, clean up at shutdown.

Everything the request handlers need is built exactly once here and parked on
app.state. Nothing in the aggregation core is a module-level singleton except
the HTTP pool, and that one is closed on shutdown.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from afropulse.application.services import (
    BuzzAggregationService,
    BuzzRanker,
    MergeConfig,
    MergeEngine,
    ScoringEngine,
    SelectedReleasesService,
)
from afropulse.application.sources import (
    CatalogSourceAdapter,
    SocialSourceAdapter,
    WebPressSourceAdapter,
)
from afropulse.config import Settings, get_settings
from afropulse.domain.ports import ISourceAdapter
from afropulse.infrastructure.integrations import (
    HttpClientPool,
    MentionFeedClient,
    SpotifyCatalogClient,
)
from afropulse.infrastructure.observability import configure_logging
from afropulse.infrastructure.persistence import JsonRecordStore
from afropulse.infrastructure.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


# Hey future me, the catalog adapter is ALWAYS registered, even without credentials.
# It then fails per request with ConfigurationError, which shows up in the response's
# `errors` map - much easier to debug than an adapter that silently isn't there.
def build_adapters(settings: Settings) -> list[ISourceAdapter]:
    """Create one adapter per configured source."""
    limiter = RateLimiter.per_minute(settings.catalog.searches_per_minute, name="catalog")
    adapters: list[ISourceAdapter] = [
        CatalogSourceAdapter(
            SpotifyCatalogClient(settings.catalog, limiter),
            settings.catalog.search_queries,
            settings.catalog.playlist_ids,
        )
    ]
    if settings.social.enabled and settings.social.feed_urls:
        adapters.append(
            SocialSourceAdapter([MentionFeedClient(url) for url in settings.social.feed_urls])
        )
    if settings.web.enabled and settings.web.feed_urls:
        adapters.append(
            WebPressSourceAdapter([MentionFeedClient(url) for url in settings.web.feed_urls])
        )
    return adapters


def build_services(
    settings: Settings, adapters: list[ISourceAdapter] | None = None
) -> tuple[BuzzAggregationService, SelectedReleasesService]:
    """Build the aggregation service and the manual override service."""
    aggregation = settings.aggregation
    selected_releases = SelectedReleasesService(
        JsonRecordStore(settings.storage.selected_releases_path)
    )
    buzz_service = BuzzAggregationService(
        adapters if adapters is not None else build_adapters(settings),
        scoring=ScoringEngine(top_artists=aggregation.top_artists),
        merge=MergeEngine(
            MergeConfig(
                source_priority=aggregation.source_priority,
                register_aliases=aggregation.register_aliases,
            )
        ),
        ranker=BuzzRanker(
            max_results=aggregation.max_results,
            pad_with_fallback=aggregation.pad_with_fallback,
        ),
        selected_releases=selected_releases,
        adapter_timeout=aggregation.adapter_timeout_seconds,
    )
    return buzz_service, selected_releases


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Startup: logging, HTTP pool, adapters and services onto app.state.
    Shutdown: close the shared HTTP pool.
    """
    settings: Settings = getattr(app.state, "settings", None) or get_settings()
    app.state.settings = settings

    configure_logging(
        log_level=settings.observability.log_level,
        json_format=settings.observability.json_logs,
        app_name=settings.app_name,
    )
    logger.info("Starting application: %s", settings.app_name)

    try:
        await HttpClientPool.get_client(
            timeout=settings.http.timeout,
            max_keepalive=settings.http.max_keepalive,
            max_connections=settings.http.max_connections,
        )

        adapters = build_adapters(settings)
        buzz_service, selected_releases = build_services(settings, adapters)
        app.state.buzz_service = buzz_service
        app.state.selected_releases_service = selected_releases
        app.state.adapter_names = [adapter.name for adapter in adapters]

        if not settings.catalog.is_configured:
            logger.warning("Catalog credentials missing - catalog adapter will report errors")
        logger.info("Source adapters ready: %s", ", ".join(app.state.adapter_names))

        yield
    finally:
        logger.info("Shutting down application")
        await HttpClientPool.close()
