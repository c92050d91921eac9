"""Dependency injection for API endpoints."""

from typing import cast

from fastapi import HTTPException, Request

from afropulse.application.services import BuzzAggregationService, SelectedReleasesService


# Hey future me, both services are built ONCE in the lifespan handler and parked on
# app.state. If they're missing, startup went wrong - answer 503 instead of crashing.
# Tests swap them via app.dependency_overrides.
def get_buzz_service(request: Request) -> BuzzAggregationService:
    """Get the aggregation service from app state.

    Raises:
        HTTPException: 503 if the service is not initialized
    """
    if not hasattr(request.app.state, "buzz_service"):
        raise HTTPException(status_code=503, detail="Buzz service not initialized")
    return cast(BuzzAggregationService, request.app.state.buzz_service)


def get_selected_releases_service(request: Request) -> SelectedReleasesService:
    """Get the selected releases service from app state.

    Raises:
        HTTPException: 503 if the service is not initialized
    """
    if not hasattr(request.app.state, "selected_releases_service"):
        raise HTTPException(status_code=503, detail="Selected releases service not initialized")
    return cast(SelectedReleasesService, request.app.state.selected_releases_service)
