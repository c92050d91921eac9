"""Selected releases (manual override) endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends

from afropulse.api.dependencies import get_selected_releases_service
from afropulse.api.schemas import (
    MessageResponse,
    SelectedReleasesRequest,
    SelectedReleasesResponse,
)
from afropulse.application.services import SelectedReleasesService

router = APIRouter(prefix="/selected-releases", tags=["Selected Releases"])

# Same cap the buzzing list uses by default
MAX_LISTED = 20


@router.get("", response_model=SelectedReleasesResponse)
async def list_selected_releases(
    service: SelectedReleasesService = Depends(get_selected_releases_service),
) -> SelectedReleasesResponse:
    """Stored selection, capped to 20 (`count` is the full stored size)."""
    songs = service.get_all()
    return SelectedReleasesResponse(
        songs=songs[:MAX_LISTED],
        count=len(songs),
        source="manual_selection" if songs else "empty",
        timestamp=datetime.now(UTC),
    )


@router.post("", response_model=MessageResponse)
async def replace_selected_releases(
    body: SelectedReleasesRequest,
    service: SelectedReleasesService = Depends(get_selected_releases_service),
) -> MessageResponse:
    """Replace the whole selection (defaults are filled in per song)."""
    stored = service.replace(body.songs)
    return MessageResponse(
        message="Selected releases updated successfully",
        count=len(stored),
        timestamp=datetime.now(UTC),
    )


@router.delete("", response_model=MessageResponse)
async def clear_selected_releases(
    service: SelectedReleasesService = Depends(get_selected_releases_service),
) -> MessageResponse:
    service.clear()
    return MessageResponse(
        message="Selected releases cleared successfully",
        timestamp=datetime.now(UTC),
    )
