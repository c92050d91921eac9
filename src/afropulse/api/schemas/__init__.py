"""API request/response schemas."""

from afropulse.api.schemas.buzz import (
    BuzzRankingResponse,
    BuzzSongSchema,
    MessageResponse,
    SelectedReleasesRequest,
    SelectedReleasesResponse,
    SourceBuzzResponse,
)

__all__ = [
    "BuzzRankingResponse",
    "BuzzSongSchema",
    "MessageResponse",
    "SelectedReleasesRequest",
    "SelectedReleasesResponse",
    "SourceBuzzResponse",
]
