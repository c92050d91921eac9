"""Buzz ranking endpoints.

Every call recomputes from live sources - there is no cache. A slow or dead
source shows up in `errors`, never as a failed request.
"""

from fastapi import APIRouter, Depends

from afropulse.api.dependencies import get_buzz_service
from afropulse.api.schemas import BuzzRankingResponse, SourceBuzzResponse
from afropulse.application.services import BuzzAggregationService

router = APIRouter(prefix="/buzz", tags=["Buzz"])


@router.get("/comprehensive", response_model=BuzzRankingResponse)
async def get_comprehensive_buzz(
    service: BuzzAggregationService = Depends(get_buzz_service),
) -> BuzzRankingResponse:
    """Catalog, social and web-press merged into one ranking."""
    return BuzzRankingResponse.from_result(await service.get_comprehensive_buzz())


@router.get("/buzzing", response_model=BuzzRankingResponse)
async def get_buzzing(
    service: BuzzAggregationService = Depends(get_buzz_service),
) -> BuzzRankingResponse:
    """Catalog-only ranking, replaced by the manual selection when one exists."""
    return BuzzRankingResponse.from_result(await service.get_buzzing())


@router.get("/social", response_model=SourceBuzzResponse)
async def get_social_buzz(
    service: BuzzAggregationService = Depends(get_buzz_service),
) -> SourceBuzzResponse:
    """Social-only ranking with the top hashtags."""
    return SourceBuzzResponse.from_result(await service.get_social_buzz())


@router.get("/web", response_model=SourceBuzzResponse)
async def get_web_buzz(
    service: BuzzAggregationService = Depends(get_buzz_service),
) -> SourceBuzzResponse:
    """Web-press-only ranking."""
    return SourceBuzzResponse.from_result(await service.get_web_buzz())
