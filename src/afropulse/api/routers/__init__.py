"""API routers."""

from fastapi import APIRouter

from afropulse.api.routers import buzz, health, selected_releases

api_router = APIRouter()
api_router.include_router(buzz.router)
api_router.include_router(selected_releases.router)

__all__ = ["api_router", "buzz", "health", "selected_releases"]
