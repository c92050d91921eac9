"""FastAPI application factory and uvicorn entry point."""

import uvicorn
from fastapi import FastAPI

from afropulse import __version__
from afropulse.api.exception_handlers import register_exception_handlers
from afropulse.api.routers import api_router, health
from afropulse.config import Settings, get_settings
from afropulse.infrastructure.lifecycle import lifespan
from afropulse.infrastructure.observability.middleware import RequestLoggingMiddleware


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the FastAPI app.

    Args:
        settings: Optional settings (tests); defaults to get_settings() at startup
    """
    app = FastAPI(
        title="Afropulse",
        description="Multi-source buzz aggregation and ranking for African music",
        version=__version__,
        lifespan=lifespan,
    )
    if settings is not None:
        app.state.settings = settings

    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)

    app.include_router(api_router, prefix="/api")
    app.include_router(health.router)
    return app


app = create_app()


def run() -> None:
    """Console entry point: `afropulse`."""
    settings = get_settings()
    uvicorn.run(
        "afropulse.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.observability.log_level.lower(),
    )


if __name__ == "__main__":
    run()
