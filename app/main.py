"""
FastAPI application entrypoint for the learning progress dashboard API.
"""

from __future__ import annotations

from fastapi import FastAPI

from app.api.routes import router as api_router
from app.core.config import get_settings
from app.core.logging import configure_logging


def create_app() -> FastAPI:
    """Factory for the FastAPI application.

    Settings are resolved here so missing Notion credentials stop the
    process at start-up instead of failing each request.
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Learning Progress Analytics",
        version="0.1.0",
        description="Normalized Notion progress journal and derived analytics.",
    )
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
