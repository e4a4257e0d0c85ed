"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_app_settings,
    get_notion_client,
    get_progress_ingestion_service,
)

__all__ = [
    "get_app_settings",
    "get_notion_client",
    "get_progress_ingestion_service",
]
