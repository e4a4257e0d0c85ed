"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache

from app.clients import NotionClient
from app.core.config import AppSettings, get_settings
from app.services import ProgressIngestionService


@lru_cache()
def _settings() -> AppSettings:
    """Internal helper to cache settings for client factories."""
    return get_settings()


def get_app_settings() -> AppSettings:
    """FastAPI dependency returning application settings."""
    return _settings()


@lru_cache()
def get_notion_client() -> NotionClient:
    """Provide a singleton Notion API client."""
    return NotionClient(_settings().notion)


def get_progress_ingestion_service() -> ProgressIngestionService:
    """Build an ingestion service reading the configured journal database."""
    return ProgressIngestionService(get_notion_client())


__all__ = [
    "get_app_settings",
    "get_notion_client",
    "get_progress_ingestion_service",
]
