"""Service layer exports."""

from .progress_ingestion import ProgressIngestionService

__all__ = [
    "ProgressIngestionService",
]
