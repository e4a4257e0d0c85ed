"""Expose constructed client wrappers."""

from .notion import NotionClient, SourceUnavailableError

__all__ = [
    "NotionClient",
    "SourceUnavailableError",
]
