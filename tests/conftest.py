"""Pytest configuration shared across the suite."""

from typing import Any, Callable, Dict, Optional

import pytest


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO-powered tests to run against asyncio backend only."""
    return "asyncio"


def build_page(
    *,
    day: Optional[str] = None,
    python_status: Optional[str] = "Not started",
    llm_status: Optional[str] = "Not started",
    python_topic: Optional[str] = None,
    llm_topic: Optional[str] = None,
    date_field: str = "Day",
    page_id: str = "page",
) -> Dict[str, Any]:
    """Shape a journal row the way the Notion API returns it."""
    properties: Dict[str, Any] = {
        "Name": {"type": "title", "title": [{"plain_text": f"Entry {page_id}"}]},
    }
    if day is not None:
        properties[date_field] = {"type": "date", "date": {"start": day, "end": None}}
    if python_status is not None:
        properties["Python Status"] = {"type": "status", "status": {"name": python_status}}
    if llm_status is not None:
        properties["LLM Status"] = {"type": "select", "select": {"name": llm_status}}
    if python_topic is not None:
        properties["Python Topic"] = {
            "type": "rich_text",
            "rich_text": [{"plain_text": python_topic}],
        }
    if llm_topic is not None:
        properties["LLM Topic"] = {
            "type": "rich_text",
            "rich_text": [{"plain_text": llm_topic}],
        }
    return {"object": "page", "id": page_id, "properties": properties}


@pytest.fixture
def page_factory() -> Callable[..., Dict[str, Any]]:
    return build_page
