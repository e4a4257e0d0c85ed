"""
FastAPI routes exposing the normalized progress journal and its analytics.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from enum import Enum
from http import HTTPStatus
from typing import Annotated, Any, Awaitable, Dict, Optional, Type, TypeVar
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.clients import SourceUnavailableError
from app.dependencies import (
    get_app_settings,
    get_notion_client,
    get_progress_ingestion_service,
)
from app.schemas import (
    AnalyticsResponse,
    DateRange,
    ErrorDetail,
    ErrorResponse,
    ProgressResponse,
    TopicFocus,
    WeekDetailsResponse,
)
from app.services.progress_analytics import (
    DEFAULT_GOAL_PER_WEEK,
    MAX_GOAL_PER_WEEK,
    build_snapshot,
    filter_records,
    week_details,
)

router = APIRouter()
logger = logging.getLogger(__name__)

_NO_STORE = {"Cache-Control": "no-store"}
_DEBUG_SEARCH_PAGES = 5

E = TypeVar("E", bound=Enum)


class InvalidQueryError(ValueError):
    """Raised when a query parameter fails validation."""


def _json(model: BaseModel, status_code: int = HTTPStatus.OK) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=model.model_dump(mode="json", by_alias=True, exclude_none=True),
        headers=_NO_STORE,
    )


def _error(status_code: int, code: str, message: str) -> JSONResponse:
    return _json(ErrorResponse(error=ErrorDetail(code=code, message=message)), status_code)


def _bad_query(exc: InvalidQueryError) -> JSONResponse:
    return _error(HTTPStatus.BAD_REQUEST, "BAD_QUERY", str(exc) or "Invalid query params")


def _source_failure(exc: SourceUnavailableError) -> JSONResponse:
    logger.error("notion.progress.api.error: %s", exc, exc_info=exc)
    return _error(HTTPStatus.INTERNAL_SERVER_ERROR, "SERVER_ERROR", "Failed to fetch Notion data")


def _database_override(db: Optional[str]) -> Optional[str]:
    if db is None:
        return None
    cleaned = db.strip()
    if not cleaned:
        raise InvalidQueryError("Query parameter 'db' must not be empty.")
    if not cleaned.isprintable():
        raise InvalidQueryError("Query parameter 'db' contains non-printable characters.")
    return cleaned


def _parse_choice(enum_cls: Type[E], raw: Optional[str], default: E, name: str) -> E:
    if raw is None:
        return default
    try:
        return enum_cls(raw.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidQueryError(f"Query parameter '{name}' must be one of: {allowed}.") from exc


def _parse_goal(raw: Optional[str]) -> int:
    if raw is None:
        return DEFAULT_GOAL_PER_WEEK
    try:
        goal = int(raw)
    except ValueError as exc:
        raise InvalidQueryError("Query parameter 'goal' must be an integer.") from exc
    if not 0 <= goal <= MAX_GOAL_PER_WEEK:
        raise InvalidQueryError(
            f"Query parameter 'goal' must be between 0 and {MAX_GOAL_PER_WEEK}."
        )
    return goal


def _parse_week_start(raw: str) -> datetime:
    try:
        day = date.fromisoformat(raw)
    except ValueError as exc:
        raise InvalidQueryError("Week start must be a YYYY-MM-DD date.") from exc
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


def _parse_zone(raw: Optional[str]) -> Optional[ZoneInfo]:
    if not raw:
        return None
    try:
        return ZoneInfo(raw)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidQueryError(f"Unknown timezone '{raw}'.") from exc


_DB_QUERY = Query(
    default=None,
    description="Optional Notion database identifier overriding the configured one.",
)


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get("/notion/progress", response_model=ProgressResponse)
async def get_progress(
    service: Annotated[Any, Depends(get_progress_ingestion_service)],
    db: Optional[str] = _DB_QUERY,
) -> JSONResponse:
    """Return every journal row normalized into progress records."""
    try:
        database_id = _database_override(db)
    except InvalidQueryError as exc:
        return _bad_query(exc)

    try:
        records = await service.ingest(database_id)
    except SourceUnavailableError as exc:
        return _source_failure(exc)

    return _json(ProgressResponse(data=records))


@router.get("/notion/progress/analytics", response_model=AnalyticsResponse)
async def get_progress_analytics(
    service: Annotated[Any, Depends(get_progress_ingestion_service)],
    db: Optional[str] = _DB_QUERY,
    date_range: Optional[str] = Query(
        default=None, alias="range", description="One of all, 4w, 12w, ytd."
    ),
    focus: Optional[str] = Query(default=None, description="One of both, python, llm."),
    goal: Optional[str] = Query(
        default=None, description="Target number of done days per week (0-14)."
    ),
) -> JSONResponse:
    """Compute KPIs, streak, velocity, burn-up and topic aggregates."""
    try:
        database_id = _database_override(db)
        selected_range = _parse_choice(DateRange, date_range, DateRange.ALL, "range")
        selected_focus = _parse_choice(TopicFocus, focus, TopicFocus.BOTH, "focus")
        goal_per_week = _parse_goal(goal)
    except InvalidQueryError as exc:
        return _bad_query(exc)

    try:
        records = await service.ingest(database_id)
    except SourceUnavailableError as exc:
        return _source_failure(exc)

    snapshot = build_snapshot(
        records,
        date_range=selected_range,
        focus=selected_focus,
        goal_per_week=goal_per_week,
    )
    return _json(AnalyticsResponse(data=snapshot))


@router.get("/notion/progress/weeks/{week_start}", response_model=WeekDetailsResponse)
async def get_week_details(
    week_start: str,
    service: Annotated[Any, Depends(get_progress_ingestion_service)],
    db: Optional[str] = _DB_QUERY,
    date_range: Optional[str] = Query(default=None, alias="range"),
    tz: Optional[str] = Query(
        default=None, description="IANA timezone used only for the week label."
    ),
) -> JSONResponse:
    """List the records of one ISO week, oldest first."""
    try:
        database_id = _database_override(db)
        start = _parse_week_start(week_start)
        selected_range = _parse_choice(DateRange, date_range, DateRange.ALL, "range")
        zone = _parse_zone(tz)
    except InvalidQueryError as exc:
        return _bad_query(exc)

    try:
        records = await service.ingest(database_id)
    except SourceUnavailableError as exc:
        return _source_failure(exc)

    details = week_details(filter_records(records, selected_range), start, zone)
    return _json(WeekDetailsResponse(data=details))


async def _inline_errors(call: Awaitable[Dict[str, Any]]) -> Dict[str, Any]:
    try:
        return await call
    except SourceUnavailableError as exc:
        return {"error": str(exc)}


@router.get("/notion/debug")
async def notion_debug(
    notion: Annotated[Any, Depends(get_notion_client)],
    settings: Annotated[Any, Depends(get_app_settings)],
) -> JSONResponse:
    """Report which integration is connected and which databases it can see."""
    user = await _inline_errors(notion.whoami())

    databases: list[dict] = []
    cursor: str | None = None
    try:
        for _ in range(_DEBUG_SEARCH_PAGES):
            page = await notion.search_databases(start_cursor=cursor, page_size=25)
            databases.extend(page.get("results") or [])
            cursor = page.get("next_cursor")
            if not page.get("has_more") or not cursor:
                break
    except SourceUnavailableError as exc:
        logger.error("notion.debug.search.error: %s", exc, exc_info=exc)
        return JSONResponse(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            content={"ok": False, "error": str(exc)},
            headers=_NO_STORE,
        )

    database_id = settings.notion.database_id
    probe = await _inline_errors(notion.retrieve_database(database_id=database_id))

    return JSONResponse(
        content={
            "ok": True,
            "user": user,
            "databasesFound": [
                {"id": item.get("id"), "title": _database_title(item)} for item in databases
            ],
            "probeDatabaseId": database_id,
            "probeResult": probe,
        },
        headers=_NO_STORE,
    )


def _database_title(item: Dict[str, Any]) -> str:
    title = item.get("title") or []
    if title and isinstance(title[0], dict) and title[0].get("plain_text"):
        return title[0]["plain_text"]
    return "(untitled)"


__all__ = ["router"]
