"""
Pull the full progress journal from Notion and normalize every row.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from app.clients import NotionClient, SourceUnavailableError
from app.schemas import ProgressRecord
from app.services.progress_mapping import DEFAULT_FIELDS, FieldNames, map_page

logger = logging.getLogger(__name__)


class ProgressIngestionService:
    """Fetch every journal page sequentially and map rows to canonical records."""

    def __init__(self, notion_client: NotionClient, fields: FieldNames = DEFAULT_FIELDS) -> None:
        self._notion = notion_client
        self._fields = fields

    async def ingest(self, database_id: str | None = None) -> List[ProgressRecord]:
        """Return every row of the database, or raise ``SourceUnavailableError``.

        Rows are requested in ascending order of the primary date column;
        Notion ignores the hint when that column does not exist.
        """
        target = database_id or self._notion.default_database_id
        rows = await self._fetch_all_rows(target)
        records = [map_page(row, self._fields) for row in rows]
        logger.info("Ingested %d progress records from database %s", len(records), target)
        return records

    async def _fetch_all_rows(self, database_id: str) -> List[Dict[str, Any]]:
        rows: List[Dict[str, Any]] = []
        cursor: str | None = None
        page_number = 0
        sorts = [{"property": self._fields.sort_property, "direction": "ascending"}]

        while True:
            page_number += 1
            try:
                response = await self._notion.query_database(
                    database_id=database_id,
                    start_cursor=cursor,
                    page_size=self._notion.page_size,
                    sorts=sorts,
                )
            except SourceUnavailableError as exc:
                logger.error(
                    "Aborting ingestion of %s at page %d: %s", database_id, page_number, exc
                )
                raise SourceUnavailableError(
                    f"Failed to fetch page {page_number} of database {database_id}",
                    status_code=exc.status_code,
                ) from exc

            results = response.get("results") or []
            rows.extend(row for row in results if isinstance(row, dict))
            logger.info("Fetched page %d with %d rows", page_number, len(results))

            cursor = response.get("next_cursor")
            if not response.get("has_more") or not cursor:
                break

        return rows


__all__ = ["ProgressIngestionService"]
