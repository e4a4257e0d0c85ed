"""Thin async wrapper over the Notion REST API used to read the progress journal."""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from app.core.config import NotionSettings
from app.utils.http import RetryConfig, request_with_retry


class SourceUnavailableError(Exception):
    """Raised when the Notion API cannot be reached or rejects a request."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _segment(value: str) -> str:
    return quote(value, safe="")


class NotionClient:
    """Query databases, pages and integration metadata from Notion."""

    def __init__(
        self,
        settings: NotionSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        retry_config: RetryConfig | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._retry_config = retry_config or RetryConfig()

    @property
    def default_database_id(self) -> str:
        return self._settings.database_id

    @property
    def page_size(self) -> int:
        return self._settings.page_size

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._settings.api_key}",
            "Notion-Version": self._settings.api_version,
            "Content-Type": "application/json",
        }

    async def _request(
        self, method: str, path: str, *, json: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        async with httpx.AsyncClient(
            base_url=self._settings.base_url,
            headers=self._headers(),
            timeout=self._settings.timeout_seconds,
            transport=self._transport,
        ) as client:
            try:
                response = await request_with_retry(
                    client.request,
                    method,
                    path,
                    json=json,
                    retry_config=self._retry_config,
                )
            except httpx.HTTPStatusError as exc:
                raise SourceUnavailableError(
                    f"Notion {method} {path} failed with HTTP {exc.response.status_code}",
                    status_code=exc.response.status_code,
                ) from exc
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                raise SourceUnavailableError(
                    f"Notion {method} {path} failed: {exc}"
                ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise SourceUnavailableError(
                f"Notion {method} {path} returned a non-JSON body"
            ) from exc
        if not isinstance(payload, dict):
            raise SourceUnavailableError(
                f"Notion {method} {path} returned an unexpected payload"
            )
        return payload

    async def query_database(
        self,
        *,
        database_id: str,
        start_cursor: str | None = None,
        page_size: int | None = None,
        sorts: List[Dict[str, str]] | None = None,
    ) -> Dict[str, Any]:
        """Fetch one page of rows; returns ``results``, ``has_more`` and ``next_cursor``."""
        body: Dict[str, Any] = {"page_size": page_size or self._settings.page_size}
        if start_cursor:
            body["start_cursor"] = start_cursor
        if sorts:
            body["sorts"] = sorts
        path = f"/databases/{_segment(database_id)}/query"
        return await self._request("POST", path, json=body)

    async def retrieve_database(self, *, database_id: str) -> Dict[str, Any]:
        """Return the schema and metadata of a database."""
        return await self._request("GET", f"/databases/{_segment(database_id)}")

    async def whoami(self) -> Dict[str, Any]:
        """Return the bot user the integration token belongs to."""
        return await self._request("GET", "/users/me")

    async def search_databases(
        self, *, start_cursor: str | None = None, page_size: int = 25
    ) -> Dict[str, Any]:
        """List databases shared with the integration, one page at a time."""
        body: Dict[str, Any] = {
            "page_size": page_size,
            "filter": {"property": "object", "value": "database"},
        }
        if start_cursor:
            body["start_cursor"] = start_cursor
        return await self._request("POST", "/search", json=body)


__all__ = ["NotionClient", "SourceUnavailableError"]
