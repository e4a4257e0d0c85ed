try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from datetime import datetime, timezone

import httpx
import pytest

from app.clients import NotionClient, SourceUnavailableError
from app.core.config import NotionSettings
from app.main import app
from app.schemas import ProgressRecord, ProgressStatus
from app.services import ProgressIngestionService
from app.utils.http import RetryConfig

pytestmark = pytest.mark.anyio

UTC = timezone.utc


def _sample_records() -> list[ProgressRecord]:
    return [
        ProgressRecord(
            date=datetime(2024, 3, 4, tzinfo=UTC),
            status=ProgressStatus.DONE,
            python_topic="Decorators",
            llm_topic="Embeddings",
            python_pct=100,
            llm_pct=100,
            overall_pct=100,
        ),
        ProgressRecord(
            date=datetime(2024, 3, 6, tzinfo=UTC),
            status=ProgressStatus.IN_PROGRESS,
            python_pct=100,
        ),
        ProgressRecord(date=None, status=ProgressStatus.NOT_STARTED),
    ]


class RecordingIngestionService:
    def __init__(self, records=None, error: Exception | None = None) -> None:
        self.records = records if records is not None else _sample_records()
        self.error = error
        self.database_ids: list[str | None] = []

    async def ingest(self, database_id: str | None = None):
        self.database_ids.append(database_id)
        if self.error is not None:
            raise self.error
        return self.records


class StubNotionClient:
    def __init__(self, probe_error: bool = False) -> None:
        self.probe_error = probe_error
        self.search_cursors: list[str | None] = []

    async def whoami(self):
        return {"object": "user", "id": "bot-1", "type": "bot"}

    async def search_databases(self, *, start_cursor=None, page_size=25):
        self.search_cursors.append(start_cursor)
        if start_cursor is None:
            return {
                "results": [{"id": "db-a", "title": [{"plain_text": "Learning Log"}]}],
                "has_more": True,
                "next_cursor": "next",
            }
        return {"results": [{"id": "db-b", "title": []}], "has_more": False, "next_cursor": None}

    async def retrieve_database(self, *, database_id):
        if self.probe_error:
            raise SourceUnavailableError("Notion GET failed with HTTP 404", status_code=404)
        return {"id": database_id, "object": "database"}


@pytest.fixture()
def ingestion():
    from app import dependencies

    service = RecordingIngestionService()
    app.dependency_overrides.clear()
    app.dependency_overrides[dependencies.get_progress_ingestion_service] = lambda: service
    yield service
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(ingestion):
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
    ) as test_client:
        yield test_client


async def test_healthcheck(client):
    response = await client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_progress_returns_camel_case_records(client, ingestion):
    response = await client.get("/api/notion/progress")

    assert response.status_code == 200
    assert response.headers["cache-control"] == "no-store"
    body = response.json()
    assert body["success"] is True
    first, second, undated = body["data"]
    assert first["date"].startswith("2024-03-04T00:00:00")
    assert first["status"] == "Done"
    assert first["pythonTopic"] == "Decorators"
    assert (first["pythonPct"], first["llmPct"], first["overallPct"]) == (100, 100, 100)
    assert second["status"] == "In Progress"
    assert "date" not in undated
    assert ingestion.database_ids == [None]


async def test_progress_passes_database_override(client, ingestion):
    response = await client.get("/api/notion/progress", params={"db": "alt-db"})

    assert response.status_code == 200
    assert ingestion.database_ids == ["alt-db"]


@pytest.mark.parametrize("db", ["  ", "abc\x00def"])
async def test_progress_rejects_malformed_database_override(client, ingestion, db):
    response = await client.get("/api/notion/progress", params={"db": db})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "BAD_QUERY"
    assert ingestion.database_ids == []


async def test_progress_override_stays_inside_database_path(client):
    from app import dependencies

    paths: list[bytes] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.raw_path)
        return httpx.Response(200, json={"results": [], "has_more": False})

    notion = NotionClient(
        NotionSettings(),
        transport=httpx.MockTransport(handler),
        retry_config=RetryConfig(attempts=1, backoff_seconds=0),
    )
    app.dependency_overrides[dependencies.get_progress_ingestion_service] = (
        lambda: ProgressIngestionService(notion)
    )

    response = await client.get("/api/notion/progress", params={"db": "x/../../pages/abc?"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "data": []}
    assert paths == [b"/v1/databases/x%2F..%2F..%2Fpages%2Fabc%3F/query"]


async def test_progress_reports_source_failure(client, ingestion):
    ingestion.error = SourceUnavailableError("Failed to fetch page 2 of database x")

    response = await client.get("/api/notion/progress")

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": {"code": "SERVER_ERROR", "message": "Failed to fetch Notion data"},
    }


async def test_analytics_snapshot(client):
    response = await client.get(
        "/api/notion/progress/analytics", params={"focus": "python", "goal": "1"}
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["kpis"] == {"total": 3, "done": 2, "open": 1, "completion": 67, "streak": 1}
    assert data["dateRange"] == "all"
    assert data["goalPerWeek"] == 1
    assert [avg["topic"] for avg in data["topicAverages"]] == ["Python"]
    assert data["weeklyVelocity"][0]["doneCount"] == 2
    assert data["weeklyVelocity"][0]["meetsGoal"] is True
    assert data["burnup"][-1]["cumulativeTotal"] == 2


@pytest.mark.parametrize(
    "params",
    [{"range": "6w"}, {"focus": "rust"}, {"goal": "15"}, {"goal": "many"}, {"db": ""}],
)
async def test_analytics_rejects_invalid_parameters(client, params):
    response = await client.get("/api/notion/progress/analytics", params=params)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "BAD_QUERY"


async def test_analytics_reports_source_failure(client, ingestion):
    ingestion.error = SourceUnavailableError("boom")

    response = await client.get("/api/notion/progress/analytics")

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "SERVER_ERROR"


async def test_week_details_floors_to_monday(client):
    response = await client.get("/api/notion/progress/weeks/2024-03-07")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["weekStart"].startswith("2024-03-04T00:00:00")
    assert data["label"] == "Mar 04, 2024 — Mar 10, 2024"
    assert [record["status"] for record in data["records"]] == ["Done", "In Progress"]


async def test_week_details_label_uses_viewer_timezone(client):
    response = await client.get(
        "/api/notion/progress/weeks/2024-03-04", params={"tz": "America/New_York"}
    )

    assert response.status_code == 200
    assert response.json()["data"]["label"] == "Mar 03, 2024 — Mar 09, 2024"


@pytest.mark.parametrize(
    ("path", "params"),
    [
        ("/api/notion/progress/weeks/last-week", {}),
        ("/api/notion/progress/weeks/2024-03-04", {"tz": "Mars/Olympus_Mons"}),
    ],
)
async def test_week_details_rejects_bad_input(client, path, params):
    response = await client.get(path, params=params)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "BAD_QUERY"


async def test_debug_lists_databases_and_probe(client):
    from app import dependencies

    notion = StubNotionClient()
    app.dependency_overrides[dependencies.get_notion_client] = lambda: notion

    response = await client.get("/api/notion/debug")

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["user"]["id"] == "bot-1"
    assert body["databasesFound"] == [
        {"id": "db-a", "title": "Learning Log"},
        {"id": "db-b", "title": "(untitled)"},
    ]
    assert body["probeDatabaseId"] == "test-database"
    assert body["probeResult"] == {"id": "test-database", "object": "database"}
    assert notion.search_cursors == [None, "next"]


async def test_debug_reports_probe_failure_inline(client):
    from app import dependencies

    app.dependency_overrides[dependencies.get_notion_client] = lambda: StubNotionClient(
        probe_error=True
    )

    response = await client.get("/api/notion/debug")

    assert response.status_code == 200
    assert "HTTP 404" in response.json()["probeResult"]["error"]
