try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import itertools
from datetime import datetime, timezone

import pytest

from app.schemas import ProgressStatus
from app.services.progress_mapping import (
    as_plain_text,
    derive_overall_status,
    first_existing_property,
    map_page,
    progress_from_status,
)

STATUSES = ["Not started", "In progress", "Completed", "Skipped", "", None, "Blocked"]


@pytest.mark.parametrize(
    ("prop", "expected"),
    [
        ({"type": "title", "title": [{"plain_text": "Day "}, {"plain_text": "12"}]}, "Day 12"),
        ({"type": "title", "title": []}, None),
        ({"type": "rich_text", "rich_text": [{"plain_text": "Decorators"}]}, "Decorators"),
        ({"type": "select", "select": {"name": "Completed"}}, "Completed"),
        ({"type": "select", "select": None}, None),
        ({"type": "status", "status": {"name": "In progress"}}, "In progress"),
        ({"type": "number", "number": 3}, "3"),
        ({"type": "number", "number": 3.0}, "3"),
        ({"type": "number", "number": 2.5}, "2.5"),
        ({"type": "number", "number": None}, None),
        ({"type": "date", "date": {"start": "2024-03-05", "end": None}}, "2024-03-05"),
        ({"type": "date", "date": None}, None),
        (
            {"type": "multi_select", "multi_select": [{"name": "RAG"}, {"name": "Agents"}]},
            "RAG, Agents",
        ),
        ({"type": "multi_select", "multi_select": []}, None),
        ({"type": "formula", "formula": {"type": "string", "string": "Completed"}}, "Completed"),
        ({"type": "formula", "formula": {"type": "number", "number": 7}}, "7"),
        ({"type": "formula", "formula": {"type": "boolean", "boolean": True}}, "true"),
        ({"type": "formula", "formula": {"type": "boolean", "boolean": False}}, "false"),
        (
            {"type": "formula", "formula": {"type": "date", "date": {"start": "2024-01-02"}}},
            "2024-01-02",
        ),
        ({"type": "formula", "formula": {"type": "unheard_of"}}, None),
        ({"type": "formula", "formula": None}, None),
    ],
)
def test_as_plain_text_by_kind(prop, expected):
    assert as_plain_text(prop) == expected


@pytest.mark.parametrize(
    "prop",
    [
        None,
        {},
        "Completed",
        {"type": "people", "people": [{"id": "u1"}]},
        {"type": "select", "select": "not-a-dict"},
        {"no_type": True},
    ],
)
def test_as_plain_text_never_raises_on_unusable_values(prop):
    assert as_plain_text(prop) is None


def test_first_existing_property_prefers_earlier_candidates():
    props = {"Date": {"type": "date"}, "Day": {"type": "title"}}
    assert first_existing_property(props, ["Day", "Date"]) == {"type": "title"}
    assert first_existing_property({"Date": {"type": "date"}}, ["Day", "Date"]) == {"type": "date"}
    assert first_existing_property({}, ["Day", "Date"]) is None


@pytest.mark.parametrize(
    ("status", "expected"),
    [("Completed", 100), ("  completed  ", 100), ("COMPLETED", 100), ("In progress", 0), ("", 0), (None, 0)],
)
def test_progress_from_status(status, expected):
    assert progress_from_status(status) == expected


@pytest.mark.parametrize(
    ("python_status", "llm_status", "expected"),
    [
        ("Completed", "Completed", ProgressStatus.DONE),
        ("Completed", "In progress", ProgressStatus.IN_PROGRESS),
        ("In progress", "Skipped", ProgressStatus.IN_PROGRESS),
        ("Skipped", "In progress", ProgressStatus.IN_PROGRESS),
        ("Skipped", "Not started", ProgressStatus.SKIPPED),
        ("Skipped", "Skipped", ProgressStatus.SKIPPED),
        ("Skipped", "Completed", ProgressStatus.NOT_STARTED),
        ("Completed", "Not started", ProgressStatus.NOT_STARTED),
        ("Not started", "Not started", ProgressStatus.NOT_STARTED),
        (None, None, ProgressStatus.NOT_STARTED),
    ],
)
def test_derive_overall_status_tie_break_order(python_status, llm_status, expected):
    assert derive_overall_status(python_status, llm_status) is expected


@pytest.mark.parametrize(("python_status", "llm_status"), itertools.product(STATUSES, STATUSES))
def test_overall_pct_requires_both_topics(page_factory, python_status, llm_status):
    record = map_page(page_factory(python_status=python_status, llm_status=llm_status))
    both = record.python_pct == 100 and record.llm_pct == 100
    assert (record.overall_pct == 100) is both
    assert (record.status is ProgressStatus.DONE) is both


def test_map_page_builds_canonical_record(page_factory):
    page = page_factory(
        day="2024-03-05",
        python_status="Completed",
        llm_status="In progress",
        python_topic="Generators",
        llm_topic="Tokenizers",
    )

    record = map_page(page)

    assert record.date == datetime(2024, 3, 5, tzinfo=timezone.utc)
    assert record.status is ProgressStatus.IN_PROGRESS
    assert record.python_topic == "Generators"
    assert record.llm_topic == "Tokenizers"
    assert (record.python_pct, record.llm_pct, record.overall_pct) == (100, 0, 0)


def test_map_page_falls_back_to_date_column(page_factory):
    record = map_page(page_factory(day="2024-04-01", date_field="Date"))
    assert record.date == datetime(2024, 4, 1, tzinfo=timezone.utc)


def test_map_page_without_date_leaves_it_absent(page_factory):
    record = map_page(page_factory(day=None))
    assert record.date is None


def test_map_page_with_unparseable_date_uses_today(page_factory):
    record = map_page(page_factory(day="someday"))
    today = datetime.now(timezone.utc)
    assert record.date is not None
    assert record.date.hour == 0
    assert abs((today - record.date).days) <= 1


def test_map_page_tolerates_missing_properties():
    record = map_page({"id": "empty"})
    assert record.date is None
    assert record.status is ProgressStatus.NOT_STARTED
    assert (record.python_pct, record.llm_pct, record.overall_pct) == (0, 0, 0)


def test_map_page_reads_formula_statuses():
    page = {
        "properties": {
            "Day": {"type": "formula", "formula": {"type": "string", "string": "Mon, Jan 01"}},
            "Python Status": {"type": "formula", "formula": {"type": "string", "string": "Completed"}},
            "LLM Status": {"type": "formula", "formula": {"type": "string", "string": "completed"}},
        }
    }

    record = map_page(page)

    assert record.status is ProgressStatus.DONE
    assert record.overall_pct == 100
    assert (record.date.month, record.date.day) == (1, 1)
