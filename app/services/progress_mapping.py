"""
Map raw Notion journal rows onto :class:`ProgressRecord`.

Journal schema:

* ``Python Status`` / ``LLM Status``: select or status with the options
  "Not started", "In progress", "Completed", "Skipped".
* ``Day`` (date), with ``Date`` accepted as a fallback column name.
* Optional ``Python Topic`` / ``LLM Topic`` text columns.

Progress is all-or-nothing: a topic is 100 when its status is "Completed"
and 0 otherwise; the overall percentage is 100 only when both topics are.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from app.schemas.notion import (
    DateProperty,
    FormulaBoolean,
    FormulaDate,
    FormulaNumber,
    FormulaProperty,
    FormulaString,
    MultiSelectProperty,
    NumberProperty,
    PropertyValue,
    RichTextProperty,
    SelectProperty,
    StatusProperty,
    TitleProperty,
    parse_property,
)
from app.schemas.progress import ProgressRecord, ProgressStatus
from app.utils.dates import normalize_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldNames:
    """Column names read from the journal database, in lookup order."""

    date_candidates: tuple[str, ...] = ("Day", "Date")
    python_status: str = "Python Status"
    llm_status: str = "LLM Status"
    python_topic: str = "Python Topic"
    llm_topic: str = "LLM Topic"

    @property
    def sort_property(self) -> str:
        return self.date_candidates[0]


DEFAULT_FIELDS = FieldNames()


def first_existing_property(
    properties: Mapping[str, Any], candidates: Sequence[str]
) -> Optional[Any]:
    """Return the first candidate present in ``properties``."""
    for name in candidates:
        value = properties.get(name)
        if value:
            return value
    return None


def _number_text(value: int | float | None) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _formula_text(prop: FormulaProperty) -> Optional[str]:
    result = prop.formula
    if isinstance(result, FormulaString):
        return result.string
    if isinstance(result, FormulaNumber):
        return _number_text(result.number)
    if isinstance(result, FormulaBoolean):
        return None if result.boolean is None else str(result.boolean).lower()
    if isinstance(result, FormulaDate):
        return result.date.start if result.date else None
    return None


def as_plain_text(raw: Any) -> Optional[str]:
    """Extract a plain-text rendering from any supported property kind."""
    prop: Optional[PropertyValue] = parse_property(raw)
    if prop is None:
        return None
    if isinstance(prop, FormulaProperty):
        return _formula_text(prop)
    if isinstance(prop, TitleProperty):
        return "".join(run.plain_text or "" for run in prop.title) or None
    if isinstance(prop, RichTextProperty):
        return "".join(run.plain_text or "" for run in prop.rich_text) or None
    if isinstance(prop, (SelectProperty, StatusProperty)):
        option = prop.select if isinstance(prop, SelectProperty) else prop.status
        return option.name if option else None
    if isinstance(prop, NumberProperty):
        return _number_text(prop.number)
    if isinstance(prop, DateProperty):
        return prop.date.start if prop.date else None
    if isinstance(prop, MultiSelectProperty):
        return ", ".join(option.name or "" for option in prop.multi_select) or None
    return None


def progress_from_status(status: Optional[str]) -> int:
    """Return 100 for a completed status, 0 for anything else."""
    return 100 if (status or "").strip().lower() == "completed" else 0


def derive_overall_status(
    python_status: Optional[str], llm_status: Optional[str]
) -> ProgressStatus:
    """Combine the two topic statuses; order of checks is significant."""
    py = (python_status or "").lower()
    llm = (llm_status or "").lower()

    py_done = py == "completed"
    llm_done = llm == "completed"
    any_in_progress = py == "in progress" or llm == "in progress"
    any_skipped = (py == "skipped" or llm == "skipped") and not py_done and not llm_done

    if py_done and llm_done:
        return ProgressStatus.DONE
    if any_in_progress:
        return ProgressStatus.IN_PROGRESS
    if any_skipped:
        return ProgressStatus.SKIPPED
    return ProgressStatus.NOT_STARTED


def map_page(page: Mapping[str, Any], fields: FieldNames = DEFAULT_FIELDS) -> ProgressRecord:
    """Normalize one Notion page; missing or malformed values degrade to empty."""
    properties = page.get("properties") if isinstance(page, Mapping) else None
    if not isinstance(properties, Mapping):
        logger.debug("Journal row without a properties mapping; treating it as empty")
        properties = {}

    date_text = as_plain_text(first_existing_property(properties, fields.date_candidates))
    python_status = as_plain_text(properties.get(fields.python_status))
    llm_status = as_plain_text(properties.get(fields.llm_status))

    python_pct = progress_from_status(python_status)
    llm_pct = progress_from_status(llm_status)

    return ProgressRecord(
        date=normalize_date(date_text) if date_text else None,
        status=derive_overall_status(python_status, llm_status),
        python_topic=as_plain_text(properties.get(fields.python_topic)),
        llm_topic=as_plain_text(properties.get(fields.llm_topic)),
        python_pct=python_pct,
        llm_pct=llm_pct,
        overall_pct=100 if python_pct == 100 and llm_pct == 100 else 0,
    )


__all__ = [
    "DEFAULT_FIELDS",
    "FieldNames",
    "as_plain_text",
    "derive_overall_status",
    "first_existing_property",
    "map_page",
    "progress_from_status",
]
