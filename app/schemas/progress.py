"""
Canonical progress record and the response envelopes wrapping API payloads.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

Percent = Literal[0, 100]


class CamelModel(BaseModel):
    """Base model serialising field names in camelCase for the dashboard."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )


class ProgressStatus(str, Enum):
    """Overall status derived from the two per-topic statuses."""

    DONE = "Done"
    IN_PROGRESS = "In Progress"
    SKIPPED = "Skipped"
    NOT_STARTED = "Not Started"


class ProgressRecord(CamelModel):
    """One normalized journal row."""

    date: Optional[datetime] = Field(
        None, description="UTC instant of the entry, absent when the row has no date."
    )
    status: ProgressStatus
    python_topic: Optional[str] = None
    llm_topic: Optional[str] = None
    python_pct: Percent = 0
    llm_pct: Percent = 0
    overall_pct: Percent = 0

    @field_validator("date")
    @classmethod
    def _as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @model_validator(mode="after")
    def _check_overall(self) -> "ProgressRecord":
        both_complete = self.python_pct == 100 and self.llm_pct == 100
        if (self.overall_pct == 100) != both_complete:
            raise ValueError("overall_pct must be 100 exactly when both topics are 100")
        return self


class ErrorDetail(BaseModel):
    code: Literal["BAD_QUERY", "SERVER_ERROR"]
    message: str


class ErrorResponse(BaseModel):
    """Failure envelope shared by every progress endpoint."""

    success: Literal[False] = False
    error: ErrorDetail


class ProgressResponse(CamelModel):
    success: Literal[True] = True
    data: List[ProgressRecord] = Field(default_factory=list)


__all__ = [
    "CamelModel",
    "ErrorDetail",
    "ErrorResponse",
    "Percent",
    "ProgressRecord",
    "ProgressResponse",
    "ProgressStatus",
]
