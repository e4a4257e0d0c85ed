"""
Pydantic models describing the aggregates derived from progress records.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import Field

from .progress import CamelModel, ProgressRecord, ProgressStatus


class DateRange(str, Enum):
    """Lower bound applied to records before any aggregate is computed."""

    ALL = "all"
    LAST_4_WEEKS = "4w"
    LAST_12_WEEKS = "12w"
    YEAR_TO_DATE = "ytd"


class TopicFocus(str, Enum):
    BOTH = "both"
    PYTHON = "python"
    LLM = "llm"


class ProgressKPIs(CamelModel):
    total: int
    done: int
    open: int
    completion: int = Field(..., description="Rounded percentage of done records.")
    streak: int = Field(..., description="Consecutive UTC days ending at the latest done day.")


class StatusCount(CamelModel):
    status: ProgressStatus
    count: int


class VelocityPoint(CamelModel):
    week_start: datetime
    done_count: int
    moving_average: float
    meets_goal: bool = False


class BurnupPoint(CamelModel):
    day: datetime
    cumulative_total: int
    cumulative_done: int


class TopicAverage(CamelModel):
    topic: Literal["Python", "LLM", "Overall"]
    pct: float


class TimelineEntry(CamelModel):
    date: datetime
    topic: Literal["Python", "LLM"]
    value: str


class AggregateSnapshot(CamelModel):
    """Everything the dashboard renders for one filter selection."""

    date_range: DateRange
    range_start: Optional[datetime] = None
    focus: TopicFocus
    goal_per_week: int
    generated_at: datetime
    kpis: ProgressKPIs
    status_breakdown: List[StatusCount] = Field(default_factory=list)
    weekly_velocity: List[VelocityPoint] = Field(default_factory=list)
    burnup: List[BurnupPoint] = Field(default_factory=list)
    topic_averages: List[TopicAverage] = Field(default_factory=list)
    topic_timeline: List[TimelineEntry] = Field(default_factory=list)


class WeekDetails(CamelModel):
    week_start: datetime
    label: str
    records: List[ProgressRecord] = Field(default_factory=list)


class AnalyticsResponse(CamelModel):
    success: Literal[True] = True
    data: AggregateSnapshot


class WeekDetailsResponse(CamelModel):
    success: Literal[True] = True
    data: WeekDetails


__all__ = [
    "AggregateSnapshot",
    "AnalyticsResponse",
    "BurnupPoint",
    "DateRange",
    "ProgressKPIs",
    "StatusCount",
    "TimelineEntry",
    "TopicAverage",
    "TopicFocus",
    "VelocityPoint",
    "WeekDetails",
    "WeekDetailsResponse",
]
