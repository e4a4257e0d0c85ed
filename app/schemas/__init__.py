"""Public schema exports."""

from .analytics import (
    AggregateSnapshot,
    AnalyticsResponse,
    BurnupPoint,
    DateRange,
    ProgressKPIs,
    StatusCount,
    TimelineEntry,
    TopicAverage,
    TopicFocus,
    VelocityPoint,
    WeekDetails,
    WeekDetailsResponse,
)
from .notion import PropertyValue, parse_property
from .progress import (
    ErrorDetail,
    ErrorResponse,
    ProgressRecord,
    ProgressResponse,
    ProgressStatus,
)

__all__ = [
    "AggregateSnapshot",
    "AnalyticsResponse",
    "BurnupPoint",
    "DateRange",
    "ErrorDetail",
    "ErrorResponse",
    "ProgressKPIs",
    "ProgressRecord",
    "ProgressResponse",
    "ProgressStatus",
    "PropertyValue",
    "StatusCount",
    "TimelineEntry",
    "TopicAverage",
    "TopicFocus",
    "VelocityPoint",
    "WeekDetails",
    "WeekDetailsResponse",
    "parse_property",
]
