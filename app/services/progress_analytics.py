"""
Aggregates derived from normalized progress records.

Every function here is pure: the same records, filter and ``now`` always
produce the same result, and nothing is cached between calls. All bucketing
is UTC-based so membership does not depend on the viewer's timezone.

Two completion tests coexist on purpose:

* :func:`is_fully_complete` (``overall_pct == 100``) matches ``status == Done``.
* :func:`is_done_day` also accepts a single completed topic, and is the one
  used for KPIs, streaks, velocity and burn-up.
"""

from __future__ import annotations

import math
from collections import Counter, defaultdict
from datetime import datetime, timezone, tzinfo
from typing import Dict, Iterable, List, Optional, Sequence

from app.schemas import (
    AggregateSnapshot,
    BurnupPoint,
    DateRange,
    ProgressKPIs,
    ProgressRecord,
    StatusCount,
    TimelineEntry,
    TopicAverage,
    TopicFocus,
    VelocityPoint,
    WeekDetails,
)
from app.utils.time_buckets import (
    ONE_DAY,
    ONE_WEEK,
    day_key,
    format_week_range,
    sunday_week_start,
    week_key,
)

MOVING_AVERAGE_WINDOW = 3
DEFAULT_GOAL_PER_WEEK = 3
MAX_GOAL_PER_WEEK = 14


def _now(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def range_start(date_range: DateRange, now: Optional[datetime] = None) -> Optional[datetime]:
    """Lower bound for ``date_range``; ``None`` means unbounded."""
    current = _now(now)
    if date_range is DateRange.LAST_4_WEEKS:
        return sunday_week_start(current) - 4 * ONE_WEEK
    if date_range is DateRange.LAST_12_WEEKS:
        return sunday_week_start(current) - 12 * ONE_WEEK
    if date_range is DateRange.YEAR_TO_DATE:
        return datetime(current.year, 1, 1, tzinfo=timezone.utc)
    return None


def filter_records(
    records: Iterable[ProgressRecord],
    date_range: DateRange = DateRange.ALL,
    now: Optional[datetime] = None,
) -> List[ProgressRecord]:
    """Apply the date-range filter; undated rows only survive ``all``."""
    start = range_start(date_range, now)
    if start is None:
        return list(records)
    return [record for record in records if record.date is not None and record.date >= start]


def is_done_day(record: ProgressRecord) -> bool:
    return record.overall_pct >= 100 or record.python_pct >= 100 or record.llm_pct >= 100


def is_fully_complete(record: ProgressRecord) -> bool:
    return record.overall_pct >= 100


def _dated(records: Iterable[ProgressRecord]) -> List[ProgressRecord]:
    return [record for record in records if record.date is not None]


def current_streak(records: Iterable[ProgressRecord]) -> int:
    """Consecutive UTC days with a done record, counted back from the latest one."""
    done_days = {day_key(record.date) for record in _dated(records) if is_done_day(record)}
    if not done_days:
        return 0
    cursor = max(done_days)
    streak = 0
    while cursor in done_days:
        streak += 1
        cursor -= ONE_DAY
    return streak


def compute_kpis(records: Sequence[ProgressRecord]) -> ProgressKPIs:
    total = len(records)
    done = sum(1 for record in records if is_done_day(record))
    completion = math.floor(done * 100 / total + 0.5) if total else 0
    return ProgressKPIs(
        total=total,
        done=done,
        open=total - done,
        completion=completion,
        streak=current_streak(records),
    )


def weekly_velocity(
    records: Iterable[ProgressRecord], goal_per_week: int = 0
) -> List[VelocityPoint]:
    """Done records per ISO week with a trailing moving average over data points."""
    counts: Counter[datetime] = Counter(
        week_key(record.date) for record in _dated(records) if is_done_day(record)
    )
    weeks = sorted(counts)
    points: List[VelocityPoint] = []
    for index, week in enumerate(weeks):
        window = weeks[max(0, index - MOVING_AVERAGE_WINDOW + 1) : index + 1]
        average = sum(counts[w] for w in window) / len(window)
        points.append(
            VelocityPoint(
                week_start=week,
                done_count=counts[week],
                moving_average=average,
                meets_goal=goal_per_week > 0 and counts[week] >= goal_per_week,
            )
        )
    return points


def cumulative_burnup(records: Iterable[ProgressRecord]) -> List[BurnupPoint]:
    """Running totals of added and done records per UTC day."""
    added: Dict[datetime, int] = defaultdict(int)
    done: Dict[datetime, int] = defaultdict(int)
    for record in _dated(records):
        key = day_key(record.date)
        added[key] += 1
        if is_done_day(record):
            done[key] += 1

    series: List[BurnupPoint] = []
    total_so_far = done_so_far = 0
    for day in sorted(added):
        total_so_far += added[day]
        done_so_far += done[day]
        series.append(
            BurnupPoint(day=day, cumulative_total=total_so_far, cumulative_done=done_so_far)
        )
    return series


def _average(values: Iterable[object]) -> float:
    numbers = [
        float(value)
        for value in values
        if isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    ]
    if not numbers:
        return 0.0
    return sum(numbers) / len(numbers)


def topic_averages(
    records: Sequence[ProgressRecord], focus: TopicFocus = TopicFocus.BOTH
) -> List[TopicAverage]:
    python = TopicAverage(topic="Python", pct=_average(r.python_pct for r in records))
    llm = TopicAverage(topic="LLM", pct=_average(r.llm_pct for r in records))
    if focus is TopicFocus.PYTHON:
        return [python]
    if focus is TopicFocus.LLM:
        return [llm]
    overall = TopicAverage(topic="Overall", pct=_average(r.overall_pct for r in records))
    return [python, llm, overall]


def status_breakdown(records: Iterable[ProgressRecord]) -> List[StatusCount]:
    counts: Counter = Counter(record.status for record in records)
    return [StatusCount(status=status, count=count) for status, count in counts.items()]


def topic_timeline(
    records: Iterable[ProgressRecord], focus: TopicFocus = TopicFocus.BOTH
) -> List[TimelineEntry]:
    """Topic names studied per day, oldest first."""
    dated = _dated(records)
    entries: List[TimelineEntry] = []
    if focus in (TopicFocus.BOTH, TopicFocus.PYTHON):
        entries.extend(
            TimelineEntry(date=r.date, topic="Python", value=r.python_topic)
            for r in dated
            if r.python_topic
        )
    if focus in (TopicFocus.BOTH, TopicFocus.LLM):
        entries.extend(
            TimelineEntry(date=r.date, topic="LLM", value=r.llm_topic)
            for r in dated
            if r.llm_topic
        )
    return sorted(entries, key=lambda entry: entry.date)


def week_details(
    records: Iterable[ProgressRecord],
    week_start: datetime,
    tz: Optional[tzinfo] = None,
) -> WeekDetails:
    """Records dated within ``[week_start, week_start + 7 days)``, oldest first."""
    start = week_key(week_start)
    end = start + ONE_WEEK
    rows = sorted(
        (r for r in _dated(records) if start <= r.date < end),
        key=lambda r: r.date,
    )
    return WeekDetails(week_start=start, label=format_week_range(start, tz), records=rows)


def build_snapshot(
    records: Sequence[ProgressRecord],
    *,
    date_range: DateRange = DateRange.ALL,
    focus: TopicFocus = TopicFocus.BOTH,
    goal_per_week: int = DEFAULT_GOAL_PER_WEEK,
    now: Optional[datetime] = None,
) -> AggregateSnapshot:
    """Filter ``records`` and derive every aggregate from the filtered view."""
    current = _now(now)
    filtered = filter_records(records, date_range, current)
    return AggregateSnapshot(
        date_range=date_range,
        range_start=range_start(date_range, current),
        focus=focus,
        goal_per_week=goal_per_week,
        generated_at=current,
        kpis=compute_kpis(filtered),
        status_breakdown=status_breakdown(filtered),
        weekly_velocity=weekly_velocity(filtered, goal_per_week),
        burnup=cumulative_burnup(filtered),
        topic_averages=topic_averages(filtered, focus),
        topic_timeline=topic_timeline(filtered, focus),
    )


__all__ = [
    "DEFAULT_GOAL_PER_WEEK",
    "MAX_GOAL_PER_WEEK",
    "build_snapshot",
    "compute_kpis",
    "cumulative_burnup",
    "current_streak",
    "filter_records",
    "is_done_day",
    "is_fully_complete",
    "range_start",
    "status_breakdown",
    "topic_averages",
    "topic_timeline",
    "week_details",
    "weekly_velocity",
]
