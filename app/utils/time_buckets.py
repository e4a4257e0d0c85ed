"""UTC-aligned day and ISO-week buckets used by every progress aggregate."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo

ONE_DAY = timedelta(days=1)
ONE_WEEK = timedelta(days=7)

_RANGE_LABEL_FORMAT = "%b %d, %Y"


def _to_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def day_key(moment: datetime) -> datetime:
    """Floor ``moment`` to midnight UTC."""
    utc = _to_utc(moment)
    return datetime(utc.year, utc.month, utc.day, tzinfo=timezone.utc)


def week_key(moment: datetime) -> datetime:
    """Floor ``moment`` to the Monday midnight UTC at or before it."""
    day = day_key(moment)
    return day - timedelta(days=day.weekday())


def sunday_week_start(moment: datetime) -> datetime:
    """Floor ``moment`` to the Sunday midnight UTC at or before it."""
    day = day_key(moment)
    return day - timedelta(days=(day.weekday() + 1) % 7)


def format_week_range(week_start: datetime, tz: tzinfo | None = None) -> str:
    """Human label such as ``"Mar 04, 2024 — Mar 10, 2024"`` for a bucket.

    ``tz`` only changes presentation; bucket membership stays UTC-based.
    """
    start = week_key(week_start)
    end = start + ONE_WEEK - ONE_DAY
    zone = tz or timezone.utc
    return (
        f"{start.astimezone(zone).strftime(_RANGE_LABEL_FORMAT)} — "
        f"{end.astimezone(zone).strftime(_RANGE_LABEL_FORMAT)}"
    )


__all__ = [
    "ONE_DAY",
    "ONE_WEEK",
    "day_key",
    "format_week_range",
    "sunday_week_start",
    "week_key",
]
