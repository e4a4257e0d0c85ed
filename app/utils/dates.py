"""Normalize the loosely formatted date strings found in journal rows."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

_ISO_DAY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_YEARLESS = re.compile(r"^(?:[A-Za-z]{3},\s*)?([A-Za-z]{3})\s+(\d{1,2})$")

# Anything older is a parser filling in a default year, not a real entry.
_MIN_PLAUSIBLE_YEAR = 2015

_TEXT_LAYOUTS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%B %d, %Y %I:%M %p",
    "%b %d, %Y %I:%M %p",
    "%B %d, %Y",
    "%b %d, %Y",
    "%a, %b %d, %Y",
    "%A, %B %d, %Y",
    "%a %b %d %Y",
    "%a, %d %b %Y %H:%M:%S %Z",
    "%a %b %d %Y %H:%M:%S GMT%z",
    "%d %B %Y",
    "%d %b %Y",
    "%B %d %Y",
    "%b %d %Y",
)


def _utc_midnight(moment: datetime) -> datetime:
    return datetime(moment.year, moment.month, moment.day, tzinfo=timezone.utc)


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _parse_general(text: str) -> datetime | None:
    candidate = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return _as_utc(datetime.fromisoformat(candidate))
    except ValueError:
        pass
    # Date.toString() appends the zone name, e.g. " (Central European Standard Time)".
    stripped = text.split(" (", 1)[0].strip()
    for layout in _TEXT_LAYOUTS:
        try:
            return _as_utc(datetime.strptime(stripped, layout))
        except ValueError:
            continue
    try:
        return _as_utc(parsedate_to_datetime(stripped))
    except (TypeError, ValueError):
        return None


def _parse_yearless(text: str, year: int) -> datetime | None:
    match = _YEARLESS.match(text)
    if not match:
        return None
    month, day = match.groups()
    try:
        parsed = datetime.strptime(f"{month.title()} {int(day)} {year}", "%b %d %Y")
    except ValueError:
        return None
    return parsed.replace(tzinfo=timezone.utc)


def normalize_date(raw: str | None, *, now: datetime | None = None) -> datetime:
    """Return a UTC instant for ``raw``; never raises.

    Precedence: bare ``YYYY-MM-DD`` as UTC midnight, then a general parse
    whose year must be later than 2015, then ``"Mon, Jan 01"``/``"Jan 01"``
    in the current UTC year, then today's UTC midnight.
    """
    current = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    text = (raw or "").strip()

    if _ISO_DAY.match(text):
        try:
            return datetime.strptime(text, "%Y-%m-%d").replace(tzinfo=timezone.utc)
        except ValueError:
            pass

    if text:
        parsed = _parse_general(text)
        if parsed is not None and parsed.year > _MIN_PLAUSIBLE_YEAR:
            return parsed

        parsed = _parse_yearless(text, current.year)
        if parsed is not None:
            return parsed

    return _utc_midnight(current)


__all__ = ["normalize_date"]
