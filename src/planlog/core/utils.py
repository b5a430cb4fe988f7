"""Utility functions for planlog."""

import re
from datetime import date, datetime, timezone

_WS = re.compile(r"\s+")


def now_iso(moment: datetime | None = None) -> str:
    """
    UTC timestamp with millisecond precision and a trailing Z.

    Examples:
        >>> now_iso(datetime(2024, 1, 1, 9, 30, tzinfo=timezone.utc))
        '2024-01-01T09:30:00.000Z'
    """
    moment = moment or datetime.now(timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def today_id(day: date | None = None) -> str:
    """Local calendar date formatted YYYY-MM-DD."""
    day = day or date.today()
    return day.strftime("%Y-%m-%d")


def shorten(text: str, n: int = 120) -> str:
    """
    Collapse whitespace and cut to at most n characters.

    Examples:
        >>> shorten("  a\\n  b ")
        'a b'
        >>> shorten("abcdef", 4)
        'abc…'
    """
    s = _WS.sub(" ", str(text or "").strip())
    return s[: n - 1] + "…" if len(s) > n else s
