# stats_api/timeline.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Iterable, List, Optional, TypeVar

from dateutil import parser as date_parser

T = TypeVar("T")


def _naive_utc(d: datetime) -> datetime:
    if d.tzinfo is None:
        return d
    return d.astimezone(timezone.utc).replace(tzinfo=None)


def parse_date(value: Any) -> Optional[datetime]:
    """
    Best-effort date parse for match documents.

    Handles datetime objects (Firestore timestamps included), exported
    timestamps ({"_seconds": ...}), ISO strings ("2024-03-01",
    "...T10:00:00Z") and scorecard dates ("01/04/2024" is 1 April).
    Unknown -> None (never raises).
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _naive_utc(value)

    if isinstance(value, dict):
        seconds = value.get("_seconds", value.get("seconds"))
        if seconds is None:
            return None
        try:
            return datetime.fromtimestamp(float(seconds), tz=timezone.utc).replace(tzinfo=None)
        except (TypeError, ValueError, OverflowError, OSError):
            return None

    s = str(value).strip()
    if not s:
        return None

    try:
        return _naive_utc(date_parser.isoparse(s))
    except (ValueError, OverflowError):
        pass

    # dayfirst only applies once ISO failed, so "2024-04-01" stays 1 April
    try:
        return _naive_utc(date_parser.parse(s, dayfirst=True))
    except (ValueError, OverflowError):
        return None


def chronological(items: Iterable[T], get_date: Callable[[T], Any]) -> List[T]:
    """
    Oldest first. Stable: items with equal or missing dates keep their input
    order; undated items are placed before dated ones.
    """
    def key_fn(item: T):
        d = parse_date(get_date(item))
        return (d is not None, d or datetime.min)

    return sorted(items, key=key_fn)
