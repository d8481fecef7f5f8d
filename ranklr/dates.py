"""
Puzzle date keys.

Every puzzle is keyed by a civil date in America/New_York ("YYYY-MM-DD") and
goes live at local midnight of that date. Anything that needs "today" takes
an injectable clock so tests can pin the instant.
"""

from __future__ import annotations

import datetime as dt
import re
from typing import Callable, Optional
from zoneinfo import ZoneInfo

PUZZLE_TZ = "America/New_York"

DATE_KEY_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")

Clock = Callable[[], dt.datetime]


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def is_date_key(value: object) -> bool:
    """
    True if `value` is a "YYYY-MM-DD" string naming a real calendar date
    (so "2025-02-30" is rejected).
    """
    if not isinstance(value, str) or not DATE_KEY_RE.fullmatch(value):
        return False
    try:
        return dt.date.fromisoformat(value).isoformat() == value
    except ValueError:
        return False


def today_key(
        now: Optional[dt.datetime] = None,
        *,
        clock: Clock = utc_now,
        tz: str = PUZZLE_TZ,
) -> str:
    """
    Current puzzle key: the civil date in `tz` at `now` (or `clock()`).

    A naive `now` is taken to be UTC.
    """
    instant = now if now is not None else clock()
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=dt.timezone.utc)
    return instant.astimezone(ZoneInfo(tz)).date().isoformat()


def to_local(instant: dt.datetime, tz: str = PUZZLE_TZ) -> dt.datetime:
    return instant.astimezone(ZoneInfo(tz))


def local_midnight(date_key: str, tz: str = PUZZLE_TZ) -> dt.datetime:
    """
    The aware instant at which puzzle `date_key` goes live (00:00 local time).
    """
    if not is_date_key(date_key):
        raise ValueError(f"not a YYYY-MM-DD date key: {date_key!r}")
    d = dt.date.fromisoformat(date_key)
    return dt.datetime(d.year, d.month, d.day, tzinfo=ZoneInfo(tz))


def is_local_midnight(instant: dt.datetime, date_key: str, tz: str = PUZZLE_TZ) -> bool:
    """
    True if `instant` falls on `date_key` in `tz` at exactly 00:00:00
    (second resolution).
    """
    local = to_local(instant, tz)
    return (
        local.date().isoformat() == date_key
        and (local.hour, local.minute, local.second) == (0, 0, 0)
    )
