"""
Clock-time helpers shared by reservation capacity and shift scheduling.

Times are "HH:MM" strings on a single calendar day. Windows are half-open
``[start, start + duration)`` in minutes since midnight; a window may run
past 24:00 (overnight shifts) and is still compared on the same day.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import time as dt_time

MINUTES_PER_DAY = 24 * 60

_HHMM_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def to_minutes(value) -> int:
    """Convert an "HH:MM" string (or ``datetime.time``) to minutes since midnight."""
    if isinstance(value, dt_time):
        return value.hour * 60 + value.minute
    match = _HHMM_RE.match(str(value or "").strip())
    if not match:
        raise ValueError(f"Invalid time '{value}'. Expected HH:MM (24h).")
    return int(match.group(1)) * 60 + int(match.group(2))


def format_minutes(minutes: int) -> str:
    minutes = int(minutes) % MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_time(value) -> str:
    """Canonical "HH:MM" form of a time value."""
    return format_minutes(to_minutes(value))


def is_valid_time(value) -> bool:
    try:
        to_minutes(value)
    except ValueError:
        return False
    return True


def span_minutes(start, end) -> int:
    """Minutes from ``start`` to ``end``, wrapping past midnight when end < start."""
    diff = to_minutes(end) - to_minutes(start)
    if diff < 0:
        diff += MINUTES_PER_DAY
    return diff


def overlaps(start1: int, duration1: int, start2: int, duration2: int) -> bool:
    """True when ``[start1, start1+duration1)`` and ``[start2, start2+duration2)`` intersect."""
    return start1 < start2 + duration2 and start2 < start1 + duration1


@dataclass(frozen=True)
class Window:
    start: int
    duration: int

    @property
    def end(self) -> int:
        return self.start + self.duration

    @classmethod
    def starting_at(cls, start, duration: int) -> "Window":
        return cls(to_minutes(start), int(duration))

    @classmethod
    def between(cls, start, end) -> "Window":
        return cls(to_minutes(start), span_minutes(start, end))

    def overlaps(self, other: "Window") -> bool:
        return overlaps(self.start, self.duration, other.start, other.duration)

    def __str__(self) -> str:
        return f"{format_minutes(self.start)}-{format_minutes(self.end)}"
