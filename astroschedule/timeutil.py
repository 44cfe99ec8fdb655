"""
Time helpers for same-day 'HH:MM' wall-clock times.

All intervals are half-open: [start, end). Two intervals that only share an
endpoint (end == other_start) do NOT overlap.

Overlap rule:
    start < other_end AND other_start < end
"""

from __future__ import annotations

import re
from typing import Union

from astroschedule.errors import InvalidTimeFormatError, InvalidTimeRangeError

TimeLike = Union[str, int]

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

MINUTES_PER_DAY = 24 * 60


def validate_format(value: str) -> None:
    """
    Raise InvalidTimeFormatError unless value is a 24-hour 'HH:MM' string.
    """
    if not isinstance(value, str) or not _TIME_RE.match(value):
        raise InvalidTimeFormatError(f"Invalid time format {value!r}. Must be HH:MM (24-hour format).")


def to_minutes(value: TimeLike) -> int:
    """
    Convert 'HH:MM' to minutes since midnight (0..1439).

    Callers are expected to validate first; a malformed value still raises
    InvalidTimeFormatError instead of returning garbage.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        if not (0 <= value < MINUTES_PER_DAY):
            raise InvalidTimeFormatError(f"Internal error converting time {value!r}.")
        return value
    m = _TIME_RE.match(str(value))
    if not m:
        raise InvalidTimeFormatError(f"Internal error converting time {value!r}.")
    return int(m.group(1)) * 60 + int(m.group(2))


def from_minutes(minutes: int) -> str:
    if not (0 <= minutes < MINUTES_PER_DAY):
        raise InvalidTimeFormatError(f"Minute offset out of range: {minutes!r}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format_time(value: str) -> str:
    """
    Validate and normalize a time string ('9:05' -> '09:05').
    """
    raw = str(value).strip()
    parts = raw.split(":")
    if len(parts) == 2 and parts[0].isdigit() and len(parts[0]) == 1:
        raw = f"0{raw}"
    validate_format(raw)
    return raw


def validate_range(start: TimeLike, end: TimeLike) -> None:
    if to_minutes(start) >= to_minutes(end):
        raise InvalidTimeRangeError(
            f"Invalid time range: start time ({start}) must be strictly before end time ({end})."
        )


def overlaps(start1: TimeLike, end1: TimeLike, start2: TimeLike, end2: TimeLike) -> bool:
    s1, e1 = to_minutes(start1), to_minutes(end1)
    s2, e2 = to_minutes(start2), to_minutes(end2)
    return s1 < e2 and s2 < e1


def compare(t1: TimeLike, t2: TimeLike) -> int:
    """
    Return -1, 0 or 1 depending on whether t1 is before, equal to or after t2.
    """
    diff = to_minutes(t1) - to_minutes(t2)
    return (diff > 0) - (diff < 0)


def duration(start: TimeLike, end: TimeLike) -> int:
    return to_minutes(end) - to_minutes(start)
