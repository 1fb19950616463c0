# ============================================================================
# app/services/scheduling/intervals.py
# Time ranges within a single day - pure functions, no database access
# ============================================================================
"""
Intervals are half-open [start, end) ranges expressed in minutes since
midnight. "HH:mm" strings and datetime.time values are converted at the
boundary with the helpers below.
"""
from dataclasses import dataclass
from datetime import time
from typing import Iterable, List

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True, order=True)
class TimeRange:
    start: int
    end: int

    def __post_init__(self):
        if not 0 <= self.start < self.end <= MINUTES_PER_DAY:
            raise ValueError(
                f"Invalid time range {self.start}-{self.end}: start must be before end"
            )

    @classmethod
    def from_times(cls, start: time, end: time) -> "TimeRange":
        return cls(minutes_from_time(start), minutes_from_time(end))

    @classmethod
    def parse(cls, start: str, end: str) -> "TimeRange":
        return cls(parse_time(start), parse_time(end))

    @classmethod
    def starting_at(cls, start: int, duration_minutes: int) -> "TimeRange":
        return cls(start, start + duration_minutes)

    def overlaps(self, other: "TimeRange") -> bool:
        return self.start < other.end and other.start < self.end

    def to_dict(self) -> dict:
        return {"start_time": format_time(self.start), "end_time": format_time(self.end)}

    def __str__(self):
        return f"[{format_time(self.start)}, {format_time(self.end)})"


def parse_time(value: str) -> int:
    """Parse a 24-hour "HH:mm" (or "HH:mm:ss") string into minutes since midnight."""
    parts = value.strip().split(":") if isinstance(value, str) else []
    if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
        raise ValueError(f"Time must be in HH:mm format, got {value!r}")

    hours, minutes = int(parts[0]), int(parts[1])
    if hours > 23 or minutes > 59:
        raise ValueError(f"Time out of range: {value!r}")
    return hours * 60 + minutes


def format_time(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def minutes_from_time(value: time) -> int:
    return value.hour * 60 + value.minute


def time_from_minutes(minutes: int) -> time:
    return time(hour=minutes // 60, minute=minutes % 60)


def merge_ranges(ranges: Iterable[TimeRange]) -> List[TimeRange]:
    """Sort by start and coalesce overlapping (or touching) ranges."""
    merged: List[TimeRange] = []
    for current in sorted(ranges):
        if merged and current.start <= merged[-1].end:
            last = merged[-1]
            if current.end > last.end:
                merged[-1] = TimeRange(last.start, current.end)
        else:
            merged.append(current)
    return merged


def subtract_ranges(base: Iterable[TimeRange], removed: Iterable[TimeRange]) -> List[TimeRange]:
    """
    Return the parts of `base` not covered by `removed`.

    Both inputs may be unsorted and overlapping. A removed range that only
    touches a base boundary leaves it intact.
    """
    cuts = merge_ranges(removed)
    result: List[TimeRange] = []

    for window in merge_ranges(base):
        cursor = window.start
        for cut in cuts:
            if cut.end <= cursor:
                continue
            if cut.start >= window.end:
                break
            if cut.start > cursor:
                result.append(TimeRange(cursor, cut.start))
            cursor = max(cursor, cut.end)
            if cursor >= window.end:
                break
        if cursor < window.end:
            result.append(TimeRange(cursor, window.end))

    return result


def free_intervals(open_ranges: Iterable[TimeRange], blocked: Iterable[TimeRange]) -> List[TimeRange]:
    """Open hours minus blocked time. No open hours means the day is not available."""
    return subtract_ranges(open_ranges, blocked)
