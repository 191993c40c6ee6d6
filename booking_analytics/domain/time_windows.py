"""Hour-aligned clipping, operating-hours gating and local-time parsing.

All timestamps are treated as naive local wall-clock time. Any timezone
designator on an input string (``Z``, ``+05:30``, ``-0800``) is discarded
rather than converted, so ``"2026-03-02T09:00:00Z"`` means 09:00 on the
campus clock.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Iterator, Optional, Union

from booking_analytics.domain.models import OperatingHours


ONE_HOUR = timedelta(hours=1)
ONE_DAY = timedelta(days=1)

_TZ_SUFFIX = re.compile(r"(Z|[+-]\d{2}:?\d{2})$")

_WEEK_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def to_local_naive(value: datetime) -> datetime:
    """Drop tzinfo while keeping the wall-clock fields."""
    if value.tzinfo is not None:
        return value.replace(tzinfo=None)
    return value


def parse_local_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse a booking timestamp, returning ``None`` when it is unusable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_local_naive(value)
    text = str(value).strip()
    if not text:
        return None
    text = _TZ_SUFFIX.sub("", text.replace(" ", "T", 1))
    try:
        return to_local_naive(datetime.fromisoformat(text))
    except ValueError:
        return None


def floor_to_hour(moment: datetime) -> datetime:
    return moment.replace(minute=0, second=0, microsecond=0)


def floor_to_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def clip_to_hour(
    cursor: datetime,
    window_start: datetime,
    window_end: datetime,
) -> tuple[datetime, datetime]:
    """Intersect the hour enclosing ``cursor`` with ``[window_start, window_end)``.

    The returned chunk never has a negative width. A zero-width chunk means
    there is nothing left to walk.
    """
    hour_start = floor_to_hour(cursor)
    hour_end = hour_start + ONE_HOUR
    chunk_start = max(cursor, hour_start, window_start)
    chunk_end = min(hour_end, window_end)
    if chunk_end < chunk_start:
        chunk_end = chunk_start
    return chunk_start, chunk_end


def iter_hour_chunks(start: datetime, end: datetime) -> Iterator[tuple[datetime, datetime]]:
    """Decompose ``[start, end)`` into consecutive hour-aligned chunks."""
    cursor = start
    while cursor < end:
        chunk_start, chunk_end = clip_to_hour(cursor, start, end)
        if chunk_end <= chunk_start:
            break
        yield chunk_start, chunk_end
        cursor = chunk_end


def minutes_between(start: datetime, end: datetime) -> float:
    return max(0.0, (end - start).total_seconds() / 60.0)


def overlap_minutes(
    a_start: datetime,
    a_end: datetime,
    b_start: datetime,
    b_end: datetime,
) -> float:
    """Length in minutes of ``[a_start, a_end) ∩ [b_start, b_end)``."""
    return minutes_between(max(a_start, b_start), min(a_end, b_end))


def is_open(hour: int, operating_hours: Optional[OperatingHours]) -> bool:
    if operating_hours is None:
        return True
    return operating_hours.start <= hour < operating_hours.end


def open_minutes_in_range(
    range_start: datetime,
    range_end: datetime,
    operating_hours: Optional[OperatingHours],
) -> float:
    """Minutes of ``[range_start, range_end)`` that fall inside operating hours."""
    total = 0.0
    for chunk_start, chunk_end in iter_hour_chunks(range_start, range_end):
        if is_open(chunk_start.hour, operating_hours):
            total += minutes_between(chunk_start, chunk_end)
    return total


def iter_days(range_start: datetime, range_end: datetime) -> Iterator[datetime]:
    """Yield the midnight of every calendar day touching ``[range_start, range_end)``."""
    day = floor_to_day(range_start)
    while day < range_end:
        yield day
        day += ONE_DAY


def at_hour(day: datetime, hour: int) -> datetime:
    """Timestamp ``hour`` hours after ``day``'s midnight; hour 24 is the next midnight."""
    return floor_to_day(day) + timedelta(hours=hour)


def weekday_index(moment: datetime) -> int:
    """Monday-based weekday, 0=Mon .. 6=Sun."""
    return moment.weekday()


def week_labels() -> tuple[str, ...]:
    return _WEEK_LABELS


def hour_label(hour: int) -> str:
    """12-hour clock label: 0 -> ``"12 AM"``, 13 -> ``"1 PM"``."""
    suffix = "AM" if hour < 12 else "PM"
    if hour == 0:
        hour12 = 12
    elif hour <= 12:
        hour12 = hour
    else:
        hour12 = hour - 12
    return f"{hour12} {suffix}"
