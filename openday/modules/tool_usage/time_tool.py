"""
modules/tool_usage/time_tool.py
---------------------------------
Interval arithmetic shared by conflict detection, gap finding and slot
fitting. All functions take datetimes; mixing naive and aware values raises
TypeError, as datetime comparison does.
"""

from __future__ import annotations
from datetime import datetime

from openday.schemas.events import Event
from openday.schemas.recommendations import TimeSlot


def overlap_minutes(
    start_a: datetime,
    end_a: datetime,
    start_b: datetime,
    end_b: datetime,
) -> int:
    """
    Whole minutes (floored) during which [start_a, end_a) and [start_b, end_b)
    overlap. Disjoint or touching intervals give 0.
    """
    latest_start = max(start_a, start_b)
    earliest_end = min(end_a, end_b)
    seconds = (earliest_end - latest_start).total_seconds()
    if seconds <= 0:
        return 0
    return int(seconds // 60)


def events_overlap_minutes(a: Event, b: Event) -> int:
    """overlap_minutes for two events; 0 unless both have a full time window."""
    if not (a.is_timed and b.is_timed):
        return 0
    return overlap_minutes(a.time_start, a.time_end, b.time_start, b.time_end)


def fits_time_slot(start: datetime | None, end: datetime | None, slot: TimeSlot) -> bool:
    """True iff the interval lies completely inside the slot."""
    if start is None or end is None:
        return False
    return start >= slot.start and end <= slot.end


def minutes_between(earlier: datetime, later: datetime) -> float:
    """Signed minutes from *earlier* to *later*."""
    return (later - earlier).total_seconds() / 60.0


def seconds_between(earlier: datetime, later: datetime) -> float:
    return (later - earlier).total_seconds()


def same_calendar_day(a: datetime, b: datetime) -> bool:
    return a.date() == b.date()
