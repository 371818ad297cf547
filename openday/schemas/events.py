"""
schemas/events.py
-----------------
Catalogue records supplied by the surrounding event application, plus the
visitor's working schedule.

Records are frozen dataclasses: the engine reads them and never mutates them.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional


class EventType(str, Enum):
    VORTRAG       = "VORTRAG"
    LABORFUEHRUNG = "LABORFUEHRUNG"
    RUNDGANG      = "RUNDGANG"
    WORKSHOP      = "WORKSHOP"
    LINK          = "LINK"
    INFOSTAND     = "INFOSTAND"


class Institution(str, Enum):
    UNI        = "UNI"
    HOCHSCHULE = "HOCHSCHULE"
    BOTH       = "BOTH"


_EVENT_TYPE_LABELS: dict[EventType, str] = {
    EventType.VORTRAG:       "Talks",
    EventType.LABORFUEHRUNG: "Lab tours",
    EventType.RUNDGANG:      "Campus tours",
    EventType.WORKSHOP:      "Workshops",
    EventType.LINK:          "Online links",
    EventType.INFOSTAND:     "Info stands",
}

# New EventType members must get a label; fail at import rather than at render.
_missing = set(EventType) - set(_EVENT_TYPE_LABELS)
if _missing:
    raise RuntimeError(f"event_type_label: no label for {sorted(m.value for m in _missing)}")


def event_type_label(event_type: EventType) -> str:
    """Plural display label used as the group heading for an event type."""
    return _EVENT_TYPE_LABELS[EventType(event_type)]


@dataclass(frozen=True)
class StudyProgram:
    id: str
    name: str
    institution: Institution = Institution.BOTH


@dataclass(frozen=True)
class Location:
    """A room / building reference attached to an event."""
    id: str
    building_name: str
    room_number: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass(frozen=True)
class Event:
    """
    One catalogue event.

    time_start / time_end are normally both set; time_end may be missing.
    Events without a full time window never take part in conflict checks.
    """
    id: str
    title: str
    event_type: EventType
    institution: Institution = Institution.BOTH
    time_start: Optional[datetime] = None
    time_end: Optional[datetime] = None
    location: Optional[Location] = None
    study_programs: tuple[StudyProgram, ...] = ()

    @property
    def is_timed(self) -> bool:
        return self.time_start is not None and self.time_end is not None

    @property
    def study_program_ids(self) -> list[str]:
        return [sp.id for sp in self.study_programs]

    @property
    def building_name(self) -> Optional[str]:
        return self.location.building_name if self.location else None


@dataclass(frozen=True)
class ScheduledItem:
    """An event in the visitor's schedule. Lower priority value = more important."""
    event: Event
    priority: int = 0
    order: int = 0

    @property
    def event_id(self) -> str:
        return self.event.id


@dataclass(frozen=True)
class ScheduleSnapshot:
    """
    The visitor's schedule at the time of a request.

    Built once per request and handed to every planning component so that
    "which events are scheduled" is derived in exactly one place. Items are
    unique by event id; later duplicates are dropped.
    """
    items: tuple[ScheduledItem, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        unique: list[ScheduledItem] = []
        for item in self.items:
            if item.event_id in seen:
                continue
            seen.add(item.event_id)
            unique.append(item)
        if len(unique) != len(self.items):
            object.__setattr__(self, "items", tuple(unique))

    # ── Construction ──────────────────────────────────────────────────────────

    @classmethod
    def from_events(cls, events: Iterable[Event], priority: int = 0) -> "ScheduleSnapshot":
        return cls(tuple(
            ScheduledItem(event=ev, priority=priority, order=i)
            for i, ev in enumerate(events)
        ))

    def with_events(self, events: Iterable[Event], priority: int = 0) -> "ScheduleSnapshot":
        """Return a new snapshot with *events* appended after the current items."""
        start = len(self.items)
        extra = tuple(
            ScheduledItem(event=ev, priority=priority, order=start + i)
            for i, ev in enumerate(events)
        )
        return ScheduleSnapshot(self.items + extra)

    # ── Views ─────────────────────────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)

    @property
    def event_ids(self) -> list[str]:
        return [item.event_id for item in self.items]

    @property
    def events(self) -> list[Event]:
        return [item.event for item in self.items]

    @property
    def timed_events(self) -> list[Event]:
        return [item.event for item in self.items if item.event.is_timed]

    @property
    def event_types(self) -> set[EventType]:
        return {item.event.event_type for item in self.items}

    def contains(self, event_id: str) -> bool:
        return any(item.event_id == event_id for item in self.items)

    def chronological(self) -> list[Event]:
        """Events ordered by start time; events without a start go last."""
        timed   = [e for e in self.events if e.time_start is not None]
        untimed = [e for e in self.events if e.time_start is None]
        return sorted(timed, key=lambda e: e.time_start) + untimed
