"""
schemas/routes.py
-----------------
Dataclass definitions for walking routes between campus buildings.

Units:
  distance → metres | duration → seconds | coordinates → WGS84 degrees
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from openday import config


class WalkingSpeed(str, Enum):
    SLOW   = "slow"
    NORMAL = "normal"
    FAST   = "fast"

    @property
    def metres_per_second(self) -> float:
        return config.WALKING_SPEEDS_MPS[self.value]


class WaypointType(str, Enum):
    BUILDING         = "building"
    EVENT            = "event"
    CURRENT_LOCATION = "current_location"


class WarningType(str, Enum):
    INSUFFICIENT_TIME = "insufficient_time"
    LONG_DISTANCE     = "long_distance"
    ACCESSIBILITY     = "accessibility"


class WarningSeverity(str, Enum):
    INFO    = "info"
    WARNING = "warning"
    ERROR   = "error"


class TravelStatus(str, Enum):
    OK           = "ok"
    TIGHT        = "tight"
    INSUFFICIENT = "insufficient"


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float

    def as_lon_lat(self) -> tuple[float, float]:
        return (self.longitude, self.latitude)


@dataclass(frozen=True)
class Building:
    """Static reference data for one campus building."""
    id: str
    name: str
    coordinates: Coordinates
    address: str = ""
    campus: str = "other"                  # schloss | westerberg | haste | caprivi | other
    short_name: Optional[str] = None
    has_accessibility: bool = True
    accessibility_notes: Optional[str] = None
    event_count: Optional[int] = None


@dataclass(frozen=True)
class CampusArea:
    id: str
    name: str
    center: Coordinates
    north: float
    south: float
    east: float
    west: float

    def contains(self, point: Coordinates) -> bool:
        return (self.south <= point.latitude <= self.north
                and self.west <= point.longitude <= self.east)


@dataclass(frozen=True)
class Waypoint:
    """
    A named stop on a route. Event stops carry the originating event's id,
    title and time window so the feasibility check can compare them.
    """
    id: str
    name: str
    coordinates: Coordinates
    type: WaypointType = WaypointType.BUILDING
    address: Optional[str] = None
    event_id: Optional[str] = None
    event_title: Optional[str] = None
    time_start: Optional[datetime] = None
    time_end: Optional[datetime] = None
    accessible: Optional[bool] = None      # None = unknown


@dataclass
class RouteGeometry:
    type: str = "LineString"
    coordinates: list[tuple[float, float]] = field(default_factory=list)   # [lon, lat] pairs


@dataclass
class RouteInstruction:
    type: str          # depart | turn_left | turn_right | continue | arrive
    text: str
    distance: float = 0.0
    duration: int = 0


@dataclass
class RouteLeg:
    start_waypoint: Waypoint
    end_waypoint: Waypoint
    distance: float                        # metres
    duration: int                          # seconds of walking
    geometry: RouteGeometry = field(default_factory=RouteGeometry)
    instructions: list[RouteInstruction] = field(default_factory=list)


@dataclass
class RouteWarning:
    type: WarningType
    severity: WarningSeverity
    message: str
    leg_index: int
    required_time: int                     # seconds of walking
    available_time: float                  # seconds between events (0 if untimed)
    event_from_id: Optional[str] = None
    event_to_id: Optional[str] = None


@dataclass
class Route:
    """Ordered waypoints and the legs between them. Empty below two waypoints."""
    id: str
    waypoints: list[Waypoint] = field(default_factory=list)
    legs: list[RouteLeg] = field(default_factory=list)
    total_distance: float = 0.0
    total_duration: int = 0
    warnings: list[RouteWarning] = field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


@dataclass
class TravelTimeAnalysis:
    """Feasibility of walking from one scheduled event to the next."""
    event_from_id: str
    event_to_id: str
    event_from_title: str
    event_to_title: str
    time_between_events: float             # seconds
    walking_time: int                      # seconds
    distance: float                        # metres
    time_margin: float                     # seconds, negative = infeasible
    status: TravelStatus

    @property
    def has_sufficient_time(self) -> bool:
        return self.status is TravelStatus.OK


@dataclass
class AlternativeSuggestion:
    event_id: str
    title: str
    reason: str
    new_travel_time: int                   # seconds


# ── Request models ────────────────────────────────────────────────────────────

class TravelTimeSettings(BaseModel):
    walking_speed: WalkingSpeed = Field(
        default_factory=lambda: WalkingSpeed(config.DEFAULT_WALKING_SPEED)
    )
    buffer_minutes: int = Field(config.TRAVEL_BUFFER_MINUTES, ge=0)
    min_warning_minutes: int = Field(config.TRAVEL_MIN_WARNING_MINUTES, ge=0)
    requires_accessibility: bool = False

    @property
    def buffer_seconds(self) -> int:
        return self.buffer_minutes * 60

    @property
    def min_warning_seconds(self) -> int:
        return self.min_warning_minutes * 60
