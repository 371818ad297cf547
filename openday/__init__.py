"""
openday
-------
Recommendation, schedule-conflict and walking-route engine for a university
open day.

Public exports:
    from openday import OpenDayEngine, ScheduleSnapshot, RecommendationContext
"""

from openday.engine import OpenDayEngine
from openday.schemas.events import (
    Event,
    EventType,
    Institution,
    Location,
    ScheduleSnapshot,
    StudyProgram,
)
from openday.schemas.routes import Coordinates, TravelTimeSettings, Waypoint
from openday.schemas.recommendations import (
    BatchAddRequest,
    RecommendationContext,
    RecommendationFilters,
    TimeSlot,
)

__all__ = [
    "OpenDayEngine",
    "Event",
    "EventType",
    "Institution",
    "Location",
    "ScheduleSnapshot",
    "StudyProgram",
    "Coordinates",
    "TravelTimeSettings",
    "Waypoint",
    "BatchAddRequest",
    "RecommendationContext",
    "RecommendationFilters",
    "TimeSlot",
]
