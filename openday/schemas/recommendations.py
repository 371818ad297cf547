"""
schemas/recommendations.py
--------------------------
Input and output structures of the recommendation, batch-add and schedule
analysis components.

Request structures (context, filters, batch request) are pydantic models so
malformed input is rejected at the boundary with a ValidationError.
Results are plain dataclasses.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from openday import config
from openday.schemas.events import Event, EventType, Institution, ScheduleSnapshot


class ReasonType(str, Enum):
    STUDY_PROGRAM = "study_program"
    EVENT_TYPE    = "event_type"
    TIME_FIT      = "time_fit"
    NO_CONFLICT   = "no_conflict"
    POPULARITY    = "popularity"
    DIVERSITY     = "diversity"
    LOCATION      = "location"
    GENERAL       = "general"       # fallback when no rule fired


class GroupType(str, Enum):
    STUDY_PROGRAM = "study_program"
    EVENT_TYPE    = "event_type"


class OptimizationType(str, Enum):
    RESOLVE_CONFLICT = "resolve_conflict"
    FILL_GAP         = "fill_gap"
    REDUCE_TRAVEL    = "reduce_travel"
    ADD_DIVERSITY    = "add_diversity"


class PopularityTrend(str, Enum):
    RISING  = "rising"
    STABLE  = "stable"
    FALLING = "falling"


@dataclass(frozen=True)
class TimeSlot:
    start: datetime
    end: datetime

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() / 60 + 0.5)


@dataclass
class RecommendationReason:
    type: ReasonType
    description: str
    weight: float                  # 0–1 contribution to the score


@dataclass
class EventRecommendation:
    event: Event
    score: int                     # 0–100
    reasons: list[RecommendationReason] = field(default_factory=list)
    conflicts_with_schedule: bool = False
    conflicting_event_ids: list[str] = field(default_factory=list)
    travel_time_from_previous: Optional[int] = None   # minutes
    is_high_demand: bool = False


@dataclass
class RecommendationGroup:
    category: str
    category_type: GroupType
    recommendations: list[EventRecommendation] = field(default_factory=list)
    average_score: float = 0.0


@dataclass
class RecommendationResult:
    recommendations: list[EventRecommendation]
    groups: list[RecommendationGroup]
    total_available: int
    generated_at: datetime
    study_program_count: int = 0
    available_slot_count: int = 0
    scheduled_event_count: int = 0


@dataclass
class BatchAddResult:
    added_event_ids: list[str] = field(default_factory=list)
    skipped_event_ids: list[str] = field(default_factory=list)
    conflicting_event_ids: list[str] = field(default_factory=list)
    schedule: ScheduleSnapshot = field(default_factory=ScheduleSnapshot)

    @property
    def added_count(self) -> int:
        return len(self.added_event_ids)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped_event_ids)

    @property
    def conflict_count(self) -> int:
        return len(self.conflicting_event_ids)


@dataclass
class ScheduleConflict:
    event1_id: str
    event1_title: str
    event2_id: str
    event2_title: str
    overlap_minutes: int


@dataclass
class SuggestedAction:
    action: str                    # swap | remove | add | move
    event_ids: list[str]
    reason: str


@dataclass
class ScheduleOptimization:
    type: OptimizationType
    description: str
    suggested_action: SuggestedAction
    benefit_score: int


@dataclass
class DiversityReport:
    event_type_distribution: dict[str, int] = field(default_factory=dict)
    study_program_distribution: dict[str, int] = field(default_factory=dict)
    location_distribution: dict[str, int] = field(default_factory=dict)


@dataclass
class ScheduleOptimizationResult:
    current_score: int
    optimizations: list[ScheduleOptimization] = field(default_factory=list)
    gaps: list[TimeSlot] = field(default_factory=list)
    conflicts: list[ScheduleConflict] = field(default_factory=list)
    diversity: DiversityReport = field(default_factory=DiversityReport)


@dataclass
class EventPopularity:
    event_id: str
    view_count: int = 0
    add_to_schedule_count: int = 0
    popularity_score: int = 0
    trend: PopularityTrend = PopularityTrend.STABLE


# ── Request models ────────────────────────────────────────────────────────────

class RecommendationContext(BaseModel):
    """What the visitor told us, besides the schedule itself."""
    study_program_ids: list[str] = Field(default_factory=list)
    available_time_slots: list[TimeSlot] = Field(default_factory=list)
    institution: Optional[Institution] = None
    preferred_event_types: list[EventType] = Field(default_factory=list)
    viewed_event_ids: list[str] = Field(default_factory=list)
    dismissed_event_ids: list[str] = Field(default_factory=list)
    max_travel_time: int = Field(config.DEFAULT_MAX_TRAVEL_MINUTES, ge=0)   # minutes


class RecommendationFilters(BaseModel):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    exclude_conflicts: bool = False
    only_high_demand: bool = False
    event_types: list[EventType] = Field(default_factory=list)
    min_score: int = Field(0, ge=0, le=100)
    limit: int = Field(config.DEFAULT_RECOMMENDATION_LIMIT, ge=1)

    @model_validator(mode="after")
    def _check_range(self) -> "RecommendationFilters":
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class BatchAddRequest(BaseModel):
    event_ids: list[str] = Field(..., min_length=1)
    skip_conflicts: bool = True
    priority_override: Optional[int] = None
