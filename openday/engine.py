"""
engine.py
---------
OpenDayEngine — the single entry point the surrounding event application
talks to.

The engine holds a validated slice of the event catalogue and the building
directory, and wires the planning components together:

  recommend / score          → modules/planning/recommendation_scoring.py
  batch_add                  → modules/planning/batch_scheduler.py
  analyze_schedule           → modules/planning/schedule_optimizer.py
  build_route / build_schedule_route
                             → modules/planning/route_planner.py
  analyze_travel / suggest_alternatives
                             → modules/planning/travel_analyzer.py
  record_view / record_scheduled / popular_events
                             → modules/memory/popularity_tracker.py

Every call is a pure function of its inputs plus the popularity counters.
Nothing here performs I/O apart from the optional Redis popularity backend
and the structured performance log.

Usage:
    engine = OpenDayEngine(events)
    schedule = engine.snapshot(["evt-1", "evt-7"])
    result = engine.recommend(schedule, RecommendationContext(study_program_ids=["inf"]))
"""

from __future__ import annotations
import logging
from typing import Iterable, Optional

from openday import config
from openday.schemas.events import Event, ScheduleSnapshot
from openday.schemas.routes import (
    AlternativeSuggestion,
    Building,
    Coordinates,
    Route,
    TravelTimeAnalysis,
    TravelTimeSettings,
    Waypoint,
)
from openday.schemas.recommendations import (
    BatchAddRequest,
    BatchAddResult,
    EventRecommendation,
    RecommendationContext,
    RecommendationFilters,
    RecommendationResult,
    ScheduleOptimizationResult,
    TimeSlot,
)
from openday.modules.memory.popularity_tracker import PopularityTracker, get_popularity_tracker
from openday.modules.planning import route_planner, travel_analyzer
from openday.modules.planning.batch_scheduler import batch_add
from openday.modules.planning.recommendation_scoring import RecommendationScorer
from openday.modules.planning.schedule_optimizer import analyze_schedule
from openday.modules.tool_usage.building_tool import (
    CAMPUS_BUILDINGS,
    assign_campus,
    buildings_with_event_counts,
)
from openday.modules.validation import (
    filter_valid,
    parse_coordinates,
    validate_building,
    validate_event,
)

logger = logging.getLogger(__name__)


class OpenDayEngine:

    def __init__(
        self,
        events: Iterable[Event],
        buildings: Iterable[Building] = CAMPUS_BUILDINGS,
        tracker: PopularityTracker | None = None,
        settings: TravelTimeSettings | None = None,
    ):
        self.catalogue: dict[str, Event] = {}
        for event in filter_valid(events, validate_event):
            if event.id in self.catalogue:
                logger.warning("duplicate catalogue id %s; keeping the first record", event.id)
                continue
            self.catalogue[event.id] = event

        self.buildings = assign_campus(filter_valid(buildings, validate_building))
        self.tracker   = tracker or get_popularity_tracker()
        self.settings  = settings or TravelTimeSettings()
        self.scorer    = RecommendationScorer(self.tracker, self.buildings)
        logger.info(
            "engine ready: %d events, %d buildings, popularity backend %s",
            len(self.catalogue), len(self.buildings), type(self.tracker).__name__,
        )

    # ── Schedule ──────────────────────────────────────────────────────────────

    def snapshot(self, event_ids: Iterable[str], priority: int = 0) -> ScheduleSnapshot:
        """Build a schedule from catalogue ids; unknown ids are dropped."""
        events: list[Event] = []
        for event_id in event_ids:
            event = self.catalogue.get(event_id)
            if event is None:
                logger.info("snapshot: unknown event id %s ignored", event_id)
                continue
            events.append(event)
        return ScheduleSnapshot.from_events(events, priority=priority)

    def batch_add(self, request: BatchAddRequest, snapshot: ScheduleSnapshot) -> BatchAddResult:
        return batch_add(request, snapshot, self.catalogue)

    def analyze_schedule(self, snapshot: ScheduleSnapshot) -> ScheduleOptimizationResult:
        return analyze_schedule(snapshot)

    # ── Recommendations ───────────────────────────────────────────────────────

    def score(
        self,
        event: Event,
        snapshot: ScheduleSnapshot,
        context: RecommendationContext,
    ) -> EventRecommendation:
        return self.scorer.score_event(event, snapshot, context)

    def recommend(
        self,
        snapshot: ScheduleSnapshot,
        context: RecommendationContext,
        filters: RecommendationFilters | None = None,
        candidates: Optional[Iterable[Event]] = None,
    ) -> RecommendationResult:
        """Rank *candidates* (default: the whole catalogue) for this visitor."""
        pool = self.catalogue.values() if candidates is None else candidates
        return self.scorer.recommend(pool, snapshot, context, filters)

    def events_for_time_slots(
        self,
        slots: list[TimeSlot],
        exclude_ids: Iterable[str] = (),
        limit: int = config.DEFAULT_RECOMMENDATION_LIMIT,
    ) -> list[EventRecommendation]:
        return self.scorer.events_for_time_slots(self.catalogue.values(), slots, exclude_ids, limit)

    def popular_events(self, limit: int = 10) -> list[EventRecommendation]:
        return self.scorer.popular_events(self.catalogue.values(), limit)

    # ── Popularity ────────────────────────────────────────────────────────────

    def record_view(self, event_id: str) -> None:
        self.tracker.record_view(event_id)

    def record_scheduled(self, event_id: str) -> None:
        self.tracker.record_scheduled(event_id)

    # ── Routes / travel ───────────────────────────────────────────────────────

    def build_route(
        self,
        waypoints: list[Waypoint],
        settings: TravelTimeSettings | None = None,
    ) -> Route:
        return route_planner.build_route(waypoints, settings or self.settings)

    def build_schedule_route(
        self,
        snapshot: ScheduleSnapshot,
        settings: TravelTimeSettings | None = None,
        current: Coordinates | tuple[float, float] | None = None,
    ) -> Route:
        start = parse_coordinates(current) if current is not None else None
        return route_planner.build_schedule_route(
            snapshot, settings or self.settings, start, self.buildings,
        )

    def analyze_travel(
        self,
        snapshot: ScheduleSnapshot,
        settings: TravelTimeSettings | None = None,
    ) -> list[TravelTimeAnalysis]:
        return travel_analyzer.analyze_travel_times(snapshot, settings or self.settings, self.buildings)

    def suggest_alternatives(
        self,
        event_id: str,
        snapshot: ScheduleSnapshot,
        settings: TravelTimeSettings | None = None,
    ) -> list[AlternativeSuggestion]:
        return travel_analyzer.suggest_alternatives(
            event_id, snapshot, self.catalogue.values(), settings or self.settings, self.buildings,
        )

    def buildings_with_event_counts(self) -> list[Building]:
        return buildings_with_event_counts(self.catalogue.values(), self.buildings)
