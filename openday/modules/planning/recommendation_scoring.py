"""
modules/planning/recommendation_scoring.py
--------------------------------------------
Additive scoring of candidate events against a visitor's schedule and stated
interests.

  score = Σ rule points − viewed penalty, clamped to [0, 100]

  Rule            Points  Condition
  study_program   20 × k  k matching study program ids, capped at 40
  event_type      15      event type ∈ preferred_event_types
  time_fit        15      event (start and end) lies inside an available slot
  no_conflict     10      schedule non-empty and no overlap with any timed item
  popularity      10      popularity score > HIGH_DEMAND_THRESHOLD
  diversity        5      event type not yet in the schedule
  location         5      walk from the previous scheduled event ≤ max travel
                          time and ≤ the gap between the two events
  (viewed)        −5      event id ∈ viewed_event_ids; no reason attached

Each fired rule contributes one RecommendationReason with weight = points/100.
A candidate that fires no rule gets a single "general" reason.

"Previous scheduled event" = the scheduled event with the latest end strictly
before the candidate's start. Its walking time uses Haversine when both
buildings resolve to coordinates, else a building-name heuristic:
  unknown / identical name → 0 min, same first word → 2 min, otherwise 10 min.
"""

from __future__ import annotations
import logging
import time as _time_mod
from datetime import datetime, timezone
from typing import Iterable, Optional

from openday import config
from openday.schemas.events import Event, Institution, ScheduleSnapshot, event_type_label
from openday.schemas.routes import Building
from openday.schemas.recommendations import (
    EventRecommendation,
    ReasonType,
    RecommendationContext,
    RecommendationFilters,
    RecommendationReason,
    RecommendationResult,
    TimeSlot,
)
from openday.modules.memory.popularity_tracker import PopularityTracker, get_popularity_tracker
from openday.modules.tool_usage.building_tool import CAMPUS_BUILDINGS, resolve_event_coordinates
from openday.modules.tool_usage.distance_tool import DistanceTool
from openday.modules.tool_usage.time_tool import (
    events_overlap_minutes,
    fits_time_slot,
    minutes_between,
)
from openday.modules.planning.recommendation_grouping import group_recommendations
from openday.modules.observability.logger import StructuredLogger

logger = logging.getLogger(__name__)
_perf_logger = StructuredLogger()


# Rule points (score contribution; reason weight = points / 100)
_PROGRAM_POINTS_EACH = 20
_PROGRAM_POINTS_CAP  = 40
_EVENT_TYPE_POINTS   = 15
_TIME_FIT_POINTS     = 15
_NO_CONFLICT_POINTS  = 10
_POPULARITY_POINTS   = 10
_DIVERSITY_POINTS    = 5
_LOCATION_POINTS     = 5
_VIEWED_PENALTY      = 5

# Building-name heuristic [minutes]
_SAME_BUILDING_MINUTES  = 0
_SAME_COMPLEX_MINUTES   = 2
_OTHER_BUILDING_MINUTES = 10


def _clamp_score(raw: int) -> int:
    return max(0, min(100, int(raw)))


def estimate_travel_minutes(from_building: Optional[str], to_building: Optional[str]) -> int:
    """Rough walk between two building names when no coordinates are known."""
    if not from_building or not to_building:
        return _SAME_BUILDING_MINUTES
    a = from_building.strip().lower()
    b = to_building.strip().lower()
    if a == b:
        return _SAME_BUILDING_MINUTES
    if a.split()[:1] == b.split()[:1]:
        return _SAME_COMPLEX_MINUTES
    return _OTHER_BUILDING_MINUTES


def previous_scheduled_event(event: Event, snapshot: ScheduleSnapshot) -> Optional[Event]:
    """Scheduled event with the latest end strictly before *event* starts."""
    if event.time_start is None:
        return None
    earlier = [
        e for e in snapshot.events
        if e.id != event.id and e.time_end is not None and e.time_end < event.time_start
    ]
    if not earlier:
        return None
    return max(earlier, key=lambda e: e.time_end)


class RecommendationScorer:
    """
    Scores, filters, ranks and groups catalogue events for one visitor.

    Stateless apart from the popularity tracker it reads from; one instance
    can serve concurrent requests.
    """

    def __init__(
        self,
        tracker: PopularityTracker | None = None,
        buildings: Iterable[Building] = CAMPUS_BUILDINGS,
        distance_tool: DistanceTool | None = None,
    ):
        self.tracker       = tracker or get_popularity_tracker()
        self.buildings     = list(buildings)
        self.distance_tool = distance_tool or DistanceTool()

    # ── Public ────────────────────────────────────────────────────────────────

    def score_event(
        self,
        event: Event,
        snapshot: ScheduleSnapshot,
        context: RecommendationContext,
    ) -> EventRecommendation:
        reasons: list[RecommendationReason] = []
        score = 0

        # ── Study programs ────────────────────────────────────────────────────
        wanted = set(context.study_program_ids)
        matching = [sp for sp in event.study_programs if sp.id in wanted]
        if matching:
            points = min(_PROGRAM_POINTS_CAP, len(matching) * _PROGRAM_POINTS_EACH)
            score += points
            reasons.append(RecommendationReason(
                ReasonType.STUDY_PROGRAM,
                f"Matches {len(matching)} of your study programs "
                f"({', '.join(sp.name for sp in matching)})",
                points / 100,
            ))

        # ── Event type ────────────────────────────────────────────────────────
        if event.event_type in context.preferred_event_types:
            score += _EVENT_TYPE_POINTS
            reasons.append(RecommendationReason(
                ReasonType.EVENT_TYPE,
                f"{event_type_label(event.event_type)} are one of your preferred formats",
                _EVENT_TYPE_POINTS / 100,
            ))

        # ── Time slots ────────────────────────────────────────────────────────
        if event.is_timed and any(
            fits_time_slot(event.time_start, event.time_end, slot)
            for slot in context.available_time_slots
        ):
            score += _TIME_FIT_POINTS
            reasons.append(RecommendationReason(
                ReasonType.TIME_FIT,
                "Fits into one of your free time slots",
                _TIME_FIT_POINTS / 100,
            ))

        # ── Conflicts ─────────────────────────────────────────────────────────
        conflicting_ids = [
            s.id for s in snapshot.timed_events
            if s.id != event.id and events_overlap_minutes(event, s) > 0
        ]
        if snapshot and not conflicting_ids:
            score += _NO_CONFLICT_POINTS
            reasons.append(RecommendationReason(
                ReasonType.NO_CONFLICT,
                "No overlap with your schedule",
                _NO_CONFLICT_POINTS / 100,
            ))

        # ── Popularity ────────────────────────────────────────────────────────
        high_demand = self.tracker.is_high_demand(event.id)
        if high_demand:
            score += _POPULARITY_POINTS
            reasons.append(RecommendationReason(
                ReasonType.POPULARITY,
                "Popular with other visitors",
                _POPULARITY_POINTS / 100,
            ))

        # ── Diversity ─────────────────────────────────────────────────────────
        if event.event_type not in snapshot.event_types:
            score += _DIVERSITY_POINTS
            reasons.append(RecommendationReason(
                ReasonType.DIVERSITY,
                f"Adds variety: no {event_type_label(event.event_type).lower()} in your schedule yet",
                _DIVERSITY_POINTS / 100,
            ))

        # ── Location ──────────────────────────────────────────────────────────
        travel_minutes: Optional[int] = None
        previous = previous_scheduled_event(event, snapshot)
        if previous is not None:
            travel_minutes = self.travel_minutes(previous, event)
            gap_minutes = minutes_between(previous.time_end, event.time_start)
            if travel_minutes <= context.max_travel_time and travel_minutes <= gap_minutes:
                score += _LOCATION_POINTS
                reasons.append(RecommendationReason(
                    ReasonType.LOCATION,
                    f"Only {travel_minutes} min walk from {previous.title!r}",
                    _LOCATION_POINTS / 100,
                ))

        if event.id in context.viewed_event_ids:
            score -= _VIEWED_PENALTY

        if not reasons:
            reasons.append(RecommendationReason(
                ReasonType.GENERAL, "Part of the open-day programme", 0.0,
            ))

        return EventRecommendation(
            event=event,
            score=_clamp_score(score),
            reasons=reasons,
            conflicts_with_schedule=bool(conflicting_ids),
            conflicting_event_ids=conflicting_ids,
            travel_time_from_previous=travel_minutes,
            is_high_demand=high_demand,
        )

    def recommend(
        self,
        candidates: Iterable[Event],
        snapshot: ScheduleSnapshot,
        context: RecommendationContext,
        filters: RecommendationFilters | None = None,
    ) -> RecommendationResult:
        """
        Full pipeline: pre-filter → score → post-filter → rank → limit → group.

        Ranking is a stable sort on score, so equal scores keep catalogue
        order. total_available counts recommendations that survived every
        filter, before the limit is applied.
        """
        _t0 = _time_mod.perf_counter()
        filters = filters or RecommendationFilters()

        pool = self._prefilter(candidates, snapshot, context, filters)

        ranked: list[EventRecommendation] = []
        for event in pool:
            rec = self.score_event(event, snapshot, context)
            if filters.exclude_conflicts and rec.conflicts_with_schedule:
                continue
            if filters.only_high_demand and not rec.is_high_demand:
                continue
            if rec.score < filters.min_score:
                continue
            ranked.append(rec)

        ranked.sort(key=lambda r: r.score, reverse=True)
        limited = ranked[:filters.limit]

        result = RecommendationResult(
            recommendations=limited,
            groups=group_recommendations(limited),
            total_available=len(ranked),
            generated_at=datetime.now(timezone.utc),
            study_program_count=len(context.study_program_ids),
            available_slot_count=len(context.available_time_slots),
            scheduled_event_count=len(snapshot),
        )
        _perf_logger.performance(
            "recommendation_scoring.recommend", _t0,
            candidates=len(pool), returned=len(limited),
        )
        return result

    def events_for_time_slots(
        self,
        candidates: Iterable[Event],
        slots: list[TimeSlot],
        exclude_ids: Iterable[str] = (),
        limit: int = config.DEFAULT_RECOMMENDATION_LIMIT,
    ) -> list[EventRecommendation]:
        """Events that fit completely inside one of *slots*, at a fixed score."""
        if not slots:
            return []
        excluded = set(exclude_ids)
        weight = config.TIME_SLOT_MATCH_SCORE / 100
        out: list[EventRecommendation] = []
        for event in candidates:
            if event.id in excluded:
                continue
            if not any(fits_time_slot(event.time_start, event.time_end, s) for s in slots):
                continue
            out.append(EventRecommendation(
                event=event,
                score=config.TIME_SLOT_MATCH_SCORE,
                reasons=[RecommendationReason(
                    ReasonType.TIME_FIT, "Fits into your free time", weight,
                )],
                is_high_demand=self.tracker.is_high_demand(event.id),
            ))
            if len(out) >= limit:
                break
        return out

    def popular_events(
        self,
        catalogue: Iterable[Event],
        limit: int = 10,
    ) -> list[EventRecommendation]:
        """Most viewed / most scheduled catalogue events, best first."""
        by_id = {e.id: e for e in catalogue}
        out: list[EventRecommendation] = []
        for pop in self.tracker.most_popular(None):
            event = by_id.get(pop.event_id)
            if event is None:
                continue
            out.append(EventRecommendation(
                event=event,
                score=pop.popularity_score or 50,
                reasons=[RecommendationReason(
                    ReasonType.POPULARITY,
                    f"Viewed {pop.view_count}×, scheduled {pop.add_to_schedule_count}×",
                    1.0,
                )],
                is_high_demand=pop.popularity_score > config.HIGH_DEMAND_THRESHOLD,
            ))
            if len(out) >= limit:
                break
        return out

    def travel_minutes(self, src: Event, dst: Event) -> int:
        """Walking minutes between two events' buildings."""
        src_xy = resolve_event_coordinates(src, self.buildings)
        dst_xy = resolve_event_coordinates(dst, self.buildings)
        if src_xy is not None and dst_xy is not None:
            return self.distance_tool.walking_time_minutes(src_xy, dst_xy)
        return estimate_travel_minutes(src.building_name, dst.building_name)

    # ── Internal ──────────────────────────────────────────────────────────────

    @staticmethod
    def _prefilter(
        candidates: Iterable[Event],
        snapshot: ScheduleSnapshot,
        context: RecommendationContext,
        filters: RecommendationFilters,
    ) -> list[Event]:
        dismissed = set(context.dismissed_event_ids)
        institution = context.institution
        pool: list[Event] = []
        for event in candidates:
            if snapshot.contains(event.id) or event.id in dismissed:
                continue
            if filters.start_date or filters.end_date:
                if event.time_start is None:
                    continue
                if filters.start_date and event.time_start < filters.start_date:
                    continue
                if filters.end_date and event.time_start > filters.end_date:
                    continue
            if (institution and institution != Institution.BOTH
                    and event.institution not in (institution, Institution.BOTH)):
                continue
            if filters.event_types and event.event_type not in filters.event_types:
                continue
            pool.append(event)
            if len(pool) >= config.MAX_CANDIDATES:
                logger.debug("candidate cap %d reached", config.MAX_CANDIDATES)
                break
        return pool
