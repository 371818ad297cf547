"""
modules/planning/travel_analyzer.py
-------------------------------------
Can the visitor walk from one scheduled event to the next in time?

Two entry points:
  check_travel_warnings()  — per-leg warnings attached to a built Route
  analyze_travel_times()   — per consecutive event pair, independent of routes

Leg warning rules (both families are additive):
  insufficient_time  available < walking            → error
                     walking ≤ available < walking + buffer → warning
  long_distance      distance > LONG_DISTANCE_THRESHOLD_M   → info
  accessibility      requires_accessibility and the destination is marked
                     not accessible                          → warning

Pair status (analyze_travel_times), margin = available − walking − buffer:
  margin < 0                  → insufficient
  0 ≤ margin < min_warning    → tight
  otherwise                   → ok

Pairs with missing coordinates or times are skipped, never fatal.
"""

from __future__ import annotations
import logging
from typing import Iterable, Optional

from openday import config
from openday.schemas.events import Event, ScheduleSnapshot
from openday.schemas.routes import (
    AlternativeSuggestion,
    Building,
    RouteLeg,
    RouteWarning,
    TravelStatus,
    TravelTimeAnalysis,
    TravelTimeSettings,
    WarningSeverity,
    WarningType,
)
from openday.modules.tool_usage.building_tool import CAMPUS_BUILDINGS, resolve_event_coordinates
from openday.modules.tool_usage.distance_tool import (
    calculate_distance,
    calculate_walking_time,
    format_distance,
    format_duration,
)
from openday.modules.tool_usage.time_tool import seconds_between

logger = logging.getLogger(__name__)


# ── Route warnings ────────────────────────────────────────────────────────────

def check_travel_warnings(
    legs: list[RouteLeg],
    settings: TravelTimeSettings,
) -> list[RouteWarning]:
    warnings: list[RouteWarning] = []
    buffer_s = settings.buffer_seconds

    for index, leg in enumerate(legs):
        src = leg.start_waypoint
        dst = leg.end_waypoint

        # ── Timing: only between two time-bound stops ─────────────────────────
        if src.time_end is not None and dst.time_start is not None:
            available = seconds_between(src.time_end, dst.time_start)
            required  = leg.duration + buffer_s
            if available < required:
                if available < leg.duration:
                    severity = WarningSeverity.ERROR
                    message = (
                        f"Not enough time to get from {src.event_title!r} to "
                        f"{dst.event_title!r} ({format_duration(leg.duration)} walk, "
                        f"only {format_duration(max(0.0, available))} available)"
                    )
                else:
                    severity = WarningSeverity.WARNING
                    message = (
                        f"Tight transfer between {src.event_title!r} and "
                        f"{dst.event_title!r} ({format_duration(available - leg.duration)} spare)"
                    )
                warnings.append(RouteWarning(
                    type=WarningType.INSUFFICIENT_TIME,
                    severity=severity,
                    message=message,
                    leg_index=index,
                    required_time=leg.duration,
                    available_time=available,
                    event_from_id=src.event_id,
                    event_to_id=dst.event_id,
                ))

        # ── Distance: independent of timing ───────────────────────────────────
        if leg.distance > config.LONG_DISTANCE_THRESHOLD_M:
            warnings.append(RouteWarning(
                type=WarningType.LONG_DISTANCE,
                severity=WarningSeverity.INFO,
                message=(
                    f"Long walk: {format_distance(leg.distance)} (about "
                    f"{format_duration(leg.duration)}) between {src.name!r} and {dst.name!r}"
                ),
                leg_index=index,
                required_time=leg.duration,
                available_time=0,
                event_from_id=src.event_id,
                event_to_id=dst.event_id,
            ))

        if settings.requires_accessibility and dst.accessible is False:
            warnings.append(RouteWarning(
                type=WarningType.ACCESSIBILITY,
                severity=WarningSeverity.WARNING,
                message=f"{dst.name!r} has limited step-free access",
                leg_index=index,
                required_time=leg.duration,
                available_time=0,
                event_from_id=src.event_id,
                event_to_id=dst.event_id,
            ))

    return warnings


# ── Pairwise analysis ─────────────────────────────────────────────────────────

def classify_margin(margin_s: float, settings: TravelTimeSettings) -> TravelStatus:
    if margin_s < 0:
        return TravelStatus.INSUFFICIENT
    if margin_s < settings.min_warning_seconds:
        return TravelStatus.TIGHT
    return TravelStatus.OK


def analyze_pair(
    src: Event,
    dst: Event,
    settings: TravelTimeSettings,
    buildings: Iterable[Building] = CAMPUS_BUILDINGS,
) -> Optional[TravelTimeAnalysis]:
    """Analysis for one ordered pair, or None if coordinates/times are missing."""
    if src.time_end is None or dst.time_start is None:
        return None
    pool = list(buildings)
    src_xy = resolve_event_coordinates(src, pool)
    dst_xy = resolve_event_coordinates(dst, pool)
    if src_xy is None or dst_xy is None:
        return None

    distance  = calculate_distance(src_xy, dst_xy)
    walking   = calculate_walking_time(distance, settings.walking_speed)
    available = seconds_between(src.time_end, dst.time_start)
    margin    = available - walking - settings.buffer_seconds

    return TravelTimeAnalysis(
        event_from_id=src.id,
        event_to_id=dst.id,
        event_from_title=src.title,
        event_to_title=dst.title,
        time_between_events=available,
        walking_time=walking,
        distance=distance,
        time_margin=margin,
        status=classify_margin(margin, settings),
    )


def analyze_travel_times(
    snapshot: ScheduleSnapshot,
    settings: TravelTimeSettings | None = None,
    buildings: Iterable[Building] = CAMPUS_BUILDINGS,
) -> list[TravelTimeAnalysis]:
    """One record per chronologically adjacent pair of events that have a start time."""
    settings = settings or TravelTimeSettings()
    pool = list(buildings)
    ordered = [e for e in snapshot.chronological() if e.time_start is not None]

    analyses: list[TravelTimeAnalysis] = []
    for src, dst in zip(ordered, ordered[1:]):
        result = analyze_pair(src, dst, settings, pool)
        if result is None:
            logger.debug("travel analysis skipped %s → %s (missing data)", src.id, dst.id)
            continue
        analyses.append(result)
    return analyses


# ── Alternatives ──────────────────────────────────────────────────────────────

def suggest_alternatives(
    conflicting_event_id: str,
    snapshot: ScheduleSnapshot,
    candidates: Iterable[Event],
    settings: TravelTimeSettings | None = None,
    buildings: Iterable[Building] = CAMPUS_BUILDINGS,
    limit: int = config.MAX_ALTERNATIVES,
) -> list[AlternativeSuggestion]:
    """
    Unscheduled events sharing a study program with a hard-to-reach scheduled
    event, ranked by walking time from the event scheduled just before it.
    """
    settings = settings or TravelTimeSettings()
    pool = list(buildings)
    ordered = snapshot.chronological()
    index = next((i for i, e in enumerate(ordered) if e.id == conflicting_event_id), -1)
    if index <= 0:
        return []

    target = ordered[index]
    prev_xy = resolve_event_coordinates(ordered[index - 1], pool)
    if prev_xy is None:
        return []

    program_ids = set(target.study_program_ids)
    suggestions: list[AlternativeSuggestion] = []
    for alt in candidates:
        if snapshot.contains(alt.id) or not program_ids.intersection(alt.study_program_ids):
            continue
        alt_xy = resolve_event_coordinates(alt, pool)
        if alt_xy is None:
            continue
        walking = calculate_walking_time(calculate_distance(prev_xy, alt_xy), settings.walking_speed)
        suggestions.append(AlternativeSuggestion(
            event_id=alt.id,
            title=alt.title,
            reason=f"Shorter walk ({format_duration(walking)})",
            new_travel_time=walking,
        ))

    suggestions.sort(key=lambda s: s.new_travel_time)
    return suggestions[:limit]
