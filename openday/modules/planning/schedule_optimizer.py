"""
modules/planning/schedule_optimizer.py
----------------------------------------
Schedule-wide health check: conflicts, idle gaps, variety, and a single
0–100 score with ranked improvement suggestions.

  score = 50
          − 15 × conflicts
          + min(20, 5 × distinct event types)
          + min(20, 2 × events)
          − min(10, 2 × gaps)
  clamped to [0, 100]; an empty schedule scores 0.

Gaps: between chronologically adjacent fully-timed events, same calendar day,
GAP_MIN_MINUTES ≤ gap ≤ GAP_MAX_MINUTES.

Suggestions (benefit scores from config, sorted descending, stable):
  resolve_conflict  one per conflicting pair       → remove either event
  fill_gap          one per gap ≥ GAP_FILL_MIN     → add an event
  add_diversity     all events share one type and there are at least
                    DIVERSITY_MIN_EVENTS of them   → add another type
"""

from __future__ import annotations
import time as _time_mod
from collections import Counter

from openday import config
from openday.schemas.events import Event, ScheduleSnapshot, event_type_label
from openday.schemas.recommendations import (
    DiversityReport,
    OptimizationType,
    ScheduleConflict,
    ScheduleOptimization,
    ScheduleOptimizationResult,
    SuggestedAction,
    TimeSlot,
)
from openday.modules.tool_usage.time_tool import (
    events_overlap_minutes,
    minutes_between,
    same_calendar_day,
)
from openday.modules.observability.logger import StructuredLogger

_perf_logger = StructuredLogger()

_BASE_SCORE          = 50
_CONFLICT_PENALTY    = 15
_TYPE_BONUS_EACH     = 5
_TYPE_BONUS_CAP      = 20
_EVENT_BONUS_EACH    = 2
_EVENT_BONUS_CAP     = 20
_GAP_PENALTY_EACH    = 2
_GAP_PENALTY_CAP     = 10


# ── Detection ─────────────────────────────────────────────────────────────────

def find_conflicts(events: list[Event]) -> list[ScheduleConflict]:
    """Every overlapping pair (i < j) in the given order."""
    conflicts: list[ScheduleConflict] = []
    for i, a in enumerate(events):
        for b in events[i + 1:]:
            overlap = events_overlap_minutes(a, b)
            if overlap > 0:
                conflicts.append(ScheduleConflict(a.id, a.title, b.id, b.title, overlap))
    return conflicts


def find_gaps(events: list[Event]) -> list[TimeSlot]:
    timed = sorted((e for e in events if e.is_timed), key=lambda e: e.time_start)
    gaps: list[TimeSlot] = []
    for current, nxt in zip(timed, timed[1:]):
        if not same_calendar_day(current.time_end, nxt.time_start):
            continue
        minutes = minutes_between(current.time_end, nxt.time_start)
        if config.GAP_MIN_MINUTES <= minutes <= config.GAP_MAX_MINUTES:
            gaps.append(TimeSlot(current.time_end, nxt.time_start))
    return gaps


def diversity_report(events: list[Event]) -> DiversityReport:
    by_type: Counter[str] = Counter()
    by_program: Counter[str] = Counter()
    by_location: Counter[str] = Counter()
    for e in events:
        by_type[e.event_type.value] += 1
        for sp in e.study_programs:
            by_program[sp.name] += 1
        if e.building_name:
            by_location[e.building_name] += 1
    return DiversityReport(dict(by_type), dict(by_program), dict(by_location))


# ── Suggestions ───────────────────────────────────────────────────────────────

def _suggestions(
    events: list[Event],
    conflicts: list[ScheduleConflict],
    gaps: list[TimeSlot],
    diversity: DiversityReport,
) -> list[ScheduleOptimization]:
    out: list[ScheduleOptimization] = []

    for c in conflicts:
        out.append(ScheduleOptimization(
            type=OptimizationType.RESOLVE_CONFLICT,
            description=f"{c.event1_title!r} and {c.event2_title!r} overlap by {c.overlap_minutes} min",
            suggested_action=SuggestedAction(
                action="remove",
                event_ids=[c.event1_id, c.event2_id],
                reason=f"Remove {c.event1_title!r} or {c.event2_title!r} to resolve the conflict",
            ),
            benefit_score=config.BENEFIT_RESOLVE_CONFLICT,
        ))

    for gap in gaps:
        if gap.duration_minutes < config.GAP_FILL_MIN_MINUTES:
            continue
        out.append(ScheduleOptimization(
            type=OptimizationType.FILL_GAP,
            description=f"Free gap of {gap.duration_minutes} min",
            suggested_action=SuggestedAction(
                action="add",
                event_ids=[],
                reason=f"Add an event between {gap.start:%H:%M} and {gap.end:%H:%M}",
            ),
            benefit_score=config.BENEFIT_FILL_GAP,
        ))

    types = diversity.event_type_distribution
    if len(types) == 1 and len(events) >= config.DIVERSITY_MIN_EVENTS:
        only = event_type_label(next(iter(types)))
        out.append(ScheduleOptimization(
            type=OptimizationType.ADD_DIVERSITY,
            description=f"All scheduled events are {only.lower()}",
            suggested_action=SuggestedAction(
                action="add",
                event_ids=[],
                reason="Add a different kind of event for more variety",
            ),
            benefit_score=config.BENEFIT_ADD_DIVERSITY,
        ))

    out.sort(key=lambda o: o.benefit_score, reverse=True)
    return out


def schedule_score(n_events: int, n_conflicts: int, n_types: int, n_gaps: int) -> int:
    if n_events == 0:
        return 0
    score = (
        _BASE_SCORE
        - _CONFLICT_PENALTY * n_conflicts
        + min(_TYPE_BONUS_CAP, _TYPE_BONUS_EACH * n_types)
        + min(_EVENT_BONUS_CAP, _EVENT_BONUS_EACH * n_events)
        - min(_GAP_PENALTY_CAP, _GAP_PENALTY_EACH * n_gaps)
    )
    return max(0, min(100, score))


# ── Public entry point ────────────────────────────────────────────────────────

def analyze_schedule(snapshot: ScheduleSnapshot) -> ScheduleOptimizationResult:
    if not snapshot:
        return ScheduleOptimizationResult(current_score=0)

    _t0 = _time_mod.perf_counter()
    events    = snapshot.chronological()
    conflicts = find_conflicts(events)
    gaps      = find_gaps(events)
    diversity = diversity_report(events)

    result = ScheduleOptimizationResult(
        current_score=schedule_score(
            len(events), len(conflicts), len(diversity.event_type_distribution), len(gaps),
        ),
        optimizations=_suggestions(events, conflicts, gaps, diversity),
        gaps=gaps,
        conflicts=conflicts,
        diversity=diversity,
    )
    _perf_logger.performance(
        "schedule_optimizer.analyze_schedule", _t0,
        events=len(events), conflicts=len(conflicts),
    )
    return result
