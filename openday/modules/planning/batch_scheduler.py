"""
modules/planning/batch_scheduler.py
-------------------------------------
Adds several catalogue events to a visitor's schedule in one call.

Candidates are processed in the caller's order. Each timed candidate is
checked against the schedule as it stood before the call plus every
candidate already accepted earlier in the same batch.

  conflict, skip_conflicts=True   → skipped + conflicting, not added
  conflict, skip_conflicts=False  → conflicting, added anyway; the earlier
                                    batch event it overlaps is marked
                                    conflicting too
  already scheduled / repeated id → skipped
  unknown id                      → ignored (logged)

The input snapshot is never modified; the result carries a new snapshot
with the accepted events appended.
"""

from __future__ import annotations
import logging
from typing import Mapping

from openday.schemas.events import Event, ScheduleSnapshot
from openday.schemas.recommendations import BatchAddRequest, BatchAddResult
from openday.modules.tool_usage.time_tool import events_overlap_minutes

logger = logging.getLogger(__name__)


def _clashes(candidate: Event, against: list[Event]) -> list[Event]:
    if not candidate.is_timed:
        return []
    return [
        other for other in against
        if other.id != candidate.id and events_overlap_minutes(candidate, other) > 0
    ]


def batch_add(
    request: BatchAddRequest,
    snapshot: ScheduleSnapshot,
    catalogue: Mapping[str, Event],
) -> BatchAddResult:
    result = BatchAddResult(schedule=snapshot)
    accepted: list[Event] = []
    seen: set[str] = set()

    for event_id in request.event_ids:
        event = catalogue.get(event_id)
        if event is None:
            logger.info("batch_add: unknown event id %s ignored", event_id)
            continue
        if event_id in seen or snapshot.contains(event_id):
            result.skipped_event_ids.append(event_id)
            continue
        seen.add(event_id)

        clashes = _clashes(event, snapshot.timed_events + accepted)
        if clashes:
            logger.debug("batch_add: %s overlaps %s", event_id, [c.id for c in clashes])
            if request.skip_conflicts:
                result.conflicting_event_ids.append(event_id)
                result.skipped_event_ids.append(event_id)
                continue
            for other in clashes:
                if other.id in result.added_event_ids and other.id not in result.conflicting_event_ids:
                    result.conflicting_event_ids.append(other.id)
            result.conflicting_event_ids.append(event_id)

        accepted.append(event)
        result.added_event_ids.append(event_id)

    priority = request.priority_override if request.priority_override is not None else 0
    result.schedule = snapshot.with_events(accepted, priority=priority)
    return result
