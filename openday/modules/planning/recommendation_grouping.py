"""
modules/planning/recommendation_grouping.py
---------------------------------------------
Buckets a ranked recommendation list for display.

  - one bucket per study program name, one per event type label
  - a recommendation can sit in several program buckets
  - buckets with fewer than MIN_GROUP_SIZE members are dropped
  - result sorted by average score, descending; the sort is stable, so at
    equal averages program groups come before type groups and each keeps
    first-seen order
"""

from __future__ import annotations

from openday.schemas.events import event_type_label
from openday.schemas.recommendations import (
    EventRecommendation,
    GroupType,
    RecommendationGroup,
)

MIN_GROUP_SIZE = 2


def _make_group(
    category: str,
    category_type: GroupType,
    members: list[EventRecommendation],
) -> RecommendationGroup:
    return RecommendationGroup(
        category=category,
        category_type=category_type,
        recommendations=members,
        average_score=sum(r.score for r in members) / len(members),
    )


def group_recommendations(recommendations: list[EventRecommendation]) -> list[RecommendationGroup]:
    by_program: dict[str, list[EventRecommendation]] = {}
    by_type: dict[str, list[EventRecommendation]] = {}

    for rec in recommendations:
        for program in rec.event.study_programs:
            members = by_program.setdefault(program.name, [])
            if rec not in members:
                members.append(rec)
        by_type.setdefault(event_type_label(rec.event.event_type), []).append(rec)

    groups = [
        _make_group(name, GroupType.STUDY_PROGRAM, members)
        for name, members in by_program.items()
        if len(members) >= MIN_GROUP_SIZE
    ]
    groups += [
        _make_group(label, GroupType.EVENT_TYPE, members)
        for label, members in by_type.items()
        if len(members) >= MIN_GROUP_SIZE
    ]
    groups.sort(key=lambda g: g.average_score, reverse=True)
    return groups
