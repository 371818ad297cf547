"""
modules/tool_usage/building_tool.py
-------------------------------------
Static directory of campus buildings and campus areas, plus the coordinate
lookup used to turn an event's location into a route waypoint.

Lookup order for an event (resolve_event_coordinates):
  1. location.latitude / location.longitude, when both are set
  2. building table match on location.building_name
  3. None  → the event contributes nothing to routes or travel analysis
"""

from __future__ import annotations
import logging
import re
from collections import Counter
from dataclasses import replace
from typing import Iterable, Optional

from openday.schemas.events import Event
from openday.schemas.routes import Building, CampusArea, Coordinates

logger = logging.getLogger(__name__)


# ── Campus buildings ──────────────────────────────────────────────────────────

CAMPUS_BUILDINGS: tuple[Building, ...] = (
    # ── Schloss campus (university) ───────────────────────────────────────────
    Building("schloss", "Schloss Osnabrück", Coordinates(52.2728, 8.0432),
             "Neuer Graben 29, 49074 Osnabrück", "schloss", short_name="Schloss"),
    Building("uos-aula", "Aula der Universität", Coordinates(52.2725, 8.0438),
             "Neuer Graben 29, 49074 Osnabrück", "schloss", short_name="Aula"),
    Building("seminarstrasse", "Seminarstraße Gebäude", Coordinates(52.2718, 8.0445),
             "Seminarstraße 20, 49074 Osnabrück", "schloss", short_name="Seminar",
             has_accessibility=False,
             accessibility_notes="Historic building, limited step-free access"),
    # ── Westerberg campus (university) ────────────────────────────────────────
    Building("avz", "AVZ (Allgemeines Verfügungszentrum)", Coordinates(52.2816, 8.0234),
             "Albrechtstraße 28, 49076 Osnabrück", "westerberg", short_name="AVZ"),
    Building("biologie", "Biologiegebäude", Coordinates(52.2802, 8.0241),
             "Barbarastraße 11, 49076 Osnabrück", "westerberg", short_name="Bio"),
    Building("physik", "Physikgebäude", Coordinates(52.2821, 8.0252),
             "Barbarastraße 7, 49076 Osnabrück", "westerberg", short_name="Physik"),
    Building("chemie", "Chemiegebäude", Coordinates(52.2809, 8.0263),
             "Barbarastraße 7, 49076 Osnabrück", "westerberg", short_name="Chemie"),
    Building("mathematik", "Mathematik/Informatik", Coordinates(52.2827, 8.0239),
             "Albrechtstraße 28a, 49076 Osnabrück", "westerberg", short_name="Mathe/Info"),
    Building("eihu", "EIHU (Erweiterungsbau Informatik)", Coordinates(52.2831, 8.0227),
             "Wachsbleiche 27, 49076 Osnabrück", "westerberg", short_name="EIHU"),
    # ── Caprivi campus (Hochschule) ───────────────────────────────────────────
    Building("caprivi-a", "Caprivistraße Gebäude A", Coordinates(52.2756, 8.0148),
             "Caprivistraße 30a, 49076 Osnabrück", "caprivi", short_name="CN-A"),
    Building("caprivi-b", "Caprivistraße Gebäude B", Coordinates(52.2761, 8.0155),
             "Caprivistraße 30b, 49076 Osnabrück", "caprivi", short_name="CN-B"),
    Building("caprivi-c", "Caprivistraße Gebäude C", Coordinates(52.2766, 8.0162),
             "Caprivistraße 30c, 49076 Osnabrück", "caprivi", short_name="CN-C"),
    Building("caprivi-mensa", "Mensa Caprivi", Coordinates(52.2751, 8.0141),
             "Caprivistraße 30, 49076 Osnabrück", "caprivi", short_name="Mensa CN"),
    # ── Haste campus (Hochschule) ─────────────────────────────────────────────
    Building("haste-a", "Haste Gebäude A", Coordinates(52.3006, 7.9843),
             "Am Krümpel 31, 49090 Osnabrück", "haste", short_name="HA-A"),
    Building("haste-b", "Haste Gebäude B", Coordinates(52.3011, 7.9851),
             "Am Krümpel 31, 49090 Osnabrück", "haste", short_name="HA-B"),
)

CAMPUS_AREAS: tuple[CampusArea, ...] = (
    CampusArea("schloss", "Schloss Campus", Coordinates(52.2725, 8.0440),
               north=52.2745, south=52.2705, east=8.0480, west=8.0400),
    CampusArea("westerberg", "Westerberg Campus", Coordinates(52.2815, 8.0245),
               north=52.2850, south=52.2780, east=8.0300, west=8.0190),
    CampusArea("caprivi", "Caprivi Campus (Hochschule)", Coordinates(52.2758, 8.0152),
               north=52.2780, south=52.2740, east=8.0200, west=8.0100),
    CampusArea("haste", "Haste Campus (Hochschule)", Coordinates(52.3008, 7.9847),
               north=52.3030, south=52.2990, east=7.9900, west=7.9800),
)


# ── Lookups ───────────────────────────────────────────────────────────────────

def find_building(
    id_or_name: str,
    buildings: Iterable[Building] = CAMPUS_BUILDINGS,
) -> Optional[Building]:
    """Match by id, by substring of the display name, or by exact short name."""
    key = id_or_name.strip().lower()
    if not key:
        return None
    for b in buildings:
        if (b.id.lower() == key
                or key in b.name.lower()
                or (b.short_name and b.short_name.lower() == key)):
            return b
    return None


def find_building_by_name(
    name: str,
    buildings: Iterable[Building] = CAMPUS_BUILDINGS,
) -> Optional[Building]:
    """
    Match a free-text building name against the directory.

    First pass: the query is a substring of a name or short name.
    Second pass: a full name or short name occurs as a whole word in the
    query ("Schloss Osnabrück, Raum 11/15" → Schloss Osnabrück).
    """
    key = name.strip().lower()
    if not key:
        return None
    pool = list(buildings)
    for b in pool:
        if key in b.name.lower() or (b.short_name and key in b.short_name.lower()):
            return b
    for b in pool:
        for label in (b.name, b.short_name):
            if label and re.search(rf"(?<!\w){re.escape(label.lower())}(?!\w)", key):
                return b
    return None


def resolve_event_coordinates(
    event: Event,
    buildings: Iterable[Building] = CAMPUS_BUILDINGS,
) -> Optional[Coordinates]:
    loc = event.location
    if loc is None:
        return None
    if loc.has_coordinates:
        return Coordinates(loc.latitude, loc.longitude)
    if loc.building_name:
        building = find_building_by_name(loc.building_name, buildings)
        if building is not None:
            return building.coordinates
        logger.debug("no building match for %r (event %s)", loc.building_name, event.id)
    return None


def resolve_event_building(
    event: Event,
    buildings: Iterable[Building] = CAMPUS_BUILDINGS,
) -> Optional[Building]:
    if event.location is None or not event.location.building_name:
        return None
    return find_building_by_name(event.location.building_name, buildings)


def campus_for(point: Coordinates, areas: Iterable[CampusArea] = CAMPUS_AREAS) -> str:
    """Campus id whose bounds contain *point*; "other" when none does."""
    for area in areas:
        if area.contains(point):
            return area.id
    return "other"


def assign_campus(
    buildings: Iterable[Building],
    areas: Iterable[CampusArea] = CAMPUS_AREAS,
) -> list[Building]:
    """Copy of *buildings* with an untagged ("other") campus resolved from coordinates."""
    pool = list(areas)
    return [
        replace(b, campus=campus_for(b.coordinates, pool)) if b.campus == "other" else b
        for b in buildings
    ]


def buildings_with_event_counts(
    events: Iterable[Event],
    buildings: Iterable[Building] = CAMPUS_BUILDINGS,
) -> list[Building]:
    """Copy of the directory with event_count set from the given events."""
    pool = list(buildings)
    counts: Counter[str] = Counter()
    for ev in events:
        b = resolve_event_building(ev, pool)
        if b is not None:
            counts[b.id] += 1
    return [replace(b, event_count=counts.get(b.id, 0)) for b in pool]
