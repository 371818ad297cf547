"""
modules/planning/route_planner.py
-----------------------------------
Walking routes through an ordered list of waypoints.

Architecture:
  - build_route():          waypoints → legs + totals + warnings
  - build_schedule_route(): scheduled events → waypoints → build_route()

Each leg d(i, i+1):
  1. Haversine distance between the two waypoints (distance_tool).
  2. Walking time = ceil(distance × PATH_INFLATION_FACTOR / speed).
  3. Straight two-point LineString geometry; no path-finding or obstacle
     avoidance is modelled.
  4. depart / continue / arrive instructions.

Invariants:
  len(route.legs) == len(route.waypoints) - 1   (0 below two waypoints)
  route.total_distance == sum(leg.distance)
  route.total_duration == sum(leg.duration)
"""

from __future__ import annotations
import logging
import time as _time_mod
import uuid
from typing import Iterable, Optional

from openday.schemas.events import ScheduleSnapshot
from openday.schemas.routes import (
    Building,
    Coordinates,
    Route,
    RouteGeometry,
    RouteInstruction,
    RouteLeg,
    TravelTimeSettings,
    Waypoint,
    WaypointType,
)
from openday.modules.tool_usage.building_tool import (
    CAMPUS_BUILDINGS,
    resolve_event_building,
    resolve_event_coordinates,
)
from openday.modules.tool_usage.distance_tool import calculate_distance, calculate_walking_time
from openday.modules.planning.travel_analyzer import check_travel_warnings
from openday.modules.observability.logger import StructuredLogger

logger = logging.getLogger(__name__)
_perf_logger = StructuredLogger()

CURRENT_LOCATION_ID   = "current"
CURRENT_LOCATION_NAME = "Current location"
UNKNOWN_PLACE_NAME    = "Unknown place"


# ── Leg construction ──────────────────────────────────────────────────────────

def _line_geometry(a: Coordinates, b: Coordinates) -> RouteGeometry:
    return RouteGeometry(coordinates=[a.as_lon_lat(), b.as_lon_lat()])


def build_leg(src: Waypoint, dst: Waypoint, settings: TravelTimeSettings) -> RouteLeg:
    distance = calculate_distance(src.coordinates, dst.coordinates)
    duration = calculate_walking_time(distance, settings.walking_speed)
    return RouteLeg(
        start_waypoint=src,
        end_waypoint=dst,
        distance=distance,
        duration=duration,
        geometry=_line_geometry(src.coordinates, dst.coordinates),
        instructions=[
            RouteInstruction("depart", f"Start at {src.name}"),
            RouteInstruction("continue", f"Walk to {dst.name} ({round(distance)}m)",
                             distance=distance, duration=duration),
            RouteInstruction("arrive", f"Arrive at {dst.name}"),
        ],
    )


# ── Public entry points ───────────────────────────────────────────────────────

def build_route(
    waypoints: list[Waypoint],
    settings: TravelTimeSettings | None = None,
) -> Route:
    """
    Build a route through *waypoints* in the given order.

    Fewer than two waypoints is not an error: the result is an empty route
    (no legs, zero totals, no warnings), which is what a half-built schedule
    should render as.
    """
    _t0 = _time_mod.perf_counter()
    settings = settings or TravelTimeSettings()
    route = Route(id=str(uuid.uuid4()), waypoints=list(waypoints))
    if len(waypoints) < 2:
        return route

    for src, dst in zip(waypoints, waypoints[1:]):
        leg = build_leg(src, dst, settings)
        route.legs.append(leg)
        route.total_distance += leg.distance
        route.total_duration += leg.duration

    route.warnings = check_travel_warnings(route.legs, settings)

    _perf_logger.performance("route_planner.build_route", _t0, legs=len(route.legs))
    return route


def schedule_waypoints(
    snapshot: ScheduleSnapshot,
    current: Optional[Coordinates] = None,
    buildings: Iterable[Building] = CAMPUS_BUILDINGS,
) -> list[Waypoint]:
    """
    Waypoints for the scheduled events in chronological order.
    Events whose coordinates cannot be resolved are left out.
    """
    pool = list(buildings)
    waypoints: list[Waypoint] = []

    if current is not None:
        waypoints.append(Waypoint(
            id=CURRENT_LOCATION_ID,
            name=CURRENT_LOCATION_NAME,
            coordinates=current,
            type=WaypointType.CURRENT_LOCATION,
        ))

    for event in snapshot.chronological():
        coords = resolve_event_coordinates(event, pool)
        if coords is None:
            logger.debug("event %s has no resolvable coordinates; left off the route", event.id)
            continue
        building = resolve_event_building(event, pool)
        waypoints.append(Waypoint(
            id=event.id,
            name=event.building_name or UNKNOWN_PLACE_NAME,
            coordinates=coords,
            type=WaypointType.EVENT,
            address=(event.location.address if event.location else None)
                    or (building.address if building else None),
            event_id=event.id,
            event_title=event.title,
            time_start=event.time_start,
            time_end=event.time_end,
            accessible=building.has_accessibility if building else None,
        ))
    return waypoints


def build_schedule_route(
    snapshot: ScheduleSnapshot,
    settings: TravelTimeSettings | None = None,
    current: Optional[Coordinates] = None,
    buildings: Iterable[Building] = CAMPUS_BUILDINGS,
) -> Route:
    """Route through the visitor's scheduled events, optionally from *current*."""
    return build_route(schedule_waypoints(snapshot, current, buildings), settings)
