import pytest

from openday.schemas.events import ScheduleSnapshot
from openday.schemas.routes import (
    Coordinates,
    TravelTimeSettings,
    WarningSeverity,
    WarningType,
    Waypoint,
    WaypointType,
)
from openday.modules.planning.route_planner import (
    CURRENT_LOCATION_ID,
    build_route,
    build_schedule_route,
    schedule_waypoints,
)
from conftest import AULA, AVZ, CAPRIVI_A, SCHLOSS, at, loc, make_event


def stop(stop_id, coords, start=None, end=None):
    return Waypoint(
        id=stop_id,
        name=stop_id,
        coordinates=Coordinates(*coords),
        type=WaypointType.EVENT,
        event_id=stop_id,
        event_title=stop_id,
        time_start=start,
        time_end=end,
    )


@pytest.mark.parametrize("waypoints", [[], [stop("a", SCHLOSS)]])
def test_fewer_than_two_waypoints_gives_empty_route(waypoints):
    route = build_route(waypoints)
    assert route.legs == []
    assert route.total_distance == 0
    assert route.total_duration == 0
    assert route.warnings == []
    assert not route.has_warnings


def test_one_leg_per_consecutive_pair():
    waypoints = [stop("a", SCHLOSS), stop("b", AVZ), stop("c", CAPRIVI_A)]
    route = build_route(waypoints)

    assert len(route.legs) == 2
    assert route.total_distance == pytest.approx(sum(l.distance for l in route.legs))
    assert route.total_duration == sum(l.duration for l in route.legs)
    first = route.legs[0]
    assert first.start_waypoint.id == "a" and first.end_waypoint.id == "b"
    assert first.geometry.type == "LineString"
    assert first.geometry.coordinates == [(SCHLOSS[1], SCHLOSS[0]), (AVZ[1], AVZ[0])]
    assert [i.type for i in first.instructions] == ["depart", "continue", "arrive"]


def test_route_ids_are_unique():
    waypoints = [stop("a", SCHLOSS), stop("b", AVZ)]
    assert build_route(waypoints).id != build_route(waypoints).id


def test_overlapping_events_far_apart():
    # 10:00–11:00 at the Schloss, 10:30–11:30 at Caprivi (~1960 m)
    route = build_route([
        stop("a", SCHLOSS, at(10), at(11)),
        stop("b", CAPRIVI_A, at(10, 30), at(11, 30)),
    ])
    kinds = {(w.type, w.severity) for w in route.warnings}
    assert (WarningType.INSUFFICIENT_TIME, WarningSeverity.ERROR) in kinds
    assert (WarningType.LONG_DISTANCE, WarningSeverity.INFO) in kinds
    assert route.has_warnings
    timing = next(w for w in route.warnings if w.type is WarningType.INSUFFICIENT_TIME)
    assert timing.available_time == -1800
    assert timing.event_from_id == "a" and timing.event_to_id == "b"
    assert timing.leg_index == 0


def test_tight_transfer_is_a_warning():
    # Schloss → Aula is ~53 m: under a minute of walking, 2 minutes available
    route = build_route([
        stop("a", SCHLOSS, at(10), at(11)),
        stop("b", AULA, at(11, 2), at(12)),
    ])
    assert [(w.type, w.severity) for w in route.warnings] == [
        (WarningType.INSUFFICIENT_TIME, WarningSeverity.WARNING),
    ]


def test_comfortable_transfer_has_no_warning():
    route = build_route([
        stop("a", SCHLOSS, at(10), at(11)),
        stop("b", AULA, at(11, 15), at(12)),
    ])
    assert route.warnings == []


def test_zero_buffer_removes_tight_warning():
    route = build_route(
        [stop("a", SCHLOSS, at(10), at(11)), stop("b", AULA, at(11, 2), at(12))],
        TravelTimeSettings(buffer_minutes=0),
    )
    assert route.warnings == []


def test_untimed_stops_only_get_distance_warnings():
    route = build_route([stop("a", SCHLOSS), stop("b", CAPRIVI_A)])
    assert [w.type for w in route.warnings] == [WarningType.LONG_DISTANCE]
    # over the threshold, so the distance is shown in kilometres
    assert "km (about" in route.warnings[0].message


def test_schedule_route_orders_by_start_and_skips_unlocated_events():
    late = make_event("late", at(14), at(15), location=loc("Schloss Osnabrück", SCHLOSS))
    early = make_event("early", at(9), at(10), location=loc("AVZ", AVZ))
    nowhere = make_event("nowhere", at(11), at(12), location=loc("Stadthalle"))
    snapshot = ScheduleSnapshot.from_events([late, nowhere, early])

    route = build_schedule_route(snapshot)
    assert [w.id for w in route.waypoints] == ["early", "late"]
    assert len(route.legs) == 1


def test_schedule_route_from_current_location():
    snapshot = ScheduleSnapshot.from_events([
        make_event("a", at(10), at(11), location=loc("Physikgebäude")),
    ])
    route = build_schedule_route(snapshot, current=Coordinates(*SCHLOSS))
    assert route.waypoints[0].id == CURRENT_LOCATION_ID
    assert route.waypoints[0].type is WaypointType.CURRENT_LOCATION
    assert len(route.legs) == 1
    # no time window on the start position, so no timing warning
    assert all(w.type is not WarningType.INSUFFICIENT_TIME for w in route.warnings)


def test_accessibility_warning_only_when_requested():
    snapshot = ScheduleSnapshot.from_events([
        make_event("a", at(10), at(11), location=loc("Schloss Osnabrück")),
        make_event("b", at(12), at(13), location=loc("Seminarstraße Gebäude")),
    ])
    waypoints = schedule_waypoints(snapshot)
    assert waypoints[1].accessible is False

    plain = build_schedule_route(snapshot)
    assert all(w.type is not WarningType.ACCESSIBILITY for w in plain.warnings)

    strict = build_schedule_route(snapshot, TravelTimeSettings(requires_accessibility=True))
    access = [w for w in strict.warnings if w.type is WarningType.ACCESSIBILITY]
    assert len(access) == 1
    assert access[0].event_to_id == "b"
