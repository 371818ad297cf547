import pytest

from openday import (
    BatchAddRequest,
    OpenDayEngine,
    RecommendationContext,
    TimeSlot,
    TravelTimeSettings,
)
from openday.schemas.routes import Building, Coordinates, TravelStatus, WarningType
from conftest import SCHLOSS, at, loc, make_event


@pytest.fixture
def engine(catalogue, tracker):
    return OpenDayEngine(catalogue, tracker=tracker)


def test_invalid_and_duplicate_records_are_dropped(catalogue, tracker):
    broken = make_event("broken", at(12), at(11))
    dup = make_event("talk-inf", at(15), at(16), title="Shadow copy")
    engine = OpenDayEngine(catalogue + [broken, dup], tracker=tracker)
    assert "broken" not in engine.catalogue
    assert engine.catalogue["talk-inf"].title == "Event talk-inf"
    assert len(engine.catalogue) == len(catalogue)


def test_snapshot_ignores_unknown_ids(engine):
    snapshot = engine.snapshot(["talk-inf", "ghost", "lab-phys", "talk-inf"], priority=2)
    assert snapshot.event_ids == ["talk-inf", "lab-phys"]
    assert all(item.priority == 2 for item in snapshot.items)


def test_recommend_defaults_to_whole_catalogue(engine):
    result = engine.recommend(engine.snapshot(["talk-inf"]), RecommendationContext(study_program_ids=["inf"]))
    assert result.total_available == 5
    assert result.recommendations[0].event.id == "lab-phys"
    assert result.scheduled_event_count == 1


def test_recommend_with_explicit_candidates(engine, catalogue):
    result = engine.recommend(engine.snapshot([]), RecommendationContext(), candidates=catalogue[:2])
    assert {r.event.id for r in result.recommendations} == {"talk-inf", "lab-phys"}


def test_score_single_event(engine):
    rec = engine.score(engine.catalogue["ws-bio"], engine.snapshot(["talk-inf"]), RecommendationContext())
    assert rec.conflicts_with_schedule
    assert rec.conflicting_event_ids == ["talk-inf"]


def test_batch_add_then_analyze(engine):
    start = engine.snapshot(["talk-inf"])
    result = engine.batch_add(BatchAddRequest(event_ids=["ws-bio", "lab-phys", "tour-cn"]), start)
    assert result.added_event_ids == ["lab-phys", "tour-cn"]
    assert result.conflicting_event_ids == ["ws-bio"]

    analysis = engine.analyze_schedule(result.schedule)
    assert analysis.conflicts == []
    assert 0 < analysis.current_score <= 100


def test_travel_between_far_overlapping_events(tracker):
    events = [
        make_event("a", at(10), at(11), location=loc("Schloss Osnabrück")),
        make_event("b", at(10, 30), at(11, 30), location=loc("Caprivistraße Gebäude A")),
    ]
    engine = OpenDayEngine(events, tracker=tracker)
    snapshot = engine.snapshot(["a", "b"])

    [analysis] = engine.analyze_travel(snapshot)
    assert analysis.status is TravelStatus.INSUFFICIENT

    route = engine.build_schedule_route(snapshot)
    assert {w.type for w in route.warnings} == {WarningType.INSUFFICIENT_TIME, WarningType.LONG_DISTANCE}


def test_schedule_route_accepts_lat_lon_pair(engine):
    route = engine.build_schedule_route(engine.snapshot(["talk-inf", "tour-cn"]), current=SCHLOSS)
    assert [w.id for w in route.waypoints] == ["current", "talk-inf", "tour-cn"]
    assert len(route.legs) == 2
    with pytest.raises(ValueError):
        engine.build_schedule_route(engine.snapshot([]), current=(95.0, 8.0))


def test_build_route_uses_engine_settings(catalogue, tracker):
    engine = OpenDayEngine(catalogue, tracker=tracker, settings=TravelTimeSettings(walking_speed="slow"))
    waypoints = engine.build_schedule_route(engine.snapshot(["talk-inf", "lab-phys"])).waypoints
    slow = engine.build_route(waypoints)
    fast = engine.build_route(waypoints, TravelTimeSettings(walking_speed="fast"))
    assert slow.total_duration > fast.total_duration


def test_suggest_alternatives_from_catalogue(engine):
    snapshot = engine.snapshot(["talk-inf", "lab-phys"])
    suggestions = engine.suggest_alternatives("lab-phys", snapshot)
    # ws-bio shares Biologie with lab-phys; talk-inf is already scheduled
    assert [s.event_id for s in suggestions] == ["ws-bio"]


def test_time_slots_and_popularity(engine):
    recs = engine.events_for_time_slots([TimeSlot(at(10), at(12))], exclude_ids=["ws-bio"])
    assert [r.event.id for r in recs] == ["talk-inf"]

    engine.record_view("tour-cn")
    engine.record_scheduled("lab-phys")
    assert [r.event.id for r in engine.popular_events()] == ["lab-phys", "tour-cn"]


def test_building_event_counts(engine):
    counts = {b.id: b.event_count for b in engine.buildings_with_event_counts()}
    assert counts["physik"] == 1
    assert counts["biologie"] == 1
    assert counts["schloss"] == 1


def test_custom_buildings_get_campus_from_coordinates(catalogue, tracker):
    hall = Building("hall", "Hörsaalgebäude", Coordinates(*SCHLOSS))
    engine = OpenDayEngine(catalogue, buildings=[hall], tracker=tracker)
    assert [b.campus for b in engine.buildings] == ["schloss"]
