from openday.schemas.events import ScheduleSnapshot
from openday.schemas.routes import TravelStatus, TravelTimeSettings
from openday.modules.planning.travel_analyzer import (
    analyze_travel_times,
    classify_margin,
    suggest_alternatives,
)
from conftest import AULA, AVZ, BIOLOGIE, CAPRIVI_A, INFORMATIK, SCHLOSS, at, loc, make_event


def test_overlapping_far_apart_events_are_insufficient():
    snapshot = ScheduleSnapshot.from_events([
        make_event("a", at(10), at(11), location=loc("Schloss Osnabrück", SCHLOSS)),
        make_event("b", at(10, 30), at(11, 30), location=loc("Caprivi A", CAPRIVI_A)),
    ])
    [analysis] = analyze_travel_times(snapshot)
    assert analysis.status is TravelStatus.INSUFFICIENT
    assert not analysis.has_sufficient_time
    assert analysis.time_between_events == -1800
    assert analysis.time_margin == -1800 - analysis.walking_time - 300
    assert 1900 < analysis.distance < 2000


def test_tight_and_ok_margins():
    settings = TravelTimeSettings()      # 5 min buffer, 3 min warning
    # Schloss → Aula walking is under a minute
    tight = ScheduleSnapshot.from_events([
        make_event("a", at(10), at(11), location=loc("Schloss Osnabrück", SCHLOSS)),
        make_event("b", at(11, 7), at(12), location=loc("Aula", AULA)),
    ])
    ok = ScheduleSnapshot.from_events([
        make_event("a", at(10), at(11), location=loc("Schloss Osnabrück", SCHLOSS)),
        make_event("b", at(11, 10), at(12), location=loc("Aula", AULA)),
    ])
    assert analyze_travel_times(tight, settings)[0].status is TravelStatus.TIGHT
    [ok_analysis] = analyze_travel_times(ok, settings)
    assert ok_analysis.status is TravelStatus.OK
    assert ok_analysis.has_sufficient_time


def test_classify_margin_boundaries():
    settings = TravelTimeSettings(min_warning_minutes=3)
    assert classify_margin(-1, settings) is TravelStatus.INSUFFICIENT
    assert classify_margin(0, settings) is TravelStatus.TIGHT
    assert classify_margin(179, settings) is TravelStatus.TIGHT
    assert classify_margin(180, settings) is TravelStatus.OK


def test_pairs_with_missing_data_are_skipped():
    snapshot = ScheduleSnapshot.from_events([
        make_event("a", at(9), at(10), location=loc("AVZ", AVZ)),
        make_event("b", at(11), at(12), location=loc("Stadthalle")),
        make_event("c", at(13), None, location=loc("AVZ", AVZ)),
        make_event("d", at(15), at(16), location=loc("Schloss Osnabrück", SCHLOSS)),
        make_event("e", None, None, location=loc("AVZ", AVZ)),
    ])
    analyses = analyze_travel_times(snapshot)
    # a→b: no coordinates for b; b→c: same; c→d: c has no end
    assert analyses == []


def test_empty_schedule():
    assert analyze_travel_times(ScheduleSnapshot()) == []


def test_suggest_alternatives_ranked_by_walk():
    first = make_event("first", at(9), at(10), location=loc("AVZ", AVZ), programs=(INFORMATIK,))
    far = make_event("far", at(10, 5), at(11), location=loc("Caprivi", CAPRIVI_A), programs=(INFORMATIK,))
    snapshot = ScheduleSnapshot.from_events([first, far])

    near = make_event("near", at(10, 30), at(11, 30), location=loc("Physikgebäude"), programs=(INFORMATIK,))
    mid = make_event("mid", at(10, 30), at(11, 30), location=loc("Schloss Osnabrück"), programs=(INFORMATIK,))
    other_program = make_event("bio", at(10, 30), at(11), location=loc("AVZ", AVZ), programs=(BIOLOGIE,))
    unlocated = make_event("nowhere", at(10, 30), at(11), programs=(INFORMATIK,))
    candidates = [mid, other_program, near, unlocated, first, far]

    result = suggest_alternatives("far", snapshot, candidates)
    assert [s.event_id for s in result] == ["near", "mid"]
    assert result[0].new_travel_time < result[1].new_travel_time


def test_suggest_alternatives_needs_a_previous_event():
    only = make_event("only", at(9), at(10), location=loc("AVZ", AVZ), programs=(INFORMATIK,))
    snapshot = ScheduleSnapshot.from_events([only])
    other = make_event("x", at(11), at(12), location=loc("AVZ", AVZ), programs=(INFORMATIK,))
    assert suggest_alternatives("only", snapshot, [other]) == []
    assert suggest_alternatives("missing", snapshot, [other]) == []


def test_suggest_alternatives_limit():
    first = make_event("first", at(9), at(10), location=loc("AVZ", AVZ), programs=(INFORMATIK,))
    second = make_event("second", at(11), at(12), location=loc("AVZ", AVZ), programs=(INFORMATIK,))
    snapshot = ScheduleSnapshot.from_events([first, second])
    candidates = [
        make_event(f"c{i}", at(11), at(12), location=loc("AVZ", AVZ), programs=(INFORMATIK,))
        for i in range(8)
    ]
    assert len(suggest_alternatives("second", snapshot, candidates)) == 5
    assert len(suggest_alternatives("second", snapshot, candidates, limit=2)) == 2
