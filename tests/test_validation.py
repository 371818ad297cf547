import logging
from datetime import datetime, timezone

import pytest

from openday.schemas.routes import Building, Coordinates
from openday.modules.validation import (
    filter_valid,
    parse_coordinates,
    validate_building,
    validate_coordinates,
    validate_event,
    validate_location,
)
from openday.schemas.events import Location
from conftest import AVZ, at, loc, make_event


@pytest.mark.parametrize("lat,lon,ok", [
    (52.28, 8.02, True),
    (-90, 180, True),
    (90.1, 8.0, False),
    (52.0, -180.5, False),
    (0.0, 0.0, False),
    ("abc", 8.0, False),
])
def test_validate_coordinates(lat, lon, ok):
    assert bool(validate_coordinates(lat, lon)) is ok


def test_parse_coordinates():
    assert parse_coordinates((52.28, 8.02)) == Coordinates(52.28, 8.02)
    assert parse_coordinates(Coordinates(*AVZ)) == Coordinates(*AVZ)
    with pytest.raises(ValueError):
        parse_coordinates((123.0, 8.0))


def test_location_checks():
    assert validate_location(loc("AVZ", AVZ))
    assert validate_location(loc("AVZ"))
    half = Location(id="x", building_name="AVZ", latitude=52.0)
    assert not validate_location(half)
    assert not validate_location(Location(id="x", building_name=" "))


def test_valid_event():
    result = validate_event(make_event("e", at(10), at(11), location=loc("AVZ")))
    assert result.valid
    assert result.errors == []


@pytest.mark.parametrize("event,fragment", [
    (make_event("", at(10), at(11)), "id"),
    (make_event("e", at(10), at(11), title=" "), "title"),
    (make_event("e", None, at(11)), "time_start is missing"),
    (make_event("e", at(11), at(10)), "before time_start"),
    (make_event("e", at(10), datetime(2026, 5, 14, 11, tzinfo=timezone.utc)), "naive"),
    (make_event("e", at(10), at(11), location=loc("AVZ", (200.0, 8.0))), "latitude"),
])
def test_invalid_events(event, fragment):
    result = validate_event(event)
    assert not result
    assert any(fragment in e for e in result.errors)


def test_event_without_times_is_valid():
    assert validate_event(make_event("online", None, None))
    assert validate_event(make_event("open-end", at(10), None))


def test_validate_building():
    good = Building("b", "Building", Coordinates(52.28, 8.02))
    bad = Building("", "", Coordinates(0.0, 0.0))
    assert validate_building(good)
    result = validate_building(bad)
    assert not result
    assert len(result.errors) == 3


def test_filter_valid_keeps_order_and_logs(caplog):
    events = [
        make_event("a", at(10), at(11)),
        make_event("b", at(11), at(10)),
        make_event("c", None, None),
    ]
    with caplog.at_level(logging.WARNING):
        kept = filter_valid(events, validate_event)
    assert [e.id for e in kept] == ["a", "c"]
    assert "REJECTED 'b'" in caplog.text
    assert "1/3 records rejected" in caplog.text
