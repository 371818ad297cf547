import os

# Keep the JSONL performance log out of the working tree during tests.
os.environ["STRUCTURED_LOGGING"] = "false"
os.environ.setdefault("POPULARITY_BACKEND", "memory")

from datetime import datetime

import pytest

from openday.schemas.events import Event, EventType, Institution, Location, StudyProgram
from openday.modules.memory.popularity_tracker import InMemoryPopularityTracker


# Coordinates from the building directory
SCHLOSS    = (52.2728, 8.0432)
AULA       = (52.2725, 8.0438)
AVZ        = (52.2816, 8.0234)
PHYSIK     = (52.2821, 8.0252)
CAPRIVI_A  = (52.2756, 8.0148)

INFORMATIK = StudyProgram("inf", "Informatik", Institution.UNI)
BIOLOGIE   = StudyProgram("bio", "Biologie", Institution.UNI)
MECHATRONIK = StudyProgram("mech", "Mechatronik", Institution.HOCHSCHULE)


def at(hour: int, minute: int = 0, day: int = 14) -> datetime:
    return datetime(2026, 5, day, hour, minute)


def loc(building: str, coords: tuple[float, float] | None = None, loc_id: str | None = None) -> Location:
    lat, lon = coords if coords else (None, None)
    return Location(id=loc_id or building.lower(), building_name=building, latitude=lat, longitude=lon)


def make_event(
    event_id: str,
    start: datetime | None,
    end: datetime | None,
    event_type: EventType = EventType.VORTRAG,
    location: Location | None = None,
    programs: tuple[StudyProgram, ...] = (),
    institution: Institution = Institution.BOTH,
    title: str | None = None,
) -> Event:
    return Event(
        id=event_id,
        title=title or f"Event {event_id}",
        event_type=event_type,
        institution=institution,
        time_start=start,
        time_end=end,
        location=location,
        study_programs=programs,
    )


@pytest.fixture
def tracker():
    return InMemoryPopularityTracker()


@pytest.fixture
def catalogue():
    return [
        make_event("talk-inf", at(10), at(11), EventType.VORTRAG,
                   loc("Schloss Osnabrück", SCHLOSS), (INFORMATIK,), Institution.UNI),
        make_event("lab-phys", at(11, 30), at(12, 30), EventType.LABORFUEHRUNG,
                   loc("Physikgebäude", PHYSIK), (INFORMATIK, BIOLOGIE), Institution.UNI),
        make_event("ws-bio", at(10, 30), at(11, 30), EventType.WORKSHOP,
                   loc("Biologiegebäude"), (BIOLOGIE,), Institution.UNI),
        make_event("tour-cn", at(13), at(14), EventType.RUNDGANG,
                   loc("Caprivistraße Gebäude A", CAPRIVI_A), (MECHATRONIK,), Institution.HOCHSCHULE),
        make_event("stand-both", at(9), at(17), EventType.INFOSTAND,
                   loc("Aula der Universität", AULA)),
        make_event("link-online", None, None, EventType.LINK),
    ]


# ── Redis test double ─────────────────────────────────────────────────────────

class FakePipeline:
    def __init__(self, redis: "FakeRedis"):
        self._redis = redis
        self._ops: list[tuple] = []

    def hincrby(self, key: str, field: str, amount: int = 1):
        self._ops.append(("hincrby", key, field, amount))
        return self

    def hsetnx(self, key: str, field: str, value: str):
        self._ops.append(("hsetnx", key, field, value))
        return self

    def sadd(self, key: str, *members: str):
        self._ops.append(("sadd", key, *members))
        return self

    def execute(self) -> list:
        return [getattr(self._redis, op)(*args) for op, *args in self._ops]


class FakeRedis:
    """In-process stand-in for the handful of hash/set commands the tracker uses."""

    def __init__(self):
        self.hashes: dict[str, dict[str, str]] = {}
        self.sets: dict[str, set[str]] = {}

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        return FakePipeline(self)

    def hincrby(self, key: str, field: str, amount: int = 1) -> int:
        h = self.hashes.setdefault(key, {})
        h[field] = str(int(h.get(field, "0")) + amount)
        return int(h[field])

    def hsetnx(self, key: str, field: str, value: str) -> bool:
        h = self.hashes.setdefault(key, {})
        if field in h:
            return False
        h[field] = value
        return True

    def hgetall(self, key: str) -> dict[str, str]:
        return dict(self.hashes.get(key, {}))

    def sadd(self, key: str, *members: str) -> int:
        s = self.sets.setdefault(key, set())
        before = len(s)
        s.update(members)
        return len(s) - before

    def smembers(self, key: str) -> set[str]:
        return set(self.sets.get(key, set()))

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.hashes.pop(key, None) is not None:
                removed += 1
            if self.sets.pop(key, None) is not None:
                removed += 1
        return removed


@pytest.fixture
def fake_redis(monkeypatch):
    from openday.db import redis_client

    fake = FakeRedis()
    monkeypatch.setattr(redis_client, "_client", fake)
    return fake
