"""
modules/memory/popularity_tracker.py
--------------------------------------
View and schedule-add counters per event, feeding the "high demand" signal
of the recommender and the most-popular listing.

  popularity_score = min(100, (views × 1 + adds × 10) // 2)
  high demand      ⇔ popularity_score > HIGH_DEMAND_THRESHOLD (70)
  trend            = "stable" if the first recorded action was a view,
                     "rising" if it was a schedule add; never changed later

Two backends:
  InMemoryPopularityTracker — dict guarded by one lock; per process, reset on
                              restart, diverges between workers.
  RedisPopularityTracker    — HINCRBY on a hash per event; shared across
                              processes (db/redis_client.py).

This is the only mutable state in the engine. Every read-modify-write is
serialized (lock or Redis atomic increment) so concurrent requests never
lose an update.

Usage:
    tracker = get_popularity_tracker()
    tracker.record_view("evt-1")
    tracker.record_scheduled("evt-1")
    tracker.is_high_demand("evt-1")
    tracker.most_popular(limit=10)
"""

from __future__ import annotations
import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Optional

from openday import config
from openday.db import redis_client
from openday.schemas.recommendations import EventPopularity, PopularityTrend

_VIEWS = "views"
_ADDS  = "adds"


def calculate_popularity_score(views: int, adds: int) -> int:
    """Schedule adds count ten times as much as views; normalised to 0–100."""
    raw = views * 1 + adds * 10
    return min(100, raw // 2)


# ─────────────────────────────────────────────────────────────────────────────
# Base class
# ─────────────────────────────────────────────────────────────────────────────

class PopularityTracker(ABC):

    # ── Backend hooks ─────────────────────────────────────────────────────────

    @abstractmethod
    def _increment(self, event_id: str, counter: str, initial_trend: PopularityTrend) -> None:
        ...

    @abstractmethod
    def get(self, event_id: str) -> Optional[EventPopularity]:
        """Snapshot of one event's record, or None if never recorded."""

    @abstractmethod
    def all(self) -> list[EventPopularity]:
        ...

    @abstractmethod
    def reset(self) -> None:
        ...

    # ── Mutators ──────────────────────────────────────────────────────────────

    def record_view(self, event_id: str) -> None:
        self._increment(event_id, _VIEWS, PopularityTrend.STABLE)

    def record_scheduled(self, event_id: str) -> None:
        self._increment(event_id, _ADDS, PopularityTrend.RISING)

    # ── Reads ─────────────────────────────────────────────────────────────────

    def popularity_score(self, event_id: str) -> int:
        rec = self.get(event_id)
        return rec.popularity_score if rec else 0

    def is_high_demand(self, event_id: str) -> bool:
        return self.popularity_score(event_id) > config.HIGH_DEMAND_THRESHOLD

    def most_popular(self, limit: int | None = 10) -> list[EventPopularity]:
        """Records by descending score; ties keep the backend listing order. None = all."""
        ranked = sorted(self.all(), key=lambda p: p.popularity_score, reverse=True)
        return ranked if limit is None else ranked[:max(0, limit)]


# ─────────────────────────────────────────────────────────────────────────────
# In-memory backend
# ─────────────────────────────────────────────────────────────────────────────

class InMemoryPopularityTracker(PopularityTracker):
    """Thread-safe per-process counters."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[str, EventPopularity] = {}

    def _increment(self, event_id: str, counter: str, initial_trend: PopularityTrend) -> None:
        with self._lock:
            rec = self._records.get(event_id)
            if rec is None:
                rec = EventPopularity(event_id=event_id, trend=initial_trend)
                self._records[event_id] = rec
            if counter == _VIEWS:
                rec.view_count += 1
            else:
                rec.add_to_schedule_count += 1
            rec.popularity_score = calculate_popularity_score(
                rec.view_count, rec.add_to_schedule_count,
            )

    def get(self, event_id: str) -> Optional[EventPopularity]:
        with self._lock:
            rec = self._records.get(event_id)
            return replace(rec) if rec else None

    def all(self) -> list[EventPopularity]:
        with self._lock:
            return [replace(rec) for rec in self._records.values()]

    def reset(self) -> None:
        with self._lock:
            self._records.clear()


# ─────────────────────────────────────────────────────────────────────────────
# Redis backend
# ─────────────────────────────────────────────────────────────────────────────

class RedisPopularityTracker(PopularityTracker):
    """Counters shared by every process talking to the same Redis database."""

    def _increment(self, event_id: str, counter: str, initial_trend: PopularityTrend) -> None:
        redis_client.incr_popularity(event_id, counter, initial_trend.value)

    def get(self, event_id: str) -> Optional[EventPopularity]:
        data = redis_client.get_popularity_hash(event_id)
        if data is None:
            return None
        views = int(data.get(_VIEWS, 0))
        adds  = int(data.get(_ADDS, 0))
        return EventPopularity(
            event_id=event_id,
            view_count=views,
            add_to_schedule_count=adds,
            popularity_score=calculate_popularity_score(views, adds),
            trend=PopularityTrend(data.get("trend", PopularityTrend.STABLE.value)),
        )

    def all(self) -> list[EventPopularity]:
        records = [self.get(eid) for eid in redis_client.list_popularity_ids()]
        return [r for r in records if r is not None]

    def reset(self) -> None:
        redis_client.clear_popularity()


# ─────────────────────────────────────────────────────────────────────────────
# Process-wide instance
# ─────────────────────────────────────────────────────────────────────────────

_tracker: PopularityTracker | None = None
_tracker_lock = threading.Lock()


def make_popularity_tracker(backend: str | None = None) -> PopularityTracker:
    backend = (backend or config.POPULARITY_BACKEND).lower()
    if backend == "memory":
        return InMemoryPopularityTracker()
    if backend == "redis":
        return RedisPopularityTracker()
    raise ValueError(f"unknown POPULARITY_BACKEND {backend!r} (expected 'memory' or 'redis')")


def get_popularity_tracker() -> PopularityTracker:
    """Return the process-wide tracker, creating it on first call."""
    global _tracker
    with _tracker_lock:
        if _tracker is None:
            _tracker = make_popularity_tracker()
        return _tracker
