"""
db/redis_client.py
-------------------
redis-py client — singleton plus helpers for the popularity key schema.

Key schemas:

  1. {POPULARITY_KEY_PREFIX}:{event_id}
       Type  : Hash
       Fields: views, adds (integers, HINCRBY), trend (set once, HSETNX)
       TTL   : none; counters live as long as the Redis instance

  2. {POPULARITY_KEY_PREFIX}:index
       Type  : Set of event ids that have a popularity hash

Environment variables (set in config.py):
    REDIS_HOST             default: localhost
    REDIS_PORT             default: 6379
    REDIS_DB               default: 0
    REDIS_PASSWORD         default: ""  (empty = no auth)
    POPULARITY_KEY_PREFIX  default: popularity
"""

from __future__ import annotations

from typing import Any

import redis

from openday import config

# Module-level singleton; initialised lazily on first call to get_redis()
_client: redis.Redis | None = None


def get_redis() -> redis.Redis:
    """Return the singleton Redis client, creating it on first call."""
    global _client
    if _client is None:
        kwargs: dict[str, Any] = {
            "host":             config.REDIS_HOST,
            "port":             config.REDIS_PORT,
            "db":               config.REDIS_DB,
            "decode_responses": True,   # return str, not bytes
        }
        if config.REDIS_PASSWORD:
            kwargs["password"] = config.REDIS_PASSWORD
        _client = redis.Redis(**kwargs)
    return _client


# ── Popularity hashes ──────────────────────────────────────────────────────────

def _pop_key(event_id: str) -> str:
    return f"{config.POPULARITY_KEY_PREFIX}:{event_id}"


def _pop_index_key() -> str:
    return f"{config.POPULARITY_KEY_PREFIX}:index"


def incr_popularity(event_id: str, field: str, initial_trend: str) -> None:
    """
    Atomically bump one counter ("views" or "adds") for an event.

    The trend field is only written when the hash is first created, so the
    first recorded action decides it. All three commands go out in a single
    MULTI/EXEC round-trip.
    """
    pipe = get_redis().pipeline(transaction=True)
    pipe.hincrby(_pop_key(event_id), field, 1)
    pipe.hsetnx(_pop_key(event_id), "trend", initial_trend)
    pipe.sadd(_pop_index_key(), event_id)
    pipe.execute()


def get_popularity_hash(event_id: str) -> dict[str, str] | None:
    """Return the raw str→str hash, or None if the event was never recorded."""
    data = get_redis().hgetall(_pop_key(event_id))
    return data if data else None


def list_popularity_ids() -> list[str]:
    return sorted(get_redis().smembers(_pop_index_key()))


def clear_popularity() -> int:
    """Delete every popularity hash plus the index. Returns keys deleted."""
    r = get_redis()
    ids = r.smembers(_pop_index_key())
    keys = [_pop_key(eid) for eid in ids] + [_pop_index_key()]
    return r.delete(*keys)
