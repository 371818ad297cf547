"""
db/
----
Shared-state access for the engine.

The engine keeps no persistent data of its own. The only external store is
Redis, used when POPULARITY_BACKEND=redis so that view / schedule-add
counters are shared between worker processes.

Public exports:
    from openday.db import get_redis
"""

from openday.db.redis_client import get_redis

__all__ = ["get_redis"]
