"""
config.py
---------
Central configuration for the open-day planning engine.
Every tunable is read from environment variables with a default.

The numeric weights below (path inflation, benefit scores, gap bounds) are
heuristics, not derived values. Keep them here so they can be tuned without
touching the scoring code.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (if it exists). Variables already set in the
# shell win over the file.
_env_path = Path(__file__).resolve().parent.parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path, override=False)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


# ── Walking / routing ─────────────────────────────────────────────────────────
# Walking speeds in metres per second, keyed by profile name.
WALKING_SPEEDS_MPS: dict[str, float] = {
    "slow":   0.8,   # ~2.9 km/h (mobility impaired, crowded corridors)
    "normal": 1.2,   # ~4.3 km/h
    "fast":   1.5,   # ~5.4 km/h
}
DEFAULT_WALKING_SPEED: str = os.getenv("DEFAULT_WALKING_SPEED", "normal")

# Straight-line distance is multiplied by this to approximate real footpaths.
PATH_INFLATION_FACTOR: float = float(os.getenv("PATH_INFLATION_FACTOR", "1.2"))

# Legs longer than this (metres) get an informational warning.
LONG_DISTANCE_THRESHOLD_M: float = float(os.getenv("LONG_DISTANCE_THRESHOLD_M", "1500"))

TRAVEL_BUFFER_MINUTES: int      = int(os.getenv("TRAVEL_BUFFER_MINUTES", "5"))
TRAVEL_MIN_WARNING_MINUTES: int = int(os.getenv("TRAVEL_MIN_WARNING_MINUTES", "3"))

# ── Recommendations ───────────────────────────────────────────────────────────
HIGH_DEMAND_THRESHOLD: int        = int(os.getenv("HIGH_DEMAND_THRESHOLD", "70"))
DEFAULT_MAX_TRAVEL_MINUTES: int   = int(os.getenv("DEFAULT_MAX_TRAVEL_MINUTES", "15"))
DEFAULT_RECOMMENDATION_LIMIT: int = int(os.getenv("DEFAULT_RECOMMENDATION_LIMIT", "20"))
# Upper bound on candidates scored per request.
MAX_CANDIDATES: int               = int(os.getenv("MAX_CANDIDATES", "100"))
MAX_ALTERNATIVES: int             = int(os.getenv("MAX_ALTERNATIVES", "5"))
TIME_SLOT_MATCH_SCORE: int        = int(os.getenv("TIME_SLOT_MATCH_SCORE", "75"))

# ── Schedule optimisation ─────────────────────────────────────────────────────
GAP_MIN_MINUTES: int      = int(os.getenv("GAP_MIN_MINUTES", "30"))
GAP_MAX_MINUTES: int      = int(os.getenv("GAP_MAX_MINUTES", "480"))
GAP_FILL_MIN_MINUTES: int = int(os.getenv("GAP_FILL_MIN_MINUTES", "45"))
DIVERSITY_MIN_EVENTS: int = int(os.getenv("DIVERSITY_MIN_EVENTS", "3"))

# Fixed benefit per suggestion type, used only for ranking suggestions.
BENEFIT_RESOLVE_CONFLICT: int = int(os.getenv("BENEFIT_RESOLVE_CONFLICT", "30"))
BENEFIT_FILL_GAP: int         = int(os.getenv("BENEFIT_FILL_GAP", "15"))
BENEFIT_ADD_DIVERSITY: int    = int(os.getenv("BENEFIT_ADD_DIVERSITY", "10"))

# ── Popularity backend ────────────────────────────────────────────────────────
# "memory" keeps counters in this process only (reset on restart).
# "redis" shares counters across worker processes.
POPULARITY_BACKEND: str    = os.getenv("POPULARITY_BACKEND", "memory")
POPULARITY_KEY_PREFIX: str = os.getenv("POPULARITY_KEY_PREFIX", "popularity")

# ── Redis ─────────────────────────────────────────────────────────────────────
REDIS_HOST: str     = os.getenv("REDIS_HOST",     "localhost")
REDIS_PORT: int     = int(os.getenv("REDIS_PORT", "6379"))
REDIS_DB: int       = int(os.getenv("REDIS_DB",   "0"))
REDIS_PASSWORD: str = os.getenv("REDIS_PASSWORD", "")

# ── Observability ─────────────────────────────────────────────────────────────
STRUCTURED_LOGGING: bool = _env_bool("STRUCTURED_LOGGING", "true")
LOGS_DIR: str            = os.getenv("LOGS_DIR", "")   # empty → <project>/logs
