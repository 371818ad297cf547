"""
modules/tool_usage/distance_tool.py
-------------------------------------
Walking distance and walking time between campus coordinates, using the
Haversine formula and a fixed speed per walking profile.
No external HTTP calls are made; paths are straight lines inflated by
config.PATH_INFLATION_FACTOR to account for detours and crossings.

Config knobs (config.py):
  WALKING_SPEEDS_MPS     -- metres/second per profile (slow, normal, fast)
  DEFAULT_WALKING_SPEED  -- profile used when none is given (default: normal)
  PATH_INFLATION_FACTOR  -- straight-line → footpath multiplier (default: 1.2)
"""

from __future__ import annotations
import math
import logging
from typing import Optional

from openday import config
from openday.schemas.routes import Coordinates, WalkingSpeed

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Pure maths
# ---------------------------------------------------------------------------

_EARTH_RADIUS_M = 6_371_000.0


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points (Haversine formula) in metres."""
    r = _EARTH_RADIUS_M
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lam = math.radians(lon2 - lon1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lam / 2) ** 2
    )
    # clamp: rounding can push a a hair above 1.0 for antipodal points
    return 2 * r * math.asin(math.sqrt(min(1.0, a)))


def calculate_distance(a: Coordinates, b: Coordinates) -> float:
    """Haversine distance in metres between two coordinate pairs."""
    if a == b:
        return 0.0
    return haversine_m(a.latitude, a.longitude, b.latitude, b.longitude)


def calculate_walking_time(
    distance_m: float,
    speed: WalkingSpeed | str = WalkingSpeed.NORMAL,
) -> int:
    """
    Walking time in whole seconds (rounded up).

    The distance is inflated by PATH_INFLATION_FACTOR before dividing by the
    profile speed. Zero distance gives zero seconds.
    """
    if distance_m < 0:
        raise ValueError(f"distance must be >= 0, got {distance_m!r}")
    if distance_m == 0:
        return 0
    mps = WalkingSpeed(speed).metres_per_second
    return math.ceil(distance_m * config.PATH_INFLATION_FACTOR / mps)


def seconds_to_minutes(seconds: float) -> int:
    """Whole minutes, rounded up, for display and minute-based comparisons."""
    return math.ceil(seconds / 60) if seconds > 0 else 0


def format_duration(seconds: float) -> str:
    minutes = round(seconds / 60)
    if minutes < 1:
        return "less than 1 min"
    return f"{minutes} min"


def format_distance(metres: float) -> str:
    if metres < 1000:
        return f"{round(metres)}m"
    return f"{metres / 1000:.1f}km"


# ---------------------------------------------------------------------------
# DistanceTool
# ---------------------------------------------------------------------------


class DistanceTool:
    """
    Computes distances and walking times between coordinates for one walking
    profile (config.DEFAULT_WALKING_SPEED unless overridden).
    """

    def __init__(self, speed: WalkingSpeed | str | None = None) -> None:
        self.speed: WalkingSpeed = WalkingSpeed(speed or config.DEFAULT_WALKING_SPEED)

    def distance_m(self, a: Coordinates, b: Coordinates) -> float:
        return calculate_distance(a, b)

    def walking_time_seconds(
        self,
        a: Coordinates,
        b: Coordinates,
        speed: Optional[WalkingSpeed | str] = None,
    ) -> int:
        """Return walking time in seconds between two points."""
        return calculate_walking_time(calculate_distance(a, b), speed or self.speed)

    def walking_time_minutes(self, a: Coordinates, b: Coordinates) -> int:
        return seconds_to_minutes(self.walking_time_seconds(a, b))
