"""
modules/validation/ingestion_validator.py
------------------------------------------
Data-quality guards applied to catalogue records handed to the engine by the
surrounding event application, before any of them reach scoring or routing.

  Coordinates:
    ✓ Latitude in [-90, 90]
    ✓ Longitude in [-180, 180]
    ✓ Not both exactly 0.0 (likely missing)

  Location:
    ✓ Non-empty id and building name
    ✓ latitude / longitude both set or both absent
    ✓ Coordinate checks above when set

  Event:
    ✓ Non-empty id and title
    ✓ event_type is a known EventType
    ✓ time_end not set without time_start
    ✓ time_end >= time_start
    ✓ start and end both naive or both timezone-aware
    ✓ Location checks above when a location is attached

  Building:
    ✓ Non-empty id and name
    ✓ Coordinate checks above

Usage:
    from openday.modules.validation import validate_event, filter_valid

    result = validate_event(event)
    if not result:
        print(result.errors)

    clean_events = filter_valid(events, validate_event)
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, TypeVar

from openday.schemas.events import Event, EventType, Location
from openday.schemas.routes import Building, Coordinates

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ── Result dataclass ───────────────────────────────────────────────────────────

@dataclass
class ValidationResult:
    """
    Outcome of a single validation run.

    Attributes:
        valid:  True iff there are zero errors.
        errors: Human-readable list of failure reasons.
        record: The validated record (for logging purposes).
    """
    valid: bool
    errors: list[str] = field(default_factory=list)
    record: Any = field(default=None, repr=False)

    def __bool__(self) -> bool:
        return self.valid


def _result(errors: list[str], record: Any) -> ValidationResult:
    return ValidationResult(valid=len(errors) == 0, errors=errors, record=record)


# ── Coordinates ────────────────────────────────────────────────────────────────

def _coordinate_errors(lat: Any, lon: Any) -> list[str]:
    try:
        lat = float(lat)
        lon = float(lon)
    except (TypeError, ValueError):
        return [f"latitude/longitude must be numeric (got lat={lat!r}, lon={lon!r})"]

    errors: list[str] = []
    if not (-90.0 <= lat <= 90.0):
        errors.append(f"latitude={lat} is outside valid range [-90, 90]")
    if not (-180.0 <= lon <= 180.0):
        errors.append(f"longitude={lon} is outside valid range [-180, 180]")
    if lat == 0.0 and lon == 0.0:
        errors.append("latitude=0.0 and longitude=0.0: likely a missing/default value")
    return errors


def validate_coordinates(lat: Any, lon: Any) -> ValidationResult:
    return _result(_coordinate_errors(lat, lon), (lat, lon))


def parse_coordinates(value: Coordinates | tuple[float, float]) -> Coordinates:
    """
    Accept a Coordinates or a (lat, lon) pair from a caller.
    Raises ValueError when the point is out of range.
    """
    if isinstance(value, Coordinates):
        lat, lon = value.latitude, value.longitude
    else:
        lat, lon = value
    errors = _coordinate_errors(lat, lon)
    if errors:
        raise ValueError("; ".join(errors))
    return Coordinates(float(lat), float(lon))


# ── Location / Event ───────────────────────────────────────────────────────────

def _location_errors(loc: Location) -> list[str]:
    errors: list[str] = []
    if not loc.id or not str(loc.id).strip():
        errors.append("location id must not be empty")
    if not loc.building_name or not loc.building_name.strip():
        errors.append(f"location {loc.id!r}: building_name must not be empty")
    if (loc.latitude is None) != (loc.longitude is None):
        errors.append(
            f"location {loc.id!r}: latitude and longitude must be set together "
            f"(got lat={loc.latitude!r}, lon={loc.longitude!r})"
        )
    elif loc.has_coordinates:
        errors += [f"location {loc.id!r}: {e}" for e in _coordinate_errors(loc.latitude, loc.longitude)]
    return errors


def validate_location(loc: Location) -> ValidationResult:
    return _result(_location_errors(loc), loc)


def validate_event(event: Event) -> ValidationResult:
    errors: list[str] = []

    # ── Identity ───────────────────────────────────────────────────────────
    if not event.id or not str(event.id).strip():
        errors.append("id must not be empty")
    if not event.title or not event.title.strip():
        errors.append("title must not be empty")
    if not isinstance(event.event_type, EventType):
        errors.append(f"event_type={event.event_type!r} is not a known event type")

    # ── Time window ────────────────────────────────────────────────────────
    start, end = event.time_start, event.time_end
    if end is not None and start is None:
        errors.append("time_end is set but time_start is missing")
    elif start is not None and end is not None:
        if (start.tzinfo is None) != (end.tzinfo is None):
            errors.append("time_start and time_end mix naive and timezone-aware datetimes")
        elif end < start:
            errors.append(f"time_end={end.isoformat()} is before time_start={start.isoformat()}")

    # ── Location ───────────────────────────────────────────────────────────
    if event.location is not None:
        errors += _location_errors(event.location)

    return _result(errors, event)


# ── Building ───────────────────────────────────────────────────────────────────

def validate_building(building: Building) -> ValidationResult:
    errors: list[str] = []
    if not building.id or not building.id.strip():
        errors.append("building id must not be empty")
    if not building.name or not building.name.strip():
        errors.append(f"building {building.id!r}: name must not be empty")
    errors += [
        f"building {building.id!r}: {e}"
        for e in _coordinate_errors(building.coordinates.latitude, building.coordinates.longitude)
    ]
    return _result(errors, building)


# ── Batch filter helper ────────────────────────────────────────────────────────

def filter_valid(
    items: Iterable[T],
    validator: Callable[[T], ValidationResult],
    log: bool = True,
    label: Optional[Callable[[T], str]] = None,
) -> list[T]:
    """
    Apply a validator to every item, return only the valid ones.

    Args:
        items:     Records (Event / Location / Building).
        validator: validate_event / validate_location / validate_building.
        log:       If True, log a warning for every rejected record.
        label:     How to name a record in the log line (default: its id).

    Returns:
        List containing only items that passed validation, in input order.
    """
    valid_items: list[T] = []
    rejected = 0
    total = 0

    for item in items:
        total += 1
        result = validator(item)
        if result.valid:
            valid_items.append(item)
            continue
        rejected += 1
        if log:
            name = label(item) if label else getattr(item, "id", "?")
            logger.warning("REJECTED %r: %s", name, "; ".join(result.errors))

    if log and rejected:
        logger.warning("%d/%d records rejected; %d passed.", rejected, total, len(valid_items))

    return valid_items
