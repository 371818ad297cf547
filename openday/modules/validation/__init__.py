"""
modules/validation package — data quality guards on catalogue records.
"""
from openday.modules.validation.ingestion_validator import (
    ValidationResult,
    validate_coordinates,
    parse_coordinates,
    validate_location,
    validate_event,
    validate_building,
    filter_valid,
)

__all__ = [
    "ValidationResult",
    "validate_coordinates",
    "parse_coordinates",
    "validate_location",
    "validate_event",
    "validate_building",
    "filter_valid",
]
