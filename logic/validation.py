"""
Validation and sanitization utilities.

This module contains functions for sanitizing user input before it is
written to the database: names, free text, numbers, coordinates, and
distance units.
"""

import math
from typing import Any, Optional

from fastapi import HTTPException

from .units import UNIT_CONVERSIONS

MAX_NAME_LEN = 120
MAX_TEXT_LEN = 20000

ALLOWED_WORLD_FIELDS = ("name", "description")
ALLOWED_MAP_FIELDS = ("name", "image_data", "width", "height", "scale_value", "scale_unit")
ALLOWED_LOCATION_FIELDS = ("name", "description", "wiki_link", "notes", "stamp_id", "x", "y")
ALLOWED_TRAVEL_FIELDS = ("walking_speed", "horse_speed", "wagon_speed", "hours_per_day")


def sanitise_name(value: Any, default: str) -> str:
    """Sanitize and validate a display name.

    Args:
        value: Submitted name, possibly None.
        default: Name used when nothing usable was submitted.

    Returns:
        Stripped name, or ``default`` when empty.

    Raises:
        HTTPException: If the name exceeds the maximum length.
    """
    if value is None:
        return default
    value = str(value).strip()
    if not value:
        return default
    if len(value) > MAX_NAME_LEN:
        raise HTTPException(400, "Name too long")
    return value


def sanitise_text(value: Any) -> str:
    if value is None:
        return ""
    value = str(value)
    if len(value) > MAX_TEXT_LEN:
        raise HTTPException(400, "Text too long")
    return value


def sanitise_float(value: Any, *, allow_none: bool = False) -> Optional[float]:
    """Sanitize and validate a finite real number.

    Args:
        value: Value to convert to float.
        allow_none: Whether None is an acceptable value.

    Returns:
        Float value or None if allowed.

    Raises:
        HTTPException: If value is not a finite number.
    """
    if value is None and allow_none:
        return None
    if isinstance(value, bool):
        raise HTTPException(400, "Invalid numeric value")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise HTTPException(400, "Invalid numeric value")
    if not math.isfinite(number):
        raise HTTPException(400, "Invalid numeric value")
    return number


def sanitise_int(value: Any, *, allow_none: bool = False) -> Optional[int]:
    """Sanitize and validate integer values.

    Raises:
        HTTPException: If value cannot be converted to integer.
    """
    if value is None and allow_none:
        return None
    if isinstance(value, bool):
        raise HTTPException(400, "Invalid numeric value")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise HTTPException(400, "Invalid numeric value")


def sanitise_speed(value: Any) -> float:
    """Travel speeds must be positive numbers."""
    speed = sanitise_float(value)
    if speed <= 0:
        raise HTTPException(400, "Speed must be greater than zero")
    return speed


def sanitise_unit(value: Any) -> str:
    if value not in UNIT_CONVERSIONS:
        raise HTTPException(400, f"Unknown distance unit: {value}")
    return value


def sanitise_image_data(value: Any) -> Optional[str]:
    """Image data is stored as a data URL string, or not at all."""
    if not value:
        return None
    if not isinstance(value, str):
        raise HTTPException(400, "Invalid image data")
    return value
