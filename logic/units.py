"""
Distance unit conversion.

Every supported map unit is converted to miles before travel times are
computed, since travel speeds are always expressed in miles per hour.
"""

import logging
from types import MappingProxyType
from typing import Mapping

from .errors import UnknownUnit

logger = logging.getLogger(__name__)

# Miles per one unit of the given type
UNIT_CONVERSIONS: Mapping[str, float] = MappingProxyType({
    "miles": 1,
    "km": 0.621371,
    "leagues": 3,  # 1 league ~ 3 miles
})

DEFAULT_UNIT = "miles"

# Multiplier applied to unrecognised units when conversion is not strict
UNKNOWN_UNIT_MULTIPLIER = 1


def is_known_unit(unit) -> bool:
    return unit in UNIT_CONVERSIONS


def validate_unit(unit: str) -> str:
    """Return ``unit`` unchanged, or raise UnknownUnit if unsupported."""
    if not is_known_unit(unit):
        raise UnknownUnit(unit)
    return unit


def conversion_factor(unit: str, strict: bool = True) -> float:
    """Get the miles-equivalent multiplier for a unit.

    Args:
        unit: One of ``miles``, ``km`` or ``leagues``.
        strict: Raise for unknown units instead of falling back.

    Returns:
        Miles per one ``unit``. Unknown units give UNKNOWN_UNIT_MULTIPLIER
        when ``strict`` is False.

    Raises:
        UnknownUnit: If ``unit`` is not recognised and ``strict`` is True.
    """
    if is_known_unit(unit):
        return UNIT_CONVERSIONS[unit]
    if strict:
        raise UnknownUnit(unit)
    logger.warning(
        "Unknown distance unit %r, treating it as %s mile(s) per unit",
        unit,
        UNKNOWN_UNIT_MULTIPLIER,
    )
    return UNKNOWN_UNIT_MULTIPLIER


def to_miles(distance: float, unit: str, strict: bool = True) -> float:
    """Convert a distance in ``unit`` to miles."""
    return distance * conversion_factor(unit, strict=strict)


def from_miles(miles: float, unit: str, strict: bool = True) -> float:
    """Convert a distance in miles back to ``unit``."""
    return miles / conversion_factor(unit, strict=strict)
