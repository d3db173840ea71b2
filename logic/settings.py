"""
Travel settings values.

A TravelSettings value bundles the per-mode speeds, the hours travelled per
day and the active map scale. Values are frozen: every mutator returns a new
TravelSettings and leaves its input untouched, so callers always hold the
current settings explicitly.

Two external shapes are understood:

* the JSON blob saved by the local store (``speeds``, ``hoursPerDay``,
  ``scale.pixelsPerUnit``, ``scale.unit``);
* the database records, with ``walking_speed``, ``horse_speed``,
  ``wagon_speed`` and ``hours_per_day`` on the world and ``scale_value`` /
  ``scale_unit`` on the map.
"""

import logging
import math
from dataclasses import dataclass, field, replace
from numbers import Real
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .errors import UnknownMode
from .formatting import round_half_up
from .units import DEFAULT_UNIT, validate_unit

logger = logging.getLogger(__name__)

DEFAULT_SPEEDS: Mapping[str, float] = MappingProxyType({
    "walking": 3,  # Average walking pace
    "horse": 8,  # Horse at sustainable travel pace
    "wagon": 4,  # Wagon/cart speed
})
DEFAULT_HOURS_PER_DAY = 8
DEFAULT_PIXELS_PER_UNIT = 1

MIN_HOURS_PER_DAY = 1
MAX_HOURS_PER_DAY = 24

# Database column name for each built-in travel mode
RECORD_SPEED_FIELDS = {
    "walking": "walking_speed",
    "horse": "horse_speed",
    "wagon": "wagon_speed",
}


@dataclass(frozen=True)
class Scale:
    """Pixel to real-world distance mapping for one map."""

    pixels_per_unit: float = DEFAULT_PIXELS_PER_UNIT
    unit: str = DEFAULT_UNIT


@dataclass(frozen=True)
class TravelSettings:
    """Speeds (mph), travel hours per day and map scale."""

    speeds: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_SPEEDS))
    hours_per_day: int = DEFAULT_HOURS_PER_DAY
    scale: Scale = field(default_factory=Scale)

    def __post_init__(self):
        # Read-only copy, never shared with the caller or another value
        object.__setattr__(self, "speeds", MappingProxyType(dict(self.speeds)))

    @property
    def modes(self):
        return list(self.speeds)


def clamp_hours_per_day(value) -> int:
    """Round half-up to whole hours, then clamp into [1, 24]."""
    return int(max(MIN_HOURS_PER_DAY, min(MAX_HOURS_PER_DAY, round_half_up(value, 0))))


def create_default() -> TravelSettings:
    """Create settings holding the documented defaults."""
    return TravelSettings()


def set_speed(settings: TravelSettings, mode: str, value: float) -> TravelSettings:
    """Return settings with the speed of an existing mode replaced.

    The value is stored as given. Positivity is checked when a travel time
    is computed, not here.

    Raises:
        UnknownMode: If ``mode`` is not already configured.
    """
    if mode not in settings.speeds:
        raise UnknownMode(mode)
    speeds = dict(settings.speeds)
    speeds[mode] = value
    return replace(settings, speeds=speeds)


def set_hours_per_day(settings: TravelSettings, value) -> TravelSettings:
    """Return settings with hours per day clamped into [1, 24].

    Out-of-range values are clamped rather than rejected so a settings form
    never errors.
    """
    return replace(settings, hours_per_day=clamp_hours_per_day(value))


def set_scale(settings: TravelSettings, pixels_per_unit: float, unit: str) -> TravelSettings:
    """Return settings with a new map scale.

    A zero or negative ``pixels_per_unit`` is accepted as-is and produces
    zero or negative distances later on.

    Raises:
        UnknownUnit: If ``unit`` is not a supported distance unit.
    """
    validate_unit(unit)
    return replace(settings, scale=Scale(pixels_per_unit=pixels_per_unit, unit=unit))


def reset_to_defaults(settings: TravelSettings) -> TravelSettings:
    """Restore default speeds and hours per day, keeping the map scale."""
    return replace(
        settings,
        speeds=dict(DEFAULT_SPEEDS),
        hours_per_day=DEFAULT_HOURS_PER_DAY,
    )


# =========================
# Persistence shapes
# =========================

def settings_to_dict(settings: TravelSettings) -> Dict[str, Any]:
    """Serialise settings into the JSON blob shape used by the local store."""
    return {
        "speeds": dict(settings.speeds),
        "hoursPerDay": settings.hours_per_day,
        "scale": {
            "pixelsPerUnit": settings.scale.pixels_per_unit,
            "unit": settings.scale.unit,
        },
    }


def _is_number(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def settings_from_dict(data: Optional[Mapping[str, Any]]) -> TravelSettings:
    """Build settings from a stored JSON blob.

    Missing fields, including individual missing modes, fall back to the
    defaults. Fields of the wrong type are logged and replaced by their
    default. Extra modes present in the blob are kept. The stored unit is
    taken verbatim; unknown units are handled when distances are converted.

    Args:
        data: Previously saved blob, or None.

    Returns:
        TravelSettings built from the blob.
    """
    if not data:
        return create_default()
    if not isinstance(data, Mapping):
        logger.warning("Ignoring travel settings blob of type %s", type(data).__name__)
        return create_default()

    speeds = dict(DEFAULT_SPEEDS)
    stored_speeds = data.get("speeds")
    if isinstance(stored_speeds, Mapping):
        for mode, value in stored_speeds.items():
            if _is_number(value):
                speeds[mode] = value
            else:
                logger.warning("Ignoring stored speed for %r: %r", mode, value)
    elif stored_speeds is not None:
        logger.warning("Ignoring stored speeds: %r", stored_speeds)

    hours_per_day = data.get("hoursPerDay")
    if hours_per_day is not None and not _is_number(hours_per_day):
        logger.warning("Ignoring stored hoursPerDay: %r", hours_per_day)
        hours_per_day = None
    if hours_per_day is None:
        hours_per_day = DEFAULT_HOURS_PER_DAY

    scale_data = data.get("scale")
    if scale_data is not None and not isinstance(scale_data, Mapping):
        logger.warning("Ignoring stored scale: %r", scale_data)
        scale_data = None
    scale_data = scale_data or {}

    pixels_per_unit = scale_data.get("pixelsPerUnit")
    if pixels_per_unit is not None and not _is_number(pixels_per_unit):
        logger.warning("Ignoring stored pixelsPerUnit: %r", pixels_per_unit)
        pixels_per_unit = None
    if pixels_per_unit is None:
        pixels_per_unit = DEFAULT_PIXELS_PER_UNIT

    unit = scale_data.get("unit")
    if not isinstance(unit, str) or not unit:
        unit = DEFAULT_UNIT

    return TravelSettings(
        speeds=speeds,
        hours_per_day=clamp_hours_per_day(hours_per_day),
        scale=Scale(pixels_per_unit=pixels_per_unit, unit=unit),
    )


def _field(record, name: str):
    if record is None:
        return None
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def settings_from_records(world_settings=None, map_record=None) -> TravelSettings:
    """Adapt database records into a TravelSettings value.

    Args:
        world_settings: Row or dict with ``walking_speed``, ``horse_speed``,
            ``wagon_speed`` and ``hours_per_day``.
        map_record: Row or dict with ``scale_value`` and ``scale_unit``.

    Returns:
        TravelSettings, with defaults for every field that is absent.
    """
    speeds = dict(DEFAULT_SPEEDS)
    for mode, column in RECORD_SPEED_FIELDS.items():
        value = _field(world_settings, column)
        if value is not None:
            speeds[mode] = value

    hours_per_day = _field(world_settings, "hours_per_day")
    if hours_per_day is None:
        hours_per_day = DEFAULT_HOURS_PER_DAY

    scale_value = _field(map_record, "scale_value")
    if scale_value is None:
        scale_value = DEFAULT_PIXELS_PER_UNIT

    return TravelSettings(
        speeds=speeds,
        hours_per_day=clamp_hours_per_day(hours_per_day),
        scale=Scale(
            pixels_per_unit=scale_value,
            unit=_field(map_record, "scale_unit") or DEFAULT_UNIT,
        ),
    )


def settings_to_record(settings: TravelSettings) -> Dict[str, Any]:
    """Flatten the world-level part of settings into database column names."""
    record = {
        column: settings.speeds[mode]
        for mode, column in RECORD_SPEED_FIELDS.items()
        if mode in settings.speeds
    }
    record["hours_per_day"] = settings.hours_per_day
    return record
