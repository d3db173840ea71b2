"""
Human-readable formatting for travel durations and distances.

Values are rounded half-up (2.25 -> 2.3) to match what the map UI shows,
not with Python's banker's rounding.
"""

import math


def round_half_up(value: float, digits: int = 1) -> float:
    """Round ``value`` to ``digits`` decimals, halves rounding up."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def _number(value: float) -> str:
    """Render a float without a trailing ``.0`` for whole values."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _days(days: int) -> str:
    return "1 day" if days == 1 else f"{days} days"


def format_duration(days: int, hours: float) -> str:
    """Format a days/hours breakdown as a short English string.

    Args:
        days: Whole travel days.
        hours: Remaining travel hours (rounded to one decimal here).

    Returns:
        ``"30 min"``, ``"2.5 hr"``, ``"3 days"`` or ``"1 day, 4 hr"``.
    """
    hours = round_half_up(hours, 1)

    if days == 0:
        if hours < 1:
            minutes = int(math.floor(hours * 60 + 0.5))
            return f"{minutes} min"
        return f"{_number(hours)} hr"

    if hours == 0:
        return _days(days)

    return f"{_days(days)}, {_number(hours)} hr"


def format_distance(distance: float, unit: str) -> str:
    """Format a scaled map distance, e.g. ``"12.35 miles"``."""
    return f"{_number(round_half_up(distance, 2))} {unit}"
