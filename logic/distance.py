"""
Planar distance helpers.

Points live in the top-left-origin pixel space of the loaded map image.
A map's Scale gives those pixels a real-world meaning.
"""

import math
from typing import Any, Iterable, List, NamedTuple, Tuple, Union


class Point(NamedTuple):
    """A coordinate pair in map pixel space."""

    x: float
    y: float


PointLike = Union[Point, Tuple[float, float], dict]


def as_point(value: Any) -> Point:
    """Coerce a tuple, ``{"x": .., "y": ..}`` dict or object into a Point.

    Raises:
        ValueError: If the value has no usable x/y coordinates.
    """
    if isinstance(value, Point):
        return value
    if isinstance(value, dict):
        if "x" not in value or "y" not in value:
            raise ValueError(f"Point is missing x/y: {value!r}")
        return Point(float(value["x"]), float(value["y"]))
    if hasattr(value, "x") and hasattr(value, "y"):
        return Point(float(value.x), float(value.y))
    try:
        x, y = value
    except (TypeError, ValueError):
        raise ValueError(f"Not a point: {value!r}")
    return Point(float(x), float(y))


def as_points(values: Iterable[Any]) -> List[Point]:
    return [as_point(v) for v in values]


def pixel_distance(p1: PointLike, p2: PointLike) -> float:
    """Calculate Euclidean distance between two points in pixels.

    NaN or infinite coordinates are not guarded and propagate to the result.
    """
    a = as_point(p1)
    b = as_point(p2)
    dx = b.x - a.x
    dy = b.y - a.y
    return math.sqrt(dx * dx + dy * dy)


def scaled_distance(pixels: float, scale) -> float:
    """Convert a pixel distance into the map's distance unit.

    Args:
        pixels: Distance in pixels.
        scale: Object with a ``pixels_per_unit`` attribute.

    Returns:
        ``pixels * scale.pixels_per_unit``. A zero or negative scale is not
        rejected and yields a zero or negative distance.
    """
    return pixels * scale.pixels_per_unit
