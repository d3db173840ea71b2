"""
Travel time calculations.

Turns pixel distances on a map into travel-time estimates for every
configured travel mode. A single segment between two points and a route
through several waypoints are both supported; a route is always converted
and rounded as one aggregate trip.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .distance import as_point, as_points, pixel_distance, scaled_distance
from .errors import InvalidHoursPerDay, InvalidSpeed
from .formatting import format_duration, round_half_up
from .settings import TravelSettings
from .units import to_miles

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TravelBreakdown:
    """Travel time for one mode split into whole days and remaining hours."""

    total_hours: float
    days: int
    hours: float
    formatted: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalHours": self.total_hours,
            "days": self.days,
            "hours": self.hours,
            "formatted": self.formatted,
        }


@dataclass(frozen=True)
class Segment:
    """One leg of a route between consecutive waypoints."""

    start: int
    end: int
    pixel_distance: float
    distance: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.start,
            "to": self.end,
            "pixelDistance": self.pixel_distance,
            "distance": self.distance,
        }


@dataclass(frozen=True)
class TravelResult:
    """Distance and per-mode travel times between two points."""

    pixel_distance: float
    raw_distance: float
    distance_in_miles: float
    unit: str
    times: Dict[str, TravelBreakdown] = field(default_factory=dict)

    @property
    def distance(self) -> float:
        """Scaled distance rounded to two decimals for display."""
        return round_half_up(self.raw_distance, 2)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "pixelDistance": self.pixel_distance,
            "distance": self.distance,
            "distanceInMiles": self.distance_in_miles,
            "unit": self.unit,
        }
        result.update({mode: b.to_dict() for mode, b in self.times.items()})
        return result


@dataclass(frozen=True)
class RouteResult:
    """Aggregate travel information for a route through several waypoints."""

    segments: List[Segment]
    total_pixel_distance: float
    raw_total_distance: float
    distance_in_miles: float
    unit: str
    times: Dict[str, TravelBreakdown] = field(default_factory=dict)

    @property
    def total_distance(self) -> float:
        return round_half_up(self.raw_total_distance, 2)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "segments": [s.to_dict() for s in self.segments],
            "totalPixelDistance": self.total_pixel_distance,
            "totalDistance": self.total_distance,
            "distanceInMiles": self.distance_in_miles,
            "unit": self.unit,
        }
        result.update({mode: b.to_dict() for mode, b in self.times.items()})
        return result


def travel_time(distance_in_miles: float, speed_mph: float, hours_per_day: int) -> TravelBreakdown:
    """Calculate travel time for a given distance.

    Args:
        distance_in_miles: Distance to cover, in miles.
        speed_mph: Travel speed in miles per hour.
        hours_per_day: Hours travelled per day. Settings keep this in [1, 24];
            values below 1 are rejected.

    Returns:
        TravelBreakdown where ``days * hours_per_day + hours`` equals
        ``total_hours`` to within 0.05 hours.

    Raises:
        InvalidSpeed: If ``speed_mph`` is zero or negative.
        InvalidHoursPerDay: If ``hours_per_day`` is below 1.
    """
    if not speed_mph > 0:
        raise InvalidSpeed(speed_mph)
    if not hours_per_day >= 1:
        raise InvalidHoursPerDay(hours_per_day)

    total_hours = distance_in_miles / speed_mph
    days = int(math.floor(total_hours / hours_per_day))
    remaining_hours = total_hours % hours_per_day

    return TravelBreakdown(
        total_hours=total_hours,
        days=days,
        hours=round_half_up(remaining_hours, 1),
        formatted=format_duration(days, remaining_hours),
    )


def travel_times(distance_in_miles: float, settings: TravelSettings) -> Dict[str, TravelBreakdown]:
    """Apply the travel time formula to every configured mode.

    Raises:
        InvalidSpeed: Naming the first mode whose speed is not positive.
    """
    times = {}
    for mode, speed in settings.speeds.items():
        try:
            times[mode] = travel_time(distance_in_miles, speed, settings.hours_per_day)
        except InvalidSpeed:
            raise InvalidSpeed(speed, mode) from None
    return times


def segment_travel(p1, p2, settings: TravelSettings) -> TravelResult:
    """Calculate all travel times between two pixel points.

    Args:
        p1: Start point.
        p2: End point.
        settings: Speeds, hours per day and map scale to apply.

    Returns:
        TravelResult with distances and a breakdown for each mode.
    """
    pixels = pixel_distance(p1, p2)
    distance = scaled_distance(pixels, settings.scale)
    # Unknown units fall back to a multiplier of 1 (see units.conversion_factor)
    distance_in_miles = to_miles(distance, settings.scale.unit, strict=False)

    return TravelResult(
        pixel_distance=pixels,
        raw_distance=distance,
        distance_in_miles=distance_in_miles,
        unit=settings.scale.unit,
        times=travel_times(distance_in_miles, settings),
    )


def route_time(points: Sequence, settings: TravelSettings) -> Optional[RouteResult]:
    """Calculate total travel time for a route through several waypoints.

    Segment pixel distances are summed first and the total is converted and
    broken down once. Per-segment times are never added together, so the
    result carries a single rounding step.

    Args:
        points: Ordered waypoints.
        settings: Speeds, hours per day and map scale to apply.

    Returns:
        RouteResult, or None when fewer than two points are given.
    """
    waypoints = as_points(points)
    if len(waypoints) < 2:
        logger.debug("Route needs at least two points, got %d", len(waypoints))
        return None

    segments = []
    total_pixels = 0.0
    for i in range(len(waypoints) - 1):
        pixels = pixel_distance(waypoints[i], waypoints[i + 1])
        total_pixels += pixels
        segments.append(
            Segment(
                start=i,
                end=i + 1,
                pixel_distance=pixels,
                distance=scaled_distance(pixels, settings.scale),
            )
        )

    total_distance = scaled_distance(total_pixels, settings.scale)
    distance_in_miles = to_miles(total_distance, settings.scale.unit, strict=False)

    return RouteResult(
        segments=segments,
        total_pixel_distance=total_pixels,
        raw_total_distance=total_distance,
        distance_in_miles=distance_in_miles,
        unit=settings.scale.unit,
        times=travel_times(distance_in_miles, settings),
    )


def plan_travel(points: Sequence, settings: TravelSettings):
    """Pick the single-segment or route calculation for a list of points.

    Returns:
        TravelResult for exactly two points, RouteResult for more, and None
        for fewer than two.
    """
    if len(points) == 2:
        return segment_travel(as_point(points[0]), as_point(points[1]), settings)
    return route_time(points, settings)
