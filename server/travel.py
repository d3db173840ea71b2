"""
Travel API routes.

This module exposes a world's travel settings and the travel-time
calculator. Times are computed from the world's speeds and hours per day
combined with the scale of the map the points were picked on.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from database import Location, Map, TravelSettingsRecord, get_db
from logic.distance import Point
from logic.formatting import format_distance
from logic.settings import (
    RECORD_SPEED_FIELDS,
    TravelSettings,
    set_hours_per_day,
    set_speed,
    settings_from_records,
    settings_to_record,
)
from logic.travel import RouteResult, plan_travel
from logic.validation import ALLOWED_TRAVEL_FIELDS, sanitise_float, sanitise_speed
from server.maps import get_map_or_404
from server.worlds import get_world_or_404

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_WAYPOINTS = 500


class PointIn(BaseModel):
    x: float
    y: float


class TravelRequest(BaseModel):
    """Request model for a travel-time calculation.

    Either explicit pixel points or the ids of locations on the map, in
    travel order.
    """

    points: List[PointIn] = []
    location_ids: List[str] = []


def get_or_create_settings(db: Session, world_id: str) -> TravelSettingsRecord:
    """Load a world's travel settings row, creating the defaults if missing."""
    record = (
        db.query(TravelSettingsRecord)
        .filter(TravelSettingsRecord.world_id == world_id)
        .first()
    )
    if record is None:
        record = TravelSettingsRecord(world_id=world_id)
        db.add(record)
        db.commit()
        db.refresh(record)
    return record


def apply_travel_update(settings: TravelSettings, payload: Dict[str, Any]) -> TravelSettings:
    """Apply submitted record fields to a settings value.

    Speeds must be positive. Hours per day are clamped into [1, 24].

    Raises:
        HTTPException: If a speed is not a positive number.
    """
    speed_modes = {column: mode for mode, column in RECORD_SPEED_FIELDS.items()}
    for key in ALLOWED_TRAVEL_FIELDS:
        if key not in payload or payload[key] is None:
            continue
        if key == "hours_per_day":
            settings = set_hours_per_day(settings, sanitise_float(payload[key]))
        else:
            settings = set_speed(settings, speed_modes[key], sanitise_speed(payload[key]))
    return settings


def load_map_settings(db: Session, map_row: Map) -> TravelSettings:
    """Combine a map's scale with its world's travel settings."""
    record = get_or_create_settings(db, map_row.world_id)
    return settings_from_records(record, map_row)


@router.get("/api/worlds/{world_id}/travel-settings")
def get_travel_settings(world_id: str, db: Session = Depends(get_db)):
    """Get travel settings for a world.

    Raises:
        HTTPException: If the world does not exist.
    """
    get_world_or_404(db, world_id)
    return get_or_create_settings(db, world_id).to_dict()


@router.put("/api/worlds/{world_id}/travel-settings")
def update_travel_settings(world_id: str, payload: Dict[str, Any] = Body(...),
                           db: Session = Depends(get_db)):
    """Update travel speeds and/or hours per day for a world.

    Args:
        world_id: World to update.
        payload: Any of walking_speed, horse_speed, wagon_speed and
            hours_per_day.

    Returns:
        The stored travel settings.

    Raises:
        HTTPException: If the world is missing or a speed is invalid.
    """
    get_world_or_404(db, world_id)
    record = get_or_create_settings(db, world_id)

    settings = apply_travel_update(settings_from_records(record), payload)
    for column, value in settings_to_record(settings).items():
        setattr(record, column, value)
    db.commit()
    db.refresh(record)

    return record.to_dict()


@router.post("/api/maps/{map_id}/travel")
def calculate_travel(map_id: str, request: TravelRequest, db: Session = Depends(get_db)):
    """Calculate travel times between points on a map.

    Two points give a single-segment result; more points are treated as one
    route whose total distance is converted once.

    Args:
        map_id: Map whose scale applies.
        request: Points or location ids, in travel order.

    Returns:
        Distances, unit and a breakdown per travel mode.

    Raises:
        HTTPException: If the map or a location is missing, or fewer than
            two points were given.
    """
    map_row = get_map_or_404(db, map_id)

    if request.location_ids:
        points = []
        for location_id in request.location_ids:
            location = db.get(Location, location_id)
            if not location or location.map_id != map_id:
                raise HTTPException(404, f"Location '{location_id}' not found on this map")
            points.append(Point(location.x, location.y))
    else:
        points = [Point(p.x, p.y) for p in request.points]

    if len(points) > MAX_WAYPOINTS:
        raise HTTPException(400, f"At most {MAX_WAYPOINTS} waypoints are allowed")

    settings = load_map_settings(db, map_row)
    result = plan_travel(points, settings)
    if result is None:
        raise HTTPException(400, "At least two points are required")

    data = result.to_dict()
    distance = result.raw_total_distance if isinstance(result, RouteResult) else result.raw_distance
    data["formattedDistance"] = format_distance(distance, result.unit)
    data["hoursPerDay"] = settings.hours_per_day
    return data
