"""
Location API routes.

This module contains endpoints for the stamped markers placed on a map,
plus a CSV export of a map's locations for wiki integration.
"""

import csv
import logging
from io import StringIO
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from database import Location, get_db
from logic.stamps import DEFAULT_STAMP_ID, get_default_catalog, get_stamp, merge_custom
from logic.validation import (
    ALLOWED_LOCATION_FIELDS,
    sanitise_float,
    sanitise_name,
    sanitise_text,
)
from server.maps import get_map_or_404

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_LOCATION_NAME = "New Location"
CSV_HEADERS = ["Name", "Description", "Wiki Link", "Notes", "Stamp", "X", "Y"]


class LocationCreate(BaseModel):
    """Request model for creating a new location."""

    x: float
    y: float
    name: str | None = None
    description: str | None = None
    wiki_link: str | None = None
    notes: str | None = None
    stamp_id: str | None = None


def get_location_or_404(db: Session, location_id: str) -> Location:
    location = db.get(Location, location_id)
    if not location:
        raise HTTPException(404, "Location not found")
    return location


def create_location(db: Session, map_id: str, data: Dict[str, Any], commit: bool = True) -> Location:
    """Create a location on a map.

    Raises:
        HTTPException: If the coordinates are missing or not finite.
    """
    location = Location(
        map_id=map_id,
        name=sanitise_name(data.get("name"), DEFAULT_LOCATION_NAME),
        description=sanitise_text(data.get("description")),
        wiki_link=sanitise_text(data.get("wiki_link")),
        notes=sanitise_text(data.get("notes")),
        stamp_id=str(data.get("stamp_id") or DEFAULT_STAMP_ID),
        x=sanitise_float(data.get("x")),
        y=sanitise_float(data.get("y")),
    )
    db.add(location)
    if commit:
        db.commit()
        db.refresh(location)
    return location


@router.get("/api/maps/{map_id}/locations")
def list_locations(map_id: str, db: Session = Depends(get_db)):
    """Get all locations on a map, oldest first."""
    locations = (
        db.query(Location)
        .filter(Location.map_id == map_id)
        .order_by(Location.created_at.asc())
        .all()
    )
    return [location.to_dict() for location in locations]


@router.get("/api/locations/{location_id}")
def get_location(location_id: str, db: Session = Depends(get_db)):
    return get_location_or_404(db, location_id).to_dict()


@router.post("/api/maps/{map_id}/locations", status_code=201)
def post_location(map_id: str, location_data: LocationCreate, db: Session = Depends(get_db)):
    """Place a new location on a map.

    Raises:
        HTTPException: If the map does not exist.
    """
    get_map_or_404(db, map_id)
    location = create_location(db, map_id, location_data.model_dump())
    return location.to_dict()


@router.put("/api/locations/{location_id}")
def update_location(location_id: str, payload: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    """Update location properties or move it.

    Raises:
        HTTPException: If the location is not found or a value is invalid.
    """
    location = get_location_or_404(db, location_id)

    updated = False
    for key in ALLOWED_LOCATION_FIELDS:
        if key not in payload:
            continue
        value = payload[key]
        if key == "name":
            location.name = sanitise_name(value, location.name)
        elif key in ("x", "y"):
            setattr(location, key, sanitise_float(value))
        elif key == "stamp_id":
            location.stamp_id = value or DEFAULT_STAMP_ID
        else:
            setattr(location, key, sanitise_text(value))
        updated = True

    if updated:
        db.commit()
        db.refresh(location)

    return location.to_dict()


@router.delete("/api/locations/{location_id}")
def delete_location(location_id: str, db: Session = Depends(get_db)):
    location = db.get(Location, location_id)
    if location:
        db.delete(location)
        db.commit()
    return {"success": True}


@router.get("/api/maps/{map_id}/locations.csv")
def download_locations_csv(map_id: str, db: Session = Depends(get_db)):
    """Download a map's locations as CSV.

    Stamps are written by name, using the world's custom stamps as well as
    the default catalog; unknown stamps fall back to their id.

    Returns:
        CSV file with one row per location.
    """
    map_row = get_map_or_404(db, map_id)
    catalog = merge_custom(get_default_catalog(), map_row.world.custom_stamps)

    output = StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL)
    writer.writerow(CSV_HEADERS)
    for location in map_row.locations:
        stamp = get_stamp(catalog, location.stamp_id)
        writer.writerow(
            [
                location.name or "",
                location.description or "",
                location.wiki_link or "",
                location.notes or "",
                stamp["name"] if stamp else location.stamp_id,
                location.x,
                location.y,
            ]
        )

    output.seek(0)

    def iter_csv():
        yield output.getvalue()

    return StreamingResponse(
        iter_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=map-locations.csv"},
    )
