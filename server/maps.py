"""
Map management API routes.

This module contains endpoints for the maps inside a world: CRUD, the
distance scale used for travel times, and background image upload.
"""

import base64
import logging
from io import BytesIO
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, File, HTTPException, UploadFile
from PIL import Image, UnidentifiedImageError
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import Location, Map, get_db
from logic.validation import (
    ALLOWED_MAP_FIELDS,
    sanitise_float,
    sanitise_image_data,
    sanitise_int,
    sanitise_name,
    sanitise_unit,
)
from server.worlds import get_world_or_404

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_MAP_NAME = "New Map"
MAX_IMAGE_BYTES = 50 * 1024 * 1024


class MapCreate(BaseModel):
    """Request model for creating a new map."""

    name: str | None = None
    image_data: str | None = None
    width: int = 0
    height: int = 0
    scale_value: float = 1
    scale_unit: str = "miles"


def get_map_or_404(db: Session, map_id: str) -> Map:
    map_row = db.get(Map, map_id)
    if not map_row:
        raise HTTPException(404, "Map not found")
    return map_row


def create_map(db: Session, world_id: str, data: Dict[str, Any], commit: bool = True) -> Map:
    """Create a map in a world.

    A zero or negative ``scale_value`` is stored as given.

    Args:
        db: Database session.
        world_id: Owning world.
        data: Map fields, missing ones take defaults.
        commit: Commit immediately; otherwise only flush.

    Returns:
        The new Map.
    """
    scale_value = data.get("scale_value")
    map_row = Map(
        world_id=world_id,
        name=sanitise_name(data.get("name"), DEFAULT_MAP_NAME),
        image_data=sanitise_image_data(data.get("image_data")),
        width=sanitise_int(data.get("width") or 0),
        height=sanitise_int(data.get("height") or 0),
        scale_value=1 if scale_value is None else sanitise_float(scale_value),
        scale_unit=sanitise_unit(data.get("scale_unit") or "miles"),
    )
    db.add(map_row)
    if not commit:
        db.flush()
        return map_row
    db.commit()
    db.refresh(map_row)
    return map_row


def apply_map_update(map_row: Map, payload: Dict[str, Any]) -> bool:
    """Copy allowed, sanitised fields from ``payload`` onto ``map_row``.

    Returns:
        True if any field was supplied.
    """
    updated = False
    for key in ALLOWED_MAP_FIELDS:
        if key not in payload:
            continue
        value = payload[key]
        if key == "name":
            map_row.name = sanitise_name(value, map_row.name)
        elif key == "image_data":
            map_row.image_data = sanitise_image_data(value)
        elif key in ("width", "height"):
            setattr(map_row, key, sanitise_int(value))
        elif key == "scale_value":
            map_row.scale_value = sanitise_float(value)
        elif key == "scale_unit":
            map_row.scale_unit = sanitise_unit(value)
        updated = True
    return updated


@router.get("/api/worlds/{world_id}/maps")
def list_maps(world_id: str, db: Session = Depends(get_db)):
    """Get all maps for a world, most recently updated first.

    Returns:
        List of maps, each with ``location_count``.
    """
    rows = (
        db.query(Map, func.count(Location.id))
        .outerjoin(Location, Location.map_id == Map.id)
        .filter(Map.world_id == world_id)
        .group_by(Map.id)
        .order_by(Map.updated_at.desc())
        .all()
    )

    maps = []
    for map_row, location_count in rows:
        data = map_row.to_dict()
        data["location_count"] = location_count
        maps.append(data)
    return maps


@router.get("/api/maps/{map_id}")
def get_map(map_id: str, db: Session = Depends(get_db)):
    return get_map_or_404(db, map_id).to_dict()


@router.post("/api/worlds/{world_id}/maps", status_code=201)
def post_map(world_id: str, map_data: MapCreate, db: Session = Depends(get_db)):
    """Create a new map in a world.

    Raises:
        HTTPException: If the world does not exist or the unit is unknown.
    """
    get_world_or_404(db, world_id)
    map_row = create_map(db, world_id, map_data.model_dump())
    logger.info("Created map %s in world %s", map_row.id, world_id)
    return map_row.to_dict()


@router.put("/api/maps/{map_id}")
def update_map(map_id: str, payload: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    """Update map properties, including its scale.

    Raises:
        HTTPException: If the map is not found or a field is invalid.
    """
    map_row = get_map_or_404(db, map_id)

    if apply_map_update(map_row, payload):
        db.commit()
        db.refresh(map_row)

    return map_row.to_dict()


@router.delete("/api/maps/{map_id}")
def delete_map(map_id: str, db: Session = Depends(get_db)):
    """Delete a map and its locations."""
    map_row = db.get(Map, map_id)
    if map_row:
        db.delete(map_row)
        db.commit()
        logger.info("Deleted map %s", map_id)
    return {"success": True}


@router.post("/api/maps/{map_id}/image")
async def upload_map_image(map_id: str, file: UploadFile = File(...), db: Session = Depends(get_db)):
    """Upload the background image of a map.

    The image is stored unchanged as a data URL. Its pixel size becomes the
    map's width and height, which define the coordinate space for markers.

    Args:
        map_id: Map to attach the image to.
        file: Uploaded image file.

    Returns:
        The updated map.

    Raises:
        HTTPException: If the map is missing or the upload is not an image.
    """
    map_row = get_map_or_404(db, map_id)

    content = await file.read()
    if not content:
        raise HTTPException(400, "Empty upload")
    if len(content) > MAX_IMAGE_BYTES:
        raise HTTPException(413, "Image too large")

    try:
        with Image.open(BytesIO(content)) as img:
            width, height = img.size
            mime = Image.MIME.get(img.format, file.content_type or "application/octet-stream")
    except UnidentifiedImageError:
        raise HTTPException(400, "Uploaded file is not a supported image")

    encoded = base64.b64encode(content).decode("ascii")
    map_row.image_data = f"data:{mime};base64,{encoded}"
    map_row.width = width
    map_row.height = height
    db.commit()
    db.refresh(map_row)

    logger.info("Stored %dx%d image for map %s", width, height, map_id)
    return map_row.to_dict()
