"""
World export and import routes.

A world export bundles the world, its maps with their locations, its custom
stamps and its travel settings into one JSON document. Importing such a
document always creates a new world.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from logic.settings import settings_from_records, settings_to_record
from server.locations import create_location
from server.maps import create_map
from server.stamps import create_stamp
from server.travel import apply_travel_update
from server.worlds import create_world, get_world_or_404

logger = logging.getLogger(__name__)

router = APIRouter()

EXPORT_VERSION = "2.0.0"
IMPORTED_SUFFIX = " (Imported)"


def _entries(data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    """Get a list of objects from an import document.

    Raises:
        HTTPException: If the value is not a list of objects.
    """
    entries = data.get(key) or []
    if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
        raise HTTPException(400, f"Invalid import data: {key}")
    return entries


@router.get("/api/worlds/{world_id}/export")
def export_world(world_id: str, db: Session = Depends(get_db)):
    """Export a world with everything it contains.

    Returns:
        Export document with ``version``, ``exportedAt``, ``world``, ``maps``
        (each with ``locations``), ``customStamps`` and ``travelSettings``.

    Raises:
        HTTPException: If the world does not exist.
    """
    world = get_world_or_404(db, world_id)

    maps = []
    for map_row in world.maps:
        data = map_row.to_dict()
        data["locations"] = [location.to_dict() for location in map_row.locations]
        maps.append(data)

    return {
        "version": EXPORT_VERSION,
        "exportedAt": datetime.now().isoformat(),
        "world": world.to_dict(),
        "maps": maps,
        "customStamps": [stamp.to_dict() for stamp in world.custom_stamps],
        "travelSettings": world.travel_settings.to_dict() if world.travel_settings else None,
    }


@router.post("/api/import", status_code=201)
def import_world(data: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    """Import an exported world as a new world.

    Everything is written in one transaction; an invalid map, location or
    stamp rejects the whole import.

    Args:
        data: Document produced by the export endpoint.

    Returns:
        Success flag and the newly created world.

    Raises:
        HTTPException: If the document has no world or contains invalid data.
    """
    world_data = data.get("world")
    if not isinstance(world_data, dict):
        raise HTTPException(400, "Invalid import data")

    try:
        world = create_world(
            db,
            f"{world_data.get('name') or 'World'}{IMPORTED_SUFFIX}",
            world_data.get("description"),
            commit=False,
        )

        travel_data = data.get("travelSettings")
        if isinstance(travel_data, dict):
            record = world.travel_settings
            settings = apply_travel_update(settings_from_records(record), travel_data)
            for column, value in settings_to_record(settings).items():
                setattr(record, column, value)

        for stamp in _entries(data, "customStamps"):
            create_stamp(
                db,
                world.id,
                stamp.get("icon"),
                stamp.get("name"),
                stamp.get("category"),
                commit=False,
            )

        map_count = 0
        for map_data in _entries(data, "maps"):
            map_row = create_map(db, world.id, map_data, commit=False)
            map_count += 1
            for location_data in _entries(map_data, "locations"):
                create_location(db, map_row.id, location_data, commit=False)

        db.commit()
    except HTTPException:
        db.rollback()
        raise

    db.refresh(world)
    logger.info("Imported world %s with %d map(s)", world.id, map_count)
    return {"success": True, "world": world.to_dict()}
