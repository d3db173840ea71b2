"""
World management API routes.

This module contains endpoints for listing, creating, updating and deleting
worlds. A new world always gets default travel settings; deleting a world
removes its maps, locations, custom stamps and travel settings.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import Location, Map, TravelSettingsRecord, World, get_db
from logic.validation import ALLOWED_WORLD_FIELDS, sanitise_name, sanitise_text

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_WORLD_NAME = "New World"


class WorldCreate(BaseModel):
    """Request model for creating a new world."""

    name: str | None = None
    description: str | None = None


def get_world_or_404(db: Session, world_id: str) -> World:
    world = db.get(World, world_id)
    if not world:
        raise HTTPException(404, "World not found")
    return world


def create_world(db: Session, name: Any = None, description: Any = None, commit: bool = True) -> World:
    """Create a world together with its default travel settings.

    Args:
        db: Database session.
        name: Requested name, defaults to "New World".
        description: Optional description.
        commit: Commit immediately; otherwise only flush.

    Returns:
        The new World.
    """
    world = World(
        name=sanitise_name(name, DEFAULT_WORLD_NAME),
        description=sanitise_text(description),
    )
    world.travel_settings = TravelSettingsRecord()
    db.add(world)
    if not commit:
        db.flush()
        return world
    db.commit()
    db.refresh(world)
    logger.info("Created world %s (%s)", world.id, world.name)
    return world


@router.get("/api/worlds")
def list_worlds(db: Session = Depends(get_db)):
    """Get all worlds, most recently updated first.

    Returns:
        List of worlds, each with ``map_count`` and ``location_count``.
    """
    rows = (
        db.query(
            World,
            func.count(func.distinct(Map.id)),
            func.count(func.distinct(Location.id)),
        )
        .outerjoin(Map, Map.world_id == World.id)
        .outerjoin(Location, Location.map_id == Map.id)
        .group_by(World.id)
        .order_by(World.updated_at.desc())
        .all()
    )

    worlds = []
    for world, map_count, location_count in rows:
        data = world.to_dict()
        data["map_count"] = map_count
        data["location_count"] = location_count
        worlds.append(data)
    return worlds


@router.get("/api/worlds/{world_id}")
def get_world(world_id: str, db: Session = Depends(get_db)):
    return get_world_or_404(db, world_id).to_dict()


@router.post("/api/worlds", status_code=201)
def post_world(world_data: WorldCreate, db: Session = Depends(get_db)):
    """Create a new world.

    Args:
        world_data: Name and description.

    Returns:
        The newly created world.
    """
    world = create_world(db, world_data.name, world_data.description)
    return world.to_dict()


@router.put("/api/worlds/{world_id}")
def update_world(world_id: str, payload: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    """Update world name and/or description.

    Unknown fields are ignored, matching the other update endpoints.

    Raises:
        HTTPException: If the world does not exist.
    """
    world = get_world_or_404(db, world_id)

    updated = False
    for key in ALLOWED_WORLD_FIELDS:
        if key not in payload:
            continue
        if key == "name":
            world.name = sanitise_name(payload[key], world.name)
        else:
            world.description = sanitise_text(payload[key])
        updated = True

    if updated:
        db.commit()
        db.refresh(world)

    return world.to_dict()


@router.delete("/api/worlds/{world_id}")
def delete_world(world_id: str, db: Session = Depends(get_db)):
    """Delete a world and everything in it.

    Deleting a world that does not exist still succeeds.
    """
    world = db.get(World, world_id)
    if world:
        db.delete(world)
        db.commit()
        logger.info("Deleted world %s", world_id)
    return {"success": True}
