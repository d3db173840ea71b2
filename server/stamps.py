"""
Stamp API routes.

This module serves the default stamp catalog and manages the custom stamps
each world can add to it.
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from database import CustomStamp, get_db
from logic.stamps import CUSTOM_CATEGORY, get_default_catalog, merge_custom
from logic.validation import sanitise_name
from server.worlds import get_world_or_404

router = APIRouter()

MAX_ICON_LEN = 32


class StampCreate(BaseModel):
    """Request model for creating a custom stamp."""

    icon: str
    name: str
    category: str | None = None


def create_stamp(db: Session, world_id: str, icon: str, name: str, category: str | None = None,
                 commit: bool = True) -> CustomStamp:
    """Add a custom stamp to a world.

    Raises:
        HTTPException: If the icon or name is empty or too long.
    """
    icon = str(icon or "").strip()
    if not icon or len(icon) > MAX_ICON_LEN:
        raise HTTPException(400, "Invalid stamp icon")
    name = sanitise_name(name, "")
    if not name:
        raise HTTPException(400, "Stamp name is required")

    stamp = CustomStamp(
        world_id=world_id,
        icon=icon,
        name=name,
        category=str(category or "").strip() or CUSTOM_CATEGORY,
    )
    db.add(stamp)
    if commit:
        db.commit()
        db.refresh(stamp)
    return stamp


@router.get("/api/stamps/defaults")
def get_default_stamps():
    """Get the default stamp catalog, grouped by category."""
    return get_default_catalog()


@router.get("/api/worlds/{world_id}/stamps")
def list_stamps(world_id: str, db: Session = Depends(get_db)):
    """Get the custom stamps of a world, oldest first."""
    stamps = (
        db.query(CustomStamp)
        .filter(CustomStamp.world_id == world_id)
        .order_by(CustomStamp.created_at.asc())
        .all()
    )
    return [stamp.to_dict() for stamp in stamps]


@router.get("/api/worlds/{world_id}/stamps/catalog")
def get_world_catalog(world_id: str, db: Session = Depends(get_db)):
    """Get the default catalog with the world's custom stamps merged in."""
    world = get_world_or_404(db, world_id)
    return merge_custom(get_default_catalog(), world.custom_stamps)


@router.post("/api/worlds/{world_id}/stamps", status_code=201)
def post_stamp(world_id: str, stamp_data: StampCreate, db: Session = Depends(get_db)):
    """Create a custom stamp for a world.

    Raises:
        HTTPException: If the world does not exist or the stamp is invalid.
    """
    get_world_or_404(db, world_id)
    stamp = create_stamp(db, world_id, stamp_data.icon, stamp_data.name, stamp_data.category)
    return stamp.to_dict()


@router.delete("/api/stamps/{stamp_id}")
def delete_stamp(stamp_id: str, db: Session = Depends(get_db)):
    stamp = db.get(CustomStamp, stamp_id)
    if stamp:
        db.delete(stamp)
        db.commit()
    return {"success": True}
