"""
Stamp catalog.

Stamps are the icon categories a location can be marked with. The default
catalog is shared, read-only data; callers get their own deep copy to merge
a world's custom stamps into.
"""

import copy
from typing import Any, Dict, Iterable, List, Optional

DEFAULT_STAMP_ID = "pin"
CUSTOM_CATEGORY = "custom"

_DEFAULT_STAMPS: Dict[str, Dict[str, Any]] = {
    "settlements": {
        "name": "Settlements",
        "stamps": [
            {"id": "city", "icon": "\U0001F3F0", "name": "City"},
            {"id": "town", "icon": "\U0001F3D8️", "name": "Town"},
            {"id": "village", "icon": "\U0001F3E0", "name": "Village"},
            {"id": "castle", "icon": "\U0001F3EF", "name": "Castle"},
            {"id": "fortress", "icon": "\U0001F6E1️", "name": "Fortress"},
            {"id": "ruins", "icon": "\U0001F3DA️", "name": "Ruins"},
            {"id": "camp", "icon": "⛺", "name": "Camp"},
            {"id": "port", "icon": "⚓", "name": "Port"},
        ],
    },
    "nature": {
        "name": "Nature",
        "stamps": [
            {"id": "mountain", "icon": "⛰️", "name": "Mountain"},
            {"id": "forest", "icon": "\U0001F332", "name": "Forest"},
            {"id": "lake", "icon": "\U0001F4A7", "name": "Lake"},
            {"id": "river", "icon": "\U0001F30A", "name": "River"},
            {"id": "desert", "icon": "\U0001F3DC️", "name": "Desert"},
            {"id": "volcano", "icon": "\U0001F30B", "name": "Volcano"},
            {"id": "cave", "icon": "\U0001F573️", "name": "Cave"},
            {"id": "island", "icon": "\U0001F3DD️", "name": "Island"},
        ],
    },
    "dungeons": {
        "name": "Dungeons & POI",
        "stamps": [
            {"id": "dungeon", "icon": "⚔️", "name": "Dungeon"},
            {"id": "temple", "icon": "\U0001F6D5", "name": "Temple"},
            {"id": "shrine", "icon": "⛩️", "name": "Shrine"},
            {"id": "tower", "icon": "\U0001F5FC", "name": "Tower"},
            {"id": "mine", "icon": "⛏️", "name": "Mine"},
            {"id": "treasure", "icon": "\U0001F48E", "name": "Treasure"},
            {"id": "danger", "icon": "☠️", "name": "Danger"},
            {"id": "mystery", "icon": "❓", "name": "Mystery"},
        ],
    },
    "markers": {
        "name": "Markers",
        "stamps": [
            {"id": "star", "icon": "⭐", "name": "Star"},
            {"id": "heart", "icon": "❤️", "name": "Heart"},
            {"id": "flag", "icon": "\U0001F6A9", "name": "Flag"},
            {"id": "pin", "icon": "\U0001F4CD", "name": "Pin"},
            {"id": "check", "icon": "✅", "name": "Complete"},
            {"id": "cross", "icon": "❌", "name": "Blocked"},
            {"id": "eye", "icon": "\U0001F441️", "name": "Watched"},
            {"id": "quest", "icon": "\U0001F4DC", "name": "Quest"},
        ],
    },
    "travel": {
        "name": "Travel",
        "stamps": [
            {"id": "waypoint", "icon": "\U0001F536", "name": "Waypoint"},
            {"id": "inn", "icon": "\U0001F37A", "name": "Inn"},
            {"id": "stable", "icon": "\U0001F434", "name": "Stable"},
            {"id": "bridge", "icon": "\U0001F309", "name": "Bridge"},
            {"id": "crossroads", "icon": "\U0001F500", "name": "Crossroads"},
            {"id": "ferry", "icon": "⛴️", "name": "Ferry"},
            {"id": "pass", "icon": "\U0001F6B6", "name": "Pass"},
            {"id": "blocked", "icon": "\U0001F6A7", "name": "Blocked"},
        ],
    },
    CUSTOM_CATEGORY: {
        "name": "Custom",
        "stamps": [],
    },
}


def get_default_catalog() -> Dict[str, Dict[str, Any]]:
    """Return a fresh, independently mutable copy of the default catalog."""
    return copy.deepcopy(_DEFAULT_STAMPS)


def flatten(catalog: Dict[str, Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Get all stamps of a catalog as a flat list, in category order."""
    flat = []
    for category in catalog.values():
        flat.extend(category["stamps"])
    return flat


def get_stamp(catalog: Dict[str, Dict[str, Any]], stamp_id: str) -> Optional[Dict[str, Any]]:
    """Find a stamp by ID, or None."""
    return next((s for s in flatten(catalog) if s["id"] == stamp_id), None)


def is_default_stamp(stamp_id: str) -> bool:
    return get_stamp(_DEFAULT_STAMPS, stamp_id) is not None


def merge_custom(catalog: Dict[str, Dict[str, Any]], custom_stamps: Iterable[Any]) -> Dict[str, Dict[str, Any]]:
    """Add a world's custom stamps to a catalog copy.

    Each custom stamp lands in its own category when that category exists,
    and in ``custom`` otherwise. The input catalog is not modified.

    Args:
        catalog: Catalog to start from.
        custom_stamps: Dicts or rows with ``id``, ``icon``, ``name`` and
            ``category``.

    Returns:
        New catalog containing the custom stamps.
    """
    merged = copy.deepcopy(catalog)
    for row in custom_stamps:
        data = row if isinstance(row, dict) else row.to_dict()
        category = data.get("category") or CUSTOM_CATEGORY
        if category not in merged:
            category = CUSTOM_CATEGORY
        merged[category]["stamps"].append(
            {
                "id": data["id"],
                "icon": data["icon"],
                "name": data["name"],
                "custom": True,
            }
        )
    return merged
