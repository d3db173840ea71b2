"""
Local travel settings store.

This module provides utilities for loading, saving, and clearing travel
settings blobs kept in a local JSON file, one blob per opaque key (for
example a world id). Missing keys and missing fields load as defaults.
"""

import json
import logging
import os
from typing import Any, Dict

from .settings import TravelSettings, settings_from_dict, settings_to_dict

logger = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_STORE_PATH = os.path.join(BASE_DIR, "travel_settings.json")

DEFAULT_KEY = "fantasymap_travel"


def get_store_path() -> str:
    """Path of the JSON store, overridable with TRAVEL_SETTINGS_PATH."""
    return os.getenv("TRAVEL_SETTINGS_PATH", DEFAULT_STORE_PATH)


def _read_store(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return {}
    except json.JSONDecodeError:
        logger.warning("Travel settings store %s is not valid JSON, ignoring it", path)
        return {}
    return data if isinstance(data, dict) else {}


def _write_store(path: str, data: Dict[str, Any]):
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def load_travel_settings(key: str = DEFAULT_KEY) -> TravelSettings:
    """Load travel settings saved under ``key``.

    Args:
        key: Opaque storage key.

    Returns:
        Stored settings with defaults filled in, or the defaults when nothing
        is stored under ``key``.
    """
    blob = _read_store(get_store_path()).get(key)
    return settings_from_dict(blob)


def save_travel_settings(settings: TravelSettings, key: str = DEFAULT_KEY):
    """Save travel settings under ``key``, leaving other keys untouched.

    Args:
        settings: Settings to persist.
        key: Opaque storage key.
    """
    path = get_store_path()
    data = _read_store(path)
    data[key] = settings_to_dict(settings)
    _write_store(path, data)
    logger.debug("Saved travel settings under %r to %s", key, path)


def clear_travel_settings(key: str = DEFAULT_KEY) -> bool:
    """Remove the settings stored under ``key``.

    Returns:
        True if something was removed.
    """
    path = get_store_path()
    data = _read_store(path)
    if key not in data:
        return False
    del data[key]
    _write_store(path, data)
    return True
