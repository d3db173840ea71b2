"""
Shared fixtures.

The database and the local settings store are pointed at a temporary
directory before any application module is imported.
"""

import os
import sys
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="fantasy_map_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["TRAVEL_SETTINGS_PATH"] = os.path.join(_TMP_DIR, "travel_settings.json")
os.environ.setdefault("SESSION_SECRET_KEY", "test-session-secret")

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from database import Base, engine  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_db(monkeypatch):
    """Recreate every table and disable the auth requirement per test."""
    monkeypatch.delenv("AUTH_REQUIRED", raising=False)
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def client():
    from main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def world(client):
    response = client.post("/api/worlds", json={"name": "Eldoria", "description": "A test world"})
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def game_map(client, world):
    response = client.post(
        f"/api/worlds/{world['id']}/maps",
        json={"name": "Continent", "width": 800, "height": 600},
    )
    assert response.status_code == 201
    return response.json()
