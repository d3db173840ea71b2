"""
Tests for session login and the optional auth requirement.
"""

from datetime import datetime, timedelta

from server.auth import (
    SESSION_MAX_AGE,
    create_session,
    get_session_from_cookie,
    hash_password,
    prune_expired_sessions,
    user_sessions,
    verify_password,
)


def _register(client, username="mapmaker", password="correct-horse"):
    return client.post("/auth/register", json={"username": username, "password": password})


def test_password_hashing():
    stored = hash_password("s3cret-pass")
    assert verify_password("s3cret-pass", stored)
    assert not verify_password("wrong-pass", stored)
    assert hash_password("s3cret-pass") != stored


def test_register_logs_in(client):
    response = _register(client)
    assert response.status_code == 201
    assert response.json()["user"]["username"] == "mapmaker"

    me = client.get("/auth/me").json()
    assert me["authenticated"] is True
    assert me["user"]["username"] == "mapmaker"


def test_register_duplicate(client):
    _register(client)
    assert _register(client).status_code == 409


def test_register_short_password(client):
    assert _register(client, password="short").status_code == 400


def test_login_and_logout(client):
    _register(client)
    client.post("/auth/logout")
    assert client.get("/auth/me").json() == {"authenticated": False, "user": None}

    response = client.post("/auth/login", json={"username": "mapmaker", "password": "correct-horse"})
    assert response.status_code == 200
    assert client.get("/auth/me").json()["authenticated"] is True


def test_login_wrong_password(client):
    _register(client)
    client.post("/auth/logout")
    response = client.post("/auth/login", json={"username": "mapmaker", "password": "incorrect"})
    assert response.status_code == 401


def test_api_open_by_default(client):
    assert client.get("/api/worlds").status_code == 200


def test_api_requires_session_when_enabled(client, monkeypatch):
    monkeypatch.setenv("AUTH_REQUIRED", "true")
    assert client.get("/api/worlds").status_code == 401

    _register(client)
    assert client.get("/api/worlds").status_code == 200


def test_expired_sessions_are_pruned():
    stale_at = datetime.now() - timedelta(seconds=SESSION_MAX_AGE + 60)
    user_sessions["stale-session"] = {"user": {"id": "u1"}, "created_at": stale_at.isoformat()}

    token = create_session({"id": "u2", "username": "fresh"})

    assert "stale-session" not in user_sessions
    assert get_session_from_cookie(token)["user"]["username"] == "fresh"


def test_prune_keeps_live_sessions():
    token = create_session({"id": "u3", "username": "live"})
    later = datetime.now() + timedelta(seconds=SESSION_MAX_AGE + 1)

    assert prune_expired_sessions() == 0
    assert get_session_from_cookie(token) is not None

    assert prune_expired_sessions(now=later) >= 1
    assert get_session_from_cookie(token) is None
