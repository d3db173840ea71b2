"""
API tests for worlds, maps, locations, stamps, travel and world transfer.
"""

from io import BytesIO

import pytest
from PIL import Image

from database import SessionLocal, TravelSettingsRecord


def _add_location(client, map_id, **fields):
    payload = {"x": 10, "y": 20}
    payload.update(fields)
    response = client.post(f"/api/maps/{map_id}/locations", json=payload)
    assert response.status_code == 201
    return response.json()


# ============================================================
# Worlds
# ============================================================


def test_create_world_defaults(client):
    response = client.post("/api/worlds", json={})
    assert response.status_code == 201
    assert response.json()["name"] == "New World"


def test_world_gets_default_travel_settings(client, world):
    response = client.get(f"/api/worlds/{world['id']}/travel-settings")
    assert response.status_code == 200
    data = response.json()
    assert data["walking_speed"] == 3
    assert data["horse_speed"] == 8
    assert data["wagon_speed"] == 4
    assert data["hours_per_day"] == 8


def test_list_worlds_with_counts(client, world, game_map):
    _add_location(client, game_map["id"])
    _add_location(client, game_map["id"], name="Second")

    response = client.get("/api/worlds")
    assert response.status_code == 200
    [listed] = response.json()
    assert listed["id"] == world["id"]
    assert listed["map_count"] == 1
    assert listed["location_count"] == 2


def test_update_world(client, world):
    response = client.put(
        f"/api/worlds/{world['id']}",
        json={"name": "Renamed", "ignored": "value"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Renamed"
    assert data["description"] == "A test world"


def test_update_world_name_too_long(client, world):
    response = client.put(f"/api/worlds/{world['id']}", json={"name": "x" * 500})
    assert response.status_code == 400


def test_get_missing_world(client):
    assert client.get("/api/worlds/missing").status_code == 404


def test_delete_world_cascades(client, world, game_map):
    location = _add_location(client, game_map["id"])

    response = client.delete(f"/api/worlds/{world['id']}")
    assert response.status_code == 200
    assert response.json() == {"success": True}

    assert client.get(f"/api/worlds/{world['id']}").status_code == 404
    assert client.get(f"/api/maps/{game_map['id']}").status_code == 404
    assert client.get(f"/api/locations/{location['id']}").status_code == 404

    session = SessionLocal()
    try:
        assert session.query(TravelSettingsRecord).count() == 0
    finally:
        session.close()


def test_delete_missing_world_succeeds(client):
    assert client.delete("/api/worlds/missing").json() == {"success": True}


# ============================================================
# Maps
# ============================================================


def test_create_map_defaults(client, game_map, world):
    assert game_map["world_id"] == world["id"]
    assert game_map["width"] == 800
    assert game_map["height"] == 600
    assert game_map["scale_value"] == 1
    assert game_map["scale_unit"] == "miles"


def test_create_map_in_missing_world(client):
    response = client.post("/api/worlds/missing/maps", json={"name": "Lost"})
    assert response.status_code == 404


def test_create_map_unknown_unit(client, world):
    response = client.post(
        f"/api/worlds/{world['id']}/maps",
        json={"name": "Odd", "scale_unit": "cubits"},
    )
    assert response.status_code == 400


def test_update_map_scale(client, game_map):
    response = client.put(
        f"/api/maps/{game_map['id']}",
        json={"scale_value": 2.5, "scale_unit": "leagues"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["scale_value"] == 2.5
    assert data["scale_unit"] == "leagues"


def test_update_map_unknown_unit(client, game_map):
    response = client.put(f"/api/maps/{game_map['id']}", json={"scale_unit": "versts"})
    assert response.status_code == 400
    assert client.get(f"/api/maps/{game_map['id']}").json()["scale_unit"] == "miles"


def test_list_maps_with_location_count(client, world, game_map):
    _add_location(client, game_map["id"])

    response = client.get(f"/api/worlds/{world['id']}/maps")
    [listed] = response.json()
    assert listed["id"] == game_map["id"]
    assert listed["location_count"] == 1


def test_upload_map_image(client, game_map):
    buffer = BytesIO()
    Image.new("RGB", (40, 30), "green").save(buffer, format="PNG")

    response = client.post(
        f"/api/maps/{game_map['id']}/image",
        files={"file": ("map.png", buffer.getvalue(), "image/png")},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["width"] == 40
    assert data["height"] == 30
    assert data["image_data"].startswith("data:image/png;base64,")


def test_upload_map_image_rejects_non_images(client, game_map):
    response = client.post(
        f"/api/maps/{game_map['id']}/image",
        files={"file": ("notes.txt", b"not an image", "text/plain")},
    )
    assert response.status_code == 400


# ============================================================
# Locations
# ============================================================


def test_create_location_defaults(client, game_map):
    location = _add_location(client, game_map["id"])
    assert location["name"] == "New Location"
    assert location["stamp_id"] == "pin"
    assert location["x"] == 10
    assert location["y"] == 20


def test_create_location_requires_coordinates(client, game_map):
    response = client.post(f"/api/maps/{game_map['id']}/locations", json={"name": "Nowhere"})
    assert response.status_code == 422


def test_move_location(client, game_map):
    location = _add_location(client, game_map["id"])

    response = client.put(
        f"/api/locations/{location['id']}",
        json={"x": 55.5, "y": 66, "stamp_id": "castle"},
    )
    assert response.status_code == 200
    data = response.json()
    assert (data["x"], data["y"]) == (55.5, 66)
    assert data["stamp_id"] == "castle"


def test_move_location_rejects_non_numbers(client, game_map):
    location = _add_location(client, game_map["id"])
    response = client.put(f"/api/locations/{location['id']}", json={"x": "east"})
    assert response.status_code == 400


def test_delete_location(client, game_map):
    location = _add_location(client, game_map["id"])
    assert client.delete(f"/api/locations/{location['id']}").json() == {"success": True}
    assert client.get(f"/api/maps/{game_map['id']}/locations").json() == []


def test_locations_csv(client, world, game_map):
    stamp = client.post(
        f"/api/worlds/{world['id']}/stamps",
        json={"icon": "D", "name": "Dragon Lair"},
    ).json()
    _add_location(client, game_map["id"], name="Capital", stamp_id="city", wiki_link="https://wiki/capital")
    _add_location(client, game_map["id"], name="Lair", stamp_id=stamp["id"], x=1.5, y=2)

    response = client.get(f"/api/maps/{game_map['id']}/locations.csv")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")

    lines = response.text.splitlines()
    assert lines[0] == "Name,Description,Wiki Link,Notes,Stamp,X,Y"
    assert lines[1] == "Capital,,https://wiki/capital,,City,10.0,20.0"
    assert lines[2] == "Lair,,,,Dragon Lair,1.5,2.0"


# ============================================================
# Stamps
# ============================================================


def test_default_stamps(client):
    data = client.get("/api/stamps/defaults").json()
    assert "settlements" in data
    assert data["custom"]["stamps"] == []


def test_custom_stamps(client, world):
    response = client.post(
        f"/api/worlds/{world['id']}/stamps",
        json={"icon": "W", "name": "Wizard Tower", "category": "dungeons"},
    )
    assert response.status_code == 201
    stamp = response.json()

    assert client.get(f"/api/worlds/{world['id']}/stamps").json() == [stamp]

    catalog = client.get(f"/api/worlds/{world['id']}/stamps/catalog").json()
    assert stamp["id"] in [s["id"] for s in catalog["dungeons"]["stamps"]]

    assert client.delete(f"/api/stamps/{stamp['id']}").json() == {"success": True}
    assert client.get(f"/api/worlds/{world['id']}/stamps").json() == []


@pytest.mark.parametrize("payload", [{"icon": "", "name": "Blank"}, {"icon": "X", "name": "  "}])
def test_invalid_custom_stamp(client, world, payload):
    response = client.post(f"/api/worlds/{world['id']}/stamps", json=payload)
    assert response.status_code == 400


# ============================================================
# Travel settings
# ============================================================


def test_update_travel_settings(client, world):
    response = client.put(
        f"/api/worlds/{world['id']}/travel-settings",
        json={"walking_speed": 3.5, "hours_per_day": 10},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["walking_speed"] == 3.5
    assert data["horse_speed"] == 8
    assert data["hours_per_day"] == 10


@pytest.mark.parametrize("hours, expected", [(30, 24), (0, 1), (7.9, 8), (7.2, 7)])
def test_travel_settings_clamp_hours(client, world, hours, expected):
    response = client.put(
        f"/api/worlds/{world['id']}/travel-settings",
        json={"hours_per_day": hours},
    )
    assert response.json()["hours_per_day"] == expected


@pytest.mark.parametrize("speed", [0, -2, "fast"])
def test_travel_settings_reject_invalid_speed(client, world, speed):
    response = client.put(
        f"/api/worlds/{world['id']}/travel-settings",
        json={"horse_speed": speed},
    )
    assert response.status_code == 400
    assert client.get(f"/api/worlds/{world['id']}/travel-settings").json()["horse_speed"] == 8


# ============================================================
# Travel calculation
# ============================================================


def _travel(client, map_id, points):
    return client.post(
        f"/api/maps/{map_id}/travel",
        json={"points": [{"x": x, "y": y} for x, y in points]},
    )


def test_travel_between_two_points(client, game_map):
    response = _travel(client, game_map["id"], [(0, 0), (24, 0)])
    assert response.status_code == 200
    data = response.json()

    assert data["pixelDistance"] == 24
    assert data["distance"] == 24
    assert data["unit"] == "miles"
    assert data["formattedDistance"] == "24 miles"
    assert data["hoursPerDay"] == 8
    assert data["walking"]["formatted"] == "1 day"
    assert data["horse"]["formatted"] == "3 hr"
    assert data["wagon"]["formatted"] == "6 hr"


def test_travel_route(client, world, game_map):
    client.put(f"/api/worlds/{world['id']}/travel-settings", json={"walking_speed": 3.5})

    response = _travel(client, game_map["id"], [(0, 0), (3, 0), (3, 4)])
    assert response.status_code == 200
    data = response.json()

    assert data["totalPixelDistance"] == 7
    assert data["totalDistance"] == 7
    assert [(s["from"], s["to"], s["pixelDistance"]) for s in data["segments"]] == [
        (0, 1, 3),
        (1, 2, 4),
    ]
    assert data["walking"]["totalHours"] == 2.0
    assert data["walking"]["formatted"] == "2 hr"


def test_travel_uses_map_scale(client, game_map):
    client.put(f"/api/maps/{game_map['id']}", json={"scale_value": 2, "scale_unit": "km"})

    data = _travel(client, game_map["id"], [(0, 0), (50, 0)]).json()
    assert data["distance"] == 100
    assert data["unit"] == "km"
    assert data["formattedDistance"] == "100 km"
    assert data["distanceInMiles"] == pytest.approx(62.1371)
    assert data["walking"]["days"] == 2
    assert data["walking"]["formatted"] == "2 days, 4.7 hr"


def test_travel_by_location_ids(client, game_map):
    first = _add_location(client, game_map["id"], x=0, y=0)
    second = _add_location(client, game_map["id"], x=0, y=16)

    response = client.post(
        f"/api/maps/{game_map['id']}/travel",
        json={"location_ids": [first["id"], second["id"]]},
    )
    assert response.status_code == 200
    assert response.json()["horse"]["formatted"] == "2 hr"


def test_travel_unknown_location(client, game_map):
    response = client.post(
        f"/api/maps/{game_map['id']}/travel",
        json={"location_ids": ["missing", "also-missing"]},
    )
    assert response.status_code == 404


def test_travel_needs_two_points(client, game_map):
    assert _travel(client, game_map["id"], [(5, 5)]).status_code == 400


def test_travel_with_stored_zero_speed(client, world, game_map):
    session = SessionLocal()
    try:
        record = (
            session.query(TravelSettingsRecord)
            .filter(TravelSettingsRecord.world_id == world["id"])
            .one()
        )
        record.wagon_speed = 0
        session.commit()
    finally:
        session.close()

    response = _travel(client, game_map["id"], [(0, 0), (10, 0)])
    assert response.status_code == 400
    assert response.json()["error"] == "InvalidSpeed"


# ============================================================
# Export / import
# ============================================================


def test_export_world(client, world, game_map):
    _add_location(client, game_map["id"], name="Capital")
    client.post(f"/api/worlds/{world['id']}/stamps", json={"icon": "W", "name": "Wizard"})

    response = client.get(f"/api/worlds/{world['id']}/export")
    assert response.status_code == 200
    data = response.json()

    assert data["version"] == "2.0.0"
    assert data["world"]["name"] == "Eldoria"
    [exported_map] = data["maps"]
    assert [loc["name"] for loc in exported_map["locations"]] == ["Capital"]
    assert [s["name"] for s in data["customStamps"]] == ["Wizard"]
    assert data["travelSettings"]["walking_speed"] == 3


def test_import_round_trip(client, world, game_map):
    _add_location(client, game_map["id"], name="Capital", x=12, y=34)
    client.put(f"/api/worlds/{world['id']}/travel-settings", json={"horse_speed": 11})
    export = client.get(f"/api/worlds/{world['id']}/export").json()

    response = client.post("/api/import", json=export)
    assert response.status_code == 201
    imported = response.json()["world"]
    assert imported["name"] == "Eldoria (Imported)"
    assert imported["id"] != world["id"]

    [imported_map] = client.get(f"/api/worlds/{imported['id']}/maps").json()
    assert imported_map["name"] == "Continent"
    [location] = client.get(f"/api/maps/{imported_map['id']}/locations").json()
    assert (location["name"], location["x"], location["y"]) == ("Capital", 12, 34)

    settings = client.get(f"/api/worlds/{imported['id']}/travel-settings").json()
    assert settings["horse_speed"] == 11


def test_import_without_world(client):
    response = client.post("/api/import", json={"maps": []})
    assert response.status_code == 400


def test_invalid_import_is_rolled_back(client, world):
    response = client.post(
        "/api/import",
        json={
            "world": {"name": "Broken"},
            "maps": [{"name": "Bad", "scale_unit": "cubits"}],
        },
    )
    assert response.status_code == 400
    assert [w["name"] for w in client.get("/api/worlds").json()] == ["Eldoria"]


@pytest.mark.parametrize(
    "document",
    [
        {"world": {"name": "W"}, "maps": ["oops"]},
        {"world": {"name": "W"}, "customStamps": [42]},
        {"world": {"name": "W"}, "maps": {"name": "not a list"}},
        {"world": {"name": "W"}, "maps": [{"name": "M", "locations": [None, "x"]}]},
        {"world": {"name": "W"}, "maps": [{"name": "M", "image_data": {"png": 1}}]},
    ],
)
def test_import_rejects_malformed_entries(client, world, document):
    response = client.post("/api/import", json=document)
    assert response.status_code == 400
    assert [w["name"] for w in client.get("/api/worlds").json()] == ["Eldoria"]


def test_import_stamp_with_numeric_icon(client):
    response = client.post(
        "/api/import",
        json={"world": {"name": "W"}, "customStamps": [{"icon": 7, "name": "Seven"}]},
    )
    assert response.status_code == 201
    world_id = response.json()["world"]["id"]
    [stamp] = client.get(f"/api/worlds/{world_id}/stamps").json()
    assert (stamp["icon"], stamp["category"]) == ("7", "custom")


def test_unknown_api_route(client):
    response = client.get("/api/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"error": "Not found"}
