"""
Tests for the FastAPI application.

The database dependency is replaced by an in-memory SQLite session and
settings by a fixed Settings instance.
"""

import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from outdoor_risk.activities import ActivityRegistry
from outdoor_risk.api.dependencies import get_registry
from outdoor_risk.api.main import app
from outdoor_risk.database import Base, get_db_session, get_engine, get_session_factory
from outdoor_risk.readings import forecast_from_payload, reading_from_payload
from outdoor_risk.settings import Settings, get_settings

FIXTURES = Path(__file__).parent / "fixtures"


# Fixtures


@pytest.fixture
def client():
    engine = get_engine("sqlite://")
    Base.metadata.create_all(engine)
    SessionFactory = get_session_factory(engine)

    def override_db():
        db = SessionFactory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db_session] = override_db
    app.dependency_overrides[get_registry] = ActivityRegistry.default
    app.dependency_overrides[get_settings] = lambda: Settings(MAX_HISTORY_ITEMS=3)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture
def mild_payload():
    with open(FIXTURES / "weather_mild.json") as f:
        return json.load(f)


@pytest.fixture
def mild_reading(mild_payload):
    return reading_from_payload(mild_payload).model_dump(mode="json")


@pytest.fixture
def mild_forecast(mild_payload):
    return [entry.model_dump(mode="json") for entry in forecast_from_payload(mild_payload)]


@pytest.fixture
def storm_reading():
    with open(FIXTURES / "weather_storm.json") as f:
        return reading_from_payload(json.load(f)).model_dump(mode="json")


# Service endpoints


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["name"] == "Outdoor Activity Risk API"


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy", "service": "outdoor-risk-api"}


# Activities


def test_list_activities(client):
    data = client.get("/api/activities").json()

    assert data["count"] == 6
    assert data["activities"][0] == {
        "id": "general",
        "name": "General Outdoor Activity",
        "description": "Walking, casual outdoor events",
    }


def test_get_activity(client):
    data = client.get("/api/activities/cycling").json()

    assert data["name"] == "Cycling"
    assert data["weights"]["wind"] == 0.4
    assert data["optimal_conditions"]["acceptable_wind"] == 37.5


def test_unknown_activity_degrades_to_general(client):
    response = client.get("/api/activities/skydiving")

    assert response.status_code == 200
    assert response.json()["id"] == "general"


# Assessments


def test_assessment(client, storm_reading):
    response = client.post("/api/assessments", json={"reading": storm_reading, "activity_id": "general"})

    assert response.status_code == 200
    data = response.json()
    assert data["overall"] == "high"
    assert data["score"] == 40
    assert data["factors"]["precipitation"]["status"] == "dangerous"
    assert data["recommendations"][-1]["message"] == "Moderate conditions - prepare accordingly"
    assert data["best_time_windows"] == []


def test_assessment_with_forecast(client, mild_reading, mild_forecast):
    response = client.post(
        "/api/assessments",
        json={"reading": mild_reading, "activity_id": "hiking", "forecast": mild_forecast},
    )

    windows = response.json()["best_time_windows"]
    assert len(windows) == 3
    assert windows[0]["score"] == 100
    assert windows[0]["average_score"] == 98.5


def test_invalid_reading_is_422(client, mild_reading):
    mild_reading["humidity"] = 150

    response = client.post("/api/assessments", json={"reading": mild_reading})

    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "Validation Error"
    assert "humidity" in body["message"]


def test_assessment_records_history(client, mild_reading):
    payload = {
        "reading": mild_reading,
        "activity_id": "cycling",
        "user_id": "alice",
        "location": {"name": "Boulder, CO", "lat": 40.01, "lon": -105.27},
    }
    assert client.post("/api/assessments", json=payload).status_code == 200

    history = client.get("/api/users/alice/history").json()

    assert history["count"] == 1
    entry = history["entries"][0]
    assert entry["activity_id"] == "cycling"
    assert entry["location_name"] == "Boulder, CO"
    assert entry["conditions"] == "Clear"


def test_assessment_without_user_records_nothing(client, mild_reading):
    client.post("/api/assessments", json={"reading": mild_reading})

    assert client.get("/api/users/alice/history").json()["count"] == 0


def test_basic_assessment(client, storm_reading):
    response = client.post("/api/assessments/basic", json={"reading": storm_reading})

    data = response.json()
    assert data["overall"] == "high"
    assert data["risk_score"] == 7
    assert data["factors"]["precipitation"] == "heavy"
    assert data["recommendations"][-1] == "Thunderstorm conditions - seek indoor shelter immediately"


def test_basic_assessment_with_camel_case_preferences(client, mild_reading):
    response = client.post(
        "/api/assessments/basic",
        json={"reading": mild_reading, "preferences": {"veryHot": 17, "veryCold": 0}},
    )

    data = response.json()
    assert data["factors"]["temperature"] == "hot"
    assert data["risk_score"] == 2


def test_basic_assessment_uses_stored_preferences(client, mild_reading):
    client.put("/api/users/alice/preferences", json={"veryHot": 17, "veryCold": 0})

    data = client.post("/api/assessments/basic", json={"reading": mild_reading, "user_id": "alice"}).json()
    assert data["factors"]["temperature"] == "hot"

    data = client.post("/api/assessments/basic", json={"reading": mild_reading, "user_id": "bob"}).json()
    assert data["factors"]["temperature"] == "comfortable"


# Forecast


def test_forecast_outlook(client, mild_forecast):
    response = client.post("/api/forecast/outlook", json={"forecast": mild_forecast, "activity_id": "hiking"})

    assert response.status_code == 200
    data = response.json()
    assert data["activity_id"] == "hiking"
    assert [day["day"] for day in data["days"]] == ["2024-06-01", "2024-06-02"]
    assert [day["outlook"] for day in data["days"]] == ["medium", "low"]
    assert len(data["best_time_windows"]) == 3


def test_forecast_outlook_requires_entries(client):
    response = client.post("/api/forecast/outlook", json={"forecast": []})

    assert response.status_code == 422


# Users


def test_preferences_not_found(client):
    response = client.get("/api/users/nobody/preferences")

    assert response.status_code == 404
    assert response.json() == {
        "error": "Not Found",
        "message": "No preferences stored for user 'nobody'",
    }


def test_save_and_get_preferences(client):
    with open(FIXTURES / "preferences_custom.json") as f:
        preferences = json.load(f)

    response = client.put("/api/users/alice/preferences", json=preferences)
    assert response.status_code == 200

    data = client.get("/api/users/alice/preferences").json()
    assert data["veryHot"] == 26
    assert data["veryWindy"] == 12
    assert data["preferredActivity"] == "hiking"


def test_invalid_preferences(client):
    response = client.put("/api/users/alice/preferences", json={"veryHot": 5, "veryCold": 10})

    assert response.status_code == 422


def test_history_is_trimmed_and_cleared(client, mild_reading):
    for _ in range(4):
        client.post("/api/assessments", json={"reading": mild_reading, "user_id": "alice"})

    assert client.get("/api/users/alice/history").json()["count"] == 3
    assert client.get("/api/users/alice/history", params={"limit": 2}).json()["count"] == 2

    response = client.delete("/api/users/alice/history")
    assert response.json() == {"user_id": "alice", "deleted": 3}
    assert client.get("/api/users/alice/history").json()["count"] == 0


def test_stats(client, mild_reading, storm_reading):
    client.post("/api/assessments", json={"reading": mild_reading, "user_id": "alice"})
    client.post("/api/assessments", json={"reading": storm_reading, "user_id": "alice"})
    client.post("/api/assessments", json={"reading": mild_reading, "activity_id": "hiking", "user_id": "alice"})

    data = client.get("/api/users/alice/stats").json()

    assert data["total_queries"] == 3
    assert data["activities"]["general"]["total_queries"] == 2
    assert data["activities"]["general"]["average_score"] == 70.0
    assert data["activities"]["hiking"]["average_score"] == 100.0
    assert data["average_score"] == 80.0
    assert data["most_used_activity"] == "general"
    assert data["favorite_locations_count"] == 0


def test_stats_without_history(client):
    data = client.get("/api/users/nobody/stats").json()

    assert data["total_queries"] == 0
    assert data["average_score"] == 0.0
    assert data["most_used_activity"] is None


# Favourites


BOULDER = {"name": "Boulder, CO", "lat": 40.01, "lon": -105.27}


def test_add_and_list_favorites(client):
    first = client.post("/api/users/alice/favorites", json=BOULDER).json()
    again = client.post("/api/users/alice/favorites", json={**BOULDER, "lat": 40.012}).json()

    assert again["id"] == first["id"]
    assert again["use_count"] == 2

    data = client.get("/api/users/alice/favorites").json()
    assert data["count"] == 1
    assert data["favorites"][0]["name"] == "Boulder, CO"
    assert client.get("/api/users/alice/stats").json()["favorite_locations_count"] == 1


def test_invalid_favorite_location(client):
    response = client.post("/api/users/alice/favorites", json={**BOULDER, "lat": 95})

    assert response.status_code == 422


def test_remove_favorite(client):
    favorite = client.post("/api/users/alice/favorites", json=BOULDER).json()

    response = client.delete(f"/api/users/alice/favorites/{favorite['id']}")
    assert response.json() == {"user_id": "alice", "favorite_id": favorite["id"]}
    assert client.get("/api/users/alice/favorites").json()["count"] == 0

    response = client.delete(f"/api/users/alice/favorites/{favorite['id']}")
    assert response.status_code == 404
    assert response.json()["error"] == "Not Found"


# Export and import


def test_export_and_import(client, mild_reading):
    client.put("/api/users/alice/preferences", json={"veryHot": 26, "veryCold": 8})
    client.post("/api/assessments", json={"reading": mild_reading, "activity_id": "hiking", "user_id": "alice"})
    client.post("/api/users/alice/favorites", json=BOULDER)

    export = client.get("/api/users/alice/export").json()

    assert export["version"] == "1.0"
    assert export["preferences"]["veryHot"] == 26
    assert len(export["history"]) == 1
    assert len(export["favorites"]) == 1

    response = client.post("/api/users/bob/import", json=export)

    assert response.status_code == 200
    assert response.json() == {
        "user_id": "bob",
        "imported": {"preferences": True, "history": 1, "favorites": 1},
    }
    assert client.get("/api/users/bob/preferences").json()["veryHot"] == 26
    assert client.get("/api/users/bob/history").json()["entries"][0]["activity_id"] == "hiking"
    assert client.get("/api/users/bob/favorites").json()["count"] == 1


def test_import_rejects_malformed_document(client):
    response = client.post("/api/users/bob/import", json={"user_id": "bob", "history": [{"score": "high"}]})

    assert response.status_code == 422
