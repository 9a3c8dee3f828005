from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from outing_planner.main import app
from outing_planner.schemas import DistanceMatrix


def _sample_payload() -> dict:
    return {
        "startTime": 18,
        "budget": 700,
        "numberOfPeople": 2,
        "startLocation": {"lat": 12.9716, "lng": 77.5946},
        "preferredTypes": [{"dinings": {}}, {"movies": {}}],
        "pools": {
            "dinings": [{"_id": "D1", "location": {"lat": 12.975, "lng": 77.605}, "pricePerPerson": 100}],
            "movies": [{"_id": "M1", "location": {"lat": 12.98, "lng": 77.64}, "pricePerPerson": 200}],
        },
    }


def test_plan_itinerary_endpoint(monkeypatch):
    client = TestClient(app)
    orchestrator = AsyncMock(return_value={"success": True, "scores": [80], "totalCombinations": 1})
    monkeypatch.setattr("outing_planner.main.orchestrate_itinerary_plan", orchestrator)

    response = client.post("/api/plan-itinerary", json=_sample_payload())

    assert response.status_code == 200
    orchestrator.assert_awaited_once()
    called_payload = orchestrator.await_args.args[0]
    assert called_payload["numberOfPeople"] == 2
    assert response.json() == {"success": True, "scores": [80], "totalCombinations": 1}


def test_plan_itinerary_rejects_missing_mandatory_fields():
    client = TestClient(app)
    payload = _sample_payload()
    payload.pop("startLocation")
    payload.pop("budget")

    response = client.post("/api/plan-itinerary", json=payload)

    assert response.status_code == 422
    missing = {tuple(err["loc"]) for err in response.json()["detail"]}
    assert ("startLocation",) in missing
    assert ("budget",) in missing


def test_plan_itinerary_rejects_multi_key_slot():
    client = TestClient(app)
    payload = _sample_payload()
    payload["preferredTypes"] = [{"dinings": {}, "movies": {}}]

    response = client.post("/api/plan-itinerary", json=payload)

    assert response.status_code == 422


def test_plan_itinerary_maps_unexpected_errors_to_400(monkeypatch):
    client = TestClient(app)
    orchestrator = AsyncMock(side_effect=KeyError("pools"))
    monkeypatch.setattr("outing_planner.main.orchestrate_itinerary_plan", orchestrator)

    response = client.post("/api/plan-itinerary", json=_sample_payload())

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "Invalid request"


class _FakeProvider:
    async def get_matrix(self, locations):
        size = len(locations)
        return DistanceMatrix(
            success=True,
            distances=[[0.0] * size for _ in range(size)],
            durations=[[0.0] * size for _ in range(size)],
        )

    async def get_distance(self, start, end):
        return {"success": True, "distanceKm": 3.2, "travelTimeMinutes": 12}


def test_directions_matrix_and_single_leg(monkeypatch):
    client = TestClient(app)
    monkeypatch.setattr("outing_planner.main.build_matrix_provider", lambda config: _FakeProvider())

    matrix = client.post(
        "/api/directions",
        json={"locations": [{"lat": 1.0, "lng": 2.0}, {"lat": 3.0, "lng": 4.0}, {"lat": 5.0, "lng": 6.0}]},
    )
    leg = client.post(
        "/api/directions",
        json={"start": {"lat": 1.0, "lng": 2.0}, "end": {"lat": 3.0, "lng": 4.0}},
    )

    assert matrix.status_code == 200
    assert matrix.json()["success"] is True
    assert len(matrix.json()["distances"]) == 3
    assert leg.json() == {"success": True, "distanceKm": 3.2, "travelTimeMinutes": 12}


def test_directions_requires_locations_or_endpoints(monkeypatch):
    client = TestClient(app)
    monkeypatch.setattr("outing_planner.main.build_matrix_provider", lambda config: _FakeProvider())

    response = client.post("/api/directions", json={"start": {"lat": 1.0, "lng": 2.0}})

    assert response.status_code == 400
