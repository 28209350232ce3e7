import pytest
from fastapi.testclient import TestClient

from territory.main import create_app
from territory.models.domain import FootprintFeature
from territory.services.detection.geocoding import MISSING_KEY_WARNING
from territory.services.detection.service import SIMULATED_BUILDINGS_WARNING

SQUARE_LNG_LAT = [
    [-75.0, 40.0],
    [-75.0, 40.0003],
    [-74.9997, 40.0003],
    [-74.9997, 40.0],
]


class DummyFootprints:
    def fetch(self, box):
        return [
            FootprintFeature(feature_id="way-1", latitude=40.0001, longitude=-74.9999),
            FootprintFeature(feature_id="way-2", latitude=40.0002, longitude=-74.9998),
        ]


class DummyGeocoder:
    available = True

    def reverse(self, latitude, longitude):
        return "101 Canvass Ct" if latitude < 40.00015 else "102 Canvass Ct"


@pytest.fixture
def api_client(monkeypatch: pytest.MonkeyPatch) -> TestClient:
    from territory.services.detection import service as detection_service

    monkeypatch.setattr(detection_service, "OverpassFootprintClient", lambda *args, **kwargs: DummyFootprints())
    monkeypatch.setattr(detection_service, "GoogleReverseGeocoder", lambda *args, **kwargs: DummyGeocoder())
    return TestClient(create_app())


def test_health_endpoint(api_client: TestClient):
    response = api_client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_detect_buildings_endpoint(api_client: TestClient):
    response = api_client.post("/api/zones/detect-buildings", json={"polygon": SQUARE_LNG_LAT})

    assert response.status_code == 200
    payload = response.json()
    assert payload["target_count"] == 3
    assert [b["source"] for b in payload["buildings"]] == ["osm", "osm", "simulated"]
    assert payload["buildings"][0]["id"] == "osm-way-1"
    assert payload["buildings"][0]["building_number"] == 101
    assert payload["warnings"] == [SIMULATED_BUILDINGS_WARNING]
    assert payload["house_numbers"]["odd"] == [101]
    assert payload["house_numbers"]["even"] == [102]
    assert payload["house_numbers"]["total"] == 2


def test_detect_buildings_accepts_geojson_boundary(api_client: TestClient, monkeypatch: pytest.MonkeyPatch):
    from territory.services.detection import service as detection_service

    class KeylessGeocoder:
        available = False

        def reverse(self, latitude, longitude):
            raise AssertionError("not called")

    monkeypatch.setattr(detection_service, "GoogleReverseGeocoder", lambda *args, **kwargs: KeylessGeocoder())
    boundary = {"type": "Polygon", "coordinates": [SQUARE_LNG_LAT + [SQUARE_LNG_LAT[0]]]}

    response = api_client.post("/api/zones/detect-buildings", json={"boundary": boundary})

    assert response.status_code == 200
    payload = response.json()
    assert MISSING_KEY_WARNING in payload["warnings"]
    assert payload["buildings"][0]["address"] == "Building at 40.000100, -74.999900"


def test_detect_buildings_rejects_short_polygon(api_client: TestClient):
    response = api_client.post("/api/zones/detect-buildings", json={"polygon": [[-75.0, 40.0], [-75.0, 40.1]]})

    assert response.status_code == 400
    assert "at least three" in response.json()["detail"]


def test_optimize_route_endpoint(api_client: TestClient):
    request = {
        "candidates": [
            {"property_id": "P1", "coordinates": [0, 1]},
            {"property_id": "P2", "coordinates": [0, 2]},
            {"property_id": "P0", "coordinates": [0, 0]},
        ],
        "start_location": [0, -1],
        "settings": {"max_stops": 2},
    }

    response = api_client.post("/api/routes/optimize", json=request)

    assert response.status_code == 200
    payload = response.json()
    assert [stop["property_id"] for stop in payload["stops"]] == ["P0", "P1"]
    assert [stop["order"] for stop in payload["stops"]] == [1, 2]
    assert payload["total_distance_miles"] == pytest.approx(69.1, abs=0.01)
    assert payload["total_duration_minutes"] == 30
    assert payload["start_location"] == [0, -1]


def test_optimize_route_endpoint_rejects_unlocated_candidates(api_client: TestClient):
    response = api_client.post("/api/routes/optimize", json={"candidates": [{"property_id": "P1"}]})

    assert response.status_code == 400


def test_optimize_route_endpoint_validates_max_stops(api_client: TestClient):
    response = api_client.post(
        "/api/routes/optimize",
        json={"candidates": [{"property_id": "P1", "coordinates": [0, 0]}], "settings": {"max_stops": 500}},
    )

    assert response.status_code == 422
