from __future__ import annotations

from fastapi.testclient import TestClient

from shelter_service.app import create_app
from shelter_service.cache import FacilityCacheStore, InMemoryKeyValueStore
from shelter_service.config import ShelterSettings
from shelter_service.core.metrics import InMemoryShelterMetricsCollector
from shelter_service.core.models import Coordinates, FacilityCategory, FacilityRecord
from shelter_service.orchestrator import ShelterDataOrchestrator

RECORDS = [
    FacilityRecord(
        id="osm_node_1",
        category=FacilityCategory.HOSPITAL,
        coordinates=Coordinates(lat=45.7382, lng=21.2424),
        display_name="Spitalul Judetean",
        capacity_hint="85%",
    ),
    FacilityRecord(
        id="osm_node_2",
        category=FacilityCategory.PHARMACY,
        coordinates=Coordinates(lat=45.7532, lng=21.2256),
        display_name="Farmacie Centrala",
    ),
    FacilityRecord(
        id="osm_way_3",
        category=FacilityCategory.HOSPITAL,
        coordinates=Coordinates(lat=45.7475, lng=21.2262),
        display_name="Spitalul Municipal",
    ),
]


class StubSource:
    def __init__(self, records: list[FacilityRecord], error: Exception | None = None) -> None:
        self.records = records
        self.error = error

    async def fetch(self) -> list[FacilityRecord]:
        if self.error is not None:
            raise self.error
        return list(self.records)


def build_client(source: StubSource) -> TestClient:
    metrics = InMemoryShelterMetricsCollector()
    orchestrator = ShelterDataOrchestrator(
        cache=FacilityCacheStore(InMemoryKeyValueStore()),
        client=source,
        metrics=metrics,
    )
    app = create_app(orchestrator=orchestrator, metrics=metrics, settings=ShelterSettings(CACHE_BACKEND="memory"))
    return TestClient(app)


def test_health_probes() -> None:
    client = build_client(StubSource(RECORDS))

    assert client.get("/healthz").json()["data"] == {"status": "ok"}
    assert client.get("/readyz").json()["data"] == {"status": "ready"}


def test_list_shelters_returns_live_data_with_provenance() -> None:
    client = build_client(StubSource(RECORDS))

    response = client.get("/v1/shelters")
    body = response.json()

    assert response.status_code == 200
    assert body["success"] is True
    assert body["meta"]["source"] == "api"
    assert body["meta"]["error"] is None
    assert body["meta"]["count"] == 3
    assert body["data"][0] == {
        "id": "osm_node_1",
        "category": "hospital",
        "lat": 45.7382,
        "lng": 21.2424,
        "name": "Spitalul Judetean",
        "capacity": "85%",
    }


def test_refresh_falls_back_to_cache_when_source_fails() -> None:
    source = StubSource(RECORDS)
    client = build_client(source)
    client.get("/v1/shelters")

    source.error = RuntimeError("all Overpass endpoints failed")
    body = client.post("/v1/shelters/refresh").json()

    assert body["meta"]["source"] == "cache"
    assert body["meta"]["error"] == "Refresh failed: all Overpass endpoints failed"
    assert body["meta"]["stale"] is False
    assert len(body["data"]) == 3


def test_list_shelters_serves_fallback_when_offline_on_first_run() -> None:
    client = build_client(StubSource([], error=RuntimeError("offline")))

    body = client.get("/v1/shelters").json()

    assert body["meta"]["source"] == "fallback"
    assert body["meta"]["count"] == 5
    assert body["data"][0]["id"] == "fallback_1"


def test_nearest_ranks_by_distance_and_filters_category() -> None:
    client = build_client(StubSource(RECORDS))

    response = client.get("/v1/shelters/nearest", params={"lat": 45.7530, "lng": 21.2255, "category": "hospital"})
    body = response.json()

    assert response.status_code == 200
    assert [item["id"] for item in body["data"]] == ["osm_way_3", "osm_node_1"]
    assert body["meta"]["count"] == 2
    first = body["data"][0]
    assert first["distance_label"].endswith(" m")
    assert first["travel_label"].endswith("min")


def test_nearest_rejects_out_of_range_coordinates() -> None:
    client = build_client(StubSource(RECORDS))

    response = client.get("/v1/shelters/nearest", params={"lat": 120, "lng": 21.2})

    assert response.status_code == 422
    assert response.json()["success"] is False
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_cache_info_and_clear() -> None:
    client = build_client(StubSource(RECORDS))
    assert client.get("/v1/shelters/cache").json()["data"]["exists"] is False

    client.get("/v1/shelters")
    info = client.get("/v1/shelters/cache").json()["data"]
    cleared = client.delete("/v1/shelters/cache")

    assert info["exists"] is True
    assert info["count"] == 3
    assert info["age_hours"] == 0
    assert cleared.json()["data"] == {"cleared": True}
    assert client.get("/v1/shelters/cache").json()["data"]["exists"] is False


def test_metrics_endpoint_exposes_result_counts() -> None:
    client = build_client(StubSource(RECORDS))
    client.get("/v1/shelters")

    response = client.get("/metrics")

    assert response.status_code == 200
    assert 'shelter_results_total{operation="get",source="api"} 1.0' in response.text
    assert "shelter_cache_saves_total 1.0" in response.text
