from __future__ import annotations

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from shelter_service.config import ShelterSettings, load_settings
from shelter_service.core.metrics import InMemoryShelterMetricsCollector
from shelter_service.core.models import Coordinates, FacilityCategory, SourceResult
from shelter_service.core.prometheus_exporter import ShelterPrometheusExporter
from shelter_service.dependencies import build_orchestrator
from shelter_service.geo import TravelMode, rank_by_distance
from shelter_service.observability import configure_otel, configure_probe_access_log_filter
from shelter_service.orchestrator import ShelterDataOrchestrator
from shelter_service.schemas import FacilityItem, NearestFacilityItem, result_meta


def success_response(data: object, meta: dict[str, object] | None = None) -> dict[str, object]:
    return {"success": True, "data": data, "meta": meta or {}}


def error_response(code: str, message: str) -> dict[str, object]:
    return {"success": False, "error": {"code": code, "message": message}}


def _shelters_payload(result: SourceResult) -> dict[str, object]:
    items = [FacilityItem.from_record(record).model_dump(mode="json") for record in result.shelters]
    return success_response(items, meta=result_meta(result))


def create_app(
    orchestrator: ShelterDataOrchestrator | None = None,
    metrics: InMemoryShelterMetricsCollector | None = None,
    settings: ShelterSettings | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    app = FastAPI(title="Shelter Service", version="0.1.0")
    configure_otel(service_name=settings.SERVICE_NAME)
    configure_probe_access_log_filter()
    app.state.metrics = metrics or InMemoryShelterMetricsCollector()
    app.state.exporter = ShelterPrometheusExporter()
    app.state.orchestrator = orchestrator or build_orchestrator(settings, metrics=app.state.metrics)

    @app.get("/healthz")
    async def healthz() -> dict[str, object]:
        return success_response({"status": "ok"}, meta={})

    @app.get("/readyz")
    async def readyz() -> dict[str, object]:
        return success_response({"status": "ready"}, meta={})

    @app.get("/v1/shelters")
    async def list_shelters() -> dict[str, object]:
        result = await app.state.orchestrator.get()
        return _shelters_payload(result)

    @app.post("/v1/shelters/refresh")
    async def refresh_shelters() -> dict[str, object]:
        result = await app.state.orchestrator.refresh()
        return _shelters_payload(result)

    @app.get("/v1/shelters/nearest")
    async def nearest_shelters(
        lat: float = Query(..., ge=-90, le=90),
        lng: float = Query(..., ge=-180, le=180),
        limit: int = Query(default=5, ge=1, le=50),
        category: FacilityCategory | None = None,
        mode: TravelMode = TravelMode.WALKING,
    ) -> dict[str, object]:
        result = await app.state.orchestrator.get()
        ranked = rank_by_distance(result.shelters, Coordinates(lat=lat, lng=lng), limit=limit, category=category)
        items = [NearestFacilityItem.from_ranked(item, mode).model_dump(mode="json") for item in ranked]
        meta = result_meta(result)
        meta["count"] = len(items)
        return success_response(items, meta=meta)

    @app.get("/v1/shelters/cache")
    async def cache_info() -> dict[str, object]:
        info = await app.state.orchestrator.cache_info()
        return success_response(
            {"exists": info.exists, "count": info.count, "age_hours": info.age_hours, "stale": info.stale},
            meta={},
        )

    @app.delete("/v1/shelters/cache")
    async def clear_cache() -> dict[str, object]:
        await app.state.orchestrator.clear_cache()
        return success_response({"cleared": True}, meta={})

    @app.get("/metrics")
    async def metrics_endpoint() -> Response:
        body = app.state.exporter.render(app.state.metrics)
        return Response(content=body, media_type="text/plain; version=0.0.4")

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        message = "; ".join(err["msg"] for err in exc.errors())
        return JSONResponse(status_code=422, content=error_response("VALIDATION_ERROR", message))

    return app
