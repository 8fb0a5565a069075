from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from time import perf_counter
from typing import Any

import httpx

from shelter_service.core.exceptions import (
    SourcePayloadError,
    SourceRequestError,
    SourceTemporaryError,
    SourceUnavailableError,
)
from shelter_service.core.metrics import InMemoryShelterMetricsCollector
from shelter_service.core.models import FacilityRecord
from shelter_service.core.normalizer import normalize_elements

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINTS: tuple[str, ...] = (
    "https://overpass-api.de/api/interpreter",
    "https://lz4.overpass-api.de/api/interpreter",
    "https://overpass.kumi.systems/api/interpreter",
)
DEFAULT_TIMEOUT_SECONDS = 30.0

# (element type, amenity) pairs requested by the fixed regional query.
QUERY_SELECTORS: tuple[tuple[str, str], ...] = (
    ("node", "hospital"),
    ("way", "hospital"),
    ("node", "pharmacy"),
    ("node", "fire_station"),
    ("way", "fire_station"),
    ("node", "police"),
    ("way", "police"),
)


@dataclass(frozen=True)
class BoundingBox:
    south: float
    west: float
    north: float
    east: float

    def __post_init__(self) -> None:
        if self.south >= self.north or self.west >= self.east:
            raise ValueError("bounding box must satisfy south < north and west < east")

    def as_overpass(self) -> str:
        return f"{self.south},{self.west},{self.north},{self.east}"


TIMISOARA_BBOX = BoundingBox(south=45.65, west=21.10, north=45.85, east=21.35)


def build_overpass_query(bbox: BoundingBox, server_timeout_seconds: int = 25) -> str:
    area = bbox.as_overpass()
    lines = [f"[out:json][timeout:{server_timeout_seconds}];", "("]
    lines.extend(f'  {element}["amenity"="{amenity}"]({area});' for element, amenity in QUERY_SELECTORS)
    lines.append(");")
    lines.append("out center;")
    return "\n".join(lines)


class OverpassSourceClient:
    """Runs one fixed facility query against an ordered list of Overpass mirrors.

    Endpoints are tried strictly in order. The first structurally valid
    response wins, even when it carries zero elements.
    """

    def __init__(
        self,
        endpoints: Sequence[str] = DEFAULT_ENDPOINTS,
        bbox: BoundingBox = TIMISOARA_BBOX,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        metrics: InMemoryShelterMetricsCollector | None = None,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
    ) -> None:
        if not endpoints:
            raise ValueError("at least one Overpass endpoint is required")
        self._endpoints = tuple(endpoints)
        self._query = build_overpass_query(bbox)
        self._timeout = httpx.Timeout(timeout_seconds)
        self._metrics = metrics
        self._client_factory = client_factory

    @property
    def endpoints(self) -> tuple[str, ...]:
        return self._endpoints

    @property
    def query(self) -> str:
        return self._query

    async def fetch(self) -> list[FacilityRecord]:
        last_error: Exception | None = None
        factory = self._client_factory or (lambda: httpx.AsyncClient(timeout=self._timeout))
        async with factory() as client:
            for endpoint in self._endpoints:
                logger.info("overpass_endpoint_attempt", extra={"endpoint": endpoint})
                started = perf_counter()
                try:
                    elements = await self._request_elements(client, endpoint)
                except (SourceRequestError, SourcePayloadError) as exc:
                    last_error = exc
                    self._on_endpoint_error(endpoint, exc)
                    continue
                self._observe("fetch", (perf_counter() - started) * 1000.0)
                records = normalize_elements(elements)
                logger.info(
                    "overpass_fetch_completed",
                    extra={
                        "endpoint": endpoint,
                        "element_count": len(elements),
                        "record_count": len(records),
                    },
                )
                if not elements:
                    logger.warning("overpass_empty_result", extra={"endpoint": endpoint})
                if self._metrics:
                    self._metrics.add_fetched_records(len(records))
                return records

        raise SourceUnavailableError(f"all Overpass endpoints failed: {last_error}") from last_error

    async def _request_elements(self, client: httpx.AsyncClient, endpoint: str) -> list[Any]:
        try:
            response = await client.post(
                endpoint,
                data={"data": self._query},
                headers={"Accept": "application/json"},
                timeout=self._timeout,
            )
        except httpx.TimeoutException as exc:
            raise SourceTemporaryError(f"timeout contacting {endpoint}") from exc
        except httpx.HTTPError as exc:
            raise SourceRequestError(f"request to {endpoint} failed: {exc}") from exc

        if not response.is_success:
            raise SourceRequestError(f"{endpoint} returned status={response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise SourcePayloadError(f"{endpoint} returned a non-JSON body") from exc
        if not isinstance(payload, dict):
            raise SourcePayloadError(f"{endpoint} payload is not a json object")
        elements = payload.get("elements")
        if not isinstance(elements, list):
            raise SourcePayloadError(f"{endpoint} payload missing list field 'elements'")
        return elements

    def _on_endpoint_error(self, endpoint: str, exc: Exception) -> None:
        reason = type(exc).__name__
        logger.warning(
            "overpass_endpoint_failed",
            extra={"endpoint": endpoint, "reason": reason, "error": str(exc)},
        )
        if self._metrics:
            self._metrics.increment_endpoint_error(endpoint, reason)

    def _observe(self, stage: str, duration_ms: float) -> None:
        if self._metrics:
            self._metrics.observe_stage_duration(stage, duration_ms)
