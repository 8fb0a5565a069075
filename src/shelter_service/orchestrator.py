"""Cache-first facility data orchestration.

Each request walks ``CACHE_READ -> FETCH_ATTEMPT`` and ends in exactly one
of three outcomes: fresh API data, cached data, or the bundled fallback.
Neither ``get`` nor ``refresh`` raises; every failure path resolves to a
tagged ``SourceResult``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from time import perf_counter
from typing import Protocol

from opentelemetry import trace

from shelter_service.cache.store import FacilityCacheStore
from shelter_service.core.metrics import InMemoryShelterMetricsCollector
from shelter_service.core.models import CacheInfo, CacheSnapshot, DataSource, FacilityRecord, SourceResult
from shelter_service.sources.fallback import FALLBACK_FACILITIES

logger = logging.getLogger(__name__)
_tracer = trace.get_tracer("shelter-service")

EMPTY_API_MESSAGE = "API returned empty results, using cached data"
NO_DATA_MESSAGE = "No network connection and no cached data available"
EMPTY_REFRESH_MESSAGE = "Refresh returned empty results"
REFRESH_FAILED_MESSAGE = "Refresh failed"


class FacilitySource(Protocol):
    async def fetch(self) -> list[FacilityRecord]: ...


class ShelterDataOrchestrator:
    def __init__(
        self,
        cache: FacilityCacheStore,
        client: FacilitySource,
        fallback: Sequence[FacilityRecord] = FALLBACK_FACILITIES,
        metrics: InMemoryShelterMetricsCollector | None = None,
    ) -> None:
        self._cache = cache
        self._client = client
        self._fallback = tuple(fallback)
        self._metrics = metrics

    async def get(self) -> SourceResult:
        with _tracer.start_as_current_span("shelters.get") as span:
            started = perf_counter()
            cached = await self._load_cache()
            records, fetch_error = await self._fetch()

            if records:
                result = await self._api_result(records)
            elif fetch_error is None and self._has_records(cached):
                result = self._cache_result(cached, EMPTY_API_MESSAGE)
            elif fetch_error is not None and self._has_records(cached):
                result = self._cache_result(cached, f"API unavailable: {fetch_error}")
            else:
                logger.warning("shelters_using_fallback", extra={"operation": "get"})
                result = self._fallback_result(NO_DATA_MESSAGE)

            span.set_attribute("shelters.source", result.source.value)
            self._finish("get", result, started)
            return result

    async def refresh(self) -> SourceResult:
        with _tracer.start_as_current_span("shelters.refresh") as span:
            started = perf_counter()
            records, fetch_error = await self._fetch()

            if records:
                result = await self._api_result(records)
            else:
                cached = await self._load_cache()
                if fetch_error is None:
                    cache_message = EMPTY_REFRESH_MESSAGE
                    fallback_message = REFRESH_FAILED_MESSAGE
                else:
                    cache_message = fallback_message = f"{REFRESH_FAILED_MESSAGE}: {fetch_error}"
                if self._has_records(cached):
                    result = self._cache_result(cached, cache_message)
                else:
                    logger.warning("shelters_using_fallback", extra={"operation": "refresh"})
                    result = self._fallback_result(fallback_message)

            span.set_attribute("shelters.source", result.source.value)
            self._finish("refresh", result, started)
            return result

    async def cache_info(self) -> CacheInfo:
        return await self._cache.info()

    async def clear_cache(self) -> None:
        await self._cache.clear()

    async def _load_cache(self) -> CacheSnapshot | None:
        started = perf_counter()
        snapshot = await self._cache.load()
        self._observe("cache_read", started)
        return snapshot

    async def _fetch(self) -> tuple[list[FacilityRecord], Exception | None]:
        try:
            records = await self._client.fetch()
        except Exception as exc:
            logger.error("shelters_fetch_failed", extra={"error": str(exc)})
            return [], exc
        return list(records), None

    async def _api_result(self, records: list[FacilityRecord]) -> SourceResult:
        started = perf_counter()
        saved = await self._cache.save(records)
        self._observe("cache_write", started)
        if saved and self._metrics:
            self._metrics.increment_cache_save()
        return SourceResult(shelters=tuple(records), source=DataSource.API)

    def _cache_result(self, snapshot: CacheSnapshot, message: str) -> SourceResult:
        now_ms = self._cache.now_ms()
        return SourceResult(
            shelters=snapshot.records,
            source=DataSource.CACHE,
            error=message,
            cache_age_ms=snapshot.age_ms(now_ms),
            stale=snapshot.is_stale(now_ms, self._cache.max_age_ms),
        )

    def _fallback_result(self, message: str) -> SourceResult:
        return SourceResult(shelters=self._fallback, source=DataSource.FALLBACK, error=message)

    @staticmethod
    def _has_records(snapshot: CacheSnapshot | None) -> bool:
        return snapshot is not None and len(snapshot.records) > 0

    def _finish(self, operation: str, result: SourceResult, started: float) -> None:
        self._observe(f"{operation}_total", started)
        if self._metrics:
            self._metrics.increment_result(operation, result.source.value)
        logger.info(
            "shelters_resolved",
            extra={
                "operation": operation,
                "source": result.source.value,
                "record_count": len(result.shelters),
                "error": result.error,
            },
        )

    def _observe(self, stage: str, started: float) -> None:
        if self._metrics:
            self._metrics.observe_stage_duration(stage, (perf_counter() - started) * 1000.0)
