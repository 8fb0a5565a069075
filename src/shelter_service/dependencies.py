from __future__ import annotations

import logging

from shelter_service.cache.backends import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    RedisKeyValueStore,
)
from shelter_service.cache.store import FacilityCacheStore
from shelter_service.config import ShelterSettings
from shelter_service.core.metrics import InMemoryShelterMetricsCollector
from shelter_service.orchestrator import ShelterDataOrchestrator
from shelter_service.sources.overpass import OverpassSourceClient

logger = logging.getLogger(__name__)


def build_cache_backend(settings: ShelterSettings) -> KeyValueStore:
    if settings.CACHE_BACKEND == "memory":
        return InMemoryKeyValueStore()
    if settings.CACHE_BACKEND == "redis":
        if not settings.REDIS_URL:
            raise RuntimeError("SHELTER_REDIS_URL is required when SHELTER_CACHE_BACKEND=redis")
        import redis.asyncio as redis

        client = redis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)
        return RedisKeyValueStore(client)
    return JsonFileKeyValueStore(settings.CACHE_FILE)


def build_orchestrator(
    settings: ShelterSettings,
    metrics: InMemoryShelterMetricsCollector | None = None,
) -> ShelterDataOrchestrator:
    cache = FacilityCacheStore(build_cache_backend(settings), max_age_ms=settings.cache_max_age_ms)
    client = OverpassSourceClient(
        endpoints=settings.OVERPASS_ENDPOINTS,
        bbox=settings.bbox,
        timeout_seconds=settings.REQUEST_TIMEOUT_SECONDS,
        metrics=metrics,
    )
    logger.info(
        "shelter_orchestrator_built",
        extra={"cache_backend": settings.CACHE_BACKEND, "endpoint_count": len(settings.OVERPASS_ENDPOINTS)},
    )
    return ShelterDataOrchestrator(cache=cache, client=client, metrics=metrics)
