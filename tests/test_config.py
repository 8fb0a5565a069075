from __future__ import annotations

import pytest

from shelter_service.cache import JsonFileKeyValueStore, InMemoryKeyValueStore
from shelter_service.config import load_settings
from shelter_service.dependencies import build_cache_backend, build_orchestrator
from shelter_service.orchestrator import ShelterDataOrchestrator
from shelter_service.sources.overpass import DEFAULT_ENDPOINTS


def test_load_settings_defaults() -> None:
    settings = load_settings()

    assert settings.OVERPASS_ENDPOINTS == list(DEFAULT_ENDPOINTS)
    assert settings.REQUEST_TIMEOUT_SECONDS == 30.0
    assert settings.cache_max_age_ms == 24 * 60 * 60 * 1000
    assert settings.bbox.as_overpass() == "45.65,21.1,45.85,21.35"


def test_load_settings_reads_prefixed_env(monkeypatch) -> None:
    monkeypatch.setenv("SHELTER_OVERPASS_ENDPOINTS", '["https://mirror.example.com/api/interpreter"]')
    monkeypatch.setenv("SHELTER_CACHE_BACKEND", "memory")
    monkeypatch.setenv("SHELTER_CACHE_MAX_AGE_HOURS", "6")
    settings = load_settings()

    assert settings.OVERPASS_ENDPOINTS == ["https://mirror.example.com/api/interpreter"]
    assert settings.CACHE_BACKEND == "memory"
    assert settings.cache_max_age_ms == 6 * 60 * 60 * 1000


def test_build_cache_backend_by_name(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("SHELTER_CACHE_FILE", str(tmp_path / "cache.json"))
    assert isinstance(build_cache_backend(load_settings()), JsonFileKeyValueStore)

    monkeypatch.setenv("SHELTER_CACHE_BACKEND", "memory")
    assert isinstance(build_cache_backend(load_settings()), InMemoryKeyValueStore)


def test_redis_backend_requires_url(monkeypatch) -> None:
    monkeypatch.setenv("SHELTER_CACHE_BACKEND", "redis")
    monkeypatch.delenv("SHELTER_REDIS_URL", raising=False)

    with pytest.raises(RuntimeError):
        build_cache_backend(load_settings())


def test_build_orchestrator(monkeypatch) -> None:
    monkeypatch.setenv("SHELTER_CACHE_BACKEND", "memory")

    orchestrator = build_orchestrator(load_settings())

    assert isinstance(orchestrator, ShelterDataOrchestrator)
