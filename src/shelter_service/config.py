from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shelter_service.core.models import HOUR_MS
from shelter_service.sources.overpass import DEFAULT_ENDPOINTS, DEFAULT_TIMEOUT_SECONDS, BoundingBox


class ShelterSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SHELTER_", extra="ignore")

    SERVICE_NAME: str = "shelter-service"
    OVERPASS_ENDPOINTS: list[str] = Field(default_factory=lambda: list(DEFAULT_ENDPOINTS), min_length=1)
    REQUEST_TIMEOUT_SECONDS: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    BBOX_SOUTH: float = 45.65
    BBOX_WEST: float = 21.10
    BBOX_NORTH: float = 45.85
    BBOX_EAST: float = 21.35
    CACHE_BACKEND: Literal["file", "memory", "redis"] = "file"
    CACHE_FILE: str = "runtime/shelters_cache.json"
    REDIS_URL: str | None = None
    CACHE_MAX_AGE_HOURS: float = Field(default=24.0, gt=0)
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8110

    @property
    def bbox(self) -> BoundingBox:
        return BoundingBox(
            south=self.BBOX_SOUTH,
            west=self.BBOX_WEST,
            north=self.BBOX_NORTH,
            east=self.BBOX_EAST,
        )

    @property
    def cache_max_age_ms(self) -> int:
        return int(self.CACHE_MAX_AGE_HOURS * HOUR_MS)


def load_settings() -> ShelterSettings:
    return ShelterSettings()
