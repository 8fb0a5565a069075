from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

HOUR_MS = 60 * 60 * 1000
CACHE_MAX_AGE_MS = 24 * HOUR_MS


class FacilityCategory(str, Enum):
    HOSPITAL = "hospital"
    PHARMACY = "pharmacy"
    FIRE_STATION = "fire_station"
    POLICE = "police"
    SHELTER = "shelter"
    UNKNOWN = "unknown"


class DataSource(str, Enum):
    API = "api"
    CACHE = "cache"
    FALLBACK = "fallback"


def is_valid_coordinate_pair(lat: object, lng: object) -> bool:
    for value in (lat, lng):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
    try:
        lat_value, lng_value = float(lat), float(lng)
    except OverflowError:
        return False
    if not (math.isfinite(lat_value) and math.isfinite(lng_value)):
        return False
    return -90.0 <= lat_value <= 90.0 and -180.0 <= lng_value <= 180.0


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not is_valid_coordinate_pair(self.lat, self.lng):
            raise ValueError(f"invalid coordinates: lat={self.lat!r}, lng={self.lng!r}")


@dataclass(frozen=True)
class FacilityRecord:
    id: str
    category: FacilityCategory
    coordinates: Coordinates
    display_name: str
    capacity_hint: str | None = None

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "id": self.id,
            "category": self.category.value,
            "lat": self.coordinates.lat,
            "lng": self.coordinates.lng,
            "name": self.display_name,
        }
        if self.capacity_hint is not None:
            payload["capacity"] = self.capacity_hint
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, object]) -> FacilityRecord:
        capacity = payload.get("capacity")
        return cls(
            id=str(payload["id"]),
            category=FacilityCategory(payload["category"]),
            coordinates=Coordinates(lat=payload["lat"], lng=payload["lng"]),
            display_name=str(payload["name"]),
            capacity_hint=None if capacity is None else str(capacity),
        )


@dataclass(frozen=True)
class CacheSnapshot:
    records: tuple[FacilityRecord, ...]
    saved_at_ms: int | None

    def age_ms(self, now_ms: int) -> int | None:
        if self.saved_at_ms is None:
            return None
        return max(0, now_ms - self.saved_at_ms)

    def is_stale(self, now_ms: int, max_age_ms: int = CACHE_MAX_AGE_MS) -> bool:
        age = self.age_ms(now_ms)
        return age is not None and age > max_age_ms


@dataclass(frozen=True)
class CacheInfo:
    exists: bool
    count: int
    age_hours: int | None
    stale: bool = False


@dataclass(frozen=True)
class SourceResult:
    shelters: tuple[FacilityRecord, ...]
    source: DataSource
    error: str | None = None
    cache_age_ms: int | None = None
    stale: bool = False

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "shelters": [record.to_dict() for record in self.shelters],
            "source": self.source.value,
        }
        if self.error is not None:
            payload["error"] = self.error
        return payload
