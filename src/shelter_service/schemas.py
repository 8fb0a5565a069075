from __future__ import annotations

from pydantic import BaseModel

from shelter_service.core.models import FacilityCategory, FacilityRecord, SourceResult
from shelter_service.geo import RankedFacility, TravelMode, estimate_travel_minutes, format_distance, format_travel_time


class FacilityItem(BaseModel):
    id: str
    category: FacilityCategory
    lat: float
    lng: float
    name: str
    capacity: str | None = None

    @classmethod
    def from_record(cls, record: FacilityRecord) -> FacilityItem:
        return cls(
            id=record.id,
            category=record.category,
            lat=record.coordinates.lat,
            lng=record.coordinates.lng,
            name=record.display_name,
            capacity=record.capacity_hint,
        )


class NearestFacilityItem(FacilityItem):
    distance_km: float
    distance_label: str
    travel_minutes: int
    travel_label: str

    @classmethod
    def from_ranked(cls, ranked: RankedFacility, mode: TravelMode) -> NearestFacilityItem:
        minutes = estimate_travel_minutes(ranked.distance_km, mode)
        return cls(
            **FacilityItem.from_record(ranked.record).model_dump(),
            distance_km=round(ranked.distance_km, 3),
            distance_label=format_distance(ranked.distance_km),
            travel_minutes=minutes,
            travel_label=format_travel_time(minutes),
        )


def result_meta(result: SourceResult) -> dict[str, object]:
    return {
        "source": result.source.value,
        "error": result.error,
        "cache_age_ms": result.cache_age_ms,
        "stale": result.stale,
        "count": len(result.shelters),
    }
