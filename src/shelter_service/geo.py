from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from shelter_service.core.models import Coordinates, FacilityCategory, FacilityRecord

EARTH_RADIUS_KM = 6371.0


class TravelMode(str, Enum):
    DRIVING = "driving"
    WALKING = "walking"


# Average urban speeds in km/h.
TRAVEL_SPEED_KMH: dict[TravelMode, float] = {
    TravelMode.DRIVING: 40.0,
    TravelMode.WALKING: 5.0,
}


@dataclass(frozen=True)
class RankedFacility:
    record: FacilityRecord
    distance_km: float


def haversine_distance_km(start: Coordinates, end: Coordinates) -> float:
    start_lat = math.radians(start.lat)
    end_lat = math.radians(end.lat)
    delta_lat = math.radians(end.lat - start.lat)
    delta_lng = math.radians(end.lng - start.lng)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(start_lat) * math.cos(end_lat) * math.sin(delta_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def format_distance(distance_km: float) -> str:
    if distance_km < 1:
        return f"{round(distance_km * 1000)} m"
    return f"{distance_km:.1f} km"


def estimate_travel_minutes(distance_km: float, mode: TravelMode = TravelMode.DRIVING) -> int:
    return round(distance_km / TRAVEL_SPEED_KMH[mode] * 60)


def format_travel_time(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes} min"
    hours, mins = divmod(minutes, 60)
    return f"{hours} h {mins} min" if mins else f"{hours} h"


def rank_by_distance(
    records: Iterable[FacilityRecord],
    origin: Coordinates,
    limit: int | None = None,
    category: FacilityCategory | None = None,
) -> list[RankedFacility]:
    ranked = [
        RankedFacility(record=record, distance_km=haversine_distance_km(origin, record.coordinates))
        for record in records
        if category is None or record.category == category
    ]
    ranked.sort(key=lambda item: (item.distance_km, item.record.id))
    if limit is not None:
        return ranked[:limit]
    return ranked
