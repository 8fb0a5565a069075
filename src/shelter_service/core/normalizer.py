"""Normalization of raw Overpass elements into facility records.

Every function here is pure and total: malformed input maps to ``None``
and is filtered out by the caller, it never raises.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from shelter_service.core.models import Coordinates, FacilityCategory, FacilityRecord, is_valid_coordinate_pair

SOURCE_KIND = "osm"

CATEGORY_BY_AMENITY: dict[str, FacilityCategory] = {
    "hospital": FacilityCategory.HOSPITAL,
    "pharmacy": FacilityCategory.PHARMACY,
    "fire_station": FacilityCategory.FIRE_STATION,
    "police": FacilityCategory.POLICE,
    "shelter": FacilityCategory.SHELTER,
}

_AREA_TYPES = frozenset({"way", "relation"})


def map_amenity(amenity: Any) -> FacilityCategory:
    if not isinstance(amenity, str):
        return FacilityCategory.UNKNOWN
    return CATEGORY_BY_AMENITY.get(amenity, FacilityCategory.UNKNOWN)


def extract_coordinates(element: dict[str, Any]) -> Coordinates | None:
    element_type = element.get("type")
    if element_type == "node":
        lat, lng = element.get("lat"), element.get("lon")
    elif element_type in _AREA_TYPES:
        center = element.get("center")
        if not isinstance(center, dict):
            return None
        lat, lng = center.get("lat"), center.get("lon")
    else:
        return None
    if not is_valid_coordinate_pair(lat, lng):
        return None
    return Coordinates(lat=float(lat), lng=float(lng))


def synthesize_display_name(category: FacilityCategory, source_id: int) -> str:
    return f"{category.value.capitalize()} #{source_id}"


def normalize_element(element: Any) -> FacilityRecord | None:
    if not isinstance(element, dict):
        return None
    source_id = element.get("id")
    if isinstance(source_id, bool) or not isinstance(source_id, int):
        return None
    coordinates = extract_coordinates(element)
    if coordinates is None:
        return None

    tags = element.get("tags")
    if not isinstance(tags, dict):
        tags = {}
    category = map_amenity(tags.get("amenity"))
    name = tags.get("name")
    if not isinstance(name, str) or not name:
        name = synthesize_display_name(category, source_id)
    capacity = tags.get("capacity")

    return FacilityRecord(
        id=f"{SOURCE_KIND}_{element['type']}_{source_id}",
        category=category,
        coordinates=coordinates,
        display_name=name,
        capacity_hint=capacity if isinstance(capacity, str) else None,
    )


def normalize_elements(elements: Iterable[Any]) -> list[FacilityRecord]:
    records: list[FacilityRecord] = []
    for element in elements:
        record = normalize_element(element)
        if record is not None:
            records.append(record)
    return records
