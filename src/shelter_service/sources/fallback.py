from __future__ import annotations

from shelter_service.core.models import Coordinates, FacilityCategory, FacilityRecord

# Shipped with the service; served only on first run without network.
FALLBACK_FACILITIES: tuple[FacilityRecord, ...] = (
    FacilityRecord(
        id="fallback_1",
        category=FacilityCategory.HOSPITAL,
        coordinates=Coordinates(lat=45.738205, lng=21.242398),
        display_name="Spitalul Județean Timișoara",
    ),
    FacilityRecord(
        id="fallback_2",
        category=FacilityCategory.HOSPITAL,
        coordinates=Coordinates(lat=45.747479, lng=21.226180),
        display_name="Spitalul Municipal",
    ),
    FacilityRecord(
        id="fallback_3",
        category=FacilityCategory.FIRE_STATION,
        coordinates=Coordinates(lat=45.755800, lng=21.228900),
        display_name="Stație Pompieri Centru",
    ),
    FacilityRecord(
        id="fallback_4",
        category=FacilityCategory.PHARMACY,
        coordinates=Coordinates(lat=45.753200, lng=21.225600),
        display_name="Farmacie Centrală",
    ),
    FacilityRecord(
        id="fallback_5",
        category=FacilityCategory.POLICE,
        coordinates=Coordinates(lat=45.754100, lng=21.226800),
        display_name="Poliția Municipiului Timișoara",
    ),
)
