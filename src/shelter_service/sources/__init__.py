"""Facility data sources."""

from shelter_service.sources.fallback import FALLBACK_FACILITIES
from shelter_service.sources.overpass import (
    DEFAULT_ENDPOINTS,
    TIMISOARA_BBOX,
    BoundingBox,
    OverpassSourceClient,
    build_overpass_query,
)

__all__ = [
    "DEFAULT_ENDPOINTS",
    "FALLBACK_FACILITIES",
    "TIMISOARA_BBOX",
    "BoundingBox",
    "OverpassSourceClient",
    "build_overpass_query",
]
