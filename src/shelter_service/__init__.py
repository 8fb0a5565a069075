"""Cache-first emergency facility data service."""

from shelter_service.core.models import (
    CacheInfo,
    CacheSnapshot,
    Coordinates,
    DataSource,
    FacilityCategory,
    FacilityRecord,
    SourceResult,
)
from shelter_service.orchestrator import ShelterDataOrchestrator

__all__ = [
    "CacheInfo",
    "CacheSnapshot",
    "Coordinates",
    "DataSource",
    "FacilityCategory",
    "FacilityRecord",
    "ShelterDataOrchestrator",
    "SourceResult",
]
