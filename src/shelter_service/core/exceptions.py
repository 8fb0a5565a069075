class ShelterServiceError(Exception):
    """Base shelter service exception."""


class SourceRequestError(ShelterServiceError):
    """Raised when a single Overpass endpoint request failed."""


class SourceTemporaryError(SourceRequestError):
    """Raised when a single Overpass endpoint timed out."""


class SourcePayloadError(ShelterServiceError):
    """Raised when an endpoint response is not a structurally valid Overpass payload."""


class SourceUnavailableError(ShelterServiceError):
    """Raised when every configured endpoint failed."""


class CacheCorruptedError(ShelterServiceError):
    """Raised when a persisted snapshot cannot be decoded."""
