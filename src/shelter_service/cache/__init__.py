"""Persistent shelter cache."""

from shelter_service.cache.backends import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    RedisKeyValueStore,
)
from shelter_service.cache.store import RECORDS_KEY, TIMESTAMP_KEY, FacilityCacheStore

__all__ = [
    "RECORDS_KEY",
    "TIMESTAMP_KEY",
    "FacilityCacheStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "RedisKeyValueStore",
]
