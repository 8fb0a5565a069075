from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Callable, Sequence

from shelter_service.cache.backends import KeyValueStore
from shelter_service.core.exceptions import CacheCorruptedError
from shelter_service.core.models import CACHE_MAX_AGE_MS, HOUR_MS, CacheInfo, CacheSnapshot, FacilityRecord

logger = logging.getLogger(__name__)

RECORDS_KEY = "shelters:cache"
TIMESTAMP_KEY = "shelters:timestamp"


def _epoch_ms(clock: Callable[[], float]) -> int:
    return int(clock() * 1000)


def _encode_records(records: Sequence[FacilityRecord]) -> str:
    return json.dumps([record.to_dict() for record in records], ensure_ascii=True)


def _decode_records(raw: str) -> list[FacilityRecord]:
    try:
        payload = json.loads(raw)
    except (ValueError, RecursionError) as exc:
        raise CacheCorruptedError("cached shelters are not valid json") from exc
    if not isinstance(payload, list):
        raise CacheCorruptedError("cached shelters payload is not a list")
    records: list[FacilityRecord] = []
    for item in payload:
        if not isinstance(item, dict):
            raise CacheCorruptedError("cached shelter entry is not an object")
        try:
            records.append(FacilityRecord.from_dict(item))
        except (KeyError, TypeError, ValueError, ArithmeticError) as exc:
            raise CacheCorruptedError(f"cached shelter entry is invalid: {exc}") from exc
    return records


def _parse_timestamp(raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


class FacilityCacheStore:
    """Durable storage of exactly one facility snapshot.

    Age is reported, never enforced: a snapshot older than ``max_age_ms``
    is still returned by ``load`` and only flagged as stale.
    """

    def __init__(
        self,
        backend: KeyValueStore,
        max_age_ms: int = CACHE_MAX_AGE_MS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._backend = backend
        self._max_age_ms = max_age_ms
        self._clock = clock
        self._save_lock = asyncio.Lock()

    @property
    def max_age_ms(self) -> int:
        return self._max_age_ms

    def now_ms(self) -> int:
        return _epoch_ms(self._clock)

    async def load(self) -> CacheSnapshot | None:
        try:
            raw_records = await self._backend.get(RECORDS_KEY)
            raw_timestamp = await self._backend.get(TIMESTAMP_KEY)
        except Exception as exc:
            logger.error("shelter_cache_read_failed", extra={"error": str(exc)})
            return None

        if raw_records is None:
            logger.info("shelter_cache_missing")
            return None
        try:
            records = _decode_records(raw_records)
        except CacheCorruptedError as exc:
            logger.warning("shelter_cache_corrupted", extra={"error": str(exc)})
            return None

        snapshot = CacheSnapshot(records=tuple(records), saved_at_ms=_parse_timestamp(raw_timestamp))
        now_ms = self.now_ms()
        if snapshot.is_stale(now_ms, self._max_age_ms):
            logger.info(
                "shelter_cache_stale",
                extra={"age_hours": round(snapshot.age_ms(now_ms) / HOUR_MS)},
            )
        logger.info("shelter_cache_loaded", extra={"record_count": len(snapshot.records)})
        return snapshot

    async def save(self, records: Sequence[FacilityRecord]) -> bool:
        if not records:
            logger.info("shelter_cache_save_skipped_empty")
            return False
        payload = _encode_records(records)
        async with self._save_lock:
            try:
                await self._backend.set(RECORDS_KEY, payload)
                await self._backend.set(TIMESTAMP_KEY, str(self.now_ms()))
            except Exception as exc:
                logger.error("shelter_cache_save_failed", extra={"error": str(exc)})
                return False
        logger.info("shelter_cache_saved", extra={"record_count": len(records)})
        return True

    async def clear(self) -> None:
        async with self._save_lock:
            try:
                await self._backend.delete(RECORDS_KEY, TIMESTAMP_KEY)
            except Exception as exc:
                logger.error("shelter_cache_clear_failed", extra={"error": str(exc)})
                return
        logger.info("shelter_cache_cleared")

    async def info(self) -> CacheInfo:
        snapshot = await self.load()
        if snapshot is None:
            return CacheInfo(exists=False, count=0, age_hours=None)
        now_ms = self.now_ms()
        age_ms = snapshot.age_ms(now_ms)
        return CacheInfo(
            exists=True,
            count=len(snapshot.records),
            age_hours=None if age_ms is None else round(age_ms / HOUR_MS),
            stale=snapshot.is_stale(now_ms, self._max_age_ms),
        )
