from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    @abstractmethod
    async def get(self, key: str) -> str | None:
        raise NotImplementedError

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, *keys: str) -> int:
        raise NotImplementedError


class RedisLikeClient(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> bool: ...

    async def delete(self, *keys: str) -> int: ...


class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._items.get(key)

    async def set(self, key: str, value: str) -> None:
        self._items[key] = value

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self._items.pop(key, None) is not None:
                removed += 1
        return removed


class JsonFileKeyValueStore(KeyValueStore):
    """Keeps every key in a single JSON object file.

    Writes go through a temporary file and ``os.replace`` so readers never
    observe a half-written file.
    """

    def __init__(self, file_path: str | Path) -> None:
        self._file = Path(file_path)

    async def get(self, key: str) -> str | None:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    async def set(self, key: str, value: str) -> None:
        items = self._read_all()
        items[key] = value
        self._write_all(items)

    async def delete(self, *keys: str) -> int:
        items = self._read_all()
        removed = 0
        for key in keys:
            if items.pop(key, None) is not None:
                removed += 1
        if removed:
            self._write_all(items)
        return removed

    def _read_all(self) -> dict[str, object]:
        if not self._file.exists():
            return {}
        try:
            payload = json.loads(self._file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("kv_file_unreadable", extra={"path": str(self._file), "error": str(exc)})
            return {}
        if not isinstance(payload, dict):
            logger.warning("kv_file_unreadable", extra={"path": str(self._file), "error": "not a json object"})
            return {}
        return payload

    def _write_all(self, items: dict[str, object]) -> None:
        self._file.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self._file.parent, prefix=f".{self._file.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(items, handle, ensure_ascii=True)
            os.replace(tmp_path, self._file)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise


class RedisKeyValueStore(KeyValueStore):
    def __init__(self, client: RedisLikeClient) -> None:
        self._client = client

    async def get(self, key: str) -> str | None:
        raw = await self._client.get(key)
        if raw is None:
            return None
        if isinstance(raw, bytes):
            return raw.decode("utf-8")
        return raw

    async def set(self, key: str, value: str) -> None:
        await self._client.set(key, value)

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return await self._client.delete(*keys)
