"""MemoryCacheStore: in-process CacheStoreProtocol.

Used with CACHE_BACKEND=memory for local runs and as the durable backend in
tests. Values are JSON round-tripped so callers see the same shapes Redis
would return, and the TTL hint is honoured the way Redis EX would.
"""

import json
import time
from typing import Any


class MemoryCacheStore:
    def __init__(self) -> None:
        self._data: dict[str, tuple[str, float | None]] = {}
        self.reads = 0
        self.writes = 0

    async def get(self, key: str) -> Any | None:
        self.reads += 1
        entry = self._data.get(key)
        if entry is None:
            return None
        raw, expires_at = entry
        if expires_at is not None and time.monotonic() >= expires_at:
            del self._data[key]
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        self.writes += 1
        expires_at = time.monotonic() + ttl_seconds if ttl_seconds else None
        self._data[key] = (json.dumps(value), expires_at)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)
