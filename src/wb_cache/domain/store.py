# src/wb_cache/domain/store.py
"""Cache Store Protocol: one storage contract shared by every tier.

Values are JSON-compatible dicts. Expiry is enforced by callers, which embed
their own cachedAt and compare it to a caller-known TTL; ttl_seconds is only
a storage-level hint so abandoned keys eventually disappear.
"""

from typing import Any, Protocol


class CacheStoreProtocol(Protocol):
    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None: ...
