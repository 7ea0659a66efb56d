"""RedisCacheStore: concrete CacheStoreProtocol on redis.asyncio.

Values are stored as JSON strings. Errors propagate; the tier wrappers
decide that a failing store means "miss".
"""

import json
from typing import Any

import redis.asyncio as aioredis


class RedisCacheStore:
    def __init__(self, redis: aioredis.Redis, prefix: str = "wb:") -> None:
        self._redis = redis
        self._prefix = prefix

    async def get(self, key: str) -> Any | None:
        raw = await self._redis.get(self._prefix + key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        await self._redis.set(
            self._prefix + key,
            json.dumps(value, separators=(",", ":")),
            ex=ttl_seconds,
        )
