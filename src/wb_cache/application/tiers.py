"""Cache tiers over one CacheStoreProtocol.

  MetadataCache  evm-metadata-bulk:{chain}          permanent
  PriceCache     evm-prices-bulk:{chain}            PRICE_CACHE_TTL_SECONDS
  WalletCache    evm-wallet:{chain}:{wallet}        WALLET_CACHE_TTL_SECONDS

Every tier fails open: a store error or a value that does not validate is
logged and reads as a miss; a failed write is logged and dropped. Merges
skip the write when the current value cannot be read, so a flaky read never
clobbers entries persisted by another request.
"""

import logging
from typing import Any

from pydantic import ValidationError

from src.wb_cache.domain.merge import merge_metadata, merge_prices
from src.wb_cache.domain.models import (
    BulkMetadataCache,
    BulkPriceCache,
    CachedTokenMetadata,
    CachedWalletBalances,
    TokenBalance,
)
from src.wb_cache.domain.store import CacheStoreProtocol
from src.wb_common.datetime_utils import is_fresh, now_ms

logger = logging.getLogger(__name__)


class _StoreReadError(Exception):
    pass


class _Tier:
    def __init__(self, store: CacheStoreProtocol) -> None:
        self._store = store

    async def _get_raw(self, key: str) -> Any | None:
        try:
            return await self._store.get(key)
        except Exception as exc:
            logger.warning("Cache read failed for %s: %s", key, exc)
            raise _StoreReadError(key) from exc

    async def _set(self, key: str, value: dict, ttl_seconds: int | None) -> bool:
        try:
            await self._store.set(key, value, ttl_seconds)
        except Exception as exc:
            logger.warning("Cache write failed for %s: %s", key, exc)
            return False
        return True


class MetadataCache(_Tier):
    @staticmethod
    def key(chain: str) -> str:
        return f"evm-metadata-bulk:{chain}"

    async def _load(self, chain: str) -> dict[str, CachedTokenMetadata]:
        raw = await self._get_raw(self.key(chain))
        if raw is None:
            return {}
        try:
            return BulkMetadataCache.model_validate(raw).metadata
        except ValidationError:
            logger.warning("Discarding malformed metadata cache for %s", chain)
            return {}

    async def read(self, chain: str) -> dict[str, CachedTokenMetadata]:
        try:
            return await self._load(chain)
        except _StoreReadError:
            return {}

    async def merge(self, chain: str, updates: dict[str, CachedTokenMetadata]) -> bool:
        if not updates:
            return True
        try:
            persisted = await self._load(chain)
        except _StoreReadError:
            return False
        merged = merge_metadata(persisted, updates)
        return await self._set(
            self.key(chain), BulkMetadataCache(metadata=merged).to_store(), None
        )


class PriceCache(_Tier):
    def __init__(self, store: CacheStoreProtocol, ttl_seconds: int) -> None:
        super().__init__(store)
        self._ttl_seconds = ttl_seconds

    @staticmethod
    def key(chain: str) -> str:
        return f"evm-prices-bulk:{chain}"

    async def _load_fresh(self, chain: str) -> BulkPriceCache | None:
        raw = await self._get_raw(self.key(chain))
        if raw is None:
            return None
        try:
            entry = BulkPriceCache.model_validate(raw)
        except ValidationError:
            logger.warning("Discarding malformed price cache for %s", chain)
            return None
        if not is_fresh(entry.cached_at, self._ttl_seconds):
            return None
        return entry

    async def read(self, chain: str) -> dict[str, float]:
        try:
            entry = await self._load_fresh(chain)
        except _StoreReadError:
            return {}
        if entry is None:
            return {}
        logger.debug("Using cached prices for %s (%d tokens)", chain, len(entry.prices))
        return {addr: price for addr, price in entry.prices.items() if price > 0}

    async def merge(self, chain: str, new_prices: dict[str, float]) -> bool:
        """Overlay positive prices onto the fresh persisted map.

        The persisted cachedAt is kept while that map is fresh, so no quote
        is ever served older than the TTL; a stale or missing map starts over.
        """
        if not any(price > 0 for price in new_prices.values()):
            return True
        try:
            current = await self._load_fresh(chain)
        except _StoreReadError:
            return False
        if current is None:
            base, cached_at = {}, now_ms()
        else:
            base, cached_at = current.prices, current.cached_at
        entry = BulkPriceCache(prices=merge_prices(base, new_prices), cached_at=cached_at)
        return await self._set(self.key(chain), entry.to_store(), self._ttl_seconds)


class WalletCache(_Tier):
    def __init__(self, store: CacheStoreProtocol, ttl_seconds: int) -> None:
        super().__init__(store)
        self._ttl_seconds = ttl_seconds

    @staticmethod
    def key(chain: str, wallet: str) -> str:
        return f"evm-wallet:{chain}:{wallet.lower()}"

    async def read(self, chain: str, wallet: str) -> list[TokenBalance] | None:
        try:
            raw = await self._get_raw(self.key(chain, wallet))
        except _StoreReadError:
            return None
        if raw is None:
            return None
        try:
            entry = CachedWalletBalances.model_validate(raw)
        except ValidationError:
            logger.warning("Discarding malformed wallet cache for %s:%s", chain, wallet)
            return None
        if not is_fresh(entry.cached_at, self._ttl_seconds):
            return None
        logger.info("Using cached wallet data for %s (%d tokens)", chain, len(entry.tokens))
        return entry.tokens

    async def write(self, chain: str, wallet: str, tokens: list[TokenBalance]) -> bool:
        entry = CachedWalletBalances(tokens=tokens, cached_at=now_ms())
        return await self._set(self.key(chain, wallet), entry.to_store(), self._ttl_seconds)
