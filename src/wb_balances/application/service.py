"""BalanceApplicationService: the wallet balance pipeline.

CHECK_WALLET_CACHE -> FETCH_RAW_BALANCES -> RECONCILE_METADATA ->
ENRICH_UNKNOWN -> RECONCILE_PRICES -> FETCH_UNKNOWN_PRICES -> COMPUTE_USD ->
FILTER_DUST -> SORT -> PERSIST_WALLET_CACHE

Only FETCH_RAW_BALANCES (and incomplete metadata for a newly fetched token)
can fail the request. Everything else degrades: a token with no logo or no
price still appears. Bulk metadata/price merges and logo re-hosting run as
detached background tasks; the wallet snapshot write is awaited but cannot
fail the request.
"""

import asyncio
import logging

import httpx

from src.wb_balances.domain.models import HeldToken, ProviderTokenMetadata
from src.wb_balances.domain.policy import (
    DustThresholds,
    build_token,
    filter_dust,
    nonzero_holdings,
    partition,
    provisional_metadata,
    require_complete_metadata,
    sort_tokens,
)
from src.wb_balances.domain.providers import (
    BalancesProviderProtocol,
    ImageCacheProtocol,
    LogoResolverProtocol,
    PriceServiceProtocol,
)
from src.wb_cache.application.tiers import MetadataCache, WalletCache
from src.wb_cache.domain.models import CachedTokenMetadata, TokenBalance
from src.wb_common.addresses import short_address
from src.wb_common.background import BackgroundTasks
from src.wb_common.chains import ChainConfig
from src.wb_common.datetime_utils import now_ms

logger = logging.getLogger(__name__)

# Transport-level metadata failures; the token is shown provisionally
METADATA_TRANSPORT_FAILURES = (TimeoutError, httpx.HTTPError, ValueError)


class BalanceApplicationService:
    def __init__(
        self,
        provider: BalancesProviderProtocol,
        logo_resolver: LogoResolverProtocol,
        price_service: PriceServiceProtocol,
        metadata_cache: MetadataCache,
        wallet_cache: WalletCache,
        tasks: BackgroundTasks,
        image_cache: ImageCacheProtocol | None = None,
        *,
        metadata_batch_size: int = 20,
        metadata_timeout: float = 5.0,
        logo_retry_cap: int = 10,
        logo_retry_interval_seconds: int = 24 * 60 * 60,
        dust: DustThresholds | None = None,
    ) -> None:
        self._provider = provider
        self._logo_resolver = logo_resolver
        self._price_service = price_service
        self._metadata_cache = metadata_cache
        self._wallet_cache = wallet_cache
        self._tasks = tasks
        self._image_cache = image_cache
        self._metadata_batch_size = max(1, metadata_batch_size)
        self._metadata_timeout = metadata_timeout
        self._logo_retry_cap = logo_retry_cap
        self._logo_retry_interval_seconds = logo_retry_interval_seconds
        self._dust = dust or DustThresholds.of(1.0, 0.001)

    async def get_balances(
        self, chain: ChainConfig, wallet: str, force_refresh: bool = False
    ) -> list[TokenBalance]:
        """Display-ready token list for ``wallet`` (already lowercased)."""
        if not force_refresh:
            cached = await self._wallet_cache.read(chain.chain.value, wallet)
            if cached is not None:
                return cached

        raw = await self._provider.get_token_balances(wallet, chain)
        held = nonzero_holdings(raw)
        logger.info(
            "Wallet %s on %s: %d balances, %d non-zero",
            short_address(wallet), chain.chain.value, len(raw), len(held),
        )

        metadata, updates, provisional = await self._reconcile_metadata(chain, held)

        priceable = [h.contract_address for h in held if h.contract_address not in provisional]
        prices = await self._price_service.get_prices(chain, priceable) if priceable else {}

        tokens = [
            build_token(h, metadata[h.contract_address], prices.get(h.contract_address))
            for h in held
        ]
        tokens = filter_dust(tokens, self._dust, exempt=provisional)
        tokens = sort_tokens(tokens)
        tokens, unhosted = await self._upgrade_logos(tokens, metadata, updates, provisional)

        merge_task = None
        if updates:
            merge_task = self._tasks.spawn(
                self._metadata_cache.merge(chain.chain.value, updates),
                name=f"metadata-merge:{chain.chain.value}",
            )
        if unhosted:
            self._tasks.spawn(
                self._rehost(chain.chain.value, unhosted, after=merge_task),
                name=f"logo-rehost:{chain.chain.value}",
            )

        if provisional:
            logger.warning(
                "Not caching wallet %s: %d token(s) with provisional metadata",
                short_address(wallet), len(provisional),
            )
        else:
            await self._wallet_cache.write(chain.chain.value, wallet, tokens)
        return tokens

    # --- metadata ---

    async def _reconcile_metadata(
        self, chain: ChainConfig, held: list[HeldToken]
    ) -> tuple[dict[str, CachedTokenMetadata], dict[str, CachedTokenMetadata], set[str]]:
        """Resolve metadata for every held contract.

        Returns (metadata for display, entries to merge into the cache,
        contracts shown provisionally).
        """
        if not held:
            return {}, {}, set()

        known = await self._metadata_cache.read(chain.chain.value)
        now = now_ms()
        plan = partition(
            [h.contract_address for h in held],
            known,
            now,
            self._logo_retry_interval_seconds,
            self._logo_retry_cap,
        )
        logger.info(
            "Metadata for %s: %d cached, %d to fetch, %d logo retries",
            chain.chain.value, len(plan.cached), len(plan.needs_metadata), len(plan.needs_logo_retry),
        )

        updates: dict[str, CachedTokenMetadata] = {}
        provisional: dict[str, CachedTokenMetadata] = {}

        for batch in self._batches(plan.needs_metadata):
            results = await asyncio.gather(*(self._fetch_new(chain, a, now) for a in batch))
            for address, (entry, is_provisional) in zip(batch, results):
                (provisional if is_provisional else updates)[address] = entry

        for batch in self._batches(plan.needs_logo_retry):
            logos = await asyncio.gather(
                *(self._logo_resolver.resolve(a, chain) for a in batch)
            )
            for address, logo in zip(batch, logos):
                updates[address] = known[address].model_copy(
                    update={"logo_url": logo, "logo_checked_at": now}
                )

        return {**known, **updates, **provisional}, updates, set(provisional)

    async def _fetch_new(
        self, chain: ChainConfig, address: str, now: int
    ) -> tuple[CachedTokenMetadata, bool]:
        # One provider metadata call per token; the resolver's provider step reuses it
        metadata_task = asyncio.ensure_future(self._fetch_metadata(chain, address))
        fetched, logo = await asyncio.gather(
            metadata_task,
            self._logo_resolver.resolve(address, chain, provider_metadata=metadata_task),
        )
        if fetched is None:
            return provisional_metadata(address, logo), True
        return require_complete_metadata(address, fetched, logo, now), False

    async def _fetch_metadata(
        self, chain: ChainConfig, address: str
    ) -> ProviderTokenMetadata | None:
        try:
            async with asyncio.timeout(self._metadata_timeout):
                return await self._provider.get_token_metadata(address, chain)
        except METADATA_TRANSPORT_FAILURES as exc:
            logger.warning(
                "Metadata fetch failed for %s: %s", short_address(address), type(exc).__name__
            )
            return None

    def _batches(self, addresses: list[str]) -> list[list[str]]:
        size = self._metadata_batch_size
        return [addresses[i:i + size] for i in range(0, len(addresses), size)]

    # --- logo hosting ---

    async def _upgrade_logos(
        self,
        tokens: list[TokenBalance],
        metadata: dict[str, CachedTokenMetadata],
        updates: dict[str, CachedTokenMetadata],
        provisional: set[str],
    ) -> tuple[list[TokenBalance], dict[str, CachedTokenMetadata]]:
        """Swap in already hosted logo copies.

        Hosted URLs found here are added to ``updates`` so they land in the
        same metadata merge as this request's other discoveries. Returns the
        tokens and the metadata entries whose logo still needs re-hosting.
        """
        image_cache = self._image_cache
        if image_cache is None or not image_cache.available:
            return tokens, {}

        candidates = [
            t for t in tokens
            if t.logo_url
            and not image_cache.is_hosted(t.logo_url)
            and t.contract_address not in provisional
        ]
        if not candidates:
            return tokens, {}

        hosted = await asyncio.gather(*(image_cache.lookup(t.logo_url) for t in candidates))
        replacements: dict[str, str] = {}
        unhosted: dict[str, CachedTokenMetadata] = {}
        for token, hosted_url in zip(candidates, hosted):
            entry = updates.get(token.contract_address) or metadata[token.contract_address]
            if hosted_url:
                replacements[token.contract_address] = hosted_url
                updates[token.contract_address] = entry.model_copy(update={"logo_url": hosted_url})
            else:
                unhosted[token.contract_address] = entry

        if replacements:
            tokens = [
                t.model_copy(update={"logo_url": replacements[t.contract_address]})
                if t.contract_address in replacements
                else t
                for t in tokens
            ]
        return tokens, unhosted

    async def _rehost(
        self,
        chain: str,
        entries: dict[str, CachedTokenMetadata],
        after: asyncio.Task | None = None,
    ) -> None:
        assert self._image_cache is not None
        addresses = list(entries)
        hosted = await asyncio.gather(
            *(self._image_cache.cache_best_effort(entries[a].logo_url) for a in addresses)
        )
        rehosted = {
            address: entries[address].model_copy(update={"logo_url": url})
            for address, url in zip(addresses, hosted)
            if url != entries[address].logo_url
        }
        if not rehosted:
            return
        if after is not None:
            # This request's own merge must land first or it would restore the original URL
            await asyncio.wait([after])
        logger.info("Re-hosted %d logos for %s", len(rehosted), chain)
        await self._metadata_cache.merge(chain, rehosted)
