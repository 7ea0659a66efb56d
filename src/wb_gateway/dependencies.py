"""FastAPI dependencies: request parameters and service wiring.

Services are cheap to build and hold no state of their own: the shared
httpx client, the Redis pool and the background task registry are
process-wide. Tests swap any of these through app.dependency_overrides.

Parameter dependencies are listed before service dependencies in every
route, so a bad chain or address is reported before a missing credential.
"""

from typing import Annotated

import httpx
from fastapi import Depends, Query

from config.settings import settings
from src.wb_balances.application.service import BalanceApplicationService
from src.wb_balances.domain.policy import DustThresholds
from src.wb_balances.infrastructure.alchemy import AlchemyProvider
from src.wb_cache.application.tiers import MetadataCache, PriceCache, WalletCache
from src.wb_cache.domain.store import CacheStoreProtocol
from src.wb_cache.infrastructure.memory_store import MemoryCacheStore
from src.wb_cache.infrastructure.redis_store import RedisCacheStore
from src.wb_common.addresses import normalize_address
from src.wb_common.background import background_tasks
from src.wb_common.chains import ChainConfig, get_chain_config
from src.wb_common.enums import Chain
from src.wb_common.errors import MissingCredentialError
from src.wb_common.http_client import get_http_client
from src.wb_common.redis_client import get_redis
from src.wb_images.application.service import ImageCache
from src.wb_images.infrastructure.vercel_blob import VercelBlobStore
from src.wb_logos.application.resolver import LogoResolver
from src.wb_logos.infrastructure.sources import (
    AlchemyLogoSource,
    CoinGeckoLogoSource,
    TrustWalletLogoSource,
)
from src.wb_prices.application.service import PriceService
from src.wb_prices.infrastructure.coingecko import CoinGeckoClient
from src.wb_prices.infrastructure.oracles import CoinGeckoOracle, DeFiLlamaOracle

_memory_store = MemoryCacheStore()

HttpClient = Annotated[httpx.AsyncClient, Depends(get_http_client)]


# --- request parameters ---

def chain_param(
    chain: str = Query(Chain.BASE.value, description="ethereum | base | bsc"),
) -> ChainConfig:
    return get_chain_config(chain.strip().lower())


def wallet_param(address: str = Query("", description="Wallet address (0x…)")) -> str:
    return normalize_address(address)


# --- wiring ---

async def get_cache_store() -> CacheStoreProtocol:
    if settings.CACHE_BACKEND == "memory":
        return _memory_store
    return RedisCacheStore(await get_redis())


CacheStore = Annotated[CacheStoreProtocol, Depends(get_cache_store)]


def get_coingecko(client: HttpClient) -> CoinGeckoClient:
    return CoinGeckoClient(client, settings.COINGECKO_API_KEY)


def get_price_service(
    client: HttpClient,
    store: CacheStore,
    coingecko: Annotated[CoinGeckoClient, Depends(get_coingecko)],
) -> PriceService:
    return PriceService(
        primary=DeFiLlamaOracle(client, timeout=settings.PRICE_TIMEOUT),
        secondary=CoinGeckoOracle(coingecko, timeout=settings.PRICE_TIMEOUT),
        cache=PriceCache(store, settings.PRICE_CACHE_TTL_SECONDS),
        tasks=background_tasks,
        secondary_batch_size=settings.PRICE_SECONDARY_BATCH_SIZE,
        timeout=settings.PRICE_TIMEOUT,
    )


def get_image_cache(client: HttpClient) -> ImageCache:
    blob_store = None
    if settings.BLOB_READ_WRITE_TOKEN:
        blob_store = VercelBlobStore(
            client,
            settings.BLOB_READ_WRITE_TOKEN,
            api_url=settings.BLOB_API_URL,
            timeout=settings.BLOB_TIMEOUT,
        )
    return ImageCache(
        client,
        blob_store,
        host_suffix=settings.BLOB_HOST_SUFFIX,
        download_timeout=settings.IMAGE_DOWNLOAD_TIMEOUT,
    )


def get_balance_service(
    client: HttpClient,
    store: CacheStore,
    coingecko: Annotated[CoinGeckoClient, Depends(get_coingecko)],
    price_service: Annotated[PriceService, Depends(get_price_service)],
    image_cache: Annotated[ImageCache, Depends(get_image_cache)],
) -> BalanceApplicationService:
    if not settings.ALCHEMY_API_KEY:
        raise MissingCredentialError("ALCHEMY_API_KEY")
    provider = AlchemyProvider(
        client,
        settings.ALCHEMY_API_KEY,
        balances_timeout=settings.BALANCES_TIMEOUT,
        metadata_timeout=settings.METADATA_TIMEOUT,
    )
    resolver = LogoResolver([
        TrustWalletLogoSource(client, timeout=settings.TRUSTWALLET_TIMEOUT),
        AlchemyLogoSource(provider, timeout=settings.ALCHEMY_LOGO_TIMEOUT),
        CoinGeckoLogoSource(coingecko, timeout=settings.COINGECKO_LOGO_TIMEOUT),
    ])
    return BalanceApplicationService(
        provider=provider,
        logo_resolver=resolver,
        price_service=price_service,
        metadata_cache=MetadataCache(store),
        wallet_cache=WalletCache(store, settings.WALLET_CACHE_TTL_SECONDS),
        tasks=background_tasks,
        image_cache=image_cache,
        metadata_batch_size=settings.METADATA_BATCH_SIZE,
        metadata_timeout=settings.METADATA_TIMEOUT,
        logo_retry_cap=settings.LOGO_RETRY_CAP,
        logo_retry_interval_seconds=settings.LOGO_RETRY_INTERVAL_SECONDS,
        dust=DustThresholds.of(settings.MIN_TOKEN_BALANCE, settings.MIN_VALUE_USD),
    )
