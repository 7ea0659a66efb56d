"""Endpoint-test fixtures.

The app runs in-process over ASGITransport. Every outbound collaborator is
replaced through app.dependency_overrides, so no network, Redis or API key
is needed.
"""

from unittest.mock import AsyncMock

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.wb_balances.application.service import BalanceApplicationService
from src.wb_balances.domain.models import ProviderTokenMetadata, RawTokenBalance
from src.wb_cache.application.tiers import MetadataCache, PriceCache, WalletCache
from src.wb_cache.infrastructure.memory_store import MemoryCacheStore
from src.wb_common.background import BackgroundTasks
from src.wb_common.enums import PriceSource
from src.wb_common.http_client import get_http_client
from src.wb_gateway.dependencies import (
    get_balance_service,
    get_cache_store,
    get_image_cache,
    get_price_service,
)
from src.wb_images.application.service import ImageCache
from src.wb_images.infrastructure.vercel_blob import VercelBlobStore
from src.wb_prices.application.service import PriceService

TOKEN_A = "0x" + "a" * 40
TOKEN_B = "0x" + "b" * 40


class Fakes:
    """Collaborator fakes shared by the overridden dependencies."""

    def __init__(self) -> None:
        self.store = MemoryCacheStore()
        self.tasks = BackgroundTasks()

        self.provider = AsyncMock()
        self.provider.get_token_balances.return_value = [
            RawTokenBalance(TOKEN_A, hex(3 * 10**18)),
            RawTokenBalance(TOKEN_B, hex(7 * 10**6)),
        ]
        self.provider.get_token_metadata.side_effect = lambda address, chain: {
            TOKEN_A: ProviderTokenMetadata("AAA", "Token A", 18, None),
            TOKEN_B: ProviderTokenMetadata("BBB", "Token B", 6, None),
        }[address]

        self.resolver = AsyncMock()
        self.resolver.resolve.return_value = None

        self.primary = AsyncMock()
        self.primary.source = PriceSource.DEFILLAMA
        self.primary.prices.side_effect = lambda chain, addrs: {
            a: p for a, p in {TOKEN_A: 4.0}.items() if a in addrs
        }
        self.secondary = AsyncMock()
        self.secondary.source = PriceSource.COINGECKO
        self.secondary.prices.return_value = {}

        self.outbound_transport = httpx.MockTransport(lambda request: httpx.Response(404))

    def price_service(self) -> PriceService:
        return PriceService(
            primary=self.primary,
            secondary=self.secondary,
            cache=PriceCache(self.store, 900),
            tasks=self.tasks,
        )

    def balance_service(self) -> BalanceApplicationService:
        return BalanceApplicationService(
            provider=self.provider,
            logo_resolver=self.resolver,
            price_service=self.price_service(),
            metadata_cache=MetadataCache(self.store),
            wallet_cache=WalletCache(self.store, 900),
            tasks=self.tasks,
        )


@pytest.fixture
async def fakes() -> Fakes:
    f = Fakes()
    yield f
    await f.tasks.cancel_all()


@pytest.fixture
async def client(fakes: Fakes) -> AsyncClient:
    """Async HTTP client with every outbound dependency overridden."""
    outbound = httpx.AsyncClient(transport=fakes.outbound_transport)
    app.dependency_overrides[get_http_client] = lambda: outbound
    app.dependency_overrides[get_cache_store] = lambda: fakes.store
    app.dependency_overrides[get_price_service] = fakes.price_service
    app.dependency_overrides[get_balance_service] = fakes.balance_service
    app.dependency_overrides[get_image_cache] = lambda: ImageCache(
        outbound, VercelBlobStore(outbound, "tok")
    )

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    await outbound.aclose()


@pytest.fixture
async def bare_client() -> AsyncClient:
    """Client with real service wiring and only the network stubbed out."""
    outbound = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(500))
    )
    store = MemoryCacheStore()
    app.dependency_overrides[get_http_client] = lambda: outbound
    app.dependency_overrides[get_cache_store] = lambda: store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    await outbound.aclose()
