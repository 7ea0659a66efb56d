"""Tests for LogoResolver ordering and the concrete logo sources."""

import asyncio
from unittest.mock import AsyncMock

import httpx

from src.wb_balances.domain.models import ProviderTokenMetadata
from src.wb_common.chains import ChainConfig
from src.wb_common.enums import LogoSource
from src.wb_logos.application.resolver import LogoResolver
from src.wb_logos.infrastructure.sources import (
    AlchemyLogoSource,
    CoinGeckoLogoSource,
    TrustWalletLogoSource,
    trustwallet_logo_url,
)
from src.wb_prices.infrastructure.coingecko import CoinGeckoClient

USDC_BASE = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"


async def _answer(value):
    return value


class _Source:
    def __init__(self, source: LogoSource, result=None, delay: float = 0.0, error: Exception | None = None):
        self.source = source
        self.timeout = 0.05
        self.calls = 0
        self._result = result
        self._delay = delay
        self._error = error

    async def fetch(self, contract_address: str, chain: ChainConfig) -> str | None:
        self.calls += 1
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return self._result


class TestLogoResolver:
    async def test_first_hit_wins(self, base_chain: ChainConfig) -> None:
        first = _Source(LogoSource.TRUSTWALLET, None)
        second = _Source(LogoSource.ALCHEMY, "https://alchemy/logo.png")
        third = _Source(LogoSource.COINGECKO, "https://cg/logo.png")

        url = await LogoResolver([first, second, third]).resolve(USDC_BASE.lower(), base_chain)

        assert url == "https://alchemy/logo.png"
        assert (first.calls, second.calls, third.calls) == (1, 1, 0)

    async def test_slow_source_skipped(self, base_chain: ChainConfig) -> None:
        slow = _Source(LogoSource.TRUSTWALLET, "https://tw/logo.png", delay=1.0)
        fallback = _Source(LogoSource.COINGECKO, "https://cg/logo.png")

        url = await LogoResolver([slow, fallback]).resolve(USDC_BASE.lower(), base_chain)

        assert url == "https://cg/logo.png"

    async def test_failing_source_skipped(self, base_chain: ChainConfig) -> None:
        broken = _Source(LogoSource.TRUSTWALLET, error=httpx.ConnectError("down"))
        fallback = _Source(LogoSource.ALCHEMY, "https://alchemy/logo.png")

        assert await LogoResolver([broken, fallback]).resolve("0xa", base_chain) == "https://alchemy/logo.png"

    async def test_all_exhausted_is_none(self, base_chain: ChainConfig) -> None:
        sources = [_Source(s) for s in LogoSource]
        assert await LogoResolver(sources).resolve("0xa", base_chain) is None
        assert all(s.calls == 1 for s in sources)

    async def test_pending_provider_metadata_replaces_provider_call(self, base_chain: ChainConfig) -> None:
        registry = _Source(LogoSource.TRUSTWALLET, None)
        provider = _Source(LogoSource.ALCHEMY, "https://alchemy/refetched.png")
        coingecko = _Source(LogoSource.COINGECKO, "https://cg/logo.png")
        pending = asyncio.ensure_future(
            _answer(ProviderTokenMetadata("AAA", "Token A", 18, "https://alchemy/known.png"))
        )

        url = await LogoResolver([registry, provider, coingecko]).resolve(
            "0xa", base_chain, provider_metadata=pending
        )

        assert url == "https://alchemy/known.png"
        assert (registry.calls, provider.calls, coingecko.calls) == (1, 0, 0)

    async def test_failed_provider_metadata_falls_through(self, base_chain: ChainConfig) -> None:
        provider = _Source(LogoSource.ALCHEMY, "https://alchemy/refetched.png")
        coingecko = _Source(LogoSource.COINGECKO, "https://cg/logo.png")
        pending = asyncio.ensure_future(_answer(None))

        url = await LogoResolver([_Source(LogoSource.TRUSTWALLET), provider, coingecko]).resolve(
            "0xa", base_chain, provider_metadata=pending
        )

        assert url == "https://cg/logo.png"
        assert provider.calls == 0


class TestTrustWalletSource:
    def test_url_uses_checksummed_address(self, base_chain: ChainConfig) -> None:
        url = trustwallet_logo_url(USDC_BASE.lower(), base_chain)
        assert url.endswith(f"/blockchains/base/assets/{USDC_BASE}/logo.png")

    async def test_partial_content_means_present(self, base_chain: ChainConfig) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(206, content=b"\x89")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            url = await TrustWalletLogoSource(client).fetch(USDC_BASE.lower(), base_chain)

        assert url == trustwallet_logo_url(USDC_BASE.lower(), base_chain)
        assert seen[0].method == "GET"
        assert seen[0].headers["Range"] == "bytes=0-0"

    async def test_not_found(self, base_chain: ChainConfig) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(404))
        async with httpx.AsyncClient(transport=transport) as client:
            assert await TrustWalletLogoSource(client).fetch(USDC_BASE.lower(), base_chain) is None


class TestAlchemySource:
    async def test_returns_metadata_logo(self, base_chain: ChainConfig) -> None:
        provider = AsyncMock()
        provider.get_token_metadata.return_value = ProviderTokenMetadata(
            "USDC", "USD Coin", 6, "https://static.alchemyapi.io/usdc.png"
        )
        url = await AlchemyLogoSource(provider).fetch("0xa", base_chain)
        assert url == "https://static.alchemyapi.io/usdc.png"


class TestCoinGeckoSource:
    async def test_prefers_small_image(self, base_chain: ChainConfig) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path.endswith("/coins/base/contract/0xa")
            return httpx.Response(200, json={"image": {"thumb": "t.png", "small": "s.png", "large": "l.png"}})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            url = await CoinGeckoLogoSource(CoinGeckoClient(client)).fetch("0xa", base_chain)
        assert url == "s.png"

    async def test_falls_back_to_thumb(self, base_chain: ChainConfig) -> None:
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json={"image": {"thumb": "t.png", "large": "l.png"}})
        )
        async with httpx.AsyncClient(transport=transport) as client:
            url = await CoinGeckoLogoSource(CoinGeckoClient(client)).fetch("0xa", base_chain)
        assert url == "t.png"
