"""Concrete price oracles.

DeFiLlamaOracle  primary: one multi-address query, free, good coverage of
                 newly listed tokens.
CoinGeckoOracle  secondary: asked about whatever the primary missed.

Both drop quotes that fail usable_price(); upstream errors propagate.
"""

import logging

import httpx

from src.wb_common.chains import ChainConfig
from src.wb_common.enums import PriceSource
from src.wb_prices.domain.oracle import usable_price
from src.wb_prices.infrastructure.coingecko import CoinGeckoClient

logger = logging.getLogger(__name__)

DEFILLAMA_PRICES_URL = "https://coins.llama.fi/prices/current"


class DeFiLlamaOracle:
    source = PriceSource.DEFILLAMA

    def __init__(self, client: httpx.AsyncClient, timeout: float = 10.0) -> None:
        self._client = client
        self._timeout = timeout

    async def prices(self, chain: ChainConfig, addresses: list[str]) -> dict[str, float]:
        if not addresses:
            return {}
        coins = ",".join(f"{chain.defillama_chain}:{a}" for a in addresses)
        resp = await self._client.get(f"{DEFILLAMA_PRICES_URL}/{coins}", timeout=self._timeout)
        resp.raise_for_status()
        data = resp.json()
        coins_data = data.get("coins") if isinstance(data, dict) else None
        if not isinstance(coins_data, dict):
            return {}

        prices: dict[str, float] = {}
        for key, entry in coins_data.items():
            _, _, address = key.partition(":")
            if not address or not isinstance(entry, dict):
                continue
            price = usable_price(entry.get("price"))
            if price is None:
                logger.debug("DeFiLlama dropped quote for %s: %r", address, entry.get("price"))
                continue
            prices[address.lower()] = price
        logger.info("DeFiLlama returned %d/%d prices", len(prices), len(addresses))
        return prices


class CoinGeckoOracle:
    source = PriceSource.COINGECKO

    def __init__(self, coingecko: CoinGeckoClient, timeout: float = 10.0) -> None:
        self._coingecko = coingecko
        self._timeout = timeout

    async def prices(self, chain: ChainConfig, addresses: list[str]) -> dict[str, float]:
        if not addresses:
            return {}
        data = await self._coingecko.token_prices(chain.coingecko_platform, addresses, self._timeout)
        prices: dict[str, float] = {}
        for address, entry in data.items():
            if not isinstance(entry, dict):
                continue
            price = usable_price(entry.get("usd"))
            if price is not None:
                prices[address.lower()] = price
        return prices
