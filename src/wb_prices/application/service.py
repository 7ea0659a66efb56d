"""PriceService: USD quotes with a cache tier and a two-oracle fallback.

get_prices():   reconcile against the bulk price cache, fetch only the
                addresses it cannot answer, merge fresh quotes back in a
                detached task.
fetch_prices(): network only. The primary oracle is asked once for the
                whole set; every address it missed is then asked of the
                secondary individually, a bounded batch at a time.

Both oracles are optional: a failure of either just leaves addresses
unpriced. Prices are never a reason to fail a request.
"""

import asyncio
import logging

from src.wb_cache.application.tiers import PriceCache
from src.wb_common.background import BackgroundTasks
from src.wb_common.chains import ChainConfig
from src.wb_common.optional import optional_call
from src.wb_prices.domain.oracle import PriceOracleProtocol, usable_price

logger = logging.getLogger(__name__)


class PriceService:
    def __init__(
        self,
        primary: PriceOracleProtocol,
        secondary: PriceOracleProtocol | None,
        cache: PriceCache,
        tasks: BackgroundTasks,
        secondary_batch_size: int = 10,
        timeout: float = 10.0,
    ) -> None:
        self._primary = primary
        self._secondary = secondary
        self._cache = cache
        self._tasks = tasks
        self._secondary_batch_size = max(1, secondary_batch_size)
        self._timeout = timeout

    async def get_prices(self, chain: ChainConfig, addresses: list[str]) -> dict[str, float]:
        """Known prices for ``addresses``; addresses without one are absent."""
        cached = await self._cache.read(chain.chain.value)
        result = {a: cached[a] for a in addresses if a in cached}
        unknown = [a for a in dict.fromkeys(addresses) if a not in result]
        logger.info(
            "Prices for %s: %d cached, %d to fetch", chain.chain.value, len(result), len(unknown)
        )
        if not unknown:
            return result

        fetched = await self.fetch_prices(chain, unknown)
        if fetched:
            self._tasks.spawn(
                self._cache.merge(chain.chain.value, fetched),
                name=f"price-merge:{chain.chain.value}",
            )
        result.update(fetched)
        return result

    async def fetch_prices(self, chain: ChainConfig, addresses: list[str]) -> dict[str, float]:
        if not addresses:
            return {}

        primary = await optional_call(
            self._primary.prices(chain, addresses),
            self._timeout,
            f"{self._primary.source.value} prices",
        )
        prices = _sane(primary or {}, addresses)

        missing = [a for a in addresses if a not in prices]
        if missing and self._secondary is not None:
            logger.info(
                "%s missed %d/%d prices, asking %s",
                self._primary.source.value, len(missing), len(addresses), self._secondary.source.value,
            )
            prices.update(await self._fetch_secondary(chain, missing))
        return prices

    async def _fetch_secondary(self, chain: ChainConfig, addresses: list[str]) -> dict[str, float]:
        assert self._secondary is not None
        found: dict[str, float] = {}
        size = self._secondary_batch_size
        for start in range(0, len(addresses), size):
            batch = addresses[start:start + size]
            answers = await asyncio.gather(
                *(
                    optional_call(
                        self._secondary.prices(chain, [address]),
                        self._timeout,
                        f"{self._secondary.source.value} price {address}",
                    )
                    for address in batch
                )
            )
            for answer in answers:
                found.update(_sane(answer or {}, batch))
        return found


def _sane(quotes: dict[str, float], wanted: list[str]) -> dict[str, float]:
    """Keep only requested addresses with usable quotes."""
    wanted_set = set(wanted)
    result: dict[str, float] = {}
    for address, value in quotes.items():
        address = address.lower()
        if address not in wanted_set:
            continue
        price = usable_price(value)
        if price is not None:
            result[address] = price
    return result
