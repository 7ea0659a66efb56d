"""Price oracle Protocol and quote sanity rules.

An oracle answer maps lowercased address -> USD price. "Address absent"
and "price is zero" are different upstream answers but mean the same thing
here: no usable price. Neither is ever cached.
"""

import math
from typing import Any, Protocol

from src.wb_common.chains import ChainConfig
from src.wb_common.enums import PriceSource

# Quotes above this are manipulated pools, not prices
MAX_SANE_PRICE_USD = 1_000_000_000


class PriceOracleProtocol(Protocol):
    source: PriceSource

    async def prices(self, chain: ChainConfig, addresses: list[str]) -> dict[str, float]: ...


def usable_price(value: Any) -> float | None:
    """Return ``value`` as a price if it is a sane positive number, else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    price = float(value)
    if not math.isfinite(price) or price <= 0 or price > MAX_SANE_PRICE_USD:
        return None
    return price
