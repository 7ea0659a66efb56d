"""Global enums: values double as query parameters and cache key segments."""

from enum import Enum


class Chain(str, Enum):
    ETHEREUM = "ethereum"
    BASE = "base"
    BSC = "bsc"


class LogoSource(str, Enum):
    """Logo sources, in resolution order."""
    TRUSTWALLET = "trustwallet"
    ALCHEMY = "alchemy"
    COINGECKO = "coingecko"


class PriceSource(str, Enum):
    DEFILLAMA = "defillama"
    COINGECKO = "coingecko"
