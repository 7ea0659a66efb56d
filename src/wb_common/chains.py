"""Per-chain identifiers for every upstream source.

Each third-party service names the same chain differently.
"""

from dataclasses import dataclass

from src.wb_common.enums import Chain
from src.wb_common.errors import UnsupportedChainError


@dataclass(frozen=True)
class ChainConfig:
    chain: Chain
    alchemy_network: str
    trustwallet_chain: str
    coingecko_platform: str
    defillama_chain: str


CHAIN_CONFIG: dict[Chain, ChainConfig] = {
    Chain.ETHEREUM: ChainConfig(
        chain=Chain.ETHEREUM,
        alchemy_network="eth-mainnet",
        trustwallet_chain="ethereum",
        coingecko_platform="ethereum",
        defillama_chain="ethereum",
    ),
    Chain.BASE: ChainConfig(
        chain=Chain.BASE,
        alchemy_network="base-mainnet",
        trustwallet_chain="base",
        coingecko_platform="base",
        defillama_chain="base",
    ),
    Chain.BSC: ChainConfig(
        chain=Chain.BSC,
        alchemy_network="bnb-mainnet",
        trustwallet_chain="smartchain",
        coingecko_platform="binance-smart-chain",
        defillama_chain="bsc",
    ),
}


def get_chain_config(chain: str) -> ChainConfig:
    """Look up a chain by its query-parameter name, raising UnsupportedChainError."""
    try:
        return CHAIN_CONFIG[Chain(chain)]
    except ValueError:
        raise UnsupportedChainError(chain) from None
