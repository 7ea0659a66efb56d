"""Concrete logo sources, in resolution order.

  1. TrustWalletLogoSource  static registry, path keyed by EIP-55 address
  2. AlchemyLogoSource      balances-provider token metadata
  3. CoinGeckoLogoSource    contract lookup, image.small/thumb/large
"""

import httpx

from src.wb_balances.domain.providers import BalancesProviderProtocol
from src.wb_common.addresses import checksum_address
from src.wb_common.chains import ChainConfig
from src.wb_common.enums import LogoSource
from src.wb_prices.infrastructure.coingecko import CoinGeckoClient

TRUSTWALLET_ASSETS_URL = "https://raw.githubusercontent.com/trustwallet/assets/master/blockchains"


def trustwallet_logo_url(contract_address: str, chain: ChainConfig) -> str:
    # The path segment is case-sensitive: a lowercased address silently 404s
    return (
        f"{TRUSTWALLET_ASSETS_URL}/{chain.trustwallet_chain}/assets/"
        f"{checksum_address(contract_address)}/logo.png"
    )


class TrustWalletLogoSource:
    source = LogoSource.TRUSTWALLET

    def __init__(self, client: httpx.AsyncClient, timeout: float = 2.0) -> None:
        self._client = client
        self.timeout = timeout

    async def fetch(self, contract_address: str, chain: ChainConfig) -> str | None:
        url = trustwallet_logo_url(contract_address, chain)
        # One-byte range GET instead of HEAD: raw.githubusercontent mishandles HEAD
        resp = await self._client.get(url, headers={"Range": "bytes=0-0"}, timeout=self.timeout)
        if resp.status_code in (200, 206):
            return url
        return None


class AlchemyLogoSource:
    source = LogoSource.ALCHEMY

    def __init__(self, provider: BalancesProviderProtocol, timeout: float = 5.0) -> None:
        self._provider = provider
        self.timeout = timeout

    async def fetch(self, contract_address: str, chain: ChainConfig) -> str | None:
        metadata = await self._provider.get_token_metadata(contract_address, chain)
        return metadata.logo


class CoinGeckoLogoSource:
    source = LogoSource.COINGECKO

    def __init__(self, coingecko: CoinGeckoClient, timeout: float = 3.0) -> None:
        self._coingecko = coingecko
        self.timeout = timeout

    async def fetch(self, contract_address: str, chain: ChainConfig) -> str | None:
        return await self._coingecko.contract_image(
            chain.coingecko_platform, contract_address, self.timeout
        )
