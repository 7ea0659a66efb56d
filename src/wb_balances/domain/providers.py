# src/wb_balances/domain/providers.py
"""Collaborator Protocols for the balance pipeline.

Unit tests inject fakes conforming to these Protocols.
Infrastructure provides the real HTTP implementations.
"""

from collections.abc import Awaitable
from typing import Protocol

from src.wb_balances.domain.models import ProviderTokenMetadata, RawTokenBalance
from src.wb_common.chains import ChainConfig


class BalancesProviderProtocol(Protocol):
    async def get_token_balances(
        self, address: str, chain: ChainConfig
    ) -> list[RawTokenBalance]: ...

    async def get_token_metadata(
        self, contract_address: str, chain: ChainConfig
    ) -> ProviderTokenMetadata: ...


class LogoResolverProtocol(Protocol):
    async def resolve(
        self,
        contract_address: str,
        chain: ChainConfig,
        provider_metadata: Awaitable[ProviderTokenMetadata | None] | None = None,
    ) -> str | None: ...


class PriceServiceProtocol(Protocol):
    async def get_prices(
        self, chain: ChainConfig, addresses: list[str]
    ) -> dict[str, float]: ...


class ImageCacheProtocol(Protocol):
    @property
    def available(self) -> bool: ...

    def is_hosted(self, url: str) -> bool: ...

    async def lookup(self, url: str) -> str | None: ...

    async def cache_best_effort(self, url: str) -> str: ...
