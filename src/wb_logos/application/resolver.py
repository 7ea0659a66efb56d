"""LogoResolver: ordered fallback over independent logo sources.

Each source runs under its own deadline, so one slow registry cannot stall
an enrichment batch. Returning None after every source is a valid terminal
answer: the caller records it with logoCheckedAt and stops probing until
the retry interval passes.

A caller that is already fetching the provider's token metadata passes that
pending answer in as ``provider_metadata``; the provider step then reads its
logo instead of issuing a second metadata call.
"""

import logging
from collections.abc import Awaitable

from src.wb_balances.domain.models import ProviderTokenMetadata
from src.wb_common.addresses import short_address
from src.wb_common.chains import ChainConfig
from src.wb_common.enums import LogoSource
from src.wb_common.optional import optional_call
from src.wb_logos.domain.sources import LogoSourceProtocol

logger = logging.getLogger(__name__)


class LogoResolver:
    def __init__(self, sources: list[LogoSourceProtocol]) -> None:
        self._sources = sources

    async def resolve(
        self,
        contract_address: str,
        chain: ChainConfig,
        provider_metadata: Awaitable[ProviderTokenMetadata | None] | None = None,
    ) -> str | None:
        for source in self._sources:
            if source.source is LogoSource.ALCHEMY and provider_metadata is not None:
                # Bounded by the caller's own metadata deadline
                metadata = await provider_metadata
                url = metadata.logo if metadata is not None else None
            else:
                url = await optional_call(
                    source.fetch(contract_address, chain),
                    source.timeout,
                    f"{source.source.value} logo for {short_address(contract_address)}",
                )
            if url:
                logger.debug(
                    "Found logo from %s for %s", source.source.value, short_address(contract_address)
                )
                return url
        logger.debug("No logo found for %s from any source", short_address(contract_address))
        return None
