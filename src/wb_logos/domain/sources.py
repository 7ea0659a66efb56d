# src/wb_logos/domain/sources.py
"""Logo source Protocol.

fetch() returns a URL or None and may raise on any upstream failure; the
resolver applies each source's own timeout and turns failures into None.
"""

from typing import Protocol

from src.wb_common.chains import ChainConfig
from src.wb_common.enums import LogoSource


class LogoSourceProtocol(Protocol):
    source: LogoSource
    timeout: float

    async def fetch(self, contract_address: str, chain: ChainConfig) -> str | None: ...
