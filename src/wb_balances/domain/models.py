"""Domain models for wb_balances: pure dataclasses, no I/O."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RawTokenBalance:
    """One row of the balances provider answer, before any filtering."""

    contract_address: str        # lowercased
    raw_balance_hex: str | None  # e.g. "0x0de0b6b3a7640000", "0x0", "0x"


@dataclass(frozen=True)
class HeldToken:
    """A contract the wallet holds a strictly positive raw balance of."""

    contract_address: str
    raw_balance: int


@dataclass(frozen=True)
class ProviderTokenMetadata:
    """Balances-provider metadata answer; any field may be missing upstream."""

    symbol: str | None
    name: str | None
    decimals: int | None
    logo: str | None


@dataclass
class MetadataPartition:
    """Which held contracts need which kind of network call."""

    cached: list[str]
    needs_metadata: list[str]
    needs_logo_retry: list[str]
