"""Pure balance-pipeline rules: zero filter, partition, USD, dust, sort.

No I/O here. Raw balances stay Python ints end to end; scaling by
10**decimals happens only in human_balance(), with Decimal.
"""

from dataclasses import dataclass
from decimal import Decimal

from src.wb_balances.domain.models import (
    HeldToken,
    MetadataPartition,
    ProviderTokenMetadata,
    RawTokenBalance,
)
from src.wb_cache.domain.models import CachedTokenMetadata, TokenBalance
from src.wb_common.addresses import short_address
from src.wb_common.errors import TokenMetadataIncompleteError

PROVISIONAL_NAME = "Unknown Token"
PROVISIONAL_DECIMALS = 18


@dataclass(frozen=True)
class DustThresholds:
    min_token_balance: Decimal
    min_value_usd: float

    @classmethod
    def of(cls, min_token_balance: float, min_value_usd: float) -> "DustThresholds":
        return cls(Decimal(str(min_token_balance)), min_value_usd)


def parse_raw_balance(raw_hex: str | None) -> int:
    """Hex balance -> int. ``None``, ``"0x"`` and unparseable values are 0."""
    if not raw_hex:
        return 0
    digits = raw_hex[2:] if raw_hex[:2].lower() == "0x" else raw_hex
    if not digits:
        return 0
    try:
        return int(digits, 16)
    except ValueError:
        return 0


def nonzero_holdings(raw: list[RawTokenBalance]) -> list[HeldToken]:
    """Strictly positive balances, first occurrence per contract, provider order kept."""
    held: dict[str, HeldToken] = {}
    for row in raw:
        amount = parse_raw_balance(row.raw_balance_hex)
        if amount > 0 and row.contract_address not in held:
            held[row.contract_address] = HeldToken(row.contract_address, amount)
    return list(held.values())


def needs_logo_retry(
    entry: CachedTokenMetadata, now_ms: int, retry_interval_seconds: int
) -> bool:
    if entry.logo_url:
        return False
    if entry.logo_checked_at is None:
        return True
    return now_ms - entry.logo_checked_at >= retry_interval_seconds * 1000


def partition(
    addresses: list[str],
    known: dict[str, CachedTokenMetadata],
    now_ms: int,
    retry_interval_seconds: int,
    retry_cap: int,
) -> MetadataPartition:
    """Classify held contracts by the network work they need.

    Logo retries past ``retry_cap`` are served from cache as-is this time
    and picked up by a later request.
    """
    result = MetadataPartition(cached=[], needs_metadata=[], needs_logo_retry=[])
    for address in addresses:
        entry = known.get(address)
        if entry is None:
            result.needs_metadata.append(address)
        elif (
            len(result.needs_logo_retry) < retry_cap
            and needs_logo_retry(entry, now_ms, retry_interval_seconds)
        ):
            result.needs_logo_retry.append(address)
        else:
            result.cached.append(address)
    return result


def require_complete_metadata(
    contract_address: str,
    fetched: ProviderTokenMetadata,
    logo_url: str | None,
    checked_at: int,
) -> CachedTokenMetadata:
    """Build a cacheable entry, or raise if the core triple is incomplete.

    ``logo_url`` is the resolved logo; the provider's own logo fills in when
    resolution came back empty.
    """
    missing = [
        field
        for field, value in (
            ("symbol", fetched.symbol),
            ("name", fetched.name),
            ("decimals", fetched.decimals),
        )
        if value is None
    ]
    if missing:
        raise TokenMetadataIncompleteError(contract_address, missing)
    return CachedTokenMetadata(
        symbol=fetched.symbol,
        name=fetched.name,
        decimals=fetched.decimals,
        logo_url=logo_url or fetched.logo,
        logo_checked_at=checked_at,
    )


def provisional_metadata(contract_address: str, logo_url: str | None = None) -> CachedTokenMetadata:
    """Display-only metadata for a token whose metadata fetch failed. Never cached."""
    return CachedTokenMetadata(
        symbol=short_address(contract_address),
        name=PROVISIONAL_NAME,
        decimals=PROVISIONAL_DECIMALS,
        logo_url=logo_url,
    )


def human_balance(raw_balance: int, decimals: int) -> Decimal:
    return Decimal(raw_balance).scaleb(-decimals)


def build_token(
    held: HeldToken, metadata: CachedTokenMetadata, price_usd: float | None
) -> TokenBalance:
    balance_usd = None
    if price_usd is not None and price_usd > 0:
        balance_usd = float(human_balance(held.raw_balance, metadata.decimals)) * price_usd
    else:
        price_usd = None
    return TokenBalance(
        contract_address=held.contract_address,
        symbol=metadata.symbol,
        name=metadata.name,
        decimals=metadata.decimals,
        balance=str(held.raw_balance),
        price_usd=price_usd,
        balance_usd=balance_usd,
        logo_url=metadata.logo_url,
    )


def token_human_balance(token: TokenBalance) -> Decimal:
    return human_balance(int(token.balance), token.decimals)


def is_dust(token: TokenBalance, thresholds: DustThresholds) -> bool:
    # Unpriced tokens are judged on amount alone so unlisted tokens stay visible
    if token_human_balance(token) < thresholds.min_token_balance:
        return True
    return token.has_price and (token.balance_usd or 0.0) < thresholds.min_value_usd


def filter_dust(
    tokens: list[TokenBalance],
    thresholds: DustThresholds,
    exempt: frozenset[str] | set[str] = frozenset(),
) -> list[TokenBalance]:
    return [t for t in tokens if t.contract_address in exempt or not is_dust(t, thresholds)]


def sort_key(token: TokenBalance) -> tuple[int, Decimal]:
    if token.has_price:
        return (0, -Decimal(str(token.balance_usd or 0.0)))
    return (1, -token_human_balance(token))


def sort_tokens(tokens: list[TokenBalance]) -> list[TokenBalance]:
    """Priced first by balanceUsd desc, then unpriced by amount desc; stable."""
    return sorted(tokens, key=sort_key)
