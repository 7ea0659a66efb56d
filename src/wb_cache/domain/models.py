"""Cache entities and the response-shaped TokenBalance.

All models are frozen: the pipeline builds new values instead of mutating
cached ones. Field names are snake_case in Python and camelCase on the wire
and in the durable store, so a stored wallet snapshot is byte-compatible
with the API payload.

Validation doubles as the cache corruption guard: a stored value that fails
to parse is treated as a miss by the tier wrappers.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_store(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class TokenBalance(_CamelModel):
    contract_address: str
    symbol: str
    name: str
    decimals: int = Field(ge=0)
    balance: str = Field(pattern=r"^\d+$")  # raw integer, never a float
    price_usd: float | None = None
    balance_usd: float | None = None
    logo_url: str | None = None

    @property
    def has_price(self) -> bool:
        # 0 means unknown, never worthless
        return self.price_usd is not None and self.price_usd > 0


class CachedTokenMetadata(_CamelModel):
    symbol: str
    name: str
    decimals: int = Field(ge=0)
    logo_url: str | None = None
    logo_checked_at: int | None = None  # unix ms


class BulkMetadataCache(_CamelModel):
    metadata: dict[str, CachedTokenMetadata] = Field(default_factory=dict)


class BulkPriceCache(_CamelModel):
    prices: dict[str, float] = Field(default_factory=dict)
    cached_at: int


class CachedWalletBalances(_CamelModel):
    tokens: list[TokenBalance]
    cached_at: int
