"""Read-merge-write rules for the per-chain bulk maps.

Callers read the currently persisted map, apply only this request's new
entries on top, and write the full map back. Concurrent writers race as
"last full write wins"; the rules below keep one request from erasing what
another already knew.
"""

from src.wb_cache.domain.models import CachedTokenMetadata


def merge_metadata_entry(
    existing: CachedTokenMetadata | None, update: CachedTokenMetadata
) -> CachedTokenMetadata:
    """Merge one contract's metadata.

    symbol/name/decimals are immutable once written. A known logo is never
    erased by a later probe that found nothing; logoCheckedAt only moves
    forward.
    """
    if existing is None:
        return update
    logo_url = update.logo_url or existing.logo_url
    checked = [t for t in (existing.logo_checked_at, update.logo_checked_at) if t is not None]
    return existing.model_copy(
        update={
            "logo_url": logo_url,
            "logo_checked_at": max(checked) if checked else None,
        }
    )


def merge_metadata(
    persisted: dict[str, CachedTokenMetadata],
    updates: dict[str, CachedTokenMetadata],
) -> dict[str, CachedTokenMetadata]:
    merged = dict(persisted)
    for address, entry in updates.items():
        merged[address] = merge_metadata_entry(persisted.get(address), entry)
    return merged


def merge_prices(persisted: dict[str, float], updates: dict[str, float]) -> dict[str, float]:
    """Overlay positive quotes only: 0 means unknown and never replaces a price."""
    merged = dict(persisted)
    for address, price in updates.items():
        if price > 0:
            merged[address] = price
    return merged
