"""EVM address helpers.

Cache keys and response fields use the lowercased form. Path-based registries
(Trust Wallet) need the EIP-55 checksummed form.
"""

import re

from web3 import Web3

from src.wb_common.errors import InvalidAddressError

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def normalize_address(address: str) -> str:
    """Validate and lowercase an EVM address, raising InvalidAddressError."""
    candidate = (address or "").strip()
    if not _ADDRESS_RE.match(candidate):
        raise InvalidAddressError(address)
    return candidate.lower()


def checksum_address(address: str) -> str:
    """EIP-55 encode ``address``. Raises ValueError on malformed input."""
    return Web3.to_checksum_address(address)


def short_address(address: str) -> str:
    """0x1234…abcd form for logs and provisional symbols."""
    if len(address) <= 12:
        return address
    return f"{address[:6]}…{address[-4:]}"
