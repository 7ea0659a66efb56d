"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Request validation
  2xxx: Upstream balances provider
  3xxx: Image cache
  9xxx: System

Only required-stage failures are raised as AppError. Optional enrichment
(logos, image hosting, secondary prices, cache I/O) degrades instead.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Request validation ---

class UnsupportedChainError(AppError):
    def __init__(self, chain: str) -> None:
        super().__init__(1001, f"Unsupported chain: {chain}", 400)


class InvalidAddressError(AppError):
    def __init__(self, address: str) -> None:
        super().__init__(1002, f"Invalid address: {address}", 400)


# --- 2xxx: Upstream balances provider ---

class BalanceFetchError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2001, f"Balance fetch failed: {detail}", 502)


class TokenMetadataIncompleteError(AppError):
    def __init__(self, contract_address: str, missing: list[str]) -> None:
        super().__init__(
            2002,
            f"Token metadata for {contract_address} missing {', '.join(missing)}",
            502,
        )


# --- 3xxx: Image cache ---

class UnsupportedImageUrlError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3001, detail, 400)


class ImageDownloadError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3002, f"Image download failed: {detail}", 502)


class ImageStoreError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3003, f"Image storage failed: {detail}", 502)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class MissingCredentialError(AppError):
    def __init__(self, name: str) -> None:
        super().__init__(9003, f"{name} required", 503)
