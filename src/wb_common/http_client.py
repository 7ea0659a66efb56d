"""Shared httpx.AsyncClient for all outbound calls.

One connection pool per process. Timeouts are set per call, never here,
because every upstream source has its own deadline.
"""

import httpx

USER_AGENT = "WalletBalances/1.0"

_http_client: httpx.AsyncClient | None = None


async def get_http_client() -> httpx.AsyncClient:
    """Get or create the shared AsyncClient."""
    global _http_client  # noqa: PLW0603
    if _http_client is None:
        _http_client = httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        )
    return _http_client


async def close_http_client() -> None:
    """Close the shared AsyncClient."""
    global _http_client  # noqa: PLW0603
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None
