"""CoinGeckoClient: token prices and contract info.

Uses the pro host and X-Cg-Pro-Api-Key header when an API key is set,
the public host otherwise. Non-2xx answers raise httpx.HTTPStatusError;
callers treat CoinGecko as an optional source.
"""

from typing import Any

import httpx

PUBLIC_BASE_URL = "https://api.coingecko.com/api/v3"
PRO_BASE_URL = "https://pro-api.coingecko.com/api/v3"

# small is the right size for list rows
IMAGE_PREFERENCE = ("small", "thumb", "large")


class CoinGeckoClient:
    def __init__(self, client: httpx.AsyncClient, api_key: str | None = None) -> None:
        self._client = client
        self._api_key = api_key

    @property
    def base_url(self) -> str:
        return PRO_BASE_URL if self._api_key else PUBLIC_BASE_URL

    def _headers(self) -> dict[str, str]:
        return {"X-Cg-Pro-Api-Key": self._api_key} if self._api_key else {}

    async def _get(self, path: str, params: dict[str, str] | None, timeout: float) -> Any:
        resp = await self._client.get(
            f"{self.base_url}{path}",
            params=params,
            headers=self._headers(),
            timeout=timeout,
        )
        resp.raise_for_status()
        return resp.json()

    async def token_prices(
        self, platform: str, addresses: list[str], timeout: float
    ) -> dict[str, Any]:
        """Raw simple/token_price answer: {address: {"usd": price}}."""
        data = await self._get(
            f"/simple/token_price/{platform}",
            {
                "contract_addresses": ",".join(a.lower() for a in addresses),
                "vs_currencies": "usd",
            },
            timeout,
        )
        return data if isinstance(data, dict) else {}

    async def contract_image(self, platform: str, address: str, timeout: float) -> str | None:
        data = await self._get(f"/coins/{platform}/contract/{address.lower()}", None, timeout)
        image = data.get("image") if isinstance(data, dict) else None
        if not isinstance(image, dict):
            return None
        for size in IMAGE_PREFERENCE:
            url = image.get(size)
            if isinstance(url, str) and url:
                return url
        return None
