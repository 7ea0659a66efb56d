"""VercelBlobStore: BlobStoreProtocol over the Vercel Blob HTTP API.

  head: GET {api}/?url={path}   200 -> {"url": ...}, 404 -> not found
  put:  PUT {api}/{path}        body = bytes, returns {"url": ...}

Blobs are public, keep their exact pathname (no random suffix) and may be
overwritten, which makes put() idempotent for a content-addressed path.
"""

import httpx

API_VERSION = "7"


class BlobStoreError(httpx.HTTPError):
    """Blob API answered without the fields it promises."""


class VercelBlobStore:
    def __init__(
        self,
        client: httpx.AsyncClient,
        token: str,
        api_url: str = "https://blob.vercel-storage.com",
        timeout: float = 5.0,
    ) -> None:
        self._client = client
        self._token = token
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {
            "authorization": f"Bearer {self._token}",
            "x-api-version": API_VERSION,
        }

    async def head(self, path: str) -> str | None:
        resp = await self._client.get(
            f"{self._api_url}/",
            params={"url": path},
            headers=self._headers(),
            timeout=self._timeout,
        )
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        url = resp.json().get("url")
        if not url:
            raise BlobStoreError(f"Blob head succeeded but missing url for {path}")
        return url

    async def put(self, path: str, body: bytes, content_type: str) -> str:
        resp = await self._client.put(
            f"{self._api_url}/{path}",
            content=body,
            headers={
                **self._headers(),
                "x-content-type": content_type,
                "x-add-random-suffix": "0",
                "x-allow-overwrite": "1",
            },
            timeout=self._timeout,
        )
        resp.raise_for_status()
        url = resp.json().get("url")
        if not url:
            raise BlobStoreError(f"Blob put succeeded but missing url for {path}")
        return url
