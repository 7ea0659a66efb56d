"""ImageCache: re-hosts token logos in the blob store exactly once.

cache()             strict: raises AppError subclasses, used by the
                    /cache-image endpoint where an unusable URL is an error.
cache_best_effort() never raises: the enrichment pipeline always has the
                    original URL to fall back to.
lookup()            head-only check for an already hosted copy.
"""

import logging
from urllib.parse import urlparse

import httpx

from src.wb_common.errors import (
    AppError,
    ImageDownloadError,
    ImageStoreError,
    MissingCredentialError,
)
from src.wb_images.domain.blob_store import BlobStoreProtocol
from src.wb_images.domain.paths import blob_path, download_candidates

logger = logging.getLogger(__name__)


class ImageCache:
    def __init__(
        self,
        client: httpx.AsyncClient,
        blob_store: BlobStoreProtocol | None,
        host_suffix: str = "blob.vercel-storage.com",
        download_timeout: float = 8.0,
    ) -> None:
        self._client = client
        self._blob_store = blob_store
        self._host_suffix = host_suffix
        self._download_timeout = download_timeout

    @property
    def available(self) -> bool:
        return self._blob_store is not None

    def is_hosted(self, url: str) -> bool:
        return urlparse(url).netloc.endswith(self._host_suffix)

    async def lookup(self, url: str) -> str | None:
        if self.is_hosted(url):
            return url
        if self._blob_store is None:
            return None
        try:
            return await self._blob_store.head(blob_path(url))
        except (AppError, httpx.HTTPError, ValueError) as exc:
            logger.debug("Blob lookup failed for %s: %s", url, exc)
            return None

    async def cache(self, url: str) -> str:
        if self.is_hosted(url):
            return url
        if self._blob_store is None:
            raise MissingCredentialError("BLOB_READ_WRITE_TOKEN")

        path = blob_path(url)
        try:
            existing = await self._blob_store.head(path)
        except (httpx.HTTPError, ValueError) as exc:
            raise ImageStoreError(str(exc)) from exc
        if existing:
            return existing

        body, content_type = await self._download(url)
        try:
            hosted = await self._blob_store.put(path, body, content_type)
        except (httpx.HTTPError, ValueError) as exc:
            raise ImageStoreError(str(exc)) from exc
        logger.info("Cached image to blob: %s", hosted)
        return hosted

    async def cache_best_effort(self, url: str) -> str:
        try:
            return await self.cache(url)
        except (AppError, httpx.HTTPError) as exc:
            logger.info("Image caching failed, using original URL %s: %s", url, exc.__class__.__name__)
            return url

    async def _download(self, url: str) -> tuple[bytes, str]:
        errors: list[str] = []
        for candidate in download_candidates(url):
            try:
                resp = await self._client.get(candidate, timeout=self._download_timeout)
            except httpx.HTTPError as exc:
                errors.append(f"{candidate}: {type(exc).__name__}")
                continue
            if not resp.is_success:
                errors.append(f"{candidate}: HTTP {resp.status_code}")
                continue
            content_type = resp.headers.get("content-type")
            if not content_type:
                raise ImageDownloadError(f"{candidate} returned no content-type")
            return resp.content, content_type
        raise ImageDownloadError("; ".join(errors))
