# src/wb_images/domain/blob_store.py
"""Blob store Protocol: durable public hosting for token images."""

from typing import Protocol


class BlobStoreProtocol(Protocol):
    async def head(self, path: str) -> str | None:
        """Public URL of ``path`` if it exists, None if not found."""
        ...

    async def put(self, path: str, body: bytes, content_type: str) -> str:
        """Store ``body`` at ``path`` (overwriting) and return its public URL."""
        ...
