"""Content addressing and source URL rules for re-hosted images.

Storage keys hash the original URL string, not the image bytes, so the same
source URL always maps to the same blob and is downloaded at most once.
"""

import hashlib
import re
from urllib.parse import urlparse

from src.wb_common.errors import UnsupportedImageUrlError

IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "gif", "webp", "svg"})
BLOB_PREFIX = "token-images"

# Tried in order when an IPFS-hosted image is requested
IPFS_GATEWAYS = (
    "https://cloudflare-ipfs.com",
    "https://dweb.link",
    "https://gateway.pinata.cloud",
    "https://ipfs.io",
)

_IPFS_PATTERNS = (
    re.compile(r"ipfs\.io/ipfs/([a-zA-Z0-9]+)"),
    re.compile(r"\.mypinata\.cloud/ipfs/([a-zA-Z0-9]+)"),
    re.compile(r"cloudflare-ipfs\.com/ipfs/([a-zA-Z0-9]+)"),
    re.compile(r"dweb\.link/ipfs/([a-zA-Z0-9]+)"),
    re.compile(r"gateway\.pinata\.cloud/ipfs/([a-zA-Z0-9]+)"),
)

_EXT_RE = re.compile(r"\.([a-zA-Z0-9]+)$")


def extension_from_url(url: str) -> str:
    """Image extension from the URL path; raises UnsupportedImageUrlError."""
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise UnsupportedImageUrlError(f"Invalid image URL: {url}")
    match = _EXT_RE.search(parsed.path)
    if not match:
        raise UnsupportedImageUrlError(f"Unable to determine file extension from URL: {url}")
    ext = match.group(1).lower()
    if ext not in IMAGE_EXTENSIONS:
        raise UnsupportedImageUrlError(f"Unsupported file extension: {ext} (from URL: {url})")
    return ext


def blob_path(url: str) -> str:
    digest = hashlib.md5(url.encode("utf-8")).hexdigest()  # noqa: S324  cache key, not a digest for security
    return f"{BLOB_PREFIX}/{digest}.{extension_from_url(url)}"


def extract_ipfs_hash(url: str) -> str | None:
    for pattern in _IPFS_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def download_candidates(url: str) -> list[str]:
    """URLs to try, in order, to download ``url``."""
    ipfs_hash = extract_ipfs_hash(url)
    if ipfs_hash is None:
        return [url]
    return [f"{gateway}/ipfs/{ipfs_hash}" for gateway in IPFS_GATEWAYS]
