"""Time utilities.

Cache entries store unix milliseconds (cachedAt, logoCheckedAt).
"""

import time


def now_ms() -> int:
    """Return the current unix time in milliseconds."""
    return int(time.time() * 1000)


def is_fresh(cached_at_ms: int, ttl_seconds: float, now: int | None = None) -> bool:
    """True while ``cached_at_ms`` is strictly younger than ``ttl_seconds``."""
    current = now_ms() if now is None else now
    return current - cached_at_ms < ttl_seconds * 1000
