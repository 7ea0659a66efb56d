"""Optional-stage call wrapper.

Required stages raise AppError and propagate to the request boundary.
Optional stages (logo sources, secondary prices, image hosting) go through
optional_call(): the result is the value, or None when the source timed
out, failed in transport, answered non-2xx, or returned something unusable.
"""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

import httpx
from pydantic import ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Failures that mean "this source had nothing for us"
OPTIONAL_FAILURES: tuple[type[BaseException], ...] = (
    TimeoutError,
    httpx.HTTPError,
    ValidationError,
    ValueError,
    KeyError,
    TypeError,
)


async def optional_call(awaitable: Awaitable[T], timeout: float, label: str) -> T | None:
    """Await ``awaitable`` under its own deadline; degrade failures to None."""
    try:
        async with asyncio.timeout(timeout):
            return await awaitable
    except OPTIONAL_FAILURES as exc:
        logger.debug("%s unavailable: %s: %s", label, type(exc).__name__, exc)
        return None
