"""Response bodies and headers shared by all endpoints.

Success payloads are endpoint-specific ({"tokens": [...]}, {"prices": {...}}).
Errors always look like:
{
    "error": "Unsupported chain: solana",
    "code": 1001
}
"""

from pydantic import BaseModel

# Client-facing HTTP cache windows, thinner than the internal cache tiers
BALANCES_CACHE_CONTROL = "private, s-maxage=60, stale-while-revalidate=300"
PRICES_CACHE_CONTROL = "public, s-maxage=30, stale-while-revalidate=120"


class ErrorResponse(BaseModel):
    error: str
    code: int


def error_response(code: int, message: str) -> ErrorResponse:
    return ErrorResponse(error=message, code=code)
