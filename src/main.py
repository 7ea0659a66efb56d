"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from config.settings import settings
from src.wb_balances.api.router import router as balances_router
from src.wb_common.background import background_tasks
from src.wb_common.errors import AppError, InternalError
from src.wb_common.http_client import close_http_client, get_http_client
from src.wb_common.redis_client import close_redis, get_redis
from src.wb_common.response import error_response
from src.wb_gateway.middleware.request_log import RequestLogMiddleware
from src.wb_images.api.router import router as images_router
from src.wb_prices.api.router import router as prices_router

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: open the HTTP pool, check Redis. Shutdown: finish detached writes, close pools."""
    await get_http_client()
    if settings.CACHE_BACKEND == "redis":
        try:
            redis = await get_redis()
            await redis.ping()
        except (RedisError, OSError) as exc:
            # Caches fail open; the service runs uncached until Redis is back
            logger.warning("Redis unavailable at startup: %s", exc)
    yield
    await background_tasks.drain()
    await close_http_client()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    err = InternalError()
    return JSONResponse(
        status_code=err.http_status,
        content=error_response(err.code, err.message).model_dump(),
    )


app.include_router(balances_router, prefix="/api/v1")
app.include_router(prices_router, prefix="/api/v1")
app.include_router(images_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
