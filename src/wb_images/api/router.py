"""wb_images REST API: re-host an external image in blob storage."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from src.wb_common.errors import UnsupportedImageUrlError
from src.wb_gateway.dependencies import get_image_cache
from src.wb_images.application.schemas import CachedImageResponse
from src.wb_images.application.service import ImageCache

router = APIRouter(prefix="/cache-image", tags=["images"])


@router.get("")
async def cache_image(
    image_cache: Annotated[ImageCache, Depends(get_image_cache)],
    url: str = Query("", description="Original image URL"),
) -> CachedImageResponse:
    if not url.strip():
        raise UnsupportedImageUrlError("Missing url parameter")
    hosted = await image_cache.cache(url.strip())
    return CachedImageResponse(cached_url=hosted)
