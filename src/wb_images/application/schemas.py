"""Pydantic schemas for the image cache API."""

from pydantic import BaseModel, ConfigDict, Field


class CachedImageResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    cached_url: str = Field(..., alias="cachedUrl")
