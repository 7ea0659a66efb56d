"""Pydantic schemas for the token prices API."""

from pydantic import BaseModel, Field


class TokenPricesResponse(BaseModel):
    prices: dict[str, float] = Field(default_factory=dict)
