"""Pydantic schemas for the balances API."""

from pydantic import BaseModel

from src.wb_cache.domain.models import TokenBalance


class BalancesResponse(BaseModel):
    tokens: list[TokenBalance]
