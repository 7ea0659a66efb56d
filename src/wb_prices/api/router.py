"""wb_prices REST API: cached USD prices for a list of contracts."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response

from src.wb_common.addresses import normalize_address
from src.wb_common.chains import ChainConfig
from src.wb_common.response import PRICES_CACHE_CONTROL
from src.wb_gateway.dependencies import chain_param, get_price_service
from src.wb_prices.application.schemas import TokenPricesResponse
from src.wb_prices.application.service import PriceService

router = APIRouter(prefix="/token-prices", tags=["prices"])


@router.get("")
async def get_token_prices(
    response: Response,
    chain: Annotated[ChainConfig, Depends(chain_param)],
    service: Annotated[PriceService, Depends(get_price_service)],
    addresses: str = Query("", description="Comma-separated contract addresses"),
) -> TokenPricesResponse:
    wanted = list(dict.fromkeys(
        normalize_address(a) for a in addresses.split(",") if a.strip()
    ))
    if not wanted:
        return TokenPricesResponse()
    prices = await service.get_prices(chain, wanted)
    response.headers["Cache-Control"] = PRICES_CACHE_CONTROL
    return TokenPricesResponse(prices=prices)
