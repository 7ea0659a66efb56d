"""wb_balances REST API: wallet token balances."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response

from src.wb_balances.application.schemas import BalancesResponse
from src.wb_balances.application.service import BalanceApplicationService
from src.wb_common.chains import ChainConfig
from src.wb_common.response import BALANCES_CACHE_CONTROL
from src.wb_gateway.dependencies import chain_param, get_balance_service, wallet_param

router = APIRouter(prefix="/balances", tags=["balances"])


@router.get("", response_model_exclude_none=True)
async def get_balances(
    response: Response,
    chain: Annotated[ChainConfig, Depends(chain_param)],
    wallet: Annotated[str, Depends(wallet_param)],
    service: Annotated[BalanceApplicationService, Depends(get_balance_service)],
    refresh: bool = Query(False, description="Skip the wallet snapshot cache"),
) -> BalancesResponse:
    tokens = await service.get_balances(chain, wallet, force_refresh=refresh)
    response.headers["Cache-Control"] = BALANCES_CACHE_CONTROL
    return BalancesResponse(tokens=tokens)
