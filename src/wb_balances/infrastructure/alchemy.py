"""AlchemyProvider: balances provider over Alchemy's JSON-RPC.

  alchemy_getTokenBalances [address, "erc20"]  -> required stage
  alchemy_getTokenMetadata [contract]          -> per-token enrichment

get_token_balances wraps every failure in BalanceFetchError: raw balances
are the one upstream call with no fallback. get_token_metadata lets
transport errors propagate so the caller can decide what a miss means.
"""

import logging
from typing import Any

import httpx

from src.wb_balances.domain.models import ProviderTokenMetadata, RawTokenBalance
from src.wb_common.chains import ChainConfig
from src.wb_common.errors import BalanceFetchError

logger = logging.getLogger(__name__)


class AlchemyRpcError(httpx.HTTPError):
    """JSON-RPC level error; handled like any other upstream HTTP failure."""

    def __init__(self, method: str, message: str) -> None:
        self.method = method
        super().__init__(f"{method}: {message}")


class AlchemyProvider:
    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        balances_timeout: float = 10.0,
        metadata_timeout: float = 5.0,
    ) -> None:
        self._client = client
        self._api_key = api_key
        self._balances_timeout = balances_timeout
        self._metadata_timeout = metadata_timeout

    def _url(self, chain: ChainConfig) -> str:
        return f"https://{chain.alchemy_network}.g.alchemy.com/v2/{self._api_key}"

    async def _rpc(self, chain: ChainConfig, method: str, params: list[Any], timeout: float) -> Any:
        resp = await self._client.post(
            self._url(chain),
            json={"jsonrpc": "2.0", "id": 1, "method": method, "params": params},
            timeout=timeout,
        )
        resp.raise_for_status()
        body = resp.json()
        if not isinstance(body, dict):
            raise AlchemyRpcError(method, "response is not an object")
        if body.get("error"):
            error = body["error"]
            message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            raise AlchemyRpcError(method, message)
        return body.get("result")

    async def get_token_balances(self, address: str, chain: ChainConfig) -> list[RawTokenBalance]:
        try:
            result = await self._rpc(
                chain, "alchemy_getTokenBalances", [address, "erc20"], self._balances_timeout
            )
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("getTokenBalances failed for %s: %s", chain.chain.value, exc)
            raise BalanceFetchError(f"{type(exc).__name__}: {exc}") from exc

        if not isinstance(result, dict) or not isinstance(result.get("tokenBalances"), list):
            raise BalanceFetchError("response missing tokenBalances")

        balances: list[RawTokenBalance] = []
        for row in result["tokenBalances"]:
            contract = row.get("contractAddress") if isinstance(row, dict) else None
            if not contract:
                continue
            balances.append(
                RawTokenBalance(
                    contract_address=str(contract).lower(),
                    raw_balance_hex=row.get("tokenBalance"),
                )
            )
        return balances

    async def get_token_metadata(
        self, contract_address: str, chain: ChainConfig
    ) -> ProviderTokenMetadata:
        result = await self._rpc(
            chain, "alchemy_getTokenMetadata", [contract_address], self._metadata_timeout
        )
        result = result if isinstance(result, dict) else {}
        decimals = result.get("decimals")
        return ProviderTokenMetadata(
            symbol=result.get("symbol") or None,
            name=result.get("name") or None,
            decimals=decimals if isinstance(decimals, int) and not isinstance(decimals, bool) else None,
            logo=result.get("logo") or None,
        )
