"""Endpoint tests for /balances, /token-prices, /cache-image and /health."""

import pytest

from config.settings import settings

WALLET = "0x" + "1" * 40
TOKEN_A = "0x" + "a" * 40
TOKEN_B = "0x" + "b" * 40


class TestHealth:
    async def test_health(self, client) -> None:
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


class TestBalances:
    async def test_returns_sorted_camel_case_tokens(self, client) -> None:
        resp = await client.get(f"/api/v1/balances?chain=base&address={WALLET}")

        assert resp.status_code == 200
        tokens = resp.json()["tokens"]
        assert [t["contractAddress"] for t in tokens] == [TOKEN_A, TOKEN_B]
        assert tokens[0]["priceUsd"] == 4.0
        assert tokens[0]["balanceUsd"] == pytest.approx(12.0)
        assert tokens[0]["balance"] == str(3 * 10**18)
        assert "priceUsd" not in tokens[1]
        assert "logoUrl" not in tokens[1]

    async def test_cache_control(self, client) -> None:
        resp = await client.get(f"/api/v1/balances?address={WALLET}")
        assert resp.headers["cache-control"] == "private, s-maxage=60, stale-while-revalidate=300"
        assert resp.headers["x-request-id"].startswith("req_")

    async def test_default_chain_is_base(self, client, fakes) -> None:
        await client.get(f"/api/v1/balances?address={WALLET}")
        chain = fakes.provider.get_token_balances.await_args.args[1]
        assert chain.alchemy_network == "base-mainnet"

    async def test_address_is_lowercased(self, client, fakes) -> None:
        mixed = "0x" + "Ab" * 20
        await client.get(f"/api/v1/balances?address={mixed}")
        assert fakes.provider.get_token_balances.await_args.args[0] == "0x" + "ab" * 20

    async def test_second_request_served_from_wallet_cache(self, client, fakes) -> None:
        first = await client.get(f"/api/v1/balances?address={WALLET}")
        await fakes.tasks.drain()
        second = await client.get(f"/api/v1/balances?address={WALLET}")
        assert second.json() == first.json()
        fakes.provider.get_token_balances.assert_awaited_once()

    async def test_refresh_bypasses_wallet_cache(self, client, fakes) -> None:
        await client.get(f"/api/v1/balances?address={WALLET}")
        await client.get(f"/api/v1/balances?address={WALLET}&refresh=true")
        assert fakes.provider.get_token_balances.await_count == 2

    async def test_unsupported_chain(self, client) -> None:
        resp = await client.get(f"/api/v1/balances?chain=solana&address={WALLET}")
        assert resp.status_code == 400
        assert resp.json() == {"error": "Unsupported chain: solana", "code": 1001}

    async def test_invalid_address(self, client) -> None:
        resp = await client.get("/api/v1/balances?chain=base&address=0x123")
        assert resp.status_code == 400
        assert resp.json()["code"] == 1002

    async def test_missing_address(self, client) -> None:
        resp = await client.get("/api/v1/balances?chain=base")
        assert resp.status_code == 400
        assert resp.json()["code"] == 1002


class TestBalancesWiring:
    async def test_missing_alchemy_key(self, bare_client, monkeypatch) -> None:
        monkeypatch.setattr(settings, "ALCHEMY_API_KEY", None)
        resp = await bare_client.get(f"/api/v1/balances?address={WALLET}")
        assert resp.status_code == 503
        assert resp.json() == {"error": "ALCHEMY_API_KEY required", "code": 9003}

    async def test_chain_checked_before_credentials(self, bare_client, monkeypatch) -> None:
        monkeypatch.setattr(settings, "ALCHEMY_API_KEY", None)
        resp = await bare_client.get(f"/api/v1/balances?chain=solana&address={WALLET}")
        assert resp.status_code == 400

    async def test_upstream_failure_is_502(self, bare_client, monkeypatch) -> None:
        monkeypatch.setattr(settings, "ALCHEMY_API_KEY", "test-key")
        resp = await bare_client.get(f"/api/v1/balances?address={WALLET}&refresh=true")
        assert resp.status_code == 502
        assert resp.json()["code"] == 2001


class TestTokenPrices:
    async def test_prices(self, client) -> None:
        resp = await client.get(f"/api/v1/token-prices?chain=base&addresses={TOKEN_A},{TOKEN_B}")
        assert resp.status_code == 200
        assert resp.json() == {"prices": {TOKEN_A: 4.0}}
        assert resp.headers["cache-control"] == "public, s-maxage=30, stale-while-revalidate=120"

    async def test_empty_addresses(self, client) -> None:
        resp = await client.get("/api/v1/token-prices?chain=base")
        assert resp.status_code == 200
        assert resp.json() == {"prices": {}}

    async def test_invalid_address(self, client) -> None:
        resp = await client.get("/api/v1/token-prices?addresses=0xnope")
        assert resp.status_code == 400
        assert resp.json()["code"] == 1002


class TestCacheImage:
    async def test_missing_url(self, client) -> None:
        resp = await client.get("/api/v1/cache-image")
        assert resp.status_code == 400
        assert resp.json()["code"] == 3001

    async def test_unsupported_extension(self, client) -> None:
        resp = await client.get("/api/v1/cache-image?url=https://x.io/logo.bmp")
        assert resp.status_code == 400
        assert resp.json()["code"] == 3001

    async def test_already_hosted_passes_through(self, client) -> None:
        url = "https://abc.public.blob.vercel-storage.com/token-images/x.png"
        resp = await client.get("/api/v1/cache-image", params={"url": url})
        assert resp.status_code == 200
        assert resp.json() == {"cachedUrl": url}

    async def test_download_failure(self, client) -> None:
        resp = await client.get("/api/v1/cache-image", params={"url": "https://x.io/logo.png"})
        assert resp.status_code == 502
        assert resp.json()["code"] == 3002

    async def test_blob_storage_not_configured(self, bare_client, monkeypatch) -> None:
        monkeypatch.setattr(settings, "BLOB_READ_WRITE_TOKEN", None)
        resp = await bare_client.get("/api/v1/cache-image", params={"url": "https://x.io/logo.png"})
        assert resp.status_code == 503
        assert resp.json()["code"] == 9003
