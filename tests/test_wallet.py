"""Tests for wallet providers."""

import json

import httpx
import pytest

from solchat.config.settings import RpcSettings, Settings
from solchat.data.wallet import RpcWalletProvider, StaticWalletProvider, TokenBalance, WalletState
from solchat.utils.errors import CollaboratorError, CollaboratorKind

ADDRESS = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
RPC_URL = "https://rpc.example.com"


class BalanceTransport:
    """Mock JSON-RPC endpoint for getBalance."""

    def __init__(self, body=None, status=200):
        self.body = body if body is not None else {"jsonrpc": "2.0", "id": 1, "result": {"value": 2_500_000_000}}
        self.status = status
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        return httpx.Response(self.status, json=self.body)


def _provider(transport):
    return RpcWalletProvider(
        ADDRESS,
        settings=Settings(demo_mode=False, rpc=RpcSettings(url=RPC_URL)),
        client=httpx.AsyncClient(transport=httpx.MockTransport(transport)),
    )


@pytest.mark.asyncio
class TestStaticWalletProvider:
    """Tests for StaticWalletProvider."""

    async def test_connected(self):
        provider = StaticWalletProvider(ADDRESS, 1.5, [TokenBalance(symbol="USDC", amount=20)])

        state = await provider.get_state()

        assert state.connected is True
        assert state.balance == 1.5
        assert state.token_balances[0].symbol == "USDC"

    async def test_without_address(self):
        state = await StaticWalletProvider().get_state()
        assert state == WalletState.disconnected()


@pytest.mark.asyncio
class TestRpcWalletProvider:
    """Tests for RpcWalletProvider."""

    async def test_balance_in_sol(self):
        transport = BalanceTransport()
        provider = _provider(transport)

        state = await provider.get_state()
        await provider.close()

        assert state.connected is True
        assert state.address == ADDRESS
        assert state.balance == 2.5
        assert transport.requests[0]["method"] == "getBalance"
        assert transport.requests[0]["params"] == [ADDRESS]

    async def test_http_error(self):
        provider = _provider(BalanceTransport(status=429))

        with pytest.raises(CollaboratorError) as exc_info:
            await provider.get_state()

        assert exc_info.value.kind == CollaboratorKind.RATE_LIMIT
        assert exc_info.value.source == "wallet"

    async def test_rpc_error_body(self):
        body = {"jsonrpc": "2.0", "id": 1, "error": {"code": -32602, "message": "Invalid param"}}
        provider = _provider(BalanceTransport(body=body))

        with pytest.raises(CollaboratorError) as exc_info:
            await provider.get_state()

        assert exc_info.value.kind == CollaboratorKind.INVALID_RESPONSE
