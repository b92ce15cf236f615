"""Wallet state providers.

Signing and connection live outside solchat; the assistant only needs a
read-only snapshot of the connected wallet for each message.
"""

import logging
from typing import Optional, Protocol

import httpx
from pydantic import BaseModel, Field

from solchat.config.settings import Settings, get_settings
from solchat.utils.errors import CollaboratorError, CollaboratorKind, classify_error

logger = logging.getLogger(__name__)

SOURCE = "wallet"
LAMPORTS_PER_SOL = 1_000_000_000


class TokenBalance(BaseModel):
    """Balance of one SPL token held by the wallet."""

    symbol: str
    amount: float = Field(ge=0)
    mint: Optional[str] = None


class WalletState(BaseModel):
    """Snapshot of the connected wallet."""

    connected: bool = False
    address: Optional[str] = None
    balance: float = Field(default=0.0, ge=0)
    token_balances: list[TokenBalance] = Field(default_factory=list)

    @classmethod
    def disconnected(cls) -> "WalletState":
        return cls()


class WalletProvider(Protocol):
    """Source of wallet snapshots."""

    async def get_state(self) -> WalletState: ...


class StaticWalletProvider:
    """Returns a fixed snapshot. Used by the CLI demo and in tests."""

    def __init__(
        self,
        address: Optional[str] = None,
        balance: float = 0.0,
        token_balances: Optional[list[TokenBalance]] = None,
    ):
        self.state = WalletState(
            connected=address is not None,
            address=address,
            balance=balance,
            token_balances=token_balances or [],
        )

    async def get_state(self) -> WalletState:
        return self.state


class RpcWalletProvider:
    """Reads the SOL balance of a watched address over JSON-RPC."""

    def __init__(
        self,
        address: str,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.address = address
        self.settings = settings or get_settings()
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.rpc.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get_state(self) -> WalletState:
        """Fetch the current balance.

        Raises:
            CollaboratorError: The RPC call failed
        """
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "getBalance",
            "params": [self.address],
        }
        try:
            client = await self._get_client()
            response = await client.post(self.settings.rpc.url, json=payload)
            response.raise_for_status()
            body = response.json()
        except Exception as e:
            error = classify_error(e, source=SOURCE)
            logger.warning(f"Balance lookup failed: {error.message}")
            raise error from e

        result = body.get("result")
        if not isinstance(result, dict) or "value" not in result:
            raise CollaboratorError(
                "Unexpected getBalance response",
                kind=CollaboratorKind.INVALID_RESPONSE,
                source=SOURCE,
            )

        return WalletState(
            connected=True,
            address=self.address,
            balance=result["value"] / LAMPORTS_PER_SOL,
        )
