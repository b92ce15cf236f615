"""Jupiter price client for solchat.

This module provides:
- The PriceOracle interface consumed by the chat handlers
- A Jupiter Price API v2 client keyed by SPL mint
- A 60 second per-symbol cache that keeps stale prices on failure
- Fixed demo prices when running without network
"""

import logging
from typing import Optional, Protocol

import httpx

from solchat.chat.tokens import TokenRegistry, get_registry
from solchat.config.settings import Settings, get_settings
from solchat.data.cache import PriceCache
from solchat.utils.errors import CollaboratorError, CollaboratorKind, classify_error, handle_errors

logger = logging.getLogger(__name__)

SOURCE = "jupiter"

# Offline prices used in demo mode
DEMO_PRICES = {
    "SOL": 172.40,
    "USDC": 1.00,
    "USDT": 1.00,
    "BONK": 0.00002148,
    "JUP": 1.21,
}


class PriceOracle(Protocol):
    """Anything that can quote a USD price for a token symbol."""

    async def fetch_price(self, symbol: str) -> float: ...


class JupiterPriceClient:
    """Price oracle backed by the Jupiter Price API."""

    def __init__(
        self,
        registry: Optional[TokenRegistry] = None,
        cache: Optional[PriceCache] = None,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or get_settings()
        self.registry = registry if registry is not None else get_registry()
        self.cache = cache if cache is not None else PriceCache(ttl=self.settings.prices.cache_ttl)
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.prices.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch_price(self, symbol: str) -> float:
        """Get the USD price for a symbol.

        Serves a fresh cached price when one exists. On a failed refresh the
        stale entry is left untouched and the error propagates.

        Raises:
            CollaboratorError: The price could not be fetched
        """
        symbol = symbol.upper()
        cached = self.cache.get(symbol)
        if cached is not None:
            return cached

        if self.settings.demo_mode:
            price = DEMO_PRICES.get(symbol)
            if price is None:
                raise CollaboratorError(
                    f"No demo price for {symbol}",
                    kind=CollaboratorKind.UNAVAILABLE,
                    source=SOURCE,
                )
            self.cache.set(symbol, price, source="demo")
            return price

        token = self.registry.get(symbol)
        if token is None or not token.mint:
            raise CollaboratorError(
                f"No mint known for {symbol}", kind=CollaboratorKind.UNAVAILABLE, source=SOURCE
            )

        try:
            client = await self._get_client()
            response = await client.get(self.settings.prices.base_url, params={"ids": token.mint})
            response.raise_for_status()
            data = response.json()
        except Exception as e:
            error = classify_error(e, source=SOURCE)
            logger.warning(f"Failed to fetch {symbol} price: {error.message}")
            raise error from e

        entry = (data.get("data") or {}).get(token.mint) or {}
        try:
            price = float(entry["price"])
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Jupiter returned no usable price for {symbol}")
            raise CollaboratorError(
                f"No price returned for {symbol}",
                kind=CollaboratorKind.INVALID_RESPONSE,
                source=SOURCE,
                original=e,
            ) from e

        self.cache.set(symbol, price, source=SOURCE)
        return price


@handle_errors(fallback=None, source=SOURCE)
async def quote_or_none(oracle: Optional[PriceOracle], symbol: str) -> Optional[float]:
    """Fetch a price, returning None when the oracle is missing or fails."""
    if oracle is None:
        return None
    return await oracle.fetch_price(symbol)
