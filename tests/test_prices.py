"""Tests for the Jupiter price client."""

import httpx
import pytest

from solchat.config.settings import Settings
from solchat.data.cache import PriceCache
from solchat.data.prices import DEMO_PRICES, JupiterPriceClient, quote_or_none
from solchat.utils.errors import CollaboratorError, CollaboratorKind

SOL_MINT = "So11111111111111111111111111111111111111112"


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class PriceTransport:
    """Mock Jupiter endpoint that records requests."""

    def __init__(self, price="172.50", status=200):
        self.price = price
        self.status = status
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status != 200:
            return httpx.Response(self.status, json={"error": "nope"})
        mint = request.url.params["ids"]
        data = {} if self.price is None else {mint: {"id": mint, "price": self.price}}
        return httpx.Response(200, json={"data": data})


@pytest.fixture
def live_settings():
    return Settings(demo_mode=False)


@pytest.fixture
def clock():
    return FakeClock()


def _client(transport, settings, clock):
    return JupiterPriceClient(
        cache=PriceCache(ttl=60, clock=clock),
        settings=settings,
        client=httpx.AsyncClient(transport=httpx.MockTransport(transport)),
    )


@pytest.mark.asyncio
class TestJupiterPriceClient:
    """Tests for JupiterPriceClient."""

    async def test_empty_injected_cache_is_kept(self, live_settings, clock):
        cache = PriceCache(ttl=60, clock=clock)
        client = JupiterPriceClient(cache=cache, settings=live_settings)

        assert len(cache) == 0
        assert client.cache is cache

    async def test_fetch_by_mint(self, live_settings, clock):
        """Prices are requested by SPL mint and parsed as float."""
        transport = PriceTransport()
        client = _client(transport, live_settings, clock)

        price = await client.fetch_price("sol")

        assert price == 172.5
        assert transport.requests[0].url.params["ids"] == SOL_MINT
        await client.close()

    async def test_fresh_cache_skips_network(self, live_settings, clock):
        transport = PriceTransport()
        client = _client(transport, live_settings, clock)

        await client.fetch_price("SOL")
        clock.now = 59
        await client.fetch_price("SOL")

        assert len(transport.requests) == 1

    async def test_expired_entry_is_refetched(self, live_settings, clock):
        transport = PriceTransport()
        client = _client(transport, live_settings, clock)

        await client.fetch_price("SOL")
        clock.now = 60
        transport.price = "180"

        assert await client.fetch_price("SOL") == 180.0
        assert len(transport.requests) == 2

    async def test_failed_refresh_keeps_stale_entry(self, live_settings, clock):
        """A failed refresh raises but leaves the old price as stale."""
        transport = PriceTransport()
        client = _client(transport, live_settings, clock)
        await client.fetch_price("SOL")

        clock.now = 120
        transport.status = 503
        with pytest.raises(CollaboratorError) as exc_info:
            await client.fetch_price("SOL")

        assert exc_info.value.kind == CollaboratorKind.UNAVAILABLE
        result = client.cache.lookup("SOL")
        assert result.is_stale
        assert result.value == 172.5

    async def test_rate_limited(self, live_settings, clock):
        client = _client(PriceTransport(status=429), live_settings, clock)
        with pytest.raises(CollaboratorError) as exc_info:
            await client.fetch_price("JUP")
        assert exc_info.value.kind == CollaboratorKind.RATE_LIMIT

    async def test_missing_price(self, live_settings, clock):
        client = _client(PriceTransport(price=None), live_settings, clock)
        with pytest.raises(CollaboratorError) as exc_info:
            await client.fetch_price("JUP")
        assert exc_info.value.kind == CollaboratorKind.INVALID_RESPONSE
        assert "JUP" not in client.cache

    async def test_token_without_mint(self, live_settings, clock):
        """Tokens with no known mint cannot be priced."""
        transport = PriceTransport()
        client = _client(transport, live_settings, clock)
        with pytest.raises(CollaboratorError):
            await client.fetch_price("MEME")
        assert transport.requests == []

    async def test_demo_mode_uses_fixed_prices(self, clock):
        transport = PriceTransport()
        client = _client(transport, Settings(demo_mode=True), clock)

        assert await client.fetch_price("JUP") == DEMO_PRICES["JUP"]
        assert transport.requests == []

        with pytest.raises(CollaboratorError):
            await client.fetch_price("RAY")


@pytest.mark.asyncio
class TestQuoteOrNone:
    """Tests for quote_or_none."""

    async def test_no_oracle(self):
        assert await quote_or_none(None, "SOL") is None

    async def test_failure_becomes_none(self, live_settings, clock):
        client = _client(PriceTransport(status=500), live_settings, clock)
        assert await quote_or_none(client, "SOL") is None

    async def test_success(self, live_settings, clock):
        client = _client(PriceTransport(price="1.5"), live_settings, clock)
        assert await quote_or_none(client, "JUP") == 1.5
