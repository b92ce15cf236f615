"""Market intelligence used to enrich chat responses.

Combines live prices from the price oracle with the static market notes
the assistant ships with. Nothing here raises on a failed price lookup;
missing prices fall back to the last known reference values.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Optional

from solchat.chat.tokens import TokenRegistry, get_registry
from solchat.data.cache import Cache
from solchat.data.prices import PriceOracle, quote_or_none

logger = logging.getLogger(__name__)


@dataclass
class MarketTrend:
    """Price snapshot for one token."""

    symbol: str
    name: str
    price: float
    percent_change_24h: float
    live: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class MarketSummary:
    """Narrative market overview shown by the market trends operation."""

    overall: str
    top_gainers: list[str] = field(default_factory=list)
    top_losers: list[str] = field(default_factory=list)
    solana_ecosystem: str = ""


MARKET_SUMMARY = MarketSummary(
    overall=(
        "The crypto market is showing a bullish pattern in the last 24 hours "
        "with most major assets gaining value."
    ),
    top_gainers=["SOL (+8.2%)", "JUP (+15.4%)", "WIF (+23.1%)"],
    top_losers=["Some Token (-3.2%)", "Another Token (-2.1%)"],
    solana_ecosystem=(
        "The Solana ecosystem is outperforming the broader market with increased DeFi activity."
    ),
)

# Reference rows used when live prices are unavailable
FALLBACK_TRENDS = {
    "SOL": MarketTrend("SOL", "Solana", 172.40, 2.5),
    "USDC": MarketTrend("USDC", "USD Coin", 1.00, 0.01),
    "BONK": MarketTrend("BONK", "Bonk", 0.00002148, -1.2),
    "JUP": MarketTrend("JUP", "Jupiter", 1.21, 5.4),
}

DEFAULT_WATCHLIST = ("SOL", "USDC", "BONK", "JUP")

RISK_FRAMEWORKS = {
    "Market Risk": ["Volatility analysis", "Correlation studies", "Beta calculations"],
    "Liquidity Risk": ["Volume analysis", "Order book depth", "Slippage calculations"],
    "Operational Risk": ["Smart contract audits", "Protocol security", "Team transparency"],
}


def _direction(change: float) -> str:
    if change > 1:
        return "up"
    if change < -1:
        return "down"
    return "flat"


class MarketIntelligence:
    """Builds market snapshots, sentiment and per-token trend analysis."""

    SENTIMENT_KEY = "sentiment"

    def __init__(
        self,
        oracle: Optional[PriceOracle] = None,
        registry: Optional[TokenRegistry] = None,
        cache: Optional[Cache] = None,
    ):
        self.oracle = oracle
        self.registry = registry if registry is not None else get_registry()
        self.cache = cache if cache is not None else Cache(maxsize=16, ttl=60)

    async def get_market_trends(self, symbols=DEFAULT_WATCHLIST) -> list[MarketTrend]:
        """Price rows for a watchlist, live where possible."""
        trends = []
        for symbol in symbols:
            reference = FALLBACK_TRENDS.get(symbol)
            token = self.registry.get(symbol)
            price = await quote_or_none(self.oracle, symbol)
            if price is not None:
                trends.append(
                    MarketTrend(
                        symbol=symbol,
                        name=token.name if token else symbol,
                        price=price,
                        percent_change_24h=reference.percent_change_24h if reference else 0.0,
                        live=True,
                    )
                )
            elif reference is not None:
                trends.append(reference)
        return trends

    async def get_market_sentiment(self) -> dict:
        """Overall market mood, cached for a minute."""
        cached = self.cache.get(self.SENTIMENT_KEY)
        if cached is not None:
            return cached

        trends = await self.get_market_trends()
        changes = [t.percent_change_24h for t in trends]
        average = sum(changes) / len(changes) if changes else 0.0
        if average > 1:
            mood = "bullish"
        elif average < -1:
            mood = "bearish"
        else:
            mood = "neutral"

        sentiment = {
            "overall": mood,
            "average_change_24h": round(average, 2),
            "summary": MARKET_SUMMARY.overall,
            "top_gainers": list(MARKET_SUMMARY.top_gainers),
            "top_losers": list(MARKET_SUMMARY.top_losers),
            "tokens": [t.to_dict() for t in trends],
        }
        self.cache.set(self.SENTIMENT_KEY, sentiment)
        return sentiment

    async def analyze_price_trend(self, symbol: str) -> Optional[dict]:
        """Trend analysis for one token, None for unknown symbols."""
        token = self.registry.get(symbol)
        if token is None:
            return None

        price = await quote_or_none(self.oracle, token.symbol)
        reference = FALLBACK_TRENDS.get(token.symbol)
        change = reference.percent_change_24h if reference else 0.0
        live = price is not None
        if not live and reference is not None:
            price = reference.price

        return {
            "token": token.symbol,
            "price": price,
            "live_price": live,
            "percent_change_24h": change,
            "direction": _direction(change),
            "price_range": token.price_range,
            "sentiment": token.market_sentiment,
            "trend_indicators": list(token.trend_indicators),
        }

    async def get_comprehensive_analysis(self, symbol: Optional[str] = None) -> dict:
        """Full analysis payload: sentiment, optional token trend, outlook and risks."""
        sentiment = await self.get_market_sentiment()
        token_trend = await self.analyze_price_trend(symbol) if symbol else None

        if token_trend:
            outlook = (
                f"{token_trend['token']} is trending {token_trend['direction']} "
                f"in a {sentiment['overall']} market. Watch {', '.join(token_trend['trend_indicators'][:2]).lower()}."
            )
        else:
            outlook = f"The broader market looks {sentiment['overall']} over the short term."

        return {
            "sentiment": sentiment,
            "token_trend": token_trend,
            "short_term_outlook": outlook,
            "solana_ecosystem": MARKET_SUMMARY.solana_ecosystem,
            "risk_frameworks": {k: list(v) for k, v in RISK_FRAMEWORKS.items()},
        }
