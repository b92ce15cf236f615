"""Token registry for solchat.

Static symbol -> metadata mapping for the supported Solana token universe.
Descriptors are frozen after load; the registry rejects duplicate symbols.
"""

import re
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

NATIVE_SYMBOL = "SOL"


class TokenDescriptor(BaseModel):
    """Metadata for a single supported token."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    name: str
    decimals: int = Field(ge=0)
    category: str
    description: str
    use_cases: str
    price_range: str
    market_sentiment: str
    trend_indicators: tuple[str, ...] = ()
    year_launched: Optional[int] = None
    issuer: Optional[str] = None
    mint: Optional[str] = None

    @field_validator("symbol")
    @classmethod
    def _uppercase_symbol(cls, value: str) -> str:
        value = value.strip().upper()
        if not value:
            raise ValueError("symbol must not be empty")
        return value

    @property
    def is_native(self) -> bool:
        return self.symbol == NATIVE_SYMBOL

    @property
    def price_precision(self) -> int:
        """Decimal places used when displaying a USD price."""
        return 8 if self.symbol in ("BONK", "WIF") else 2


class TokenRegistry:
    """Immutable lookup table of supported tokens."""

    def __init__(self, descriptors: Iterable[TokenDescriptor]):
        self._tokens: dict[str, TokenDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.symbol in self._tokens:
                raise ValueError(f"Duplicate token symbol: {descriptor.symbol}")
            self._tokens[descriptor.symbol] = descriptor
        self._by_name = {d.name.lower(): d for d in self._tokens.values()}

    def __contains__(self, symbol: object) -> bool:
        return isinstance(symbol, str) and symbol.upper() in self._tokens

    def __len__(self) -> int:
        return len(self._tokens)

    @property
    def symbols(self) -> list[str]:
        """Supported symbols in registry order."""
        return list(self._tokens)

    def get(self, symbol: str) -> Optional[TokenDescriptor]:
        """Look up a token by symbol (case-insensitive)."""
        if not symbol:
            return None
        return self._tokens.get(symbol.strip().upper())

    def resolve(self, text: str) -> Optional[TokenDescriptor]:
        """Look up a token by symbol or display name."""
        if not text:
            return None
        return self.get(text) or self._by_name.get(text.strip().lower())

    def mentioned_in(self, text: str) -> list[str]:
        """Return symbols mentioned in text, by symbol first then by name.

        Matching is on word boundaries so "solution" does not count as SOL.
        """
        lowered = text.lower()
        found: list[str] = []
        for symbol in self._tokens:
            if re.search(rf"\b{re.escape(symbol.lower())}\b", lowered):
                found.append(symbol)
        for symbol, descriptor in self._tokens.items():
            if symbol not in found and re.search(
                rf"\b{re.escape(descriptor.name.lower())}\b", lowered
            ):
                found.append(symbol)
        return found

    def name_pattern(self) -> str:
        """Regex alternation of all symbols and names, longest first."""
        words = set(self._tokens)
        words.update(d.name for d in self._tokens.values())
        ordered = sorted(words, key=len, reverse=True)
        return "|".join(re.escape(w) for w in ordered)


DEFAULT_TOKENS = [
    TokenDescriptor(
        symbol="SOL",
        name="Solana",
        decimals=9,
        description="Native token of the Solana blockchain, known for high throughput and low fees",
        use_cases="Transaction fees, staking, governance, DeFi collateral",
        price_range="$20-$100 historically",
        trend_indicators=("Ecosystem growth", "Developer activity", "DeFi TVL"),
        category="L1 blockchain",
        year_launched=2020,
        market_sentiment="Bullish after 2023 recovery",
        issuer="Solana Foundation",
        mint="So11111111111111111111111111111111111111112",
    ),
    TokenDescriptor(
        symbol="USDC",
        name="USD Coin",
        decimals=6,
        description="A regulated stablecoin pegged to the US dollar issued by Circle",
        use_cases="Store of value, trading pairs, cross-border payments, yield farming",
        price_range="~$1.00 (stablecoin)",
        trend_indicators=("Regulatory compliance", "Corporate adoption"),
        category="Stablecoin",
        year_launched=2018,
        market_sentiment="Stable",
        issuer="Circle",
        mint="EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
    ),
    TokenDescriptor(
        symbol="USDT",
        name="Tether",
        decimals=6,
        description="The largest stablecoin by market cap, pegged to the US dollar",
        use_cases="Trading pairs, store of value, global payments",
        price_range="~$1.00 (stablecoin)",
        trend_indicators=("Exchange reserves", "Regulatory scrutiny"),
        category="Stablecoin",
        year_launched=2014,
        market_sentiment="Stable",
        issuer="Tether Limited",
        mint="Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB",
    ),
    TokenDescriptor(
        symbol="BONK",
        name="Bonk",
        decimals=5,
        description="A community-focused Solana meme coin with the Shiba Inu dog mascot",
        use_cases="Community engagement, tipping, NFT purchases on Solana",
        price_range="High volatility meme token",
        trend_indicators=("Social media mentions", "Community engagement", "Whale movements"),
        category="Meme coin",
        year_launched=2022,
        market_sentiment="Cyclical hype patterns",
        issuer="Bonk Community",
        mint="DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263",
    ),
    TokenDescriptor(
        symbol="JUP",
        name="Jupiter",
        decimals=6,
        description="Governance token for Jupiter, Solana's leading DEX aggregator",
        use_cases="Governance, fee sharing, liquidity provision incentives",
        price_range="Trending upward since 2024 launch",
        trend_indicators=("Trading volume", "TVL growth", "Protocol revenue"),
        category="DEX token",
        year_launched=2024,
        market_sentiment="Strong as leading Solana DEX",
        issuer="Jupiter Community",
        mint="JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN",
    ),
    TokenDescriptor(
        symbol="JTO",
        name="Jito",
        decimals=9,
        description="Governance token for Jito's MEV infrastructure on Solana",
        use_cases="Governance, staking, revenue sharing",
        price_range="Stable with growth potential",
        trend_indicators=("Validator adoption", "Solana block production stats"),
        category="Infrastructure token",
        year_launched=2023,
        market_sentiment="Technical adoption focus",
        issuer="Jito Network",
        mint="jtojtomepa8beP8AuQc6eXt5FriJwfFMwQx2v2f9mCL",
    ),
    TokenDescriptor(
        symbol="RAY",
        name="Raydium",
        decimals=6,
        description="AMM and liquidity provider on Solana with concentrated liquidity features",
        use_cases="Trading, liquidity provision, yield farming",
        price_range="DeFi token with moderate volatility",
        trend_indicators=("TVL", "Trading fees generated", "New pool launches"),
        category="DEX token",
        year_launched=2021,
        market_sentiment="Recovering alongside Solana DeFi ecosystem",
        issuer="Raydium Community",
        mint="4k3Dyjzvzp8eMZWUXbBCjEvwSkkk59S5iCNLY3QrkX6R",
    ),
    TokenDescriptor(
        symbol="PYTH",
        name="Pyth Network",
        decimals=6,
        description="Oracle protocol providing real-time market data across blockchains",
        use_cases="Governance, staking for data validation",
        price_range="Varies with market conditions",
        trend_indicators=("Growing adoption", "Strong community"),
        category="Oracle token",
        year_launched=2023,
        market_sentiment="Positive",
        issuer="Pyth Network",
        mint="HZ1JovNiVvGrGNiiYvEozEVgZ58xaU3RKwX8eACQBCt3",
    ),
    TokenDescriptor(
        symbol="MEME",
        name="Memecoin",
        decimals=6,
        description="Multi-chain meme token focused on internet culture and humor",
        use_cases="Community engagement, memetic value",
        price_range="Highly volatile, follows meme cycles",
        trend_indicators=("Social media virality", "Celebrity mentions", "New exchange listings"),
        category="Meme coin",
        year_launched=2023,
        market_sentiment="Follows broader meme coin trends",
        issuer="Memecoin Community",
    ),
    TokenDescriptor(
        symbol="WIF",
        name="Dogwifhat",
        decimals=6,
        description="Solana meme coin featuring a dog wearing a pink hat, went viral in 2023",
        use_cases="Community status, NFT integration",
        price_range="Extremely volatile, reached major peaks in 2023-2024",
        trend_indicators=("Twitter mentions", "Influencer activity", "New listings"),
        category="Meme coin",
        year_launched=2023,
        market_sentiment="One of Solana's most successful meme coins",
        issuer="Dogwifhat Community",
        mint="EKpQGSJtjMFqKZ9KQanSqYXRcF8fBopzLHYxdM65zcjm",
    ),
    TokenDescriptor(
        symbol="AKT",
        name="Akash Network Token",
        decimals=6,
        description="Decentralized cloud computing token",
        use_cases="Decentralized cloud computing",
        price_range="Varies with market conditions",
        trend_indicators=("Growing adoption", "Strong community"),
        category="Infrastructure",
        year_launched=2020,
        market_sentiment="Positive",
        issuer="Akash Network",
    ),
]

# Transferable tokens, in the order the fast path accepts them
TRANSFER_SYMBOLS = ("SOL", "USDC", "USDT", "BONK", "JUP", "JTO", "RAY", "PYTH", "MEME", "WIF")

CATEGORY_EXPLANATIONS = {
    "L1 blockchain": "it's a foundational blockchain that can operate independently",
    "Layer 1 blockchain": "it's a foundational blockchain that can operate independently",
    "Stablecoin": "it's designed to maintain a stable value, usually pegged to a currency like the US dollar",
    "DeFi token": "it's used in decentralized finance applications that offer financial services without traditional intermediaries",
    "Meme coin": "it's a cryptocurrency that originated from internet memes or jokes and is often driven by community and social media",
    "Infrastructure token": "it provides essential services that support the blockchain ecosystem",
    "Oracle token": "it connects blockchain with real-world data",
    "DEX token": "it's associated with a decentralized exchange where users can trade cryptocurrencies directly",
    "Governance token": "it gives holders voting rights in the project's decisions",
}


def explain_category(category: str) -> str:
    """Plain-language explanation of a token category."""
    if not category:
        return "No category available"
    return CATEGORY_EXPLANATIONS.get(category, "it serves specific purposes within its ecosystem")


_default_registry: Optional[TokenRegistry] = None


def get_registry() -> TokenRegistry:
    """Get the default token registry."""
    global _default_registry
    if _default_registry is None:
        _default_registry = TokenRegistry(DEFAULT_TOKENS)
    return _default_registry
