"""Pattern catalog: the operations the assistant understands.

Operations are tried in the order they are declared here, and within an
operation its patterns are tried in listed order. The first pattern that
matches decides the operation, so a looser pattern declared early wins
over a stricter one declared later.
"""

import logging
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Awaitable, Callable, Optional

from solchat.chat.context import AISystemResponse, ExpertiseLevel, RequestContext
from solchat.chat.guard import NETWORK_FEE, TransferApproval, validate_transfer
from solchat.chat.tokens import TRANSFER_SYMBOLS, TokenRegistry, explain_category
from solchat.data.addresses import AddressDetector, truncate_address
from solchat.data.history import HistoryFilter, TransactionHistoryService, TransactionType
from solchat.data.market import MARKET_SUMMARY
from solchat.data.prices import PriceOracle, quote_or_none
from solchat.utils.errors import classify_error

logger = logging.getLogger(__name__)

Handler = Callable[[re.Match, RequestContext, "HandlerServices"], Awaitable[AISystemResponse]]

_FLAGS = re.IGNORECASE


@dataclass
class HandlerServices:
    """Collaborators available to operation handlers."""

    registry: TokenRegistry
    detector: AddressDetector
    prices: Optional[PriceOracle] = None
    history: Optional[TransactionHistoryService] = None
    network_fee: Decimal = NETWORK_FEE
    history_limit: int = 10
    explorer_url: str = "https://explorer.solana.com/address"


@dataclass
class Operation:
    """A named capability with its ordered match patterns."""

    name: str
    description: str
    patterns: list[re.Pattern] = field(default_factory=list)
    handler: Optional[Handler] = None

    def match(self, prompt: str) -> Optional[re.Match]:
        """First matching pattern in declared order."""
        for pattern in self.patterns:
            m = pattern.search(prompt)
            if m:
                return m
        return None


def _compile(*patterns: str) -> list[re.Pattern]:
    return [re.compile(p, _FLAGS) for p in patterns]


def transfer_alternation() -> str:
    return "|".join(s.lower() for s in TRANSFER_SYMBOLS)


# ---------------------------------------------------------------------------
# swap
# ---------------------------------------------------------------------------

_AMOUNT = r"(?P<amount>\d+\.?\d*|\.\d+)"
_ALL = r"(?:all\s+my|all|everything)"


async def handle_swap(match: re.Match, context: RequestContext, services: HandlerServices) -> AISystemResponse:
    groups = match.groupdict()
    amount_text = groups.get("amount")
    source_text = groups["from_token"]
    target_text = groups["to_token"]

    if services.detector.is_valid(target_text):
        return AISystemResponse(
            message=(
                f"{truncate_address(target_text)} looks like a wallet address, not a token. "
                "To send funds, start your message with 'Send'."
            )
        )

    source = services.registry.resolve(source_text)
    target = services.registry.resolve(target_text)
    if source is None or target is None:
        unknown = source_text if source is None else target_text
        return AISystemResponse(
            message=(
                f"I can't swap {unknown} yet. Supported tokens: "
                f"{', '.join(services.registry.symbols)}."
            )
        )

    amount = float(amount_text) if amount_text else None
    if amount is None:
        message = f"Swap operation initiated: all of your {source.symbol} to {target.symbol}."
    else:
        message = f"Swap operation initiated: {amount_text} {source.symbol} to {target.symbol}"
        source_price = await quote_or_none(services.prices, source.symbol)
        target_price = await quote_or_none(services.prices, target.symbol) if source_price else None
        if source_price and target_price:
            estimate = amount * source_price / target_price
            message += f" (≈{estimate:,.4f} {target.symbol} at current prices)"
        message += "."

    return AISystemResponse(
        message=message,
        intent={
            "action": "swap",
            "from_token": source.symbol,
            "token": target.symbol,
            "price": amount,
        },
    )


# ---------------------------------------------------------------------------
# balance
# ---------------------------------------------------------------------------


async def handle_balance(match: re.Match, context: RequestContext, services: HandlerServices) -> AISystemResponse:
    if not context.wallet_connected:
        return AISystemResponse(message="Please connect your wallet first to check your balance.")

    price_info = ""
    sol_price = await quote_or_none(services.prices, "SOL")
    if sol_price:
        price_info = f" (≈${context.balance * sol_price:,.2f})"

    return AISystemResponse(
        message=(
            f"Your current wallet balance is {context.balance:.4f} SOL{price_info} "
            f"({truncate_address(context.wallet_address)}). You can use this balance to swap "
            f"tokens or perform other operations."
        ),
        intent={"action": "balance", "address": context.wallet_address},
    )


# ---------------------------------------------------------------------------
# tokenInfo
# ---------------------------------------------------------------------------


async def handle_token_info(match: re.Match, context: RequestContext, services: HandlerServices) -> AISystemResponse:
    raw = match.group("token")
    token = services.registry.resolve(raw)
    if token is None:
        return AISystemResponse(
            message=(
                f"I don't have information about {raw}. Currently I have data on: "
                f"{', '.join(services.registry.symbols)}"
            )
        )

    message = (
        f"{token.symbol} ({token.name}): {token.description}. It has {token.decimals} decimals "
        f"and is commonly used for {token.use_cases}."
    )
    message += f"\n\nCategory: {token.category} ({explain_category(token.category)})"
    if token.year_launched:
        message += f", Launched: {token.year_launched}"
    message += f"\nPrice history: {token.price_range}"
    if token.market_sentiment:
        message += f"\nMarket sentiment: {token.market_sentiment}"

    price = await quote_or_none(services.prices, token.symbol)
    if price:
        message += f"\n\nCurrent price: ${price:.{token.price_precision}f}"

    if token.trend_indicators:
        message += f"\n\nKey trend indicators: {', '.join(token.trend_indicators)}"

    return AISystemResponse(message=message, intent={"action": "tokenInfo", "token": token.symbol})


# ---------------------------------------------------------------------------
# price
# ---------------------------------------------------------------------------


async def handle_price(match: re.Match, context: RequestContext, services: HandlerServices) -> AISystemResponse:
    raw = match.group("token")
    token = services.registry.resolve(raw)
    if token is None:
        return AISystemResponse(
            message=(
                f"I don't track a price for {raw}. I can quote: "
                f"{', '.join(services.registry.symbols)}."
            )
        )

    price = await quote_or_none(services.prices, token.symbol)
    if price:
        message = f"The current price of {token.symbol} is ${price:,.{token.price_precision}f}."
    else:
        message = (
            f"I couldn't fetch a live price for {token.symbol} right now. "
            f"For reference: {token.price_range}."
        )
    return AISystemResponse(
        message=message,
        intent={"action": "price", "token": token.symbol, "usd": price},
    )


# ---------------------------------------------------------------------------
# history
# ---------------------------------------------------------------------------

_DATE_PHRASE = re.compile(r"\b(?:on|from|for|during|in|since)\s+(?P<date>.+?)[\s?.!]*$", _FLAGS)
_RELATIVE_DATE = re.compile(
    r"\b(today|yesterday|(?:last|past|this)\s+(?:\d+\s+days?|week|month))\b", _FLAGS
)
_TX_TYPE = re.compile(r"\b(swap|transfer|send|receive)\b", _FLAGS)


async def handle_history(match: re.Match, context: RequestContext, services: HandlerServices) -> AISystemResponse:
    if not context.wallet_connected:
        return AISystemResponse(
            message="Please connect your wallet first to view your transaction history."
        )
    if services.history is None:
        return AISystemResponse(
            message="Transaction history isn't available right now. Please try again later.",
            intent={"action": "history", "success": False},
        )

    prompt = match.string
    history_filter = HistoryFilter(limit=services.history_limit)

    date_text = ""
    for m in (_DATE_PHRASE.search(prompt), _RELATIVE_DATE.search(prompt)):
        if m is None:
            continue
        candidate = m.group(m.lastindex or 0).strip()
        date_range = services.history.parse_date_query(candidate)
        if not date_range.is_empty:
            date_text = candidate
            history_filter.date_range = date_range
            break

    mentioned = services.registry.mentioned_in(prompt)
    if mentioned:
        history_filter.token = mentioned[0]

    type_match = _TX_TYPE.search(prompt)
    if type_match:
        kind = type_match.group(1).lower()
        history_filter.type = (
            TransactionType.TRANSFER if kind in ("send", "receive") else TransactionType(kind)
        )

    qualifiers = ""
    if history_filter.token:
        qualifiers += f" involving {history_filter.token}"
    if history_filter.type:
        qualifiers += f" of type {history_filter.type.value}"

    try:
        transactions = await services.history.query(context.wallet_address, history_filter)
    except Exception as e:
        error = classify_error(e, source="history")
        logger.warning(f"History unavailable ({error.category.value})")
        return AISystemResponse(
            message=(
                "I encountered an error while trying to fetch your transaction history. "
                "Please try again later."
            ),
            intent={"action": "history", "success": False},
        )

    if not transactions:
        message = "I couldn't find any transactions"
        if date_text:
            message += f" for {date_text}"
        message += qualifiers
        message += (
            ". This could be because there was no activity during this period, or the "
            "transaction history is not available through the API."
        )
        return AISystemResponse(message=message, intent={"action": "history", "success": False})

    heading = f"your transactions for {date_text}" if date_text else "your recent transactions"
    message = (
        f"Here are {heading}{qualifiers}:\n\n"
        f"{services.history.format_for_display(transactions)}\n\n"
        f"You can see your full transaction history on Solana Explorer: "
        f"{services.explorer_url}/{context.wallet_address}"
    )
    return AISystemResponse(
        message=message,
        intent={"action": "history", "success": True, "count": len(transactions)},
        data={"transactions": [tx.signature for tx in transactions]},
    )


# ---------------------------------------------------------------------------
# marketTrends
# ---------------------------------------------------------------------------


async def handle_market_trends(match: re.Match, context: RequestContext, services: HandlerServices) -> AISystemResponse:
    if context.wallet_connected:
        closing = (
            "Based on your wallet holdings, you might be interested in keeping an eye on SOL "
            "price movements."
        )
    else:
        closing = "Connect your wallet for personalized market insights based on your holdings."

    message = (
        "## Current Market Trends\n\n"
        f"{MARKET_SUMMARY.overall}\n\n"
        f"**Top gainers:**\n{', '.join(MARKET_SUMMARY.top_gainers)}\n\n"
        f"**Top losers:**\n{', '.join(MARKET_SUMMARY.top_losers)}\n\n"
        f"**Solana ecosystem:**\n{MARKET_SUMMARY.solana_ecosystem}\n\n"
        f"{closing}"
    )
    return AISystemResponse(message=message, intent={"action": "marketTrends"})


# ---------------------------------------------------------------------------
# help
# ---------------------------------------------------------------------------


async def handle_help(match: re.Match, context: RequestContext, services: HandlerServices) -> AISystemResponse:
    if context.wallet_connected:
        status = (
            f"Your wallet ({truncate_address(context.wallet_address)}) is connected with "
            f"{context.balance:.4f} SOL."
        )
    else:
        status = "Please connect your wallet to access all features."

    symbols = services.registry.symbols
    supported = ", ".join(symbols[:-1]) + f", and {symbols[-1]}" if len(symbols) > 1 else symbols[0]

    message = (
        f"I'm your advanced Web3 AI assistant. {status}\n\n"
        "Here's what I can help you with:\n\n"
        '1. **Token Swaps** - Example: "Swap 1 SOL to USDC"\n'
        '2. **Transfers** - Example: "Send 0.1 SOL to [wallet address]"\n'
        '3. **Balance Check** - Example: "Check my balance"\n'
        '4. **Transaction History** - Example: "Show my recent transactions"\n'
        '5. **Token Information** - Example: "Tell me about SOL"\n'
        '6. **Market Trends** - Example: "What are the market trends?"\n'
        '7. **Help** - Example: "What can you do?"\n\n'
        f"I support many tokens including {supported}. I can also provide real-time price "
        "estimates when performing swaps."
    )
    return AISystemResponse(message=message, intent={"action": "help"})


# ---------------------------------------------------------------------------
# transfer
# ---------------------------------------------------------------------------


async def handle_transfer(match: re.Match, context: RequestContext, services: HandlerServices) -> AISystemResponse:
    raw_message = context.original_prompt or match.string
    result = validate_transfer(
        match.group("amount"),
        match.group("token"),
        raw_message,
        context,
        services.detector,
        registry=services.registry,
        fee=services.network_fee,
    )
    if isinstance(result, TransferApproval):
        return AISystemResponse(
            message=result.message,
            intent=result.intent.to_dict(),
            suggestions=list(result.suggestions),
        )
    return AISystemResponse(message=result.message, intent=None, suggestions=list(result.suggestions))


# ---------------------------------------------------------------------------
# cryptoKnowledge
# ---------------------------------------------------------------------------

# canonical name -> (alias regex, explanation)
KNOWLEDGE_TOPICS = {
    "Layer 1": (
        r"layer\s*1|l1s?",
        "Base blockchain networks like Bitcoin and Ethereum that provide the foundation for other applications",
    ),
    "Layer 2": (
        r"layer\s*2|l2s?|rollups?",
        "Scaling solutions built on top of Layer 1 blockchains to improve transaction speed and reduce costs",
    ),
    "DeFi": (
        r"defi|decentralized\s+finance",
        "Decentralized Finance applications that provide financial services without intermediaries",
    ),
    "NFT": (r"nfts?|non[-\s]fungible\s+tokens?", "Non-Fungible Tokens representing unique digital assets"),
    "Gaming": (r"gamefi|crypto\s+gaming|blockchain\s+gaming", "Blockchain-based gaming platforms and in-game assets"),
    "Privacy": (r"privacy\s+coins?", "Cryptocurrencies focused on transaction privacy and anonymity"),
    "Stablecoins": (r"stablecoins?", "Cryptocurrencies pegged to stable assets like fiat currencies"),
    "Meme": (
        r"meme\s*coins?",
        "Cryptocurrencies that gained popularity through social media and community engagement",
    ),
    "Bitcoin": (
        r"bitcoin|btc",
        "The first cryptocurrency, a proof-of-work Layer 1 network used mainly as a store of value",
    ),
    "Staking": (
        r"staking",
        "Locking tokens with a validator to help secure a proof-of-stake network in exchange for rewards",
    ),
    "Hardware wallets": (
        r"hardware\s+wallets?|cold\s+wallets?",
        "Physical devices that keep private keys offline and sign transactions without exposing them",
    ),
}

KNOWLEDGE_TRENDS = {
    "current": "DeFi and Layer 2 solutions are seeing significant growth",
    "emerging": "NFT gaming and metaverse projects are gaining traction",
    "risks": "Regulatory uncertainty remains a key concern for the industry",
}


def _knowledge_alternation() -> str:
    return "|".join(f"(?:{alias})" for alias, _ in KNOWLEDGE_TOPICS.values())


def knowledge_topic(text: str) -> Optional[str]:
    """Canonical knowledge topic for a phrase."""
    for name, (alias, _) in KNOWLEDGE_TOPICS.items():
        if re.fullmatch(alias, text.strip(), _FLAGS):
            return name
    return None


async def handle_crypto_knowledge(match: re.Match, context: RequestContext, services: HandlerServices) -> AISystemResponse:
    topic = knowledge_topic(match.group("topic")) or match.group("topic")
    explanation = KNOWLEDGE_TOPICS.get(topic, (None, None))[1]
    if explanation is None:
        return AISystemResponse(message=f"I don't have notes on {topic} yet.")

    message = f"**{topic}**: {explanation}."
    if context.expertise_level != ExpertiseLevel.BEGINNER:
        message += (
            f"\n\nWhat's happening now: {KNOWLEDGE_TRENDS['current']}. "
            f"Emerging: {KNOWLEDGE_TRENDS['emerging']}. Watch out: {KNOWLEDGE_TRENDS['risks']}."
        )
    return AISystemResponse(message=message, intent={"action": "cryptoKnowledge", "topic": topic})


# ---------------------------------------------------------------------------
# marketAnalysis
# ---------------------------------------------------------------------------

MARKET_ANALYSIS = {
    ExpertiseLevel.ADVANCED: (
        "# Comprehensive Market Analysis\n\n"
        "## Current Market Structure\n"
        "The crypto market is showing characteristics consistent with the early accumulation "
        "phase following a bear market, with select assets beginning to show strength while "
        "overall sentiment remains cautious.\n\n"
        "## On-Chain Indicators\n"
        "- Exchange outflows have increased 15% month-over-month, suggesting accumulation\n"
        "- Long-term holder supply is near all-time highs at 78% of circulating supply\n"
        "- Realized cap has stabilized, indicating absorption of selling pressure\n"
        "- Stablecoin market cap ratio suggests significant dry powder waiting on sidelines\n\n"
        "## Macro Correlations\n"
        "- Reduced correlation with equities (0.65, down from 0.82)\n"
        "- Increased sensitivity to liquidity conditions and Fed policy\n"
        "- Dollar strength remains a headwind for risk assets\n\n"
        "## Technical Structure\n"
        "- Higher lows forming on weekly timeframes\n"
        "- 200-week moving average providing support\n"
        "- Decreased volatility typically preceding expansion phase"
    ),
    ExpertiseLevel.INTERMEDIATE: (
        "# Current Market Analysis\n\n"
        "The crypto market is currently showing signs of recovery with several key indicators "
        "suggesting accumulation:\n\n"
        "- Prices have stabilized and are forming higher lows\n"
        "- Trading volume has increased on positive price movements\n"
        "- Long-term holders are no longer selling and have begun accumulating\n"
        "- Market sentiment has shifted from extreme fear toward neutral\n\n"
        "Key levels to watch include the 200-day moving average and previous support/resistance "
        "zones. Market structure appears to be improving, but remains vulnerable to macro factors "
        "including central bank policy and traditional market movements.\n\n"
        "For Solana specifically, ecosystem activity metrics have improved significantly, with "
        "daily active addresses and transaction count trending upward."
    ),
    ExpertiseLevel.BEGINNER: (
        "# Simple Market Update\n\n"
        "The crypto market has been recovering after a difficult period. Here's what you should "
        "know:\n\n"
        "- Prices have been gradually increasing over recent months\n"
        "- More people are getting interested in crypto again\n"
        "- The overall mood has improved from fearful to cautiously optimistic\n"
        "- New projects and developments continue despite earlier price drops\n\n"
        "Remember that crypto markets can be very unpredictable and volatile. It's important to "
        "only invest what you can afford to lose and to take a long-term perspective if you "
        "decide to invest.\n\n"
        "For Solana, things have been looking positive with more people using the network and "
        "new projects launching."
    ),
}


async def handle_market_analysis(match: re.Match, context: RequestContext, services: HandlerServices) -> AISystemResponse:
    level = context.expertise_level
    return AISystemResponse(
        message=MARKET_ANALYSIS[level],
        intent={"action": "marketAnalysis", "expertise_level": level.value},
    )


# ---------------------------------------------------------------------------
# investmentEducation
# ---------------------------------------------------------------------------

INVESTMENT_STRATEGIES = {
    "portfolio": {
        "description": "Portfolio management strategies",
        "implementation": "Diversified asset allocation",
        "advantages": ["Risk reduction", "Stable returns"],
        "risk_level": "Medium",
        "methodology": ["Geographic diversification", "Asset class diversification"],
    },
    "risk": {
        "description": "Risk management strategies",
        "implementation": "Stop-loss and position sizing",
        "advantages": ["Capital preservation", "Emotional control"],
        "risk_level": "Low",
    },
}


def _format_strategy(name: str, strategy: dict) -> str:
    lines = [
        f"Investment Strategy for {name}:",
        f"Description: {strategy['description']}",
        f"Implementation: {strategy['implementation']}",
        f"Advantages: {', '.join(strategy['advantages'])}",
    ]
    if strategy.get("methodology"):
        lines.append(f"Methodology: {', '.join(strategy['methodology'])}")
    if strategy.get("risk_level"):
        lines.append(f"Risk Level: {strategy['risk_level']}")
    return "\n".join(lines)


async def handle_investment_education(match: re.Match, context: RequestContext, services: HandlerServices) -> AISystemResponse:
    topic = (match.groupdict().get("topic") or "").lower()
    names = [topic] if topic in INVESTMENT_STRATEGIES else list(INVESTMENT_STRATEGIES)
    message = "\n\n".join(_format_strategy(n, INVESTMENT_STRATEGIES[n]) for n in names)
    message += "\n\nThis is general education, not financial advice."
    return AISystemResponse(
        message=message,
        intent={"action": "investmentEducation", "topic": topic or "general"},
    )


# ---------------------------------------------------------------------------
# catalog
# ---------------------------------------------------------------------------


def build_catalog(registry: TokenRegistry) -> list[Operation]:
    """Build the operations in their matching order."""
    names = registry.name_pattern()
    topics = _knowledge_alternation()
    transfer_tokens = transfer_alternation()

    return [
        Operation(
            name="swap",
            description="Exchange one token for another",
            patterns=_compile(
                rf"swap\s+{_AMOUNT}\s+(?P<from_token>\w+)\s+(?:to|for)\s+(?P<to_token>\w+)",
                rf"convert\s+{_AMOUNT}\s+(?P<from_token>\w+)\s+(?:to|into)\s+(?P<to_token>\w+)",
                rf"exchange\s+{_AMOUNT}\s+(?P<from_token>\w+)\s+(?:to|for)\s+(?P<to_token>\w+)",
                rf"trade\s+{_AMOUNT}\s+(?P<from_token>\w+)\s+(?:to|for)\s+(?P<to_token>\w+)",
                rf"change\s+{_AMOUNT}\s+(?P<from_token>\w+)\s+(?:to|into|for)\s+(?P<to_token>\w+)",
                rf"{_AMOUNT}\s+(?P<from_token>\w+)\s+(?:to|into|for)\s+(?P<to_token>\w+)",
                rf"swap\s+{_ALL}\s+(?P<from_token>\w+)\s+(?:to|for)\s+(?P<to_token>\w+)",
                rf"convert\s+{_ALL}\s+(?P<from_token>\w+)\s+(?:to|into)\s+(?P<to_token>\w+)",
                rf"exchange\s+{_ALL}\s+(?P<from_token>\w+)\s+(?:to|for)\s+(?P<to_token>\w+)",
                rf"trade\s+{_ALL}\s+(?P<from_token>\w+)\s+(?:to|for)\s+(?P<to_token>\w+)",
            ),
            handler=handle_swap,
        ),
        Operation(
            name="balance",
            description="Check token balances",
            patterns=_compile(
                r"(?:check|show|what(?:'|i)?s\s+(?:my|the))\s+balance",
                r"how\s+much\s+(?:\w+\s+)?(?:do\s+i\s+have|is\s+in\s+my\s+wallet)",
                r"balance\s+(?:of|for)\s+my\s+(?:wallet|account)",
                r"my\s+balance",
                r"wallet\s+balance",
            ),
            handler=handle_balance,
        ),
        Operation(
            name="tokenInfo",
            description="Get information about tokens",
            patterns=_compile(
                rf"(?:(?:tell\s+me|know|learn(?:\s+more)?)\s+about|what\s+is|what'?s|explain|info(?:rmation)?\s+(?:on|about))"
                rf"\s+(?:the\s+)?(?:token\s+)?\b(?P<token>{names})\b",
                rf"\b(?P<token>{names})\s+(?:token\s+)?info(?:rmation)?\b",
                r"\binfo(?:rmation)?\s+(?:on|about)\s+(?:the\s+)?(?:token\s+)?(?P<token>\w+)",
                r"what\s+is\s+(?:the\s+)?(?P<token>\w+)\s+token\b",
            ),
            handler=handle_token_info,
        ),
        Operation(
            name="price",
            description="Get current price of a token",
            patterns=_compile(
                r"price\s+of\s+(?P<token>\w+)",
                r"how\s+much\s+is\s+(?:one\s+|1\s+)?(?P<token>\w+)\s+(?:worth|trading\s+at)",
            ),
            handler=handle_price,
        ),
        Operation(
            name="history",
            description="View transaction history",
            patterns=_compile(
                r"(?:show|view|get|check)\s+(?:my\s+)?(?:transaction|tx)\s+history",
                r"(?:what|show)\s+(?:are|were)\s+my\s+(?:recent|last|previous)\s+transactions",
                r"(?:my|wallet)\s+(?:transaction|tx)\s+history",
                r"(?:recent|last|previous)\s+transactions",
                r"what\s+(?:did|have)\s+i\s+(?:do|done|transact)",
                r"transactions\s+(?:on|from|for|during|in)\s+(.+?)(?:\s|$)",
                r"what\s+(?:happened|occurred|took\s+place)\s+(?:on|from|for|during|in)\s+(.+?)(?:\s|$)",
                r"show\s+me\s+(?:transactions|activity)\s+(?:on|from|for|during|in)\s+(.+?)(?:\s|$)",
            ),
            handler=handle_history,
        ),
        Operation(
            name="marketTrends",
            description="Get market trends and insights",
            patterns=_compile(
                r"(?:what|how)(?:'s|\s+is|\s+are)\s+(?:the\s+)?(?:crypto\s+)?(?:market|markets)(?:\s+doing)?",
                r"market\s+(?:trend|trends|overview|update|sentiment)",
                r"(?:what|which)\s+(?:token|tokens|coin|coins)(?:\s+are|\s+is)?\s+(?:trending|hot|popular)",
                r"what\s+should\s+i\s+(?:buy|invest|trade)",
                r"(?:crypto|token|coin)\s+recommendations",
            ),
            handler=handle_market_trends,
        ),
        Operation(
            name="help",
            description="Get help on using the assistant",
            patterns=_compile(
                r"(?:help|assist|guide|tutorial|how\s+to\s+use)",
                r"what\s+can\s+you\s+do",
                r"(?:list|show)\s+(?:commands|features|abilities)",
                r"what\s+tokens\s+(?:do|can)\s+you\s+support",
                r"supported\s+tokens",
            ),
            handler=handle_help,
        ),
        Operation(
            name="transfer",
            description="Transfer SOL or tokens to a wallet",
            patterns=_compile(
                rf"(?:send|transfer|pay|give)\s+{_AMOUNT}\s+(?P<token>{transfer_tokens})\b",
            ),
            handler=handle_transfer,
        ),
        Operation(
            name="cryptoKnowledge",
            description="Explain crypto concepts",
            patterns=_compile(
                rf"(?:explain|what\s+(?:is|are)|tell\s+me\s+about|how\s+(?:does|do))\s+(?:an?\s+|the\s+)?(?P<topic>{topics})\b",
                rf"(?:thoughts|opinion)\s+(?:on|of|about)\s+(?P<topic>{topics})\b",
            ),
            handler=handle_crypto_knowledge,
        ),
        Operation(
            name="marketAnalysis",
            description="Provide market analysis and insights",
            patterns=_compile(
                r"(?:market|price)\s+(?:analysis|outlook|prediction|forecast)",
                r"(?:bull|bear)\s+(?:market|cycle|phase)",
                r"(?:crypto|market)\s+(?:feeling|outlook)",
            ),
            handler=handle_market_analysis,
        ),
        Operation(
            name="investmentEducation",
            description="Provide investment education and strategies",
            patterns=_compile(
                r"(?:how|what)\s+(?:to|should\s+i)\s+(?:invest|investing)",
                r"(?:investment|investing)\s+(?:strategy|strategies|advice|tips)",
                r"(?P<topic>portfolio|risk)\s+(?:management|allocation|diversification)",
                r"(?:teach|explain|educate)\s+(?:me\s+)?(?:about\s+)?(?:investing|investment)",
            ),
            handler=handle_investment_education,
        ),
    ]
