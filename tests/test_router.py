"""Tests for the intent router and operation catalog."""

import re
from datetime import datetime, timezone

import pytest

from solchat.chat.catalog import HandlerServices, Operation, build_catalog, knowledge_topic
from solchat.chat.context import ExpertiseLevel
from solchat.chat.guard import CONFIRM_SUGGESTIONS
from solchat.chat.memory import SWAP_TIP, ConversationMemory
from solchat.chat.router import FALLBACK_MESSAGE, FALLBACK_SUGGESTIONS, IntentRouter
from solchat.chat.smalltalk import GENERAL_RESPONSES, REDIRECT_MESSAGE
from solchat.data.history import (
    Transaction,
    TransactionStatus,
    format_for_display,
    parse_date_query,
)
from solchat.utils.errors import RouterError

RECIPIENT = "11111111111111111111111111111111"
NOW = datetime(2024, 3, 15, 12, tzinfo=timezone.utc)


class StubHistory:
    """History service returning canned transactions."""

    def __init__(self, transactions=None, error=None):
        self.transactions = transactions or []
        self.error = error
        self.filters = []

    def parse_date_query(self, text):
        return parse_date_query(text, NOW)

    async def query(self, address, history_filter):
        self.filters.append(history_filter)
        if self.error:
            raise self.error
        return self.transactions

    def format_for_display(self, transactions):
        return format_for_display(transactions)


class AlwaysHigh:
    def random(self):
        return 0.99


@pytest.fixture
def router(services):
    return IntentRouter(services)


class TestOperationMatching:
    """Tests for pattern matching order."""

    def _name(self, router, text):
        matched = router.match(text)
        return matched[0].name if matched else None

    @pytest.mark.parametrize(
        "text,operation",
        [
            ("Swap 1 SOL to USDC", "swap"),
            ("convert 2.5 usdc into sol", "swap"),
            ("swap all my BONK for SOL", "swap"),
            ("Check my balance", "balance"),
            ("how much SOL do I have", "balance"),
            ("Tell me about JUP", "tokenInfo"),
            ("what is jupiter", "tokenInfo"),
            ("What is the price of SOL?", "price"),
            ("how much is JUP worth", "price"),
            ("Show my transaction history", "history"),
            ("show me transactions from yesterday", "history"),
            ("What are the market trends?", "marketTrends"),
            ("what should I buy", "marketTrends"),
            ("help", "help"),
            ("What tokens do you support?", "help"),
            ("explain staking", "cryptoKnowledge"),
            ("Tell me about Bitcoin", "cryptoKnowledge"),
            ("give me a market analysis", "marketAnalysis"),
            ("investment strategies", "investmentEducation"),
            ("portfolio management", "investmentEducation"),
        ],
    )
    def test_operation_for_message(self, router, text, operation):
        assert self._name(router, text) == operation, f"Failed for: {text}"

    def test_no_match(self, router):
        assert router.match("tell me about yourself") is None
        assert router.match("hello") is None

    def test_catalog_order(self, registry):
        names = [op.name for op in build_catalog(registry)]
        assert names == [
            "swap",
            "balance",
            "tokenInfo",
            "price",
            "history",
            "marketTrends",
            "help",
            "transfer",
            "cryptoKnowledge",
            "marketAnalysis",
            "investmentEducation",
        ]

    def test_knowledge_topic_aliases(self):
        assert knowledge_topic("NFTs") == "NFT"
        assert knowledge_topic("btc") == "Bitcoin"
        assert knowledge_topic("tea") is None


@pytest.mark.asyncio
class TestTransferRouting:
    """Transfers go through the fast path and the guard."""

    async def test_send_sol(self, router, connected_context, memory):
        response = await router.resolve(f"Send 5 SOL to {RECIPIENT}", connected_context, memory)

        assert response.intent == {
            "action": "transfer",
            "recipient": RECIPIENT,
            "amount": 5.0,
            "token": "SOL",
        }
        assert response.suggestions == CONFIRM_SUGGESTIONS

    async def test_not_shadowed_by_swap(self, router, connected_context, memory):
        """'<n> SOL to <address>' would match swap; the fast path wins."""
        response = await router.resolve(f"transfer 1 sol to {RECIPIENT}", connected_context, memory)
        assert response.action == "transfer"

    async def test_fast_path_skips_memory(self, router, connected_context, memory):
        await router.resolve(f"Send 5 SOL to {RECIPIENT}", connected_context, memory)
        assert len(memory.recent_topics) == 0

    async def test_invalid_address(self, router, connected_context, memory):
        response = await router.resolve("Send 1 SOL to invalidaddress", connected_context, memory)
        assert response.intent is None
        assert "valid Solana wallet address" in response.message

    async def test_fee_shortfall(self, router, connected_context, memory):
        response = await router.resolve(
            f"Send 9.999999 SOL to {RECIPIENT}", connected_context, memory
        )
        assert response.intent is None
        assert response.suggestions[0] == "Send 9.9999 SOL"

    async def test_disconnected(self, router, disconnected_context, memory):
        response = await router.resolve(f"pay 1 USDC to {RECIPIENT}", disconnected_context, memory)
        assert response.intent is None
        assert "connect your wallet" in response.message

    async def test_leading_decimal_point(self, router, connected_context, memory):
        response = await router.resolve(f"Send .5 SOL to {RECIPIENT}", connected_context, memory)
        assert response.intent == {
            "action": "transfer",
            "recipient": RECIPIENT,
            "amount": 0.5,
            "token": "SOL",
        }
        assert len(memory.recent_topics) == 0

    async def test_thousands_separator_is_rejected(self, router, connected_context, memory):
        response = await router.resolve(f"Send 1,000 USDC to {RECIPIENT}", connected_context, memory)
        assert response.intent is None
        assert "must be a positive number" in response.message
        assert "start your message with" not in response.message
        assert len(memory.recent_topics) == 0

    async def test_unsupported_token_to_address(self, router, connected_context, memory):
        response = await router.resolve(f"Send 5 DOGE to {RECIPIENT}", connected_context, memory)
        assert response.intent is None
        assert response.message.startswith("To send funds, give a plain positive amount")
        assert response.suggestions == ["Send 0.1 SOL to this address", "What tokens do you support?"]
        assert "swap" not in memory.recent_topics


@pytest.mark.asyncio
class TestOperationResponses:
    """Tests for handler output through the router."""

    async def test_swap(self, router, connected_context, memory):
        response = await router.resolve("Swap 1 SOL to USDC", connected_context, memory)

        assert response.intent == {"action": "swap", "from_token": "SOL", "token": "USDC", "price": 1.0}
        assert "Swap operation initiated: 1 SOL to USDC" in response.message
        assert "≈172.4000 USDC" in response.message
        assert response.suggestions == ["Check my balance", "Show my transaction history"]

    async def test_swap_unknown_token(self, router, connected_context, memory):
        response = await router.resolve("Swap 1 SOL to DOGE", connected_context, memory)
        assert response.intent is None
        assert "can't swap DOGE" in response.message

    async def test_swap_to_wallet_address(self, router, connected_context, memory):
        response = await router.resolve(f"please move 1 SOL to {RECIPIENT}", connected_context, memory)
        assert response.intent is None
        assert "looks like a wallet address" in response.message
        assert response.suggestions == ["Check my balance", "Show my transaction history"]

    async def test_token_info(self, router, connected_context, memory):
        """Tell me about JUP mentions the category and launch year."""
        response = await router.resolve("Tell me about JUP", connected_context, memory)

        assert "DEX token" in response.message
        assert "2024" in response.message
        assert "Current price: $1.21" in response.message
        assert response.intent == {"action": "tokenInfo", "token": "JUP"}
        assert memory.recent_tokens[0] == "JUP"
        assert response.suggestions == ["Swap 10 JUP to SOL", "What are the market trends?"]

    async def test_token_info_by_name(self, router, connected_context, memory):
        response = await router.resolve("what is Solana", connected_context, memory)
        assert response.intent["token"] == "SOL"

    async def test_balance(self, router, connected_context, memory):
        response = await router.resolve("Check my balance", connected_context, memory)
        assert "10.0000 SOL" in response.message
        assert "≈$1,724.00" in response.message
        assert response.intent["action"] == "balance"

    async def test_balance_disconnected(self, router, disconnected_context, memory):
        response = await router.resolve("Check my balance", disconnected_context, memory)
        assert response.message == "Please connect your wallet first to check your balance."

    async def test_price(self, router, connected_context, memory):
        response = await router.resolve("price of bonk", connected_context, memory)
        assert "$0.00002148" in response.message

    async def test_price_unavailable(self, router, connected_context, memory):
        """Without a live price the reference range is shown."""
        response = await router.resolve("price of RAY", connected_context, memory)
        assert "couldn't fetch a live price for RAY" in response.message

    async def test_market_trends(self, router, connected_context, memory):
        response = await router.resolve("What are the market trends?", connected_context, memory)
        assert "WIF (+23.1%)" in response.message
        assert "wallet holdings" in response.message

    async def test_help_lists_tokens(self, router, disconnected_context, memory):
        response = await router.resolve("help", disconnected_context, memory)
        assert "Please connect your wallet" in response.message
        assert "WIF, and AKT" in response.message

    async def test_crypto_knowledge_by_expertise(self, router, connected_context, memory):
        beginner = await router.resolve("explain staking", connected_context, memory)
        advanced_context = connected_context.model_copy(
            update={"expertise_level": ExpertiseLevel.ADVANCED}
        )
        advanced = await router.resolve("explain staking", advanced_context, memory)

        assert beginner.message.startswith("**Staking**")
        assert "Emerging" not in beginner.message
        assert "Emerging" in advanced.message

    async def test_market_analysis_by_expertise(self, router, connected_context, memory):
        context = connected_context.model_copy(update={"expertise_level": ExpertiseLevel.ADVANCED})
        response = await router.resolve("market outlook", context, memory)
        assert "Comprehensive Market Analysis" in response.message

    async def test_investment_education(self, router, connected_context, memory):
        response = await router.resolve("risk management", connected_context, memory)
        assert "Stop-loss and position sizing" in response.message
        assert "Portfolio management" not in response.message

    async def test_tip_is_appended(self, services, connected_context):
        router = IntentRouter(services)
        memory = ConversationMemory(rng=AlwaysHigh(), tip_thresholds=(0.0, 0.0, 0.0, 0.0))
        response = await router.resolve("Check my balance", connected_context, memory)
        assert response.message.endswith(f"\n\n{SWAP_TIP}")


@pytest.mark.asyncio
class TestHistoryRouting:
    """Tests for the history operation."""

    def _router(self, services, history):
        return IntentRouter(
            HandlerServices(
                registry=services.registry,
                detector=services.detector,
                prices=services.prices,
                history=history,
            )
        )

    async def test_recent_transactions(self, services, connected_context, memory):
        history = StubHistory(
            [Transaction("sig1", TransactionStatus.SUCCESS, timestamp=NOW)]
        )
        response = await self._router(services, history).resolve(
            "Show my transaction history", connected_context, memory
        )

        assert response.message.startswith("Here are your recent transactions:")
        assert f"https://explorer.solana.com/address/{connected_context.wallet_address}" in response.message
        assert response.intent == {"action": "history", "success": True, "count": 1}

    async def test_date_phrase(self, services, connected_context, memory):
        history = StubHistory()
        response = await self._router(services, history).resolve(
            "show me transactions from yesterday", connected_context, memory
        )

        assert "couldn't find any transactions for yesterday" in response.message
        assert history.filters[0].date_range.start == datetime(2024, 3, 14, tzinfo=timezone.utc)

    async def test_token_and_type_filters(self, services, connected_context, memory):
        history = StubHistory()
        await self._router(services, history).resolve(
            "show my recent transactions swap JUP", connected_context, memory
        )
        history_filter = history.filters[0]
        assert history_filter.token == "JUP"
        assert history_filter.type.value == "swap"

    async def test_history_failure(self, services, connected_context, memory):
        history = StubHistory(error=RuntimeError("rpc down"))
        response = await self._router(services, history).resolve(
            "Show my transaction history", connected_context, memory
        )
        assert "encountered an error" in response.message
        assert response.intent == {"action": "history", "success": False}

    async def test_history_unavailable(self, router, connected_context, memory):
        response = await router.resolve("Show my transaction history", connected_context, memory)
        assert "isn't available" in response.message


@pytest.mark.asyncio
class TestFallbacks:
    """Tests for unmatched messages and failures."""

    async def test_greeting(self, router, connected_context, memory):
        response = await router.resolve("Hello!", connected_context, memory)
        assert response.message in GENERAL_RESPONSES["greeting"]
        assert len(memory.recent_topics) == 0

    async def test_redirect(self, router, connected_context, memory):
        response = await router.resolve("what's the weather like", connected_context, memory)
        assert response.message == REDIRECT_MESSAGE

    async def test_bare_address(self, router, connected_context, memory):
        response = await router.resolve(RECIPIENT, connected_context, memory)
        assert "1111...1111" in response.message
        assert response.suggestions[0] == "Send 0.1 SOL to this address"

    async def test_handler_failure(self, services, connected_context, memory):
        async def explode(match, context, services):
            raise RuntimeError("boom")

        operation = Operation(
            name="boom", description="Always fails", patterns=[re.compile("boom")], handler=explode
        )
        router = IntentRouter(services, operations=[operation])

        response = await router.resolve("boom", connected_context, memory)

        assert response.message == FALLBACK_MESSAGE
        assert response.suggestions == FALLBACK_SUGGESTIONS

    async def test_handler_failure_is_logged_as_router_error(
        self, services, connected_context, memory, caplog
    ):
        original = RuntimeError("boom")

        async def explode(match, context, services):
            raise original

        operation = Operation(
            name="boom", description="Always fails", patterns=[re.compile("boom")], handler=explode
        )
        router = IntentRouter(services, operations=[operation])

        with caplog.at_level("ERROR", logger="solchat.chat.router"):
            await router.resolve("boom", connected_context, memory)

        record = caplog.records[-1]
        assert record.exc_info[0] is RouterError
        assert record.exc_info[1].original is original
        assert "boom" not in record.getMessage()
