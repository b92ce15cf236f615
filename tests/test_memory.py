"""Tests for conversation memory and sessions."""

from unittest.mock import MagicMock

import pytest

from solchat.chat.context import RequestContext
from solchat.chat.memory import (
    GENERIC_SUGGESTIONS,
    HISTORY_TIP,
    LOW_BALANCE_TIP,
    MARKET_TRENDS_TIP,
    SWAP_TIP,
    ConversationMemory,
    InteractionStyle,
    SessionStore,
)

ALWAYS = (0.0, 0.0, 0.0, 0.0)
NEVER = (1.0, 1.0, 1.0, 1.0)


class AlwaysHigh:
    """Random source whose draws clear every threshold below 1."""

    def random(self):
        return 0.99


class TestMemoryUpdate:
    """Tests for ConversationMemory.update."""

    def test_records_topic_and_tokens(self, memory):
        memory.update("Tell me about JUP", "tokenInfo", ["JUP"])
        assert list(memory.recent_topics) == ["tokenInfo"]
        assert list(memory.recent_tokens) == ["JUP"]
        assert list(memory.favorite_tokens) == ["JUP"]

    def test_recent_tokens_ring_buffer(self, memory):
        """Only the ten most recent token mentions are kept, newest first."""
        symbols = [f"T{i}" for i in range(12)]
        for symbol in symbols:
            memory.update(f"tell me about {symbol}", "tokenInfo", [symbol])

        assert len(memory.recent_tokens) == 10
        assert memory.recent_tokens[0] == "T11"
        assert "T0" not in memory.recent_tokens
        assert "T1" not in memory.recent_tokens

    def test_recent_topics_bounded(self, memory):
        for _ in range(12):
            memory.update("check my balance", "balance")
        assert len(memory.recent_topics) == 8

    def test_preferred_actions_unique(self, memory):
        for op in ["balance", "swap", "balance", "history", "tokenInfo"]:
            memory.update("x", op)
        assert list(memory.preferred_actions) == ["tokenInfo", "history", "swap"]

    def test_favorite_tokens_unique(self, memory):
        for token in ["SOL", "JUP", "SOL"]:
            memory.update("x", "tokenInfo", [token])
        assert list(memory.favorite_tokens) == ["JUP", "SOL"]
        assert list(memory.recent_tokens) == ["SOL", "JUP", "SOL"]

    def test_no_operation_leaves_topics(self, memory):
        memory.update("hello", None)
        assert len(memory.recent_topics) == 0


class TestInteractionStyle:
    """Tests for style inference."""

    def test_technical(self, memory):
        memory.update("what's the TVL and slippage on this pool", "marketTrends")
        assert memory.interaction_style == InteractionStyle.TECHNICAL

    def test_casual(self, memory):
        memory.update("wen moon lol", "marketTrends")
        assert memory.interaction_style == InteractionStyle.CASUAL

    def test_mixed_signals_keep_style(self, memory):
        memory.update("liquidity moon", "marketTrends")
        assert memory.interaction_style == InteractionStyle.NEUTRAL

    def test_prefix_match(self, memory):
        """Terms match at word starts, so 'pumping' counts as casual."""
        memory.update("is sol pumping", "marketTrends")
        assert memory.interaction_style == InteractionStyle.CASUAL


class TestSuggestions:
    """Tests for suggestion generation."""

    def test_after_balance(self, memory):
        assert memory.update("check my balance", "balance") == [
            "Swap 1 SOL to USDC",
            "Show my transaction history",
        ]

    def test_after_token_info(self, memory):
        assert memory.update("Tell me about JUP", "tokenInfo", ["JUP"]) == [
            "Swap 10 JUP to SOL",
            "What are the market trends?",
        ]

    def test_after_sol_info_uses_favorite(self, memory):
        memory.update("tell me about bonk", "tokenInfo", ["BONK"])
        suggestions = memory.update("tell me about sol", "tokenInfo", ["SOL"])
        assert suggestions[0] == "Swap 1 SOL to BONK"

    def test_after_sol_info_defaults_to_usdc(self, memory):
        suggestions = memory.update("tell me about sol", "tokenInfo", ["SOL"])
        assert suggestions[0] == "Swap 1 SOL to USDC"

    def test_after_market_trends(self, memory):
        suggestions = memory.update("market trends", "marketTrends")
        assert suggestions == ["Tell me about JUP", "Check my balance"]

    def test_generic(self, memory):
        assert memory.update("explain staking", "cryptoKnowledge") == GENERIC_SUGGESTIONS


class TestPersonalizedTip:
    """Tests for personalized_tip."""

    def test_swap_tip(self, connected_context):
        memory = ConversationMemory(rng=AlwaysHigh(), tip_thresholds=ALWAYS)
        memory.update("check my balance", "balance")
        assert memory.personalized_tip(connected_context) == SWAP_TIP

    def test_token_info_tip(self, connected_context):
        memory = ConversationMemory(rng=AlwaysHigh(), tip_thresholds=ALWAYS)
        memory.update("swap 1 sol to jup", "swap", ["SOL", "JUP"])
        assert memory.personalized_tip(connected_context) == (
            'Tip: You can learn more about JUP by asking "Tell me about JUP".'
        )

    def test_low_balance_tip_is_not_random(self):
        memory = ConversationMemory(rng=AlwaysHigh(), tip_thresholds=NEVER)
        context = RequestContext(wallet_connected=True, wallet_address="x", balance=0.01)
        assert memory.personalized_tip(context) == LOW_BALANCE_TIP

    def test_market_trends_tip(self, disconnected_context):
        memory = ConversationMemory(rng=AlwaysHigh(), tip_thresholds=ALWAYS)
        memory.update("tell me about sol", "tokenInfo", ["SOL"])
        assert memory.personalized_tip(disconnected_context) == MARKET_TRENDS_TIP

    def test_history_tip(self, connected_context):
        memory = ConversationMemory(rng=AlwaysHigh(), tip_thresholds=ALWAYS)
        for op in ["tokenInfo", "marketTrends", "help"]:
            memory.update("x", op)
        assert memory.personalized_tip(connected_context) == HISTORY_TIP

    def test_draw_must_exceed_threshold(self, connected_context):
        memory = ConversationMemory(rng=AlwaysHigh(), tip_thresholds=(0.99, 0.99, 0.99, 0.99))
        memory.update("check my balance", "balance")
        assert memory.personalized_tip(connected_context) is None

    def test_closed_gates_do_not_draw(self, disconnected_context):
        """No randomness is consumed when no candidate applies."""
        rng = MagicMock()
        memory = ConversationMemory(rng=rng, tip_thresholds=ALWAYS)
        assert memory.personalized_tip(disconnected_context) is None
        rng.random.assert_not_called()

    def test_at_most_one_tip(self, connected_context):
        memory = ConversationMemory(rng=AlwaysHigh(), tip_thresholds=ALWAYS)
        memory.update("check my balance", "balance", ["SOL"])
        tip = memory.personalized_tip(connected_context)
        assert tip == SWAP_TIP
        assert tip.count("Tip:") == 1


class TestMemoryLifecycle:
    def test_reset(self, memory):
        memory.update("wen moon", "balance", ["SOL"])
        memory.reset()
        snapshot = memory.snapshot()
        assert snapshot["recent_topics"] == []
        assert snapshot["recent_tokens"] == []
        assert snapshot["interaction_style"] == "neutral"
        assert snapshot["suggestions"] == []


class TestSessionStore:
    """Tests for SessionStore."""

    def test_get_or_create(self):
        store = SessionStore()
        session = store.get_or_create("a")
        assert store.get_or_create("a") is session
        assert "a" in store
        assert len(store) == 1

    def test_sessions_are_isolated(self):
        store = SessionStore()
        store.get_or_create("a").memory.update("check my balance", "balance")
        assert len(store.get_or_create("b").memory.recent_topics) == 0

    def test_create_generates_id(self):
        store = SessionStore()
        session = store.create()
        assert session.session_id in store

    def test_close(self):
        store = SessionStore()
        store.get_or_create("a")
        store.close("a")
        store.close("missing")
        assert "a" not in store

    def test_settings_flow_into_sessions(self):
        store = SessionStore(tip_thresholds=NEVER, low_balance_threshold=0.5, retry_budget=2)
        session = store.get_or_create("a")
        assert tuple(session.memory.tip_thresholds) == NEVER
        assert session.memory.low_balance_threshold == 0.5
        assert session.retry_budget == 2

    def test_retry_budget(self):
        session = SessionStore(retry_budget=2).get_or_create("a")
        session.record_wallet_failure()
        assert not session.has_exceeded_retries()
        session.record_wallet_failure()
        assert session.has_exceeded_retries()
        session.reset_retries()
        assert not session.has_exceeded_retries()
