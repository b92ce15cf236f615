"""Conversation memory and session state for solchat.

Each session owns a ConversationMemory: bounded recency buffers of topics
and tokens, an inferred interaction style, and the follow-up suggestions
derived from them. Sessions live in a SessionStore keyed by session id.
"""

import asyncio
import logging
import random
import re
import uuid
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Sequence

from solchat.chat.context import ConversationHistory, ExpertiseLevel, RequestContext
from solchat.chat.tokens import NATIVE_SYMBOL

logger = logging.getLogger(__name__)

MAX_RECENT_TOPICS = 8
MAX_RECENT_TOKENS = 10
MAX_PREFERRED_ACTIONS = 3
MAX_FAVORITE_TOKENS = 5

TECHNICAL_TERMS = ("tvl", "liquidity", "amm", "slippage", "liquidity pool", "apy", "yield")
CASUAL_TERMS = ("moon", "dump", "pump", "wen", "lambo", "fomo", "yolo")

DEFAULT_TIP_THRESHOLDS = (0.6, 0.6, 0.7, 0.7)

GENERIC_SUGGESTIONS = [
    "What tokens do you support?",
    "Check my balance",
    "What are the market trends?",
]

SWAP_TIP = "Tip: You can swap your SOL for other tokens by typing 'Swap 1 SOL to USDC'."
LOW_BALANCE_TIP = (
    "Tip: Your SOL balance is low. You'll need SOL to pay for transaction fees "
    "when swapping tokens."
)
MARKET_TRENDS_TIP = (
    "Tip: Ask 'What are the market trends?' to get insights on current token performance."
)
HISTORY_TIP = (
    "Tip: You can view your recent transactions by asking 'Show my transaction history'."
)


class InteractionStyle(str, Enum):
    """How the user tends to talk."""

    TECHNICAL = "technical"
    CASUAL = "casual"
    NEUTRAL = "neutral"


def _mentions(lowered: str, terms: Iterable[str]) -> bool:
    return any(re.search(rf"\b{re.escape(term)}", lowered) for term in terms)


def _push_front(buffer: deque, value: str, unique: bool = False) -> None:
    if unique and value in buffer:
        return
    buffer.appendleft(value)


@dataclass
class ConversationMemory:
    """Recency state used to personalize suggestions and tips."""

    rng: random.Random = field(default_factory=random.Random)
    tip_thresholds: Sequence[float] = DEFAULT_TIP_THRESHOLDS
    low_balance_threshold: float = 0.05

    recent_topics: deque = field(default_factory=lambda: deque(maxlen=MAX_RECENT_TOPICS))
    recent_tokens: deque = field(default_factory=lambda: deque(maxlen=MAX_RECENT_TOKENS))
    preferred_actions: deque = field(default_factory=lambda: deque(maxlen=MAX_PREFERRED_ACTIONS))
    favorite_tokens: deque = field(default_factory=lambda: deque(maxlen=MAX_FAVORITE_TOKENS))
    interaction_style: InteractionStyle = InteractionStyle.NEUTRAL
    suggestions: list[str] = field(default_factory=list)

    def update(
        self,
        prompt: str,
        matched_operation: Optional[str],
        tokens: Iterable[str] = (),
    ) -> list[str]:
        """Record a matched turn and regenerate suggestions.

        Args:
            prompt: The raw user message
            matched_operation: Name of the operation that fired, if any
            tokens: Token symbols mentioned in the message

        Returns:
            The regenerated suggestion list
        """
        if matched_operation:
            _push_front(self.recent_topics, matched_operation)
            _push_front(self.preferred_actions, matched_operation, unique=True)

        for token in tokens:
            _push_front(self.recent_tokens, token)
            _push_front(self.favorite_tokens, token, unique=True)

        self._infer_style(prompt)
        self.suggestions = self._generate_suggestions()
        return self.suggestions

    def _infer_style(self, prompt: str) -> None:
        lowered = prompt.lower()
        technical = _mentions(lowered, TECHNICAL_TERMS)
        casual = _mentions(lowered, CASUAL_TERMS)
        # Mixed or absent signals leave the style alone
        if technical and not casual:
            self.interaction_style = InteractionStyle.TECHNICAL
        elif casual and not technical:
            self.interaction_style = InteractionStyle.CASUAL

    def _generate_suggestions(self) -> list[str]:
        topic = self.recent_topics[0] if self.recent_topics else None
        last_token = self.recent_tokens[0] if self.recent_tokens else None
        suggestions: list[str] = []

        if topic == "balance":
            suggestions += ["Swap 1 SOL to USDC", "Show my transaction history"]
        elif topic == "tokenInfo" and last_token:
            if last_token != NATIVE_SYMBOL:
                suggestions.append(f"Swap 10 {last_token} to SOL")
            else:
                target = next(
                    (t for t in self.favorite_tokens if t != NATIVE_SYMBOL), "USDC"
                )
                suggestions.append(f"Swap 1 SOL to {target}")
            suggestions.append("What are the market trends?")
        elif topic == "marketTrends":
            suggestions += [f"Tell me about {last_token or 'JUP'}", "Check my balance"]
        elif topic == "history":
            suggestions += ["Check my balance", "What are the market trends?"]
        elif topic == "swap":
            suggestions += ["Check my balance", "Show my transaction history"]

        if not suggestions:
            suggestions = list(GENERIC_SUGGESTIONS)
        return suggestions[:3]

    def _draw(self, index: int) -> bool:
        return self.rng.random() > self.tip_thresholds[index]

    def personalized_tip(self, context: RequestContext) -> Optional[str]:
        """Pick at most one tip; candidates are tried in a fixed order.

        Each candidate's context gate is checked before its random draw so
        that a closed gate never consumes randomness.
        """
        topics = self.recent_topics

        if "balance" in topics and "swap" not in topics and self._draw(0):
            return SWAP_TIP

        if "swap" in topics and "tokenInfo" not in topics and self._draw(1):
            token = (self.favorite_tokens[0] if self.favorite_tokens else None) or (
                self.recent_tokens[0] if self.recent_tokens else None
            )
            if token:
                return f'Tip: You can learn more about {token} by asking "Tell me about {token}".'

        if context.wallet_connected and context.balance < self.low_balance_threshold:
            return LOW_BALANCE_TIP

        if "marketTrends" not in topics and self.recent_tokens and self._draw(2):
            return MARKET_TRENDS_TIP

        if (
            context.wallet_connected
            and len(topics) > 2
            and "history" not in topics
            and self._draw(3)
        ):
            return HISTORY_TIP

        return None

    def reset(self) -> None:
        """Forget everything except the randomness source and tuning."""
        self.recent_topics.clear()
        self.recent_tokens.clear()
        self.preferred_actions.clear()
        self.favorite_tokens.clear()
        self.interaction_style = InteractionStyle.NEUTRAL
        self.suggestions = []

    def snapshot(self) -> dict:
        """Plain-data view of the memory."""
        return {
            "recent_topics": list(self.recent_topics),
            "recent_tokens": list(self.recent_tokens),
            "preferred_actions": list(self.preferred_actions),
            "favorite_tokens": list(self.favorite_tokens),
            "interaction_style": self.interaction_style.value,
            "suggestions": list(self.suggestions),
        }


@dataclass
class Session:
    """Per-session state: memory, message log, lock and wallet retry budget."""

    session_id: str
    memory: ConversationMemory
    history: ConversationHistory = field(default_factory=ConversationHistory)
    expertise_level: ExpertiseLevel = ExpertiseLevel.BEGINNER
    retry_budget: int = 3
    wallet_failures: int = 0
    wallet_address: Optional[str] = None
    welcomed: bool = False
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def record_wallet_failure(self) -> None:
        self.wallet_failures += 1

    def reset_retries(self) -> None:
        self.wallet_failures = 0

    def has_exceeded_retries(self) -> bool:
        return self.wallet_failures >= self.retry_budget


class SessionStore:
    """In-memory sessions keyed by id. Nothing is persisted."""

    def __init__(
        self,
        rng_factory=random.Random,
        tip_thresholds: Sequence[float] = DEFAULT_TIP_THRESHOLDS,
        low_balance_threshold: float = 0.05,
        retry_budget: int = 3,
    ):
        self._sessions: dict[str, Session] = {}
        self._rng_factory = rng_factory
        self._tip_thresholds = tuple(tip_thresholds)
        self._low_balance_threshold = low_balance_threshold
        self._retry_budget = retry_budget

    def create(self, session_id: Optional[str] = None) -> Session:
        """Start a fresh session, replacing any session with the same id."""
        session_id = session_id or uuid.uuid4().hex[:8]
        memory = ConversationMemory(
            rng=self._rng_factory(),
            tip_thresholds=self._tip_thresholds,
            low_balance_threshold=self._low_balance_threshold,
        )
        session = Session(
            session_id=session_id, memory=memory, retry_budget=self._retry_budget
        )
        self._sessions[session_id] = session
        logger.debug(f"Created session {session_id}")
        return session

    def get(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def get_or_create(self, session_id: str) -> Session:
        return self._sessions.get(session_id) or self.create(session_id)

    def close(self, session_id: str) -> None:
        """Tear down a session and its memory."""
        if self._sessions.pop(session_id, None) is not None:
            logger.debug(f"Closed session {session_id}")

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
