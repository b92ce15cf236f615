"""Request and conversation context for solchat.

This module holds:
- RequestContext, the per-message wallet snapshot handed to handlers
- AISystemResponse, the shape every turn returns
- ConversationHistory, the role-tagged message log for a session
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from solchat.data.wallet import TokenBalance, WalletState


class ExpertiseLevel(str, Enum):
    """How much crypto background the user has."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class RequestContext(BaseModel):
    """Wallet and user state for a single message. Never persisted."""

    wallet_connected: bool = False
    wallet_address: Optional[str] = None
    balance: float = Field(default=0.0, ge=0)
    token_balances: list[TokenBalance] = Field(default_factory=list)
    expertise_level: ExpertiseLevel = ExpertiseLevel.BEGINNER
    original_prompt: Optional[str] = None

    @classmethod
    def from_wallet(
        cls,
        state: WalletState,
        expertise_level: ExpertiseLevel = ExpertiseLevel.BEGINNER,
    ) -> "RequestContext":
        return cls(
            wallet_connected=state.connected and state.address is not None,
            wallet_address=state.address,
            balance=state.balance,
            token_balances=list(state.token_balances),
            expertise_level=expertise_level,
        )


MAX_SUGGESTIONS = 3


class AISystemResponse(BaseModel):
    """What the assistant returns for one user turn."""

    message: str
    intent: Optional[dict[str, Any]] = None
    suggestions: Optional[list[str]] = None
    data: Optional[dict[str, Any]] = None

    @field_validator("suggestions")
    @classmethod
    def _cap_suggestions(cls, value: Optional[list[str]]) -> Optional[list[str]]:
        if value is None:
            return None
        return list(value)[:MAX_SUGGESTIONS]

    @property
    def action(self) -> Optional[str]:
        """The intent's action tag, if any."""
        return self.intent.get("action") if self.intent else None


@dataclass
class Message:
    """Represents a single message in the conversation."""

    role: str  # "user" or "assistant"
    content: str
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class ConversationHistory:
    """Role-tagged message log, bounded to avoid unbounded growth."""

    messages: deque = field(default_factory=lambda: deque(maxlen=50))

    def add_user_message(self, content: str) -> None:
        self.messages.append(Message(role="user", content=content))

    def add_assistant_message(self, content: str) -> None:
        self.messages.append(Message(role="assistant", content=content))

    def clear(self) -> None:
        self.messages.clear()

    def __len__(self) -> int:
        return len(self.messages)

    def get_history_for_llm(self, max_messages: int = 10) -> list[dict]:
        """Get recent history formatted for chat completion APIs.

        Args:
            max_messages: Maximum number of messages to include

        Returns:
            List of message dicts with role and content
        """
        recent = list(self.messages)[-max_messages:]
        return [{"role": msg.role, "content": msg.content} for msg in recent]
