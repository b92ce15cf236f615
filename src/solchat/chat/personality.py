"""Personality filter applied to every outgoing message.

Transforms are pure: the same text and style always give the same output.
"""

import re
from typing import Protocol

from solchat.chat.memory import InteractionStyle

# Applied in order for casual users
CASUAL_REWRITES = [
    (re.compile(r"\bPlease connect your wallet first\b"), "Connect your wallet first"),
    (re.compile(r"\bI'll help you send\b"), "Sure, let's send"),
    (re.compile(r"\bYou can use this balance to swap tokens or perform other operations\."), "Plenty to play with."),
    (re.compile(r"\bI encountered an error while trying to\b"), "I hit a snag trying to"),
    (re.compile(r"\bPlease try again later\."), "Give it another shot in a bit."),
]

# Applied in order for technical users
TECHNICAL_REWRITES = [
    (re.compile(r"\bYou can use this balance to swap tokens or perform other operations\."), ""),
    (re.compile(r"\bPlease confirm this transaction\."), "Awaiting signature confirmation."),
]


class Personality(Protocol):
    """Pure text -> text filter."""

    def transform(self, text: str, style: InteractionStyle) -> str: ...


def _tidy(text: str) -> str:
    text = re.sub(r"[ \t]+\n", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    text = re.sub(r"[ \t]{2,}", " ", text)
    return text.strip()


class DefaultPersonality:
    """Light rewording by interaction style plus whitespace cleanup."""

    def transform(self, text: str, style: InteractionStyle = InteractionStyle.NEUTRAL) -> str:
        if not text:
            return text
        rewrites = {
            InteractionStyle.CASUAL: CASUAL_REWRITES,
            InteractionStyle.TECHNICAL: TECHNICAL_REWRITES,
        }.get(style, [])
        for pattern, replacement in rewrites:
            text = pattern.sub(replacement, text)
        return _tidy(text)
