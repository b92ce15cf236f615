"""Error Translator - Turn solchat errors into human steps.

This module converts classified errors into:
- A short human explanation
- Actionable next steps
- Safe retry guidance

Translation is driven by the structured category and collaborator kind,
never by matching on message text.
"""

from dataclasses import dataclass, field
from typing import Optional

from solchat.utils.errors import (
    CollaboratorError,
    CollaboratorKind,
    ErrorCategory,
    SolchatError,
    classify_error,
)


@dataclass
class TranslatedError:
    """A human-friendly error with guidance."""

    category: ErrorCategory
    user_message: str
    recommended_actions: list[str] = field(default_factory=list)
    safe_to_retry_now: bool = False
    retry_after_seconds: Optional[int] = None
    kind: Optional[CollaboratorKind] = None
    source: Optional[str] = None
    original_error: Optional[str] = None

    @property
    def retry_hint(self) -> Optional[str]:
        """Get retry timing hint."""
        if self.safe_to_retry_now:
            return "Safe to retry immediately"
        if self.retry_after_seconds:
            if self.retry_after_seconds > 60:
                minutes = self.retry_after_seconds // 60
                return f"Wait ~{minutes} minute(s) before retrying"
            return f"Wait ~{self.retry_after_seconds} seconds before retrying"
        return None


# Collaborator failures, keyed by kind
COLLABORATOR_MESSAGES = {
    CollaboratorKind.NETWORK: {
        "message": "Cannot reach {source}. Check your connection or RPC endpoint.",
        "actions": [
            "Check your internet connection",
            "Run: solchat config",
            "Try again in a few seconds",
        ],
        "safe_to_retry": True,
        "retry_seconds": 10,
    },
    CollaboratorKind.TIMEOUT: {
        "message": "{source} took too long to answer.",
        "actions": [
            "The network may be congested",
            "Try again in a few seconds",
        ],
        "safe_to_retry": True,
        "retry_seconds": 15,
    },
    CollaboratorKind.RATE_LIMIT: {
        "message": "{source} is rate limiting requests. Stop retrying and wait.",
        "actions": [
            "Wait 1-2 minutes before retrying",
            "Use a private RPC endpoint for heavier use",
        ],
        "safe_to_retry": False,
        "retry_seconds": 90,
    },
    CollaboratorKind.UNAVAILABLE: {
        "message": "{source} is unavailable right now.",
        "actions": [
            "Try again later",
            "Run: solchat ask --demo \"Check my balance\" to use offline data",
        ],
        "safe_to_retry": False,
        "retry_seconds": 60,
    },
    CollaboratorKind.INVALID_RESPONSE: {
        "message": "{source} returned data solchat could not read.",
        "actions": [
            "Try again in a few seconds",
            "Check logs for more details",
        ],
        "safe_to_retry": True,
    },
}

SOURCE_NAMES = {
    "jupiter": "The price service",
    "solana_rpc": "The Solana RPC endpoint",
    "wallet": "The wallet",
    "llm": "The language model",
}


def _source_name(source: Optional[str]) -> str:
    return SOURCE_NAMES.get(source or "", "An external service")


def translate_error(error: Exception) -> TranslatedError:
    """Translate an exception into human-friendly format.

    Args:
        error: Any exception; unknown types are classified first

    Returns:
        TranslatedError with explanation and guidance
    """
    classified = classify_error(error)
    original = str(error)[:500] if str(error) else None

    if isinstance(classified, CollaboratorError):
        entry = COLLABORATOR_MESSAGES[classified.kind]
        source = _source_name(classified.source)
        return TranslatedError(
            category=classified.category,
            user_message=entry["message"].format(source=source),
            recommended_actions=list(entry["actions"]),
            safe_to_retry_now=entry["safe_to_retry"],
            retry_after_seconds=entry.get("retry_seconds"),
            kind=classified.kind,
            source=classified.source,
            original_error=original,
        )

    if classified.category in (ErrorCategory.USER_INPUT, ErrorCategory.INSUFFICIENT_FUNDS):
        actions = list(classified.suggestions) or ["Check my balance"]
        return TranslatedError(
            category=classified.category,
            user_message=classified.message,
            recommended_actions=actions,
            safe_to_retry_now=classified.category == ErrorCategory.USER_INPUT,
            original_error=original,
        )

    if classified.category == ErrorCategory.ROUTER:
        return TranslatedError(
            category=classified.category,
            user_message="solchat could not handle that message.",
            recommended_actions=["Try rephrasing the request", "Ask: What can you help me with?"],
            safe_to_retry_now=True,
            original_error=original,
        )

    # Unknown error
    return TranslatedError(
        category=ErrorCategory.UNKNOWN,
        user_message="Something went wrong. Check the error details below.",
        recommended_actions=[
            "Run: solchat config",
            "Check logs for more details",
        ],
        safe_to_retry_now=False,
        original_error=original,
    )


def format_error_for_display(translated: TranslatedError) -> str:
    """Format translated error for Rich console display."""
    lines = [f"[error]✗ {translated.user_message}[/error]"]

    if translated.retry_hint:
        lines.append(f"[muted]{translated.retry_hint}[/muted]")

    if translated.recommended_actions:
        lines.append("")
        lines.append("[muted]Next steps:[/muted]")
        for action in translated.recommended_actions:
            if action.startswith("Run:"):
                cmd = action.replace("Run:", "").strip()
                lines.append(f"  [success]➜[/success] [command]{cmd}[/command]")
            else:
                lines.append(f"  [muted]•[/muted] {action}")

    return "\n".join(lines)
