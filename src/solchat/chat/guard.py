"""Transfer safety checks.

A transfer intent is only produced once the wallet is connected, the
message carries a valid recipient address, the amount is a positive
number, the token is supported and the SOL balance covers amount and
network fee. All balance arithmetic is done in Decimal.
"""

import logging
from dataclasses import dataclass, field
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Optional, Union

from solchat.chat.context import RequestContext
from solchat.chat.tokens import TokenRegistry, get_registry
from solchat.data.addresses import AddressDetector, truncate_address
from solchat.utils.errors import InsufficientFundsError, UserInputError

logger = logging.getLogger(__name__)

NETWORK_FEE = Decimal("0.000005")
SUGGESTION_QUANTUM = Decimal("0.0001")

CONFIRM_SUGGESTIONS = ["Confirm", "Cancel", "Check my balance"]


def format_amount(value: Decimal) -> str:
    """Render a Decimal without exponent or trailing zeros."""
    return format(value.normalize(), "f")


@dataclass(frozen=True)
class TransferIntent:
    """A transfer that passed every safety check."""

    recipient: str
    token: str
    amount: Decimal

    def to_dict(self) -> dict:
        return {
            "action": "transfer",
            "recipient": self.recipient,
            "amount": float(self.amount),
            "token": self.token,
        }


@dataclass(frozen=True)
class TransferApproval:
    """Guard passed; the user is asked to confirm."""

    intent: TransferIntent
    message: str
    suggestions: list[str] = field(default_factory=lambda: list(CONFIRM_SUGGESTIONS))


@dataclass(frozen=True)
class Clarification:
    """Guard refused; no intent may be emitted."""

    message: str
    suggestions: list[str] = field(default_factory=list)
    suggested_amount: Optional[Decimal] = None

    @property
    def intent(self) -> None:
        return None


GuardResult = Union[TransferApproval, Clarification]


def _parse_amount(amount_text: str) -> Decimal:
    try:
        amount = Decimal(str(amount_text).strip())
    except (InvalidOperation, ValueError):
        amount = None
    if amount is None or not amount.is_finite() or amount <= 0:
        raise UserInputError(
            "The amount to transfer must be a positive number.",
            suggestions=["Send 0.001 SOL", "How much SOL should I transfer?"],
        )
    return amount


def _check_transfer(
    amount_text: str,
    token_text: str,
    raw_message: str,
    context: RequestContext,
    detector: AddressDetector,
    registry: TokenRegistry,
    fee: Decimal,
) -> TransferApproval:
    if not context.wallet_connected:
        raise UserInputError(
            "Please connect your wallet first to make a transfer.",
            suggestions=["How do I connect my wallet?", "What is a wallet?"],
        )

    recipient = detector.detect(raw_message or "")
    if not recipient:
        raise UserInputError(
            "I couldn't find a valid Solana wallet address in your message. "
            "Please provide a complete Solana address.",
            suggestions=[
                "What does a Solana address look like?",
                "How do I copy a wallet address?",
            ],
        )

    amount = _parse_amount(amount_text)

    token = registry.get(token_text or "")
    if token is None:
        raise UserInputError(
            f"I can't transfer {token_text} yet. Supported tokens: {', '.join(registry.symbols)}.",
            suggestions=["What tokens do you support?", "Check my balance"],
        )

    balance = Decimal(str(context.balance))

    if token.is_native:
        if amount > balance:
            shortfall = amount - balance
            raise InsufficientFundsError(
                f"You don't have enough SOL for this transfer. Your current balance is "
                f"{balance:.4f} SOL, but you're trying to send {format_amount(amount)} SOL "
                f"({format_amount(shortfall)} SOL short).",
                suggestions=["Check my balance", "How do I get more SOL?"],
                shortfall=shortfall,
            )
        required = amount + fee
        if required > balance:
            suggested = max(Decimal(0), balance - fee).quantize(
                SUGGESTION_QUANTUM, rounding=ROUND_DOWN
            )
            raise InsufficientFundsError(
                f"You need to keep some SOL for transaction fees. Your balance is "
                f"{balance:.4f} SOL, and this transaction requires "
                f"{format_amount(required)} SOL (including fees).",
                suggestions=(
                    [f"Send {suggested} SOL", "Check my balance"]
                    if suggested > 0
                    else ["How do I get more SOL?", "Check my balance"]
                ),
                shortfall=required - balance,
                suggested_amount=suggested,
            )
    else:
        # TODO: verify SPL token balance once token_balances carries per-mint amounts
        if balance < fee:
            raise InsufficientFundsError(
                f"You don't have enough SOL to cover the transaction fee. Your current SOL "
                f"balance is {balance:.6f} SOL, but you need at least {fee} SOL for fees.",
                suggestions=["Check my balance", "How do I get more SOL?"],
                shortfall=fee - balance,
            )

    intent = TransferIntent(recipient=recipient, token=token.symbol, amount=amount)
    return TransferApproval(
        intent=intent,
        message=(
            f"I'll help you send {format_amount(amount)} {token.symbol} to "
            f"{truncate_address(recipient)}. Please confirm this transaction."
        ),
    )


def validate_transfer(
    amount_text: str,
    token_text: str,
    raw_message: str,
    context: RequestContext,
    detector: AddressDetector,
    registry: Optional[TokenRegistry] = None,
    fee: Decimal = NETWORK_FEE,
) -> GuardResult:
    """Run the transfer checks in order, stopping at the first failure.

    Args:
        amount_text: Amount exactly as the user typed it
        token_text: Token symbol as the user typed it
        raw_message: Full original message, case preserved, for address detection
        context: Wallet snapshot for this message
        detector: Address detector used to find the recipient
        registry: Supported tokens
        fee: Network fee in SOL

    Returns:
        TransferApproval when every check passes, otherwise a Clarification
    """
    registry = registry if registry is not None else get_registry()
    try:
        return _check_transfer(
            amount_text, token_text, raw_message, context, detector, registry, fee
        )
    except InsufficientFundsError as e:
        logger.info(f"Transfer refused: insufficient funds ({e.shortfall} short)")
        return Clarification(
            message=e.message,
            suggestions=e.suggestions,
            suggested_amount=e.suggested_amount,
        )
    except UserInputError as e:
        logger.info("Transfer refused: needs clarification")
        return Clarification(message=e.message, suggestions=e.suggestions)
