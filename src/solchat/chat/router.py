"""Intent router - maps a user message to an operation handler.

Resolution order:
1. Transfer fast path for messages that start with a transfer verb
2. Operations in catalog order, patterns in listed order
3. Bare wallet address, then general chat

The router never raises; unexpected failures become a fixed reply.
"""

import logging
import random
import re
from typing import Optional

from solchat.chat.catalog import HandlerServices, Operation, build_catalog, transfer_alternation
from solchat.chat.context import AISystemResponse, RequestContext
from solchat.chat.memory import ConversationMemory
from solchat.chat.smalltalk import general_chat_reply
from solchat.chat.tokens import TRANSFER_SYMBOLS
from solchat.data.addresses import truncate_address
from solchat.utils.errors import RouterError

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = (
    "Sorry, I couldn't understand that command. Please try something like "
    "'Send 0.001 SOL to [wallet address]'."
)
FALLBACK_SUGGESTIONS = ["Check my balance", "What can you help me with?"]

TRANSFER_VERBS = ("send", "transfer", "pay", "give")

TRANSFER_HELP = (
    "To send funds, give a plain positive amount and a supported token, for example "
    "'Send 0.1 SOL to [wallet address]'. Supported tokens: {tokens}."
)


class IntentRouter:
    """Routes free text to operations and keeps conversation memory current."""

    def __init__(
        self,
        services: HandlerServices,
        operations: Optional[list[Operation]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.services = services
        self.operations = operations if operations is not None else build_catalog(services.registry)
        self.rng = rng or random.Random()
        self._fast_path = re.compile(
            rf"^(?:{'|'.join(TRANSFER_VERBS)})\s+(?P<amount>\S+)\s+(?P<token>{transfer_alternation()})\b",
            re.IGNORECASE,
        )
        self._operations_by_name = {op.name: op for op in self.operations}

    def get_operation(self, name: str) -> Optional[Operation]:
        return self._operations_by_name.get(name)

    def match(self, prompt: str) -> Optional[tuple[Operation, re.Match]]:
        """First operation (declared order) whose first pattern matches."""
        for operation in self.operations:
            m = operation.match(prompt)
            if m:
                return operation, m
        return None

    async def resolve(
        self,
        prompt: str,
        context: RequestContext,
        memory: ConversationMemory,
    ) -> AISystemResponse:
        """Resolve a message into a response.

        Args:
            prompt: Raw user message
            context: Wallet snapshot for this message
            memory: The session's conversation memory

        Returns:
            The handler's response, or a fallback reply
        """
        try:
            return await self._resolve(prompt, context, memory)
        except Exception as e:
            error = RouterError(f"Router failed on message: {type(e).__name__}", original=e)
            logger.error(error.message, exc_info=error)
            return AISystemResponse(message=FALLBACK_MESSAGE, suggestions=list(FALLBACK_SUGGESTIONS))

    async def _resolve(
        self,
        prompt: str,
        context: RequestContext,
        memory: ConversationMemory,
    ) -> AISystemResponse:
        text = prompt.strip()

        # Transfers must not be shadowed by the generic "<n> <A> to <B>" swap pattern
        if text.lower().startswith(TRANSFER_VERBS):
            fast = self._fast_path.match(text)
            transfer = self.get_operation("transfer")
            if fast and transfer is not None:
                logger.debug("Transfer fast path")
                enhanced = context.model_copy(update={"original_prompt": prompt})
                return await transfer.handler(fast, enhanced, self.services)
            if self.services.detector.detect(text):
                return AISystemResponse(
                    message=TRANSFER_HELP.format(tokens=", ".join(TRANSFER_SYMBOLS)),
                    suggestions=["Send 0.1 SOL to this address", "What tokens do you support?"],
                )

        matched = self.match(text)
        if matched:
            operation, m = matched
            logger.debug(f"Matched operation {operation.name}")
            tokens = self.services.registry.mentioned_in(text)
            suggestions = memory.update(prompt, operation.name, tokens)

            result = await operation.handler(m, context, self.services)

            message = result.message
            tip = memory.personalized_tip(context)
            if tip:
                message = f"{message}\n\n{tip}"

            return result.model_copy(update={"message": message, "suggestions": list(suggestions)})

        address = self.services.detector.detect(prompt)
        if address:
            return AISystemResponse(
                message=(
                    f"I've detected a Solana wallet address: {truncate_address(address)}. If you'd "
                    "like to send funds to this address, please let me know the amount and token "
                    '(e.g., "Send 0.1 SOL to this address").'
                ),
                suggestions=[
                    "Send 0.1 SOL to this address",
                    "Send 5 USDC to this address",
                    "What is this wallet?",
                ],
            )

        return AISystemResponse(message=general_chat_reply(text, self.rng))
