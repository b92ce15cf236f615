"""Model-backed response generation via an OpenAI-compatible API.

Disabled unless ``SOLCHAT_LLM__ENABLED`` is set and an API key is
available. The orchestrator falls back to the intent router whenever the
generator is unavailable or fails.
"""

import json
import logging
from typing import Optional, Protocol

from openai import AsyncOpenAI

from solchat.chat.context import AISystemResponse, RequestContext
from solchat.config.settings import Settings, get_settings
from solchat.data.addresses import truncate_address
from solchat.utils.errors import CollaboratorError, CollaboratorKind, classify_error

logger = logging.getLogger(__name__)

SOURCE = "llm"

SYSTEM_PROMPT = """You are solchat, a Solana wallet assistant. Output ONLY valid JSON matching the schema below.

RULES:
- Never request seed phrases or private keys
- Never claim a transaction was sent; transfers and swaps are only proposed
- Keep replies short (1-4 sentences)
- Keep addresses short: first 4...last 4 chars
- Suggestions are short follow-up messages the user could send next

SCHEMA:
{{
  "message": string,
  "suggestions": [string, string, string]
}}

Current context:
{context}

Respond with ONLY the JSON object."""


class ResponseGenerator(Protocol):
    """Black-box text generator consulted before the router."""

    async def generate(
        self,
        prompt: str,
        context: RequestContext,
        history: list[dict],
    ) -> AISystemResponse: ...


def _context_summary(context: RequestContext) -> str:
    if not context.wallet_connected:
        return "Wallet: not connected"
    holdings = ", ".join(f"{b.amount:g} {b.symbol}" for b in context.token_balances) or "none"
    return (
        f"Wallet: {truncate_address(context.wallet_address)}\n"
        f"SOL balance: {context.balance:.4f}\n"
        f"Token balances: {holdings}\n"
        f"User expertise: {context.expertise_level.value}"
    )


class OpenAIResponseGenerator:
    """Generator backed by any OpenAI-compatible chat completions endpoint."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.settings = settings or get_settings()
        self._client = client

    @property
    def is_available(self) -> bool:
        """Check if the generator may be used."""
        llm = self.settings.llm
        if self.settings.demo_mode or not llm.enabled:
            return False
        return self._client is not None or bool(llm.api_key)

    def _get_client(self) -> AsyncOpenAI:
        """Get or create the async OpenAI client."""
        if self._client is None:
            if not self.settings.llm.api_key:
                raise CollaboratorError(
                    "No LLM API key configured", kind=CollaboratorKind.UNAVAILABLE, source=SOURCE
                )
            self._client = AsyncOpenAI(
                api_key=self.settings.llm.api_key,
                base_url=self.settings.llm.base_url,
                timeout=self.settings.llm.timeout,
            )
        return self._client

    async def generate(
        self,
        prompt: str,
        context: RequestContext,
        history: list[dict],
    ) -> AISystemResponse:
        """Ask the model for a reply.

        Raises:
            CollaboratorError: The call failed or the reply was not usable
        """
        llm = self.settings.llm
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT.format(context=_context_summary(context))},
            *history,
            {"role": "user", "content": prompt},
        ]

        try:
            client = self._get_client()
            response = await client.chat.completions.create(
                model=llm.model,
                messages=messages,
                temperature=llm.temperature,
                max_tokens=llm.max_tokens,
            )
            content = (response.choices[0].message.content or "").strip()
        except Exception as e:
            error = classify_error(e, source=SOURCE)
            logger.warning(f"LLM call failed: {error.message}")
            raise error from e

        # Strip markdown code fences if the model wrapped its JSON
        if content.startswith("```"):
            content = content.split("```")[1]
            if content.startswith("json"):
                content = content[4:]
            content = content.strip()

        try:
            data = json.loads(content)
            message = str(data["message"]).strip()
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            raise CollaboratorError(
                "Model reply was not valid JSON",
                kind=CollaboratorKind.INVALID_RESPONSE,
                source=SOURCE,
                original=e,
            ) from e

        if not message:
            raise CollaboratorError(
                "Model returned an empty reply", kind=CollaboratorKind.INVALID_RESPONSE, source=SOURCE
            )

        suggestions = [str(s) for s in data.get("suggestions") or [] if s]
        return AISystemResponse(message=message, suggestions=suggestions or None)
