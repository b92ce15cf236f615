"""Session orchestrator - one call per user turn.

Wraps the intent router with the per-turn pipeline:
small talk -> wallet snapshot -> generator or router -> personality ->
optional enrichment -> suggestions. Always returns a response.
"""

import asyncio
import logging
import random
from decimal import Decimal
from typing import Any, Awaitable, Optional

from pydantic import BaseModel

from solchat.chat.catalog import HandlerServices
from solchat.chat.context import AISystemResponse, ExpertiseLevel, RequestContext
from solchat.chat.llm import OpenAIResponseGenerator, ResponseGenerator
from solchat.chat.memory import InteractionStyle, Session, SessionStore
from solchat.chat.personality import DefaultPersonality, Personality
from solchat.chat.router import IntentRouter
from solchat.chat.smalltalk import casual_suggestions, handle_small_talk
from solchat.chat.tokens import get_registry
from solchat.config.settings import Settings, get_settings
from solchat.data.addresses import Base58AddressDetector
from solchat.data.history import SolanaRpcHistory
from solchat.data.market import MarketIntelligence
from solchat.data.prices import JupiterPriceClient
from solchat.data.wallet import StaticWalletProvider, WalletProvider, WalletState
from solchat.utils.errors import RouterError, classify_error

logger = logging.getLogger(__name__)

DEFAULT_SESSION = "default"

FALLBACK_MESSAGE = (
    "I'm having a moment here - seems like something went sideways with processing your "
    "request. Could we try again with different wording?"
)
FALLBACK_SUGGESTIONS = ["Check my balance", "Tell me about Solana", "What are current market trends?"]

WELCOME_MESSAGE = (
    "I see you've connected your wallet. Smart move. Now I have what I need to really help you "
    "navigate the crypto landscape. What's your first move?"
)

ADVICE_PREFIX = "Want my advice? "
# Suggestions that must stay clickable verbatim
_PLAIN_SUGGESTION_PREFIXES = ("Check", "Connect", "Confirm", "Cancel")


class ProcessOptions(BaseModel):
    """Per-call options for process_message."""

    session_id: str = DEFAULT_SESSION
    include_market_data: bool = False
    include_token_data: bool = False
    full_analysis: bool = False


class SessionOrchestrator:
    """Runs user turns against per-session state."""

    def __init__(
        self,
        router: IntentRouter,
        wallet: WalletProvider,
        store: Optional[SessionStore] = None,
        personality: Optional[Personality] = None,
        generator: Optional[ResponseGenerator] = None,
        market: Optional[MarketIntelligence] = None,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings or get_settings()
        assistant = self.settings.assistant
        self.router = router
        self.wallet = wallet
        self.store = store if store is not None else SessionStore(
            tip_thresholds=assistant.tip_thresholds,
            low_balance_threshold=assistant.low_balance_threshold,
            retry_budget=assistant.wallet_retry_budget,
        )
        self.personality = personality or DefaultPersonality()
        self.generator = generator
        self.market = market
        self.rng = rng or random.Random()
        self.timeout = assistant.collaborator_timeout
        self.advice_probability = assistant.advice_prefix_probability

    # -- session lifecycle -------------------------------------------------

    def initialize_with_wallet(self, address: Optional[str], session_id: str = DEFAULT_SESSION) -> None:
        """Attach or detach a wallet for a session.

        The first connection records a one-time welcome message. Disconnecting
        clears the session's message history and memory.
        """
        session = self.store.get_or_create(session_id)
        if address:
            session.wallet_address = address
            if not session.welcomed:
                session.welcomed = True
                session.history.add_assistant_message(
                    self.personality.transform(WELCOME_MESSAGE, InteractionStyle.NEUTRAL)
                )
        else:
            session.wallet_address = None
            session.history.clear()
            session.memory.reset()

    def set_expertise_level(self, level: ExpertiseLevel, session_id: str = DEFAULT_SESSION) -> None:
        self.store.get_or_create(session_id).expertise_level = level

    def reset_retries(self, session_id: str = DEFAULT_SESSION) -> None:
        """Allow the wallet provider to be called again after repeated failures."""
        session = self.store.get(session_id)
        if session is not None:
            session.reset_retries()

    def close_session(self, session_id: str) -> None:
        self.store.close(session_id)

    def session_snapshot(self, session_id: str = DEFAULT_SESSION) -> dict:
        """Plain-data view of a session, for display and debugging."""
        session = self.store.get(session_id)
        if session is None:
            return {}
        return {
            "session_id": session.session_id,
            "expertise_level": session.expertise_level.value,
            "messages": len(session.history),
            "wallet_failures": session.wallet_failures,
            "memory": session.memory.snapshot(),
        }

    async def close(self) -> None:
        """Close HTTP clients held by collaborators."""
        services = self.router.services
        for collaborator in (services.prices, services.history, self.wallet):
            close = getattr(collaborator, "close", None)
            if close is not None:
                await close()

    # -- turn processing ---------------------------------------------------

    async def process_message(
        self,
        raw_text: str,
        options: Optional[ProcessOptions] = None,
    ) -> AISystemResponse:
        """Process one user message.

        Args:
            raw_text: What the user typed
            options: Session id and enrichment flags

        Returns:
            The response for this turn; never raises
        """
        options = options or ProcessOptions()
        try:
            reply = handle_small_talk(raw_text, self.rng)
            if reply:
                return AISystemResponse(message=reply, suggestions=casual_suggestions(self.rng))

            session = self.store.get_or_create(options.session_id)
            async with session.lock:
                return await self._process(raw_text, options, session)
        except Exception as e:
            error = RouterError(f"Failed to process message: {type(e).__name__}", original=e)
            logger.error(error.message, exc_info=error)
            return AISystemResponse(message=FALLBACK_MESSAGE, suggestions=list(FALLBACK_SUGGESTIONS))

    async def _process(self, raw_text: str, options: ProcessOptions, session: Session) -> AISystemResponse:
        wallet = await self._wallet_snapshot(session)
        context = RequestContext.from_wallet(wallet, session.expertise_level)

        history = session.history.get_history_for_llm()
        session.history.add_user_message(raw_text)

        response = await self._generate(raw_text, context, history)
        if response is None:
            response = await self.router.resolve(raw_text, context, session.memory)

        message = self.personality.transform(response.message, session.memory.interaction_style)
        session.history.add_assistant_message(message)

        data = dict(response.data or {})
        await self._enrich(raw_text, options, data, session)

        suggestions = list(response.suggestions or session.memory.suggestions or [])
        self._add_advice(suggestions)

        return AISystemResponse(
            message=message,
            intent=response.intent,
            suggestions=suggestions or None,
            data=data or None,
        )

    async def _wallet_snapshot(self, session: Session) -> WalletState:
        """Current wallet state, or a disconnected snapshot once retries run out."""
        if session.has_exceeded_retries():
            logger.debug(f"Wallet retry budget spent for session {session.session_id}")
            return WalletState.disconnected()

        try:
            state = await asyncio.wait_for(self.wallet.get_state(), timeout=self.timeout)
        except Exception as e:
            session.record_wallet_failure()
            error = classify_error(e, source="wallet")
            if session.has_exceeded_retries():
                logger.error(
                    f"Wallet unavailable after {session.wallet_failures} attempts "
                    f"({error.category.value}); continuing without wallet until reset"
                )
            else:
                logger.warning(f"Wallet snapshot failed ({error.category.value})")
            return WalletState.disconnected()

        session.reset_retries()
        if session.wallet_address and not state.address:
            state = state.model_copy(update={"address": session.wallet_address})
        return state

    async def _generate(
        self,
        raw_text: str,
        context: RequestContext,
        history: list[dict],
    ) -> Optional[AISystemResponse]:
        if self.generator is None or not getattr(self.generator, "is_available", True):
            return None
        try:
            return await asyncio.wait_for(
                self.generator.generate(raw_text, context, history), timeout=self.timeout
            )
        except Exception as e:
            error = classify_error(e, source="llm")
            logger.warning(f"Generator unavailable ({error.category.value}); using router")
            return None

    async def _call(self, awaitable: Awaitable, what: str) -> Optional[Any]:
        """Await an enrichment call, treating failure or timeout as no data."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except Exception as e:
            error = classify_error(e, source="market")
            logger.warning(f"{what} unavailable ({error.category.value})")
            return None

    async def _enrich(self, raw_text: str, options: ProcessOptions, data: dict, session: Session) -> None:
        """Merge requested enrichment into data without replacing existing keys."""
        if not (options.include_market_data or options.include_token_data or options.full_analysis):
            return

        registry = self.router.services.registry
        tokens = registry.mentioned_in(raw_text)
        primary = tokens[0] if tokens else None

        if options.include_market_data and self.market is not None:
            if primary:
                trend = await self._call(self.market.analyze_price_trend(primary), "Price trend")
                if trend:
                    data.setdefault("market_data", {"token": primary, "price_trend": trend})
            else:
                sentiment = await self._call(self.market.get_market_sentiment(), "Market sentiment")
                if sentiment:
                    data.setdefault("market_data", {"sentiment": sentiment})

        if options.include_token_data and primary:
            token = registry.get(primary)
            if token is not None:
                data.setdefault("token_data", token.model_dump(mode="json"))

        if options.full_analysis and self.market is not None:
            analysis = await self._call(
                self.market.get_comprehensive_analysis(primary), "Market analysis"
            )
            if analysis:
                analysis["short_term_outlook"] = self.personality.transform(
                    analysis["short_term_outlook"], session.memory.interaction_style
                )
                data.setdefault("analysis", analysis)

    def _add_advice(self, suggestions: list[str]) -> None:
        """Occasionally prefix one suggestion with a personal touch."""
        if not suggestions or self.rng.random() >= self.advice_probability:
            return
        index = self.rng.randrange(len(suggestions))
        if not suggestions[index].startswith(_PLAIN_SUGGESTION_PREFIXES):
            suggestions[index] = f"{ADVICE_PREFIX}{suggestions[index]}"


def create_orchestrator(
    settings: Optional[Settings] = None,
    wallet: Optional[WalletProvider] = None,
    rng: Optional[random.Random] = None,
) -> SessionOrchestrator:
    """Wire the default collaborators from settings."""
    settings = settings or get_settings()
    registry = get_registry()
    prices = JupiterPriceClient(registry=registry, settings=settings)

    services = HandlerServices(
        registry=registry,
        detector=Base58AddressDetector(),
        prices=prices,
        history=None if settings.demo_mode else SolanaRpcHistory(settings=settings),
        network_fee=Decimal(settings.assistant.network_fee_sol),
        history_limit=settings.rpc.history_limit,
        explorer_url=settings.rpc.explorer_url,
    )

    generator = OpenAIResponseGenerator(settings=settings) if settings.llm.enabled else None

    return SessionOrchestrator(
        router=IntentRouter(services, rng=rng),
        wallet=wallet or StaticWalletProvider(),
        generator=generator,
        market=MarketIntelligence(oracle=prices, registry=registry),
        settings=settings,
        rng=rng,
    )
