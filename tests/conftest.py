"""Pytest configuration and fixtures for solchat tests."""

import os
import random

import pytest

# Set demo mode for tests
os.environ["SOLCHAT_DEMO_MODE"] = "true"

USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
SYSTEM_PROGRAM = "11111111111111111111111111111111"

# Never clears a random draw, so tips never fire by chance
NO_TIPS = (1.0, 1.0, 1.0, 1.0)


@pytest.fixture
def registry():
    """The default token registry."""
    from solchat.chat.tokens import DEFAULT_TOKENS, TokenRegistry

    return TokenRegistry(DEFAULT_TOKENS)


@pytest.fixture
def detector():
    """Base58 address detector."""
    from solchat.data.addresses import Base58AddressDetector

    return Base58AddressDetector()


@pytest.fixture
def demo_settings():
    """Settings with demo prices and no random tips or advice."""
    from solchat.config.settings import AssistantSettings, Settings

    return Settings(
        demo_mode=True,
        assistant=AssistantSettings(
            tip_thresholds=list(NO_TIPS),
            advice_prefix_probability=0.0,
            collaborator_timeout=1.0,
        ),
    )


@pytest.fixture
def connected_context():
    """A wallet with 10 SOL."""
    from solchat.chat.context import RequestContext

    return RequestContext(wallet_connected=True, wallet_address=USDC_MINT, balance=10.0)


@pytest.fixture
def disconnected_context():
    """No wallet connected."""
    from solchat.chat.context import RequestContext

    return RequestContext()


@pytest.fixture
def rng():
    """Seeded random source."""
    return random.Random(42)


@pytest.fixture
def memory(rng):
    """Conversation memory that never emits random tips."""
    from solchat.chat.memory import ConversationMemory

    return ConversationMemory(rng=rng, tip_thresholds=NO_TIPS)


@pytest.fixture
def services(registry, detector, demo_settings):
    """Handler services wired with demo prices and no history backend."""
    from solchat.chat.catalog import HandlerServices
    from solchat.data.prices import JupiterPriceClient

    return HandlerServices(
        registry=registry,
        detector=detector,
        prices=JupiterPriceClient(registry=registry, settings=demo_settings),
    )
