"""Tests for small talk and general chat replies."""

import random

import pytest

from solchat.chat.smalltalk import (
    CASUAL_SUGGESTIONS,
    GENERAL_RESPONSES,
    REDIRECT_MESSAGE,
    SMALL_TALK_REPLIES,
    casual_suggestions,
    general_chat_category,
    general_chat_reply,
    handle_small_talk,
    small_talk_category,
)


class TestSmallTalk:
    """Tests for the small-talk layer."""

    @pytest.mark.parametrize(
        "text,category",
        [
            ("How are you?", "wellbeing"),
            ("how's it going", "wellbeing"),
            ("lol", "reaction"),
            ("Sounds good!", "reaction"),
            ("I'm bored", "bored"),
        ],
    )
    def test_categories(self, text, category):
        assert small_talk_category(text) == category

    @pytest.mark.parametrize("text", ["Check my balance", "hello", "cool, swap 1 SOL to USDC"])
    def test_not_small_talk(self, text):
        assert handle_small_talk(text) is None

    def test_reply_from_pool(self):
        reply = handle_small_talk("how are you", random.Random(1))
        assert reply in SMALL_TALK_REPLIES["wellbeing"]

    def test_casual_suggestions_are_distinct(self):
        picks = casual_suggestions(random.Random(3))
        assert len(picks) == 3
        assert len(set(picks)) == 3
        assert all(p in CASUAL_SUGGESTIONS for p in picks)


class TestGeneralChat:
    """Tests for general chat fallbacks."""

    @pytest.mark.parametrize(
        "text,category",
        [
            ("Hello there", "greeting"),
            ("good morning!", "greeting"),
            ("bye for now", "farewell"),
            ("thank you so much", "thanks"),
            ("who are you?", "identity"),
            ("tell me about yourself", "identity"),
            ("what can you do", "capabilities"),
            ("tell me a crypto joke", "joke"),
        ],
    )
    def test_categories(self, text, category):
        assert general_chat_category(text) == category

    def test_words_starting_with_greetings(self):
        """'history' and 'type' are not a greeting or thanks."""
        assert general_chat_category("history please") is None
        assert general_chat_category("type something") is None

    def test_greeting_reply(self):
        assert general_chat_reply("Hello", random.Random(0)) in GENERAL_RESPONSES["greeting"]

    def test_redirect(self):
        assert general_chat_reply("what's the weather like") == REDIRECT_MESSAGE
