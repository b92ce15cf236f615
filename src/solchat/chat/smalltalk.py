"""Canned conversation for messages that are not wallet operations.

Two layers:
- small talk ("how are you", "lol") answered before any session state is touched
- general chat (greetings, thanks, jokes, ...) used by the router when no
  operation matched
"""

import random
import re
from typing import Optional

# Checked before routing; must not overlap with greetings, which the router owns
SMALL_TALK_PATTERNS = {
    "wellbeing": re.compile(
        r"^\s*(?:how\s+are\s+you(?:\s+doing)?(?:\s+today)?|how'?s\s+it\s+going"
        r"|how\s+have\s+you\s+been|how\s+do\s+you\s+feel)\W*$",
        re.IGNORECASE,
    ),
    "reaction": re.compile(
        r"^\s*(?:lol|lmao|haha+|hehe+|cool|nice|awesome|great|ok(?:ay)?|k|wow|interesting"
        r"|got\s+it|makes\s+sense|sounds\s+good)\W*$",
        re.IGNORECASE,
    ),
    "bored": re.compile(r"^\s*(?:i'?m\s+bored|entertain\s+me)\W*$", re.IGNORECASE),
}

SMALL_TALK_REPLIES = {
    "wellbeing": [
        "Doing great, thanks for asking! The blocks keep coming and so do the questions.",
        "All good here. Solana's producing blocks and I'm ready to help.",
        "Never better. What's on your mind in crypto today?",
    ],
    "reaction": [
        "Glad that landed. Anything else you want to dig into?",
        "Right? Let me know what you'd like to look at next.",
        "Happy to keep going whenever you are.",
    ],
    "bored": [
        "Let's fix that. Ask me about a token you've never heard of.",
        "How about a quick tour of what's trending on Solana?",
    ],
}

CASUAL_SUGGESTIONS = [
    "Tell me about Bitcoin",
    "What are your thoughts on NFTs?",
    "How's the crypto market doing today?",
    "What's your favorite blockchain project?",
    "Tell me about DeFi",
    "What should I know about Solana?",
    "How do hardware wallets work?",
]

# Resolved in this order; the first category with a matching pattern wins
CONVERSATION_PATTERNS = {
    "greeting": [
        re.compile(
            r"^(?:hi|hello|hey|howdy|greetings|good\s+(?:morning|afternoon|evening)|what'?s\s+up)\b",
            re.IGNORECASE,
        ),
    ],
    "farewell": [
        re.compile(
            r"^(?:bye|goodbye|see\s+you|farewell|later|have\s+a\s+(?:good|nice|great)\s+(?:day|night|evening))",
            re.IGNORECASE,
        ),
    ],
    "thanks": [
        re.compile(r"^(?:thanks|thank\s+you|thx|ty|appreciate\s+(?:it|you))\b", re.IGNORECASE),
    ],
    "identity": [
        re.compile(r"(?:who|what)\s+are\s+you", re.IGNORECASE),
        re.compile(r"tell\s+(?:me\s+)?about\s+yourself", re.IGNORECASE),
    ],
    "capabilities": [
        re.compile(r"what\s+can\s+you\s+do", re.IGNORECASE),
        re.compile(r"help\s+me\s+with", re.IGNORECASE),
        re.compile(r"how\s+does\s+this\s+(?:work|app\s+work)", re.IGNORECASE),
    ],
    "joke": [
        re.compile(r"tell\s+(?:me\s+)?a\s+(?:joke|crypto\s+joke)", re.IGNORECASE),
    ],
}

GENERAL_RESPONSES = {
    "greeting": [
        "Hello! How can I help with your Web3 journey today?",
        "Hi there! I'm your AI assistant for Web3 and crypto. What can I do for you?",
        "Hey! Ready to explore the blockchain world together?",
    ],
    "farewell": [
        "Goodbye! Feel free to return whenever you have Web3 questions or want to make transactions.",
    ],
    "thanks": [
        "You're welcome! Happy to assist with your crypto needs.",
        "Anytime! Let me know if you need anything else related to blockchain.",
        "Glad I could help! Feel free to ask more about Web3.",
    ],
    "identity": [
        "I'm an AI assistant specialized in Web3 and cryptocurrency. While I can chat about "
        "general topics, I'm most knowledgeable about blockchain technology, Solana, and token swaps.",
        "I'm your Web3 AI Wallet assistant. I can help with token swaps, provide crypto "
        "information, and chat about various topics, though my expertise is in blockchain.",
    ],
    "capabilities": [
        "I can help you swap tokens on Solana, check token prices and balances, provide "
        "information about cryptocurrencies, and chat about various topics. Try asking me to "
        "'Swap 1 SOL to USDC' or 'Tell me about NFTs'.",
    ],
    "joke": [
        "Why don't programmers like nature? It has too many bugs and no debugging tools!",
        "Why did the blockchain go to therapy? It had too many trust issues!",
        "How many Bitcoin miners does it take to change a lightbulb? 21 million, but only one gets the reward!",
        "Why did the crypto investor go to the dentist? Because of the tooth decay... just like their portfolio in a bear market!",
        "What do you call a cryptocurrency investor who finally breaks even? A miracle!",
    ],
}

REDIRECT_MESSAGE = (
    "I'm here to help with Web3 and blockchain topics primarily! You can ask me to swap "
    "tokens, check prices, or learn about crypto concepts. I can also chat about other "
    "topics, but my expertise is in the blockchain space."
)


def small_talk_category(text: str) -> Optional[str]:
    """Return the small-talk category for text, if any."""
    for category, pattern in SMALL_TALK_PATTERNS.items():
        if pattern.match(text or ""):
            return category
    return None


def handle_small_talk(text: str, rng: Optional[random.Random] = None) -> Optional[str]:
    """Canned reply for small talk, or None if the message is not small talk."""
    category = small_talk_category(text)
    if category is None:
        return None
    return (rng or random).choice(SMALL_TALK_REPLIES[category])


def casual_suggestions(rng: Optional[random.Random] = None, count: int = 3) -> list[str]:
    """Pick distinct casual follow-ups."""
    return (rng or random).sample(CASUAL_SUGGESTIONS, count)


def general_chat_category(prompt: str) -> Optional[str]:
    """Return the first conversation category whose patterns match."""
    for category, patterns in CONVERSATION_PATTERNS.items():
        if any(p.search(prompt) for p in patterns):
            return category
    return None


def general_chat_reply(prompt: str, rng: Optional[random.Random] = None) -> str:
    """Reply from the matching category's pool, or the redirect message."""
    category = general_chat_category(prompt)
    if category is None:
        return REDIRECT_MESSAGE
    return (rng or random).choice(GENERAL_RESPONSES[category])
