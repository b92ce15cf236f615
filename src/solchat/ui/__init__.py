"""UI components for solchat."""

from solchat.ui.console import console, print_error, print_response, print_welcome
from solchat.ui.theme import SolchatColors, Symbols, solchat_theme

__all__ = [
    "console",
    "print_error",
    "print_response",
    "print_welcome",
    "SolchatColors",
    "Symbols",
    "solchat_theme",
]
