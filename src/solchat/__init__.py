"""solchat - conversational assistant for Solana wallets."""

__app_name__ = "solchat"
__version__ = "0.3.0"
