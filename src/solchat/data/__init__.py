"""Data layer for solchat - prices, history, wallet state and caching."""

from solchat.data.addresses import Base58AddressDetector
from solchat.data.cache import Cache, PriceCache
from solchat.data.history import SolanaRpcHistory
from solchat.data.market import MarketIntelligence
from solchat.data.prices import JupiterPriceClient
from solchat.data.wallet import RpcWalletProvider, StaticWalletProvider, WalletState

__all__ = [
    "Base58AddressDetector",
    "Cache",
    "PriceCache",
    "SolanaRpcHistory",
    "MarketIntelligence",
    "JupiterPriceClient",
    "RpcWalletProvider",
    "StaticWalletProvider",
    "WalletState",
]
