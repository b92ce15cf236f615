"""Solana address detection.

Addresses are base58 strings of 32-44 characters that decode to a
32-byte public key.
"""

import logging
import re
from typing import Optional, Protocol

import base58

logger = logging.getLogger(__name__)

_BASE58_SOL = r"[1-9A-HJ-NP-Za-km-z]{32,44}"
_addr_re = re.compile(rf"\b({_BASE58_SOL})\b")

PUBKEY_LENGTH = 32


class AddressDetector(Protocol):
    """Finds and validates Solana addresses in free text."""

    def detect(self, text: str) -> Optional[str]: ...

    def is_valid(self, address: str) -> bool: ...


class Base58AddressDetector:
    """Default detector backed by base58 decoding."""

    def is_valid(self, address: str) -> bool:
        if not address or not _addr_re.fullmatch(address):
            return False
        try:
            return len(base58.b58decode(address)) == PUBKEY_LENGTH
        except ValueError:
            return False

    def detect(self, text: str) -> Optional[str]:
        """Return the first valid address in text, preserving case."""
        if not text:
            return None
        for candidate in _addr_re.findall(text):
            if self.is_valid(candidate):
                return candidate
            logger.debug(f"Rejected address candidate {candidate[:4]}...")
        return None


def truncate_address(address: Optional[str], start: int = 4, end: int = 4) -> str:
    """Format an address as first/last characters, e.g. EPjF...Dt1v."""
    if not address:
        return ""
    if len(address) <= start + end:
        return address
    return f"{address[:start]}...{address[-end:]}"
