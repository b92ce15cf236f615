"""Transaction history lookup for solchat.

Signatures come from the Solana JSON-RPC ``getSignaturesForAddress`` call.
Date phrases from chat ("yesterday", "last week", "March 2024") are turned
into a DateRange that filters the results by block time.
"""

import calendar
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Protocol

import httpx

from solchat.config.settings import Settings, get_settings
from solchat.data.addresses import truncate_address
from solchat.utils.errors import CollaboratorError, CollaboratorKind, classify_error

logger = logging.getLogger(__name__)

SOURCE = "solana_rpc"


class TransactionType(str, Enum):
    """Types of transactions."""

    TRANSFER = "transfer"
    SWAP = "swap"
    UNKNOWN = "unknown"


class TransactionStatus(str, Enum):
    """Status of a transaction."""

    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class Transaction:
    """A confirmed transaction signature for a wallet."""

    signature: str
    status: TransactionStatus
    timestamp: Optional[datetime] = None
    type: TransactionType = TransactionType.UNKNOWN
    token: Optional[str] = None
    amount: Optional[float] = None
    memo: Optional[str] = None
    slot: Optional[int] = None

    @classmethod
    def from_rpc(cls, item: dict) -> "Transaction":
        """Create from a getSignaturesForAddress result item."""
        block_time = item.get("blockTime")
        return cls(
            signature=item["signature"],
            status=TransactionStatus.FAILED if item.get("err") else TransactionStatus.SUCCESS,
            timestamp=(
                datetime.fromtimestamp(block_time, tz=timezone.utc) if block_time else None
            ),
            memo=item.get("memo"),
            slot=item.get("slot"),
        )


@dataclass
class DateRange:
    """Inclusive start, exclusive end. Either bound may be open."""

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @property
    def is_empty(self) -> bool:
        return self.start is None and self.end is None

    def contains(self, moment: Optional[datetime]) -> bool:
        if moment is None:
            return self.is_empty
        if self.start and moment < self.start:
            return False
        if self.end and moment >= self.end:
            return False
        return True


@dataclass
class HistoryFilter:
    """Filters applied to a history query."""

    limit: int = 10
    date_range: Optional[DateRange] = None
    token: Optional[str] = None
    type: Optional[TransactionType] = None

    def accepts(self, tx: Transaction) -> bool:
        if self.date_range and not self.date_range.contains(tx.timestamp):
            return False
        # Signature listings rarely carry token or type; only reject known mismatches
        if self.token and tx.token and tx.token != self.token:
            return False
        if self.type and tx.type != TransactionType.UNKNOWN and tx.type != self.type:
            return False
        return True


_MONTHS = {name.lower(): i for i, name in enumerate(calendar.month_name) if name}
_MONTHS.update({name.lower(): i for i, name in enumerate(calendar.month_abbr) if name})


def _day_start(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _month_range(year: int, month: int) -> DateRange:
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(year, month + 1, 1, tzinfo=timezone.utc)
    return DateRange(start=start, end=end)


def parse_date_query(text: str, now: Optional[datetime] = None) -> DateRange:
    """Turn a free-text date phrase into a UTC DateRange.

    Unrecognised phrases give an empty range (no date filter).
    """
    now = now or datetime.now(timezone.utc)
    today = _day_start(now)
    phrase = (text or "").strip().lower()

    if not phrase:
        return DateRange()
    if "today" in phrase:
        return DateRange(start=today, end=today + timedelta(days=1))
    if "yesterday" in phrase:
        return DateRange(start=today - timedelta(days=1), end=today)

    m = re.search(r"(?:last|past)\s+(\d+)\s+days?", phrase)
    if m:
        return DateRange(start=today - timedelta(days=int(m.group(1))), end=None)
    if re.search(r"(?:last|past)\s+week", phrase):
        return DateRange(start=today - timedelta(days=7), end=None)
    if "this week" in phrase:
        return DateRange(start=today - timedelta(days=today.weekday()), end=None)
    if re.search(r"(?:last|past)\s+month", phrase):
        year, month = (now.year, now.month - 1) if now.month > 1 else (now.year - 1, 12)
        return _month_range(year, month)
    if "this month" in phrase:
        return DateRange(start=today.replace(day=1), end=None)

    m = re.search(r"(\d{4})-(\d{2})-(\d{2})", phrase)
    if m:
        try:
            start = datetime(int(m.group(1)), int(m.group(2)), int(m.group(3)), tzinfo=timezone.utc)
        except ValueError:
            return DateRange()
        return DateRange(start=start, end=start + timedelta(days=1))

    for m in re.finditer(r"\b([a-z]+)\s+(\d{1,2})(?:st|nd|rd|th)?(?:,?\s+(\d{4}))?\b", phrase):
        if m.group(1) not in _MONTHS:
            continue
        year = int(m.group(3)) if m.group(3) else now.year
        try:
            start = datetime(year, _MONTHS[m.group(1)], int(m.group(2)), tzinfo=timezone.utc)
        except ValueError:
            return DateRange()
        return DateRange(start=start, end=start + timedelta(days=1))

    for m in re.finditer(r"\b([a-z]+)(?:\s+(\d{4}))?\b", phrase):
        if m.group(1) in _MONTHS:
            year = int(m.group(2)) if m.group(2) else now.year
            return _month_range(year, _MONTHS[m.group(1)])

    return DateRange()


def format_for_display(transactions: list[Transaction]) -> str:
    """Render transactions as a numbered plain-text list."""
    lines = []
    for i, tx in enumerate(transactions, start=1):
        when = tx.timestamp.strftime("%Y-%m-%d %H:%M UTC") if tx.timestamp else "pending"
        parts = [f"{i}. {when}", tx.type.value]
        if tx.amount is not None and tx.token:
            parts.append(f"{tx.amount:g} {tx.token}")
        parts.append(f"({truncate_address(tx.signature, 6, 6)})")
        if tx.status == TransactionStatus.FAILED:
            parts.append("failed")
        lines.append(" - ".join(parts))
    return "\n".join(lines)


class TransactionHistoryService(Protocol):
    """Wallet history collaborator."""

    def parse_date_query(self, text: str) -> DateRange: ...

    async def query(self, address: str, history_filter: HistoryFilter) -> list[Transaction]: ...

    def format_for_display(self, transactions: list[Transaction]) -> str: ...


class SolanaRpcHistory:
    """History service backed by a Solana JSON-RPC endpoint."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or get_settings()
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.rpc.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def parse_date_query(self, text: str) -> DateRange:
        return parse_date_query(text)

    def format_for_display(self, transactions: list[Transaction]) -> str:
        return format_for_display(transactions)

    async def query(self, address: str, history_filter: HistoryFilter) -> list[Transaction]:
        """Fetch recent signatures for an address and apply the filter.

        Raises:
            CollaboratorError: The RPC call failed or returned an error
        """
        # Over-fetch when filtering by date so the window still fills up
        fetch_limit = history_filter.limit
        if history_filter.date_range and not history_filter.date_range.is_empty:
            fetch_limit = min(1000, history_filter.limit * 10)

        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "getSignaturesForAddress",
            "params": [address, {"limit": fetch_limit}],
        }

        try:
            client = await self._get_client()
            response = await client.post(self.settings.rpc.url, json=payload)
            response.raise_for_status()
            body = response.json()
        except Exception as e:
            error = classify_error(e, source=SOURCE)
            logger.warning(f"History lookup failed: {error.message}")
            raise error from e

        if "error" in body:
            logger.warning(f"RPC error: {body['error']}")
            raise CollaboratorError(
                "RPC returned an error",
                kind=CollaboratorKind.INVALID_RESPONSE,
                source=SOURCE,
            )

        transactions = [Transaction.from_rpc(item) for item in body.get("result") or []]
        matching = [tx for tx in transactions if history_filter.accepts(tx)]
        return matching[: history_filter.limit]
