"""
Eligibility Cache
Per-process TTL cache in front of the ledger's read path.
"""

from collections import OrderedDict
from typing import Any, Callable, List, Optional, Tuple
import time

from nft_airdrop.models.nft_airdrop import NFTAirdrop

MISSING = object()


class _TTLStore:
    """Insertion-ordered map with per-entry expiry and a size bound."""

    def __init__(self, ttl_seconds: float, max_entries: int, clock: Callable[[], float]):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[float, Any]]" = OrderedDict()

    def get(self, key: str) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return MISSING
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return MISSING
        return value

    def set(self, key: str, value: Any) -> None:
        self._entries.pop(key, None)
        self._entries[key] = (self._clock() + self.ttl_seconds, value)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)


class EligibilityCache:
    """
    Cache-aside entries keyed by recipient address.

    Two namespaces: the boolean "already served" flag and the most recent
    history page. Entries expire after `ttl_seconds`; once `max_entries` is
    reached in a namespace the oldest stored entry is evicted. The cache is
    never the source of truth and is not shared between processes.
    """

    def __init__(
        self,
        ttl_seconds: float = 300,
        max_entries: int = 10000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._status = _TTLStore(ttl_seconds, max_entries, clock)
        self._history = _TTLStore(ttl_seconds, max_entries, clock)

    @staticmethod
    def _status_key(recipient: str) -> str:
        return f"airdrop-status:{recipient}"

    @staticmethod
    def _history_key(recipient: str) -> str:
        return f"airdrop-history:{recipient}"

    def get_status(self, recipient: str) -> Optional[bool]:
        """Cached served flag, or None on miss."""
        value = self._status.get(self._status_key(recipient))
        return None if value is MISSING else value

    def set_status(self, recipient: str, served: bool) -> None:
        self._status.set(self._status_key(recipient), served)

    def get_history(self, recipient: str) -> Optional[List[NFTAirdrop]]:
        value = self._history.get(self._history_key(recipient))
        return None if value is MISSING else value

    def set_history(self, recipient: str, history: List[NFTAirdrop]) -> None:
        self._history.set(self._history_key(recipient), list(history))

    def invalidate(self, recipient: str) -> None:
        self._status.delete(self._status_key(recipient))
        self._history.delete(self._history_key(recipient))

    def __len__(self) -> int:
        return len(self._status) + len(self._history)
