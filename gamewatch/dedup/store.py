"""Bounded, expiring memory of processed release GUIDs."""

import threading
import time
from collections import OrderedDict
from typing import Callable, Optional

from gamewatch.logging import get_logger

logger = get_logger(__name__, component="dedup")

DEFAULT_MAX_PROCESSED = 1000
DEFAULT_MAX_AGE_SECONDS = 86400


class DedupStore:
    """Remembers which GUIDs were processed, bounded in both size and age.

    - ``len(store) <= max_processed`` after every ``mark_seen``; overflow drops
      the oldest insertions first.
    - An entry older than ``max_age_seconds`` reads as absent and is removed
      when looked up, or in bulk by ``purge_stale``.
    - Re-marking a GUID refreshes its timestamp but keeps its insertion
      position.

    Args:
        max_processed: Maximum number of remembered GUIDs
        max_age_seconds: Lifetime of an entry
        clock: Returns the current time in seconds; ``time.time`` by default
    """

    def __init__(
        self,
        max_processed: int = DEFAULT_MAX_PROCESSED,
        max_age_seconds: float = DEFAULT_MAX_AGE_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        if max_processed < 1:
            raise ValueError(f"max_processed must be at least 1, got {max_processed}")
        if max_age_seconds <= 0:
            raise ValueError(f"max_age_seconds must be positive, got {max_age_seconds}")

        self.max_processed = max_processed
        self.max_age_seconds = max_age_seconds
        self._clock = clock
        self._entries: "OrderedDict[str, float]" = OrderedDict()
        self._lock = threading.Lock()

    def _is_stale(self, seen_at: float, now: float) -> bool:
        return now - seen_at > self.max_age_seconds

    def has(self, guid: str) -> bool:
        """True if ``guid`` was marked and has not expired. Expired entries are dropped."""
        now = self._clock()
        with self._lock:
            seen_at = self._entries.get(guid)
            if seen_at is None:
                return False
            if self._is_stale(seen_at, now):
                del self._entries[guid]
                return False
            return True

    __contains__ = has

    def mark_seen(self, guid: str, now: Optional[float] = None) -> None:
        """Record ``guid`` as processed at ``now`` and enforce the size bound."""
        timestamp = self._clock() if now is None else now
        with self._lock:
            self._entries[guid] = timestamp
            overflow = len(self._entries) - self.max_processed
            for _ in range(max(overflow, 0)):
                self._entries.popitem(last=False)

        if overflow > 0:
            logger.debug(
                "Evicted oldest processed GUIDs",
                extra={
                    "event": "dedup.evicted",
                    "evicted_count": overflow,
                    "max_processed": self.max_processed,
                },
            )

    def purge_stale(self, now: Optional[float] = None) -> int:
        """Drop every expired entry; returns how many were removed."""
        reference = self._clock() if now is None else now
        with self._lock:
            stale = [
                guid for guid, seen_at in self._entries.items()
                if self._is_stale(seen_at, reference)
            ]
            for guid in stale:
                del self._entries[guid]

        if stale:
            logger.debug(
                "Purged stale processed GUIDs",
                extra={"event": "dedup.purged", "purged_count": len(stale)},
            )
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
