"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: the read-modify-write of an entry happens under a lock, so at
  most ``max_requests`` checks per window are accepted for a key.
- Windows start at a key's first request and are reset lazily on the next
  check after they expire. There is no background timer.
- Memory is bounded by ``max_keys``: when a new key overflows the map, expired
  windows at the least recently seen end are dropped, then the least
  recently seen live keys. Eviction never walks the whole map.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable

from portal.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult

logger = logging.getLogger(__name__)


def epoch_ms() -> int:
    """Current UNIX time in whole milliseconds."""
    return int(time.time() * 1000)


@dataclass
class RateLimitEntry:
    count: int
    window_start: int


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Fixed-window counter per key, held in a process-local map.

    Example:
        >>> limiter = InMemoryFixedWindowRateLimiter(window_ms=1000, max_requests=2)
        >>> limiter.check("10.0.0.1:/v1/posts").success
        True
    """

    def __init__(
        self,
        window_ms: int = 60_000,
        max_requests: int = 10,
        *,
        clock: Callable[[], int] = epoch_ms,
        max_keys: int | None = None,
    ) -> None:
        """Initialize the limiter.

        Args:
            window_ms: Size of the fixed window in milliseconds.
            max_requests: Requests allowed per key within one window.
            clock: Time source returning UNIX epoch milliseconds.
            max_keys: Maximum number of tracked keys (None for unbounded).

        Raises:
            ValueError: If any limit is not a positive integer.
        """
        if window_ms < 1:
            raise ValueError("window_ms must be >= 1")
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if max_keys is not None and max_keys < 1:
            raise ValueError("max_keys must be >= 1")

        self.window_ms = window_ms
        self.max_requests = max_requests
        self._clock = clock
        self._max_keys = max_keys
        self._lock = threading.Lock()
        self._entries: OrderedDict[str, RateLimitEntry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def _is_expired(self, entry: RateLimitEntry, now: int) -> bool:
        return now - entry.window_start > self.window_ms

    def _evict_locked(self, now: int) -> None:
        if self._max_keys is None or len(self._entries) <= self._max_keys:
            return

        # Entries are kept in recency order; only the cold end is inspected
        expired = 0
        while self._entries:
            oldest = next(iter(self._entries.values()))
            if not self._is_expired(oldest, now):
                break
            self._entries.popitem(last=False)
            expired += 1

        evicted = 0
        while len(self._entries) > self._max_keys:
            self._entries.popitem(last=False)
            evicted += 1

        logger.debug(
            "rate_limit.evicted",
            extra={"expired": expired, "lru": evicted, "size": len(self._entries)},
        )

    def check(self, key: str) -> RateLimitResult:
        """Count one request for ``key`` against its current window.

        Args:
            key: Unique identifier for rate limiting (client + route).

        Returns:
            RateLimitResult. When allowed, ``remaining`` is the headroom
            before this request was counted (``max_requests`` for the first
            request of a window); when blocked it is 0.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock()

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                entry = RateLimitEntry(count=0, window_start=now)
                self._entries[key] = entry
            elif self._is_expired(entry, now):
                entry.count = 0
                entry.window_start = now
            self._entries.move_to_end(key)

            reset_time = entry.window_start + self.window_ms

            remaining = self.max_requests - entry.count
            if remaining <= 0:
                return RateLimitResult(
                    success=False,
                    remaining=0,
                    reset_time=reset_time,
                    limit=self.max_requests,
                )

            entry.count += 1
            self._evict_locked(now)

        return RateLimitResult(
            success=True,
            remaining=remaining,
            reset_time=reset_time,
            limit=self.max_requests,
        )

    def reset(self, key: str | None = None) -> None:
        """Forget one key, or every key when ``key`` is None."""
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)
