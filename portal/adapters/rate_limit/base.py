"""Rate limiter interfaces.

The HTTP layer depends on this abstraction (not the concrete implementation)
so the storage backend can be swapped later (e.g., Redis) with minimal changes.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Decision returned by a rate limit check.

    Attributes:
        success: Whether the request may proceed.
        remaining: Headroom before this request was counted when allowed
            (``limit`` for the first request of a window); 0 when blocked.
        reset_time: UNIX epoch milliseconds at which the window ends.
        limit: Max requests per window.
    """

    success: bool
    remaining: int
    reset_time: int
    limit: int

    def retry_after_seconds(self, now_ms: float) -> int:
        """Whole seconds until the window resets, never negative."""
        return max(0, math.ceil((self.reset_time - now_ms) / 1000))


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    max_requests: int
    window_ms: int

    @abstractmethod
    def check(self, key: str) -> RateLimitResult:
        """Count one request against ``key`` and decide whether it is allowed.

        Args:
            key: Opaque identifier, typically ``"{client}:{route}"``.

        Returns:
            RateLimitResult describing the decision.
        """
        raise NotImplementedError
