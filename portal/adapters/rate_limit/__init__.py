"""Rate limiting adapters.

The HTTP layer talks to ``AbstractRateLimiter`` only, so the in-memory fixed
window used today can move to a shared store without touching the routes.
"""

from portal.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from portal.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter

__all__ = ["AbstractRateLimiter", "InMemoryFixedWindowRateLimiter", "RateLimitResult"]
