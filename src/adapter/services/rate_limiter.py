"""
Rate Limiter Adapter

Fixed-window request counting backed by the `limits` library. The storage
URI selects the backend: `async+memory://` for a single process, or
`async+redis://...` when several instances share counters.
"""

import math
import time

from limits import RateLimitItemPerSecond
from limits.aio.strategies import FixedWindowRateLimiter
from limits.storage import storage_from_string

from src.app.services.rate_limiter import IRateLimiter, RateLimitDecision


class LimitsRateLimiter(IRateLimiter):
    def __init__(self, storage_uri: str = "async+memory://", enabled: bool = True):
        self.enabled = enabled
        self._limiter = FixedWindowRateLimiter(storage_from_string(storage_uri))

    async def hit(self, key: str, limit: int, window_seconds: int) -> RateLimitDecision:
        if not self.enabled:
            return RateLimitDecision(
                allowed=True,
                limit=limit,
                remaining=limit,
                reset=int(time.time()) + window_seconds,
            )

        item = RateLimitItemPerSecond(limit, window_seconds)
        allowed = await self._limiter.hit(item, key)
        stats = await self._limiter.get_window_stats(item, key)

        # reset_time is wall-clock epoch seconds as computed by limits
        return RateLimitDecision(
            allowed=allowed,
            limit=limit,
            remaining=max(0, stats.remaining),
            reset=int(math.ceil(stats.reset_time)),
            retry_after=0 if allowed else max(1, math.ceil(stats.reset_time - time.time())),
        )
