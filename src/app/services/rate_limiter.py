from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of one hit against a fixed-window counter"""

    allowed: bool
    limit: int
    remaining: int
    reset: int  # epoch seconds when the window resets
    retry_after: int = 0

    def headers(self) -> Dict[str, str]:
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(max(0, self.remaining)),
            "X-RateLimit-Reset": str(self.reset),
        }
        if not self.allowed:
            headers["Retry-After"] = str(max(1, self.retry_after))
        return headers


class IRateLimiter(ABC):
    """Rate limit gate consulted before any credential check"""

    @abstractmethod
    async def hit(self, key: str, limit: int, window_seconds: int) -> RateLimitDecision:
        """Count one request against key and report whether it may proceed"""
        pass
