"""Token bucket rate limiter for provider APIs with strict quotas."""

from __future__ import annotations

import asyncio
import time

from cosmos_engine.utils.logging import get_logger

logger = get_logger(__name__)


class TokenBucketRateLimiter:
    """In-process token bucket shared by all searches of one provider.

    The GitHub search API allows 10 unauthenticated requests per minute, so the
    code host provider acquires a token before every call instead of burning
    its quota on a burst of keystroke searches.
    """

    def __init__(self, rate: float, capacity: int) -> None:
        self._rate = rate  # tokens per second
        self._capacity = capacity
        self._tokens = float(capacity)
        self._last_refill = time.monotonic()
        self._lock = asyncio.Lock()

    @classmethod
    def per_minute(cls, requests: int) -> TokenBucketRateLimiter:
        requests = max(requests, 1)
        return cls(rate=requests / 60.0, capacity=requests)

    async def acquire(self) -> None:
        """Wait until a token is available, then consume it."""
        async with self._lock:
            self._refill()
            if self._tokens < 1.0:
                wait = (1.0 - self._tokens) / self._rate
                logger.info("rate_limit_wait", wait=round(wait, 2))
            while self._tokens < 1.0:
                await asyncio.sleep((1.0 - self._tokens) / self._rate)
                self._refill()
            self._tokens -= 1.0

    @property
    def available(self) -> float:
        self._refill()
        return self._tokens

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self._last_refill
        self._tokens = min(self._capacity, self._tokens + elapsed * self._rate)
        self._last_refill = now
