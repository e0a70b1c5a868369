import asyncio
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

from utils.logger import get_logger

logger = get_logger("rate_limiter")


@dataclass(frozen=True)
class RateLimitConfig:
    requests_per_window: int
    window_seconds: float = 60.0
    burst_limit: Optional[int] = None


@dataclass
class TokenBucket:
    capacity: float
    tokens: float
    refill_rate: float  # tokens per second
    last_refill: float = field(default_factory=time.monotonic)

    def refill(self) -> None:
        now = time.monotonic()
        self.tokens = min(self.capacity, self.tokens + (now - self.last_refill) * self.refill_rate)
        self.last_refill = now

    def wait_time(self, tokens: int = 1) -> float:
        self.refill()
        if self.tokens >= tokens:
            return 0.0
        return (tokens - self.tokens) / self.refill_rate


class RateLimiter:
    """Token-bucket limiter keyed by DEX Screener endpoint family.

    Profile, boost and takeover feeds share a 60 req/min budget; search,
    token and pair lookups share 300 req/min.  Acquiring only delays the
    request; it never retries or drops one.
    """

    LIMITS = {
        "profiles": RateLimitConfig(requests_per_window=60, window_seconds=60),
        "pairs": RateLimitConfig(requests_per_window=300, window_seconds=60),
    }
    DEFAULT_LIMIT = RateLimitConfig(requests_per_window=60, window_seconds=60)

    def __init__(self, limits: Optional[Dict[str, RateLimitConfig]] = None):
        self._limits = dict(limits or self.LIMITS)
        self._buckets: Dict[str, TokenBucket] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def _get_bucket(self, endpoint: str) -> TokenBucket:
        bucket = self._buckets.get(endpoint)
        if bucket is None:
            config = self._limits.get(endpoint, self.DEFAULT_LIMIT)
            capacity = float(config.burst_limit or config.requests_per_window)
            bucket = TokenBucket(
                capacity=capacity,
                tokens=capacity,
                refill_rate=config.requests_per_window / config.window_seconds,
            )
            self._buckets[endpoint] = bucket
        return bucket

    async def acquire(self, endpoint: str, tokens: int = 1) -> float:
        """Block until ``tokens`` are available; returns the seconds waited."""
        lock = self._locks.setdefault(endpoint, asyncio.Lock())
        async with lock:
            bucket = self._get_bucket(endpoint)
            wait_time = bucket.wait_time(tokens)
            if wait_time > 0:
                logger.debug("Rate limit wait", endpoint=endpoint, wait_seconds=round(wait_time, 3))
                await asyncio.sleep(wait_time)
                bucket.refill()
            bucket.tokens = max(0.0, bucket.tokens - tokens)
            return wait_time

    def get_status(self) -> Dict[str, dict]:
        status = {}
        for endpoint, bucket in self._buckets.items():
            bucket.refill()
            config = self._limits.get(endpoint, self.DEFAULT_LIMIT)
            status[endpoint] = {
                "available_tokens": round(bucket.tokens, 2),
                "capacity": bucket.capacity,
                "limit": f"{config.requests_per_window}/{config.window_seconds:g}s",
            }
        return status


def endpoint_for_url(url: str) -> str:
    """Map a DEX Screener URL onto its rate-limit family."""
    if "/token-profiles/" in url or "/token-boosts/" in url or "/community-takeovers/" in url:
        return "profiles"
    if "/latest/dex/" in url or "/tokens/" in url or "/pairs/" in url:
        return "pairs"
    return "default"


rate_limiter = RateLimiter()
