from .clock import Clock, FixedClock, SystemClock, iso_from_ms, now_ms, system_clock, utcnow
from .logger import (
    setup_logging,
    get_logger,
    universe_logger,
    scheduler_logger,
    dexscreener_logger,
    api_logger,
)
from .rate_limiter import RateLimiter, rate_limiter, endpoint_for_url

__all__ = [
    # Clock
    "Clock",
    "FixedClock",
    "SystemClock",
    "iso_from_ms",
    "now_ms",
    "system_clock",
    "utcnow",

    # Logger
    "setup_logging",
    "get_logger",
    "universe_logger",
    "scheduler_logger",
    "dexscreener_logger",
    "api_logger",

    # Rate Limiter
    "RateLimiter",
    "rate_limiter",
    "endpoint_for_url",
]
