"""Rate limiting module - sliding window implementation."""

from .limiter import (
    RateLimitConfig,
    RateLimitResult,
    SlidingWindowRateLimiter,
)
from .exceptions import RateLimitExceededError
from .middleware import get_rate_limiter, rate_limit_dependency


__all__ = [
    "RateLimitConfig",
    "RateLimitResult",
    "SlidingWindowRateLimiter",
    "RateLimitExceededError",
    "get_rate_limiter",
    "rate_limit_dependency",
]
