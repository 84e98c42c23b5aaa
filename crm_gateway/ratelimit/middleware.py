"""Rate limiting FastAPI dependencies."""

from typing import Annotated

import structlog
from fastapi import Depends, Request, Response

from .limiter import RateLimitResult, SlidingWindowRateLimiter
from .exceptions import RateLimitExceededError

logger = structlog.get_logger("ratelimit")


def add_rate_limit_headers(response: Response, result: RateLimitResult) -> None:
    """Add rate limit headers to response.

    Args:
        response: Response to add headers to.
        result: Rate limit check result.
    """
    response.headers["X-RateLimit-Limit"] = str(result.limit)
    response.headers["X-RateLimit-Remaining"] = str(result.remaining)
    response.headers["X-RateLimit-Reset"] = str(result.reset_at)


def client_identifier(request: Request) -> str:
    """Derive the rate-limit key from the connecting peer."""
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


async def get_rate_limiter(request: Request) -> SlidingWindowRateLimiter:
    """Return the limiter owned by the application lifespan."""
    return request.app.state.rate_limiter


async def rate_limit_dependency(
    request: Request,
    response: Response,
    limiter: Annotated[SlidingWindowRateLimiter, Depends(get_rate_limiter)],
) -> RateLimitResult:
    """FastAPI dependency that enforces rate limiting per client address.

    Raises:
        RateLimitExceededError: If rate limit is exceeded.
    """
    identifier = client_identifier(request)
    result = limiter.check(identifier)

    if not result.allowed:
        logger.info("rate_limited", identifier=identifier, retry_after=result.retry_after)
        raise RateLimitExceededError(
            limit=result.limit,
            window_ms=limiter.config.window_ms,
            retry_after=result.retry_after,
        )

    add_rate_limit_headers(response, result)
    return result
