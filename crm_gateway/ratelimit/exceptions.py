"""Rate limit exceptions."""

from crm_gateway.auth.exceptions import CRMGatewayError


class RateLimitExceededError(CRMGatewayError):
    """Raised when a rate limit is exceeded.

    Attributes:
        limit: The rate limit that was exceeded.
        window_ms: The window the limit applies to.
        retry_after: Whole seconds until request can be retried.
    """

    status_code = 429

    def __init__(self, limit: int, window_ms: int, retry_after: int):
        super().__init__(
            message=f"Rate limit exceeded ({limit} requests per {window_ms} ms). Retry after {retry_after}s",
            code="RATE_LIMIT_EXCEEDED",
            details={
                "maxRequests": limit,
                "windowMs": window_ms,
                "retryAfterSeconds": retry_after,
            },
        )
        self.limit = limit
        self.window_ms = window_ms
        self.retry_after = retry_after
