"""Custom exceptions for the proxy dispatcher."""

from typing import Any

from crm_gateway.auth.exceptions import AuthorizationError, CRMGatewayError, InternalError


class ForbiddenCategoryError(AuthorizationError):
    """Raised when a tool exists but its category is not proxied.

    Attributes:
        tool_name: Name of the rejected tool.
        category: The tool's category.
    """

    def __init__(self, tool_name: str, category: str, supported: list[str]):
        super().__init__(
            message=(
                f"Tool '{tool_name}' is not in supported categories ({', '.join(supported)})"
            ),
            code="FORBIDDEN_CATEGORY",
            details={"category": category, "supportedCategories": supported},
        )
        self.tool_name = tool_name
        self.category = category


class DownstreamError(CRMGatewayError):
    """Raised when the CRM service answers with an error status.

    Status code and body are passed through verbatim.

    Attributes:
        status_code: HTTP status code from the CRM service.
        body: Parsed JSON body, or raw text when not JSON.
    """

    def __init__(self, status_code: int, body: Any):
        super().__init__(
            message="MCP request failed",
            code="DOWNSTREAM_ERROR",
            details={"details": body, "status": status_code},
        )
        self.status_code = status_code
        self.body = body


class DownstreamUnavailableError(InternalError):
    """Raised when the CRM service produced no response (network, timeout).

    Attributes:
        url: The URL that was called.
        reason: Description of the failure, kept for logs only.
    """

    def __init__(self, url: str, reason: str):
        super().__init__(message="Failed to proxy MCP request", code="INTERNAL_ERROR")
        self.url = url
        self.reason = reason


class DownstreamTimeoutError(DownstreamUnavailableError):
    """Raised when the CRM service doesn't respond in time."""

    def __init__(self, url: str, timeout_seconds: float):
        super().__init__(url=url, reason=f"timed out after {timeout_seconds}s")
        self.timeout_seconds = timeout_seconds
