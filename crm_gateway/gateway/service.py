"""Proxy dispatcher: turns an admitted tool call into one downstream request."""

from typing import Any

import httpx

from crm_gateway.config import Settings, get_settings
from crm_gateway.registry.models import SUPPORTED_CATEGORIES, ToolDefinition

from .exceptions import ForbiddenCategoryError
from .proxy import forward_tool_call, probe_endpoint
from .schemas import ProbeResult, ProxyEnvelope


class ProxyDispatcher:
    """Dispatches validated tool calls to the CRM service's MCP endpoint.

    Callers must have authenticated, rate-limited, looked up and validated
    the call already; the dispatcher only re-checks the tool category.
    """

    def __init__(self, client: httpx.AsyncClient, settings: Settings | None = None):
        self.client = client
        self.settings = settings or get_settings()

    @property
    def base_url(self) -> str:
        base = self.settings.MCP_BASE_URL
        return base if base.endswith("/") else f"{base}/"

    def ensure_supported(self, tool: ToolDefinition) -> None:
        """Raise ForbiddenCategoryError unless the tool's category is proxied."""
        if tool.category not in SUPPORTED_CATEGORIES:
            raise ForbiddenCategoryError(
                tool_name=tool.name,
                category=tool.category.value,
                supported=[category.value for category in SUPPORTED_CATEGORIES],
            )

    async def dispatch(
        self,
        tool: ToolDefinition,
        location_id: str,
        credential: str,
        params: dict[str, Any],
    ) -> ProxyEnvelope:
        """Invoke a tool downstream and wrap the result.

        Raises:
            ForbiddenCategoryError: Tool category not supported (no call made).
            DownstreamError: CRM service answered with an error status.
            DownstreamUnavailableError: No response from the CRM service.
        """
        self.ensure_supported(tool)

        data = await forward_tool_call(
            client=self.client,
            url=f"{self.base_url}{tool.endpoint}",
            credential=credential,
            location_id=location_id,
            params=params,
            timeout=self.settings.PROXY_TIMEOUT_SECONDS,
        )
        return ProxyEnvelope(data=data, tool=tool.name, category=tool.category.value)

    async def probe(self, location_id: str, credential: str, timeout: float | None = None) -> ProbeResult:
        """Check connectivity to the MCP endpoint with a short timeout."""
        return await probe_endpoint(
            client=self.client,
            url=self.base_url,
            credential=credential,
            location_id=location_id,
            timeout=timeout or self.settings.MCP_PROBE_TIMEOUT_SECONDS,
        )
