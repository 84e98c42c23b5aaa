"""Pydantic schemas for proxy results and catalog listings."""

from typing import Any

from pydantic import BaseModel, Field


class ProxyEnvelope(BaseModel):
    """Successful proxy result.

    Attributes:
        success: Always True; failures are raised as errors.
        data: Body returned by the CRM service.
        tool: Tool that was invoked.
        category: The tool's category.
    """

    success: bool = Field(default=True, description="Always true on success")
    data: Any = Field(default=None, description="Downstream response body")
    tool: str = Field(..., description="Invoked tool name")
    category: str = Field(..., description="Tool category")


class ProbeResult(BaseModel):
    """Outcome of a connectivity probe against the MCP endpoint."""

    connected: bool
    status: int | None = None
    response_time_ms: int
    error: str | None = None
