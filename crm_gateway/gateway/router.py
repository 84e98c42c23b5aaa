"""FastAPI router for tool catalog and proxy endpoints."""

from datetime import datetime, timezone
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse

from crm_gateway.auth.dependencies import get_authenticated_client
from crm_gateway.auth.exceptions import BadRequestError, LocationMismatchError, MissingCredentialsError
from crm_gateway.auth.models import AuthenticatedClient
from crm_gateway.dependencies import get_dispatcher, get_tool_registry
from crm_gateway.ratelimit import rate_limit_dependency
from crm_gateway.registry import (
    SUPPORTED_CATEGORIES,
    CategoryNotFoundError,
    ParameterValidationError,
    ToolNotFoundError,
    ToolRegistry,
    validate_parameters,
)

from .schemas import ProxyEnvelope
from .service import ProxyDispatcher


router = APIRouter(
    prefix="/mcp",
    tags=["gateway"],
    dependencies=[Depends(get_authenticated_client), Depends(rate_limit_dependency)],
)

SUPPORTED = [category.value for category in SUPPORTED_CATEGORIES]


def resolve_credential(client: AuthenticatedClient, location_id: str) -> str:
    """Pick the vendor credential for a downstream call.

    Raises:
        LocationMismatchError: Session bound to a different location.
        MissingCredentialsError: No vendor API key available for the call.
    """
    if client.location_id and client.location_id != location_id:
        raise LocationMismatchError(client.location_id, location_id)
    if not client.credential:
        raise MissingCredentialsError(
            "A vendor API key matching the session is required to call the CRM service"
        )
    return client.credential


@router.get("/tools")
async def list_tools(
    registry: Annotated[ToolRegistry, Depends(get_tool_registry)],
    dispatcher: Annotated[ProxyDispatcher, Depends(get_dispatcher)],
    location_id: Annotated[str | None, Query(alias="locationId")] = None,
) -> dict:
    """List tools in the supported categories."""
    if not location_id:
        raise BadRequestError("locationId is required", code="LOCATION_ID_REQUIRED")

    return {
        "tools": [tool.to_public() for tool in registry.supported_tools()],
        "mcpEndpoint": dispatcher.base_url,
        "locationId": location_id,
        "supportedCategories": SUPPORTED,
    }


@router.post("/proxy/{tool_name}", response_model=ProxyEnvelope)
async def proxy_tool(
    tool_name: str,
    registry: Annotated[ToolRegistry, Depends(get_tool_registry)],
    dispatcher: Annotated[ProxyDispatcher, Depends(get_dispatcher)],
    client: Annotated[AuthenticatedClient, Depends(get_authenticated_client)],
    payload: Annotated[dict[str, Any] | None, Body()] = None,
) -> ProxyEnvelope:
    """Validate a tool call and proxy it to the CRM service.

    The body holds ``locationId`` plus the tool's parameters. ``locationId``
    is sent downstream as a header, the rest as the JSON body.
    """
    payload = payload or {}
    params = dict(payload)
    location_id = params.pop("locationId", None)
    if not location_id:
        raise BadRequestError("locationId is required in request body", code="LOCATION_ID_REQUIRED")

    tool = registry.lookup(tool_name)
    if tool is None:
        raise ToolNotFoundError(tool_name, available_tools=[t.name for t in registry.supported_tools()])

    verdict = validate_parameters(tool, payload)
    if not verdict.valid:
        raise ParameterValidationError(tool_name, verdict.errors)

    dispatcher.ensure_supported(tool)
    credential = resolve_credential(client, str(location_id))
    return await dispatcher.dispatch(tool, str(location_id), credential, params)


@router.get("/health")
async def mcp_health(
    dispatcher: Annotated[ProxyDispatcher, Depends(get_dispatcher)],
    client: Annotated[AuthenticatedClient, Depends(get_authenticated_client)],
    location_id: Annotated[str | None, Query(alias="locationId")] = None,
):
    """Probe connectivity to the MCP endpoint for a location."""
    if not location_id:
        raise BadRequestError("locationId is required for health check", code="LOCATION_ID_REQUIRED")

    credential = resolve_credential(client, location_id)
    result = await dispatcher.probe(location_id, credential)
    timestamp = datetime.now(timezone.utc).isoformat()

    if not result.connected:
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "mcpServer": "disconnected",
                "error": result.error,
                "timestamp": timestamp,
            },
        )

    return {
        "status": "healthy",
        "mcpServer": "connected",
        "locationId": location_id,
        "responseTime": result.response_time_ms,
        "timestamp": timestamp,
    }


@router.get("/{category}/tools")
async def list_category_tools(
    category: str,
    registry: Annotated[ToolRegistry, Depends(get_tool_registry)],
) -> dict:
    """List tools of one supported category."""
    if category not in SUPPORTED:
        raise CategoryNotFoundError(category, available_categories=SUPPORTED)

    return {
        "category": category,
        "tools": [tool.to_public() for tool in registry.by_category(category)],
    }
