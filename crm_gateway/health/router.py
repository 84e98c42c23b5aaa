"""Liveness and diagnostics endpoints."""

import os
import platform
import time
from datetime import datetime, timezone
from typing import Annotated

import httpx
import psutil
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from crm_gateway.auth.strategies import API_KEY_HEADER, bearer_credential
from crm_gateway.config import Settings
from crm_gateway.dependencies import get_app_settings, get_dispatcher, get_http_client, get_tool_registry
from crm_gateway.gateway.service import ProxyDispatcher
from crm_gateway.registry import SUPPORTED_CATEGORIES, ToolRegistry


router = APIRouter(prefix="/health", tags=["health"])

_PROCESS_STARTED = time.time()
_MB = 1024 * 1024


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _uptime() -> dict:
    seconds = int(time.time() - _PROCESS_STARTED)
    return {
        "seconds": seconds,
        "human": f"{seconds // 3600}h {(seconds % 3600) // 60}m {seconds % 60}s",
    }


def _credential_from(request: Request) -> str | None:
    return request.headers.get(API_KEY_HEADER) or bearer_credential(request.headers)


def _location_from(request: Request) -> str | None:
    return request.headers.get("x-location-id") or request.query_params.get("locationId")


@router.get("")
async def health_check(settings: Annotated[Settings, Depends(get_app_settings)]) -> dict:
    memory = psutil.Process().memory_info()
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "timestamp": _now(),
        "uptime": _uptime(),
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "memory": {
            "rss": f"{round(memory.rss / _MB)} MB",
            "vms": f"{round(memory.vms / _MB)} MB",
        },
    }


@router.get("/detailed")
async def detailed_health(
    request: Request,
    registry: Annotated[ToolRegistry, Depends(get_tool_registry)],
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> dict:
    """Catalog check plus an optional live CRM connectivity check."""
    start = time.perf_counter()
    checks: dict = {
        "server": {"status": "healthy"},
        "tools": {
            "status": "healthy" if len(registry) else "unhealthy",
            "count": len(registry),
            "categories": [category.value for category in SUPPORTED_CATEGORIES],
            "supportedTools": len(registry.supported_tools()),
        },
    }

    api_key = _credential_from(request)
    location_id = _location_from(request)
    if api_key and location_id:
        crm_start = time.perf_counter()
        url = f"{settings.CRM_API_BASE_URL.rstrip('/')}/locations/{location_id}"
        try:
            response = await client.get(
                url,
                headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
                timeout=settings.CREDENTIAL_CHECK_TIMEOUT_SECONDS,
            )
            error = None
            if response.status_code == 401:
                error = "Authentication failed"
            elif response.status_code >= 400:
                error = "Connection failed"
        except httpx.RequestError:
            error = "Connection failed"

        checks["crmConnectivity"] = {
            "status": "unhealthy" if error else "healthy",
            "responseTime": int((time.perf_counter() - crm_start) * 1000),
            "endpoint": settings.CRM_API_BASE_URL,
        }
        if error:
            checks["crmConnectivity"]["error"] = error
    else:
        checks["crmConnectivity"] = {
            "status": "skipped",
            "reason": "No API key or location ID provided for testing",
        }

    elapsed = int((time.perf_counter() - start) * 1000)
    checks["server"]["responseTime"] = elapsed
    overall = (
        "healthy"
        if all(check["status"] in ("healthy", "skipped") for check in checks.values())
        else "degraded"
    )
    return {
        "status": overall,
        "timestamp": _now(),
        "responseTime": elapsed,
        "checks": checks,
        "requiredScopes": sorted(registry.all_scopes()),
    }


@router.get("/mcp")
async def mcp_connectivity(
    request: Request,
    dispatcher: Annotated[ProxyDispatcher, Depends(get_dispatcher)],
    settings: Annotated[Settings, Depends(get_app_settings)],
):
    """Probe the MCP endpoint with a caller-supplied API key."""
    api_key = _credential_from(request)
    location_id = _location_from(request) or ""

    if not api_key:
        return JSONResponse(
            status_code=400,
            content={
                "status": "error",
                "message": "API key required for MCP connectivity test",
                "headers": {
                    "required": "x-api-key or Authorization: Bearer",
                    "optional": "x-location-id",
                },
            },
        )

    result = await dispatcher.probe(location_id, api_key, timeout=settings.HEALTH_PROBE_TIMEOUT_SECONDS)
    mcp_server = {
        "endpoint": dispatcher.base_url,
        "responseTime": result.response_time_ms,
        "status": result.status,
        "connected": result.connected,
    }

    if not result.connected:
        mcp_server["error"] = result.error
        content = {"status": "unhealthy", "mcpServer": mcp_server, "timestamp": _now()}
        if result.status == 401:
            content["authentication"] = {
                "apiKeyValid": False,
                "error": "Invalid API key or insufficient permissions",
            }
        return JSONResponse(status_code=result.status or 500, content=content)

    return {
        "status": "healthy",
        "mcpServer": mcp_server,
        "authentication": {
            "apiKeyValid": True,
            "locationId": location_id or "not provided",
        },
        "timestamp": _now(),
    }


@router.get("/system")
async def system_info(settings: Annotated[Settings, Depends(get_app_settings)]) -> dict:
    process = psutil.Process()
    memory = process.memory_info()
    return {
        "python": {
            "version": platform.python_version(),
            "implementation": platform.python_implementation(),
            "platform": platform.system().lower(),
            "arch": platform.machine(),
        },
        "memory": {
            "rss": f"{round(memory.rss / _MB)} MB",
            "vms": f"{round(memory.vms / _MB)} MB",
            "systemTotal": f"{round(psutil.virtual_memory().total / _MB)} MB",
        },
        "uptime": {
            "process": round(time.time() - _PROCESS_STARTED, 3),
            "system": round(time.time() - psutil.boot_time(), 3),
        },
        "environment": {
            "environment": settings.ENVIRONMENT,
            "pid": os.getpid(),
            "timezone": time.strftime("%Z"),
            "timestamp": _now(),
        },
        "server": {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
        },
    }
