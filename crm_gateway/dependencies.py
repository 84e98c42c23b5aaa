"""Global dependencies for the application."""

from typing import Annotated

import httpx
from fastapi import Depends, Request

from .config import Settings, get_settings
from .gateway.service import ProxyDispatcher
from .registry.registry import ToolRegistry


async def get_http_client(request: Request) -> httpx.AsyncClient:
    """Dependency to get the global shared HTTP client.

    This client is initialized in main.py lifespan and shared across requests
    to enable connection pooling (keep-alive).
    """
    return request.app.state.http_client


async def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


async def get_tool_registry(request: Request) -> ToolRegistry:
    """Return the registry loaded at startup."""
    return request.app.state.tool_registry


async def get_dispatcher(
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> ProxyDispatcher:
    return ProxyDispatcher(client, settings)
