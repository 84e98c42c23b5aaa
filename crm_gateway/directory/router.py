"""FastAPI router for read-only catalog introspection."""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query

from crm_gateway.auth.dependencies import get_authenticated_client
from crm_gateway.auth.exceptions import BadRequestError
from crm_gateway.config import Settings
from crm_gateway.dependencies import get_app_settings, get_tool_registry
from crm_gateway.ratelimit import rate_limit_dependency
from crm_gateway.registry import CategoryNotFoundError, ToolNotFoundError, ToolRegistry

from .service import (
    build_directory,
    category_listing,
    format_tool,
    search_tools,
    tool_usage,
)


router = APIRouter(
    prefix="/directory",
    tags=["directory"],
    dependencies=[Depends(get_authenticated_client), Depends(rate_limit_dependency)],
)


@router.get("")
async def get_directory(
    registry: Annotated[ToolRegistry, Depends(get_tool_registry)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    category: str | None = None,
    include_scopes: Annotated[bool, Query(alias="includeScopes")] = False,
) -> dict:
    """Complete directory, or one category when ``category`` is given."""
    if category:
        if category not in registry.categories():
            raise BadRequestError(
                f"Invalid category '{category}'",
                code="INVALID_CATEGORY",
                details={"availableCategories": registry.categories()},
            )
        return category_listing(registry, category, include_scopes)

    return build_directory(
        registry,
        include_scopes,
        server_name=settings.APP_NAME,
        version=settings.APP_VERSION,
    )


@router.get("/category/{category_name}")
async def get_category(
    category_name: str,
    registry: Annotated[ToolRegistry, Depends(get_tool_registry)],
    include_scopes: Annotated[bool, Query(alias="includeScopes")] = False,
    format: Literal["simple", "detailed"] = "detailed",
) -> dict:
    if not registry.by_category(category_name):
        raise CategoryNotFoundError(category_name, available_categories=registry.categories())

    return category_listing(registry, category_name, include_scopes, simple=format == "simple")


@router.get("/tool/{tool_name}")
async def get_tool(
    tool_name: str,
    registry: Annotated[ToolRegistry, Depends(get_tool_registry)],
    include_scopes: Annotated[bool, Query(alias="includeScopes")] = False,
) -> dict:
    """Tool details plus a ready-to-use example request."""
    tool = registry.lookup(tool_name)
    if tool is None:
        raise ToolNotFoundError(tool_name, available_tools=registry.names())

    return {**format_tool(tool, include_scopes), "usage": tool_usage(tool)}


@router.get("/search")
async def search(
    registry: Annotated[ToolRegistry, Depends(get_tool_registry)],
    q: str | None = None,
    category: str | None = None,
    scope: str | None = None,
) -> dict:
    if not q:
        raise BadRequestError('Search query parameter "q" is required', code="QUERY_REQUIRED")

    results = search_tools(registry, q, category=category, scope=scope)
    return {
        "query": q,
        "filters": {"category": category, "scope": scope},
        "totalResults": len(results),
        "results": [format_tool(tool) for tool in results],
    }
