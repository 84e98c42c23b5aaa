"""Catalog introspection helpers for the directory endpoints."""

from typing import Any

from crm_gateway.registry import ToolDefinition, ToolRegistry


CATEGORY_DESCRIPTIONS = {
    "conversations": "Tools for managing conversations, messages, and communication workflows",
    "calendars": "Tools for calendar management, events, appointments, and scheduling",
    "blog": "Tools for blog post creation, management, and content operations",
    "contacts": "Tools for contact management and customer data operations",
    "campaigns": "Tools for marketing campaign management and automation",
}

# Checked in order; the first keyword found in the tool name wins
TRIGGER_KEYWORDS = [
    (("view", "get"), "read"),
    (("edit", "update"), "update"),
    (("create", "send"), "create"),
    (("delete",), "delete"),
    (("search",), "search"),
]


def category_description(category: str) -> str:
    return CATEGORY_DESCRIPTIONS.get(category, f"Tools in the {category} category")


def trigger_type(tool: ToolDefinition) -> str:
    """Classify a tool as read, update, create, delete, search or action."""
    for keywords, trigger in TRIGGER_KEYWORDS:
        if any(keyword in tool.name for keyword in keywords):
            return trigger
    return "action"


def proxy_path(tool: ToolDefinition) -> str:
    return f"/mcp/proxy/{tool.name}"


def format_tool(tool: ToolDefinition, include_scopes: bool = False) -> dict[str, Any]:
    public = tool.to_public()
    formatted = {
        "name": tool.name,
        "category": tool.category.value,
        "description": tool.description,
        "endpoint": proxy_path(tool),
        "parameters": public.get("parameters", {}),
        "triggerType": trigger_type(tool),
    }
    if include_scopes:
        formatted["requiredScopes"] = list(tool.required_scopes)
    return formatted


def format_tool_simple(tool: ToolDefinition) -> dict[str, Any]:
    return {
        "name": tool.name,
        "description": tool.description,
        "endpoint": proxy_path(tool),
    }


def example_request(tool: ToolDefinition) -> dict[str, Any]:
    """Build an example proxy body filling in every required parameter."""
    example: dict[str, Any] = {"locationId": "your-location-id"}

    for name, spec in tool.parameters.items():
        if not spec.required or name == "locationId":
            continue
        if spec.type == "string":
            example[name] = spec.enum[0] if spec.enum else f"example-{name}"
        elif spec.type == "number":
            example[name] = spec.default if spec.default else 20
        elif spec.type == "boolean":
            example[name] = True
        elif spec.type == "array":
            example[name] = ["example-item"]

    return example


def tool_usage(tool: ToolDefinition) -> dict[str, Any]:
    return {
        "endpoint": proxy_path(tool),
        "method": "POST",
        "headers": {
            "x-api-key": "your-pit-token",
            "Content-Type": "application/json",
        },
        "exampleRequest": example_request(tool),
    }


def category_listing(
    registry: ToolRegistry,
    category: str,
    include_scopes: bool = False,
    simple: bool = False,
) -> dict[str, Any]:
    tools = registry.by_category(category)
    return {
        "category": category,
        "description": category_description(category),
        "totalTools": len(tools),
        "tools": [
            format_tool_simple(tool) if simple else format_tool(tool, include_scopes)
            for tool in tools
        ],
    }


def build_directory(
    registry: ToolRegistry,
    include_scopes: bool = False,
    server_name: str = "CRM Tool Gateway",
    version: str = "1.0.0",
) -> dict[str, Any]:
    """Full directory of the catalog organized by category."""
    categories = registry.categories()
    summary: dict[str, Any] = {
        "totalEndpoints": len(registry),
        "categoriesBreakdown": [
            {"category": category, "count": len(registry.by_category(category))}
            for category in categories
        ],
    }
    if include_scopes:
        summary["requiredScopes"] = sorted(registry.all_scopes())

    return {
        "serverInfo": {
            "name": server_name,
            "version": version,
            "description": "Directory of CRM tool endpoints organized by category",
            "totalCategories": len(categories),
            "totalTools": len(registry),
        },
        "categories": {
            category: {"name": category, **category_listing(registry, category, include_scopes)}
            for category in categories
        },
        "summary": summary,
    }


def search_tools(
    registry: ToolRegistry,
    query: str,
    category: str | None = None,
    scope: str | None = None,
) -> list[ToolDefinition]:
    """Case-insensitive substring search over name, description and category."""
    needle = query.lower()
    results = []
    for tool in registry:
        if category and tool.category != category:
            continue
        if scope and scope not in tool.required_scopes:
            continue
        if (
            needle in tool.name.lower()
            or needle in tool.description.lower()
            or needle in tool.category.value.lower()
        ):
            results.append(tool)
    return results
