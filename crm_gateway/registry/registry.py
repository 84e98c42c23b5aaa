"""In-memory, read-only tool registry."""

from types import MappingProxyType
from typing import Iterable

from .config import load_tool_catalog
from .models import SUPPORTED_CATEGORIES, ToolCategory, ToolDefinition


class ToolRegistry:
    """Immutable lookup table of tool definitions.

    Built once at startup; lookups by name are O(1), category scans are
    linear over the (small) catalog and keep registration order.
    """

    def __init__(self, tools: Iterable[ToolDefinition]):
        by_name: dict[str, ToolDefinition] = {}
        for tool in tools:
            if tool.name in by_name:
                raise ValueError(f"duplicate tool name in catalog: {tool.name}")
            by_name[tool.name] = tool
        self._tools = MappingProxyType(by_name)

    @classmethod
    def from_config(cls, config_path: str | None = None) -> "ToolRegistry":
        return cls(load_tool_catalog(config_path).tools)

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self):
        return iter(self._tools.values())

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def lookup(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    def by_category(self, category: str | ToolCategory) -> list[ToolDefinition]:
        return [tool for tool in self._tools.values() if tool.category == category]

    def supported_tools(self) -> list[ToolDefinition]:
        """Tools whose category the proxy will dispatch to."""
        return [tool for tool in self._tools.values() if tool.category in SUPPORTED_CATEGORIES]

    def categories(self) -> list[str]:
        """Distinct categories in registration order."""
        seen: dict[str, None] = {}
        for tool in self._tools.values():
            seen.setdefault(tool.category.value, None)
        return list(seen)

    def names(self) -> list[str]:
        return list(self._tools)

    def all_scopes(self) -> set[str]:
        scopes: set[str] = set()
        for tool in self._tools.values():
            scopes.update(tool.required_scopes)
        return scopes
