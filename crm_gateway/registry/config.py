"""Static tool catalog loader."""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from .models import ToolDefinition


DEFAULT_CATALOG_PATH = Path(__file__).parent / "tools.yaml"


class ToolCatalogConfig(BaseModel):
    """Container for tool definitions."""

    tools: list[ToolDefinition] = Field(default_factory=list)


def load_tool_catalog(config_path: str | Path | None = None) -> ToolCatalogConfig:
    """Load the tool catalog from YAML.

    Args:
        config_path: Optional custom path for the catalog file.

    Returns:
        Parsed ToolCatalogConfig.

    Raises:
        FileNotFoundError: If the catalog file does not exist.
    """
    path = Path(config_path) if config_path else DEFAULT_CATALOG_PATH

    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    return ToolCatalogConfig(**data)
