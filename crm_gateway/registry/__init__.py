"""Registry module - Tool definitions, lookup and parameter validation."""

from .models import (
    ToolCategory,
    SUPPORTED_CATEGORIES,
    StringParam,
    NumberParam,
    BooleanParam,
    ArrayParam,
    ParamSpec,
    ToolDefinition,
)
from .exceptions import ToolNotFoundError, CategoryNotFoundError, ParameterValidationError
from .config import load_tool_catalog
from .registry import ToolRegistry
from .validation import ValidationVerdict, validate_parameters, validate_tool_parameters


__all__ = [
    "ToolCategory",
    "SUPPORTED_CATEGORIES",
    "StringParam",
    "NumberParam",
    "BooleanParam",
    "ArrayParam",
    "ParamSpec",
    "ToolDefinition",
    "ToolNotFoundError",
    "CategoryNotFoundError",
    "ParameterValidationError",
    "load_tool_catalog",
    "ToolRegistry",
    "ValidationVerdict",
    "validate_parameters",
    "validate_tool_parameters",
]
