"""Parameter validation against a tool's schema."""

from typing import Any, Mapping

from pydantic import BaseModel, Field

from .exceptions import ToolNotFoundError
from .models import ArrayParam, NumberParam, StringParam, ToolDefinition
from .registry import ToolRegistry


class ValidationVerdict(BaseModel):
    """Outcome of validating supplied parameters.

    Attributes:
        valid: True when no violations were found.
        errors: Every violation, in schema order then supplied order.
    """

    valid: bool
    errors: list[str] = Field(default_factory=list)


def _type_error(name: str, spec: Any, value: Any) -> str | None:
    # booleans are not checked
    if isinstance(spec, StringParam) and not isinstance(value, str):
        return f"Parameter '{name}' must be a string"
    if isinstance(spec, NumberParam) and (
        isinstance(value, bool) or not isinstance(value, (int, float))
    ):
        return f"Parameter '{name}' must be a number"
    if isinstance(spec, ArrayParam) and not isinstance(value, list):
        return f"Parameter '{name}' must be an array"
    return None


def validate_parameters(tool: ToolDefinition, params: Mapping[str, Any]) -> ValidationVerdict:
    """Validate supplied parameters against a tool's parameter schema.

    All fields are evaluated; the verdict lists every violation. Keys not
    declared by the schema are accepted as-is.
    """
    errors: list[str] = []

    for name, spec in tool.parameters.items():
        if spec.required and name not in params:
            errors.append(f"Missing required parameter: {name}")

    for name, value in params.items():
        spec = tool.parameters.get(name)
        if spec is None:
            continue

        type_error = _type_error(name, spec, value)
        if type_error:
            errors.append(type_error)

        allowed = getattr(spec, "enum", None)
        if allowed is not None and not _is_member(value, allowed):
            errors.append(
                f"Parameter '{name}' must be one of: {', '.join(str(item) for item in allowed)}"
            )

    return ValidationVerdict(valid=not errors, errors=errors)


def _is_member(value: Any, allowed: tuple) -> bool:
    # bool is an int subclass; True must not match an enum value of 1
    if isinstance(value, bool):
        return False
    return value in allowed


def validate_tool_parameters(
    registry: ToolRegistry,
    tool_name: str,
    params: Mapping[str, Any],
) -> ValidationVerdict:
    """Look up a tool by name and validate parameters for it.

    Raises:
        ToolNotFoundError: If the tool is not in the registry.
    """
    tool = registry.lookup(tool_name)
    if tool is None:
        raise ToolNotFoundError(tool_name, available_tools=registry.names())
    return validate_parameters(tool, params)
