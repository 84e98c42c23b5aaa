"""Catalog lookup and parameter validation errors."""

from crm_gateway.auth.exceptions import CRMGatewayError


class ToolNotFoundError(CRMGatewayError):
    """Raised when requested tool is not in the registry.

    Attributes:
        tool_name: Name of the tool that was not found.
        available_tools: Names of the tools that do exist.
    """

    status_code = 404

    def __init__(self, tool_name: str, available_tools: list[str] | None = None):
        super().__init__(
            message=f"Tool '{tool_name}' not found",
            code="TOOL_NOT_FOUND",
            details={"availableTools": available_tools or []},
        )
        self.tool_name = tool_name
        self.available_tools = available_tools or []


class CategoryNotFoundError(CRMGatewayError):
    """Raised when a category has no tools in the registry."""

    status_code = 404

    def __init__(self, category: str, available_categories: list[str] | None = None):
        super().__init__(
            message=f"Category '{category}' not found",
            code="CATEGORY_NOT_FOUND",
            details={"availableCategories": available_categories or []},
        )
        self.category = category
        self.available_categories = available_categories or []


class ParameterValidationError(CRMGatewayError):
    """Raised when supplied parameters violate a tool's schema.

    Attributes:
        errors: Every violation found.
    """

    status_code = 400

    def __init__(self, tool_name: str, errors: list[str]):
        super().__init__(
            message=f"Invalid parameters for tool '{tool_name}'",
            code="VALIDATION_ERROR",
            details={"errors": errors},
        )
        self.tool_name = tool_name
        self.errors = errors
