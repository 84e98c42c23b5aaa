"""Tool definition models.

Parameter schemas are a discriminated union on ``type`` so that, for
example, an ``enum`` on a boolean parameter cannot be expressed.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ToolCategory(str, Enum):
    """Closed set of tool categories in the catalog."""

    conversations = "conversations"
    calendars = "calendars"
    blog = "blog"
    contacts = "contacts"
    campaigns = "campaigns"


# Categories the proxy is allowed to dispatch to
SUPPORTED_CATEGORIES: tuple[ToolCategory, ...] = (
    ToolCategory.conversations,
    ToolCategory.calendars,
    ToolCategory.blog,
)


class _BaseParam(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    required: bool = False


class _EnumerableParam(_BaseParam):
    @model_validator(mode="after")
    def _default_in_enum(self):
        if self.enum is not None and self.default is not None and self.default not in self.enum:
            raise ValueError(f"default {self.default!r} is not one of {self.enum!r}")
        return self


class StringParam(_EnumerableParam):
    type: Literal["string"] = "string"
    default: str | None = None
    enum: tuple[str, ...] | None = None
    format: str | None = Field(default=None, description="Advisory hint, e.g. date or datetime")


class NumberParam(_EnumerableParam):
    type: Literal["number"] = "number"
    default: float | int | None = None
    enum: tuple[float | int, ...] | None = None


class BooleanParam(_BaseParam):
    type: Literal["boolean"] = "boolean"
    default: bool | None = None


class ArrayParam(_BaseParam):
    type: Literal["array"] = "array"
    default: tuple[Any, ...] | None = None


ParamSpec = Annotated[
    Union[StringParam, NumberParam, BooleanParam, ArrayParam],
    Field(discriminator="type"),
]


class ToolDefinition(BaseModel):
    """A named remote operation backed by one downstream endpoint.

    Attributes:
        name: Unique tool identifier.
        category: Category used for discovery and access gating.
        endpoint: Downstream path segment under the MCP base URL.
        description: Human-readable description.
        parameters: Parameter name to schema.
        required_scopes: Vendor scopes the tool needs downstream.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    category: ToolCategory
    endpoint: str
    description: str = ""
    parameters: dict[str, ParamSpec] = Field(default_factory=dict)
    required_scopes: tuple[str, ...] = Field(default=(), alias="requiredScopes")

    @property
    def is_supported(self) -> bool:
        return self.category in SUPPORTED_CATEGORIES

    def to_public(self) -> dict[str, Any]:
        """Serialize for catalog listings (camelCase, no empty fields)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
