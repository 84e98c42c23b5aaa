"""Gateway module - proxying tool calls to the CRM service."""

from .schemas import ProxyEnvelope, ProbeResult
from .exceptions import (
    ForbiddenCategoryError,
    DownstreamError,
    DownstreamUnavailableError,
    DownstreamTimeoutError,
)
from .service import ProxyDispatcher


__all__ = [
    # Schemas
    "ProxyEnvelope",
    "ProbeResult",
    # Exceptions
    "ForbiddenCategoryError",
    "DownstreamError",
    "DownstreamUnavailableError",
    "DownstreamTimeoutError",
    # Service
    "ProxyDispatcher",
]
