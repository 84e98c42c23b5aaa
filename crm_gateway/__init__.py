"""CRM tool gateway: authenticated, rate-limited proxy for CRM MCP tools."""

__version__ = "1.0.0"
