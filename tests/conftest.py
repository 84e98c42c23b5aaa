# Test configuration
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).parent.parent

# Add repo root to path so tests can import modules
sys.path.insert(0, str(REPO_ROOT))

from crm_gateway.config import Settings  # noqa: E402
from crm_gateway.registry import ToolRegistry  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    return Settings(
        JWT_SECRET_KEY="test-secret",
        CRM_API_BASE_URL="https://crm.test",
        MCP_BASE_URL="https://crm.test/mcp/",
        CRM_API_KEY="",
        RATE_LIMIT_MAX_REQUESTS=100,
        RATE_LIMIT_WINDOW_MS=60000,
        _env_file=None,
    )


@pytest.fixture
def registry() -> ToolRegistry:
    return ToolRegistry.from_config()


class FakeClock:
    """Millisecond clock advanced manually by tests."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
