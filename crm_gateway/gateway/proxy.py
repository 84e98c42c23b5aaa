"""HTTP client calls to the CRM service's MCP endpoint."""

import time
from typing import Any

import httpx
import structlog

from .exceptions import DownstreamError, DownstreamTimeoutError, DownstreamUnavailableError
from .schemas import ProbeResult

logger = structlog.get_logger("gateway")


# Default timeouts for downstream requests
DEFAULT_TIMEOUT_SECONDS = 30.0
PROBE_TIMEOUT_SECONDS = 10.0


def _body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def build_headers(credential: str, location_id: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {credential}",
        "locationId": location_id,
        "Content-Type": "application/json",
    }


async def forward_tool_call(
    client: httpx.AsyncClient,
    url: str,
    credential: str,
    location_id: str,
    params: dict[str, Any],
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> Any:
    """Forward one tool call to the CRM service. Never retries.

    Args:
        client: Shared HTTP client.
        url: Full downstream URL of the tool endpoint.
        credential: Vendor API key sent as a bearer credential.
        location_id: Routing header value.
        params: JSON body.
        timeout: Request timeout in seconds.

    Returns:
        The downstream response body.

    Raises:
        DownstreamError: If the CRM service returns an error status.
        DownstreamTimeoutError: If it doesn't respond in time.
        DownstreamUnavailableError: If the connection fails.
    """
    start = time.perf_counter()
    try:
        response = await client.post(
            url,
            json=params,
            headers=build_headers(credential, location_id),
            timeout=timeout,
        )
    except httpx.TimeoutException:
        logger.warning("downstream_timeout", url=url, timeout=timeout)
        raise DownstreamTimeoutError(url=url, timeout_seconds=timeout)
    except httpx.RequestError as e:
        logger.warning("downstream_unavailable", url=url, error=str(e))
        raise DownstreamUnavailableError(url=url, reason=str(e))

    duration_ms = int((time.perf_counter() - start) * 1000)
    logger.info("downstream_call", url=url, status=response.status_code, duration_ms=duration_ms)

    if response.status_code >= 400:
        raise DownstreamError(status_code=response.status_code, body=_body(response))

    return _body(response)


async def probe_endpoint(
    client: httpx.AsyncClient,
    url: str,
    credential: str,
    location_id: str,
    timeout: float = PROBE_TIMEOUT_SECONDS,
) -> ProbeResult:
    """Issue a lightweight GET to check connectivity. Does not raise."""
    start = time.perf_counter()
    try:
        response = await client.get(
            url,
            headers=build_headers(credential, location_id),
            timeout=timeout,
        )
    except httpx.RequestError as e:
        return ProbeResult(
            connected=False,
            response_time_ms=int((time.perf_counter() - start) * 1000),
            error=str(e) or e.__class__.__name__,
        )

    elapsed = int((time.perf_counter() - start) * 1000)
    if response.status_code >= 400:
        return ProbeResult(
            connected=False,
            status=response.status_code,
            response_time_ms=elapsed,
            error=f"HTTP {response.status_code}",
        )
    return ProbeResult(connected=True, status=response.status_code, response_time_ms=elapsed)
