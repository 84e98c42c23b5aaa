"""Integration tests for the main application."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from crm_gateway.auth import create_session_token, fingerprint_credential
from crm_gateway.dependencies import get_http_client
from crm_gateway.main import create_app

API_KEY = "pit-test-key-1234567890"
AUTH_HEADERS = {"x-api-key": API_KEY}


def _response(status_code: int, json_body=None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = json_body if json_body is not None else {}
    return response


@pytest.fixture
def http_client():
    return AsyncMock()


@pytest.fixture
def make_client(http_client):
    """Build a TestClient for given settings with the CRM HTTP client mocked."""
    clients = []

    def _make(settings):
        app = create_app(settings)
        app.dependency_overrides[get_http_client] = lambda: http_client
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client, settings):
    return make_client(settings)


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["endpoints"]["mcp"] == "/mcp"


def test_security_headers(client):
    response = client.get("/")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert "Strict-Transport-Security" not in response.headers


class TestHealth:
    def test_health_check(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["app"] == "CRM Tool Gateway"
        assert data["memory"]["rss"].endswith("MB")

    def test_detailed_without_credentials(self, client, http_client):
        response = client.get("/health/detailed")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["checks"]["tools"]["count"] == 25
        assert data["checks"]["crmConnectivity"]["status"] == "skipped"
        http_client.get.assert_not_called()

    def test_detailed_with_failing_crm(self, client, http_client):
        http_client.get.return_value = _response(401)

        response = client.get("/health/detailed", headers={"x-api-key": API_KEY, "x-location-id": "loc_1"})

        data = response.json()
        assert data["status"] == "degraded"
        assert data["checks"]["crmConnectivity"]["error"] == "Authentication failed"

    def test_mcp_probe_requires_key(self, client):
        response = client.get("/health/mcp")

        assert response.status_code == 400
        assert response.json()["status"] == "error"

    def test_mcp_probe_healthy(self, client, http_client):
        http_client.get.return_value = _response(200)

        response = client.get("/health/mcp", headers={"x-api-key": API_KEY})

        assert response.status_code == 200
        assert response.json()["mcpServer"]["connected"] is True
        assert http_client.get.call_args.kwargs["timeout"] == 15

    def test_system_info(self, client):
        response = client.get("/health/system")

        assert response.status_code == 200
        assert response.json()["server"]["version"] == "1.0.0"


class TestAuthEndpoints:
    def test_validate_success(self, client, http_client, settings):
        """Test a live-checked key is exchanged for a session token."""
        http_client.get.return_value = _response(200, {"location": {"id": "loc_1"}})

        response = client.post("/auth/validate", json={"apiKey": API_KEY, "locationId": "loc_1"})

        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert data["expiresIn"] == "24h"
        assert data["locationId"] == "loc_1"
        assert data["sessionToken"]

    def test_validate_missing_key(self, client):
        response = client.post("/auth/validate", json={"locationId": "loc_1"})

        assert response.status_code == 400
        assert response.json() == {
            "valid": False,
            "error": "API_KEY_REQUIRED",
            "message": "API key is required",
        }

    def test_validate_missing_location(self, client):
        response = client.post("/auth/validate", json={"apiKey": API_KEY})

        assert response.status_code == 400
        assert response.json()["error"] == "LOCATION_ID_REQUIRED"

    def test_validate_malformed_key(self, client, http_client):
        response = client.post("/auth/validate", json={"apiKey": "sk-123456789", "locationId": "loc_1"})

        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_API_KEY_FORMAT"
        http_client.get.assert_not_called()

    def test_validate_rejected_key(self, client, http_client):
        http_client.get.return_value = _response(401)

        response = client.post("/auth/validate", json={"apiKey": API_KEY, "locationId": "loc_1"})

        assert response.status_code == 401
        assert response.json()["valid"] is False
        assert response.json()["kind"] == "rejected"

    def test_validate_insufficient_scope(self, client, http_client):
        http_client.get.return_value = _response(403)

        response = client.post("/auth/validate", json={"apiKey": API_KEY, "locationId": "loc_1"})

        assert response.status_code == 403
        assert "View Calendars" in response.json()["requiredScopes"]

    def test_refresh(self, client, settings):
        token = create_session_token("loc_1", fingerprint_credential(API_KEY), settings=settings)

        response = client.post("/auth/refresh", json={"sessionToken": token})

        assert response.status_code == 200
        assert response.json()["locationId"] == "loc_1"

    def test_refresh_expired(self, client, settings):
        issued = datetime.now(timezone.utc) - timedelta(hours=30)
        token = create_session_token("loc_1", "abc", issued_at=issued, settings=settings)

        response = client.post("/auth/refresh", json={"sessionToken": token})

        assert response.status_code == 401
        assert response.json()["error"] == "SESSION_TOKEN_EXPIRED"
        assert response.json()["kind"] == "expired"

    def test_validate_non_string_key(self, client, http_client):
        response = client.post("/auth/validate", json={"apiKey": 12345, "locationId": "loc_1"})

        assert response.status_code == 400
        data = response.json()
        assert data["valid"] is False
        assert data["error"] == "INVALID_API_KEY_FORMAT"
        assert data["message"] == "API key must be a string"
        http_client.get.assert_not_called()

    def test_refresh_corrupted_token(self, client):
        """Test a structurally broken token is reported as invalid, not expired."""
        response = client.post("/auth/refresh", json={"sessionToken": "not.a.jwt"})

        assert response.status_code == 401
        assert response.json()["error"] == "INVALID_SESSION_TOKEN"
        assert response.json()["kind"] == "invalid"

    def test_refresh_missing_token(self, client):
        response = client.post("/auth/refresh", json={})

        assert response.status_code == 400
        assert response.json()["error"] == "SESSION_TOKEN_REQUIRED"

    def test_requirements(self, client):
        response = client.get("/auth/requirements")

        assert response.status_code == 200
        assert "pit-" in response.json()["apiKeyFormat"]
        scopes = response.json()["requiredScopes"]
        assert "View Conversations" in scopes
        assert scopes[-2:] == ["View Custom Fields", "View Locations"]


class TestToolCatalog:
    def test_requires_authentication(self, client):
        response = client.get("/mcp/tools", params={"locationId": "loc_1"})

        assert response.status_code == 401
        data = response.json()
        assert data["error"] == "AUTHENTICATION_REQUIRED"
        assert data["kind"] == "missing"
        assert len(data["methods"]) == 3

    def test_malformed_key_rejected(self, client):
        response = client.get("/mcp/tools", params={"locationId": "loc_1"}, headers={"x-api-key": "nope"})

        assert response.status_code == 400
        assert response.json()["kind"] == "malformed"

    def test_list_tools(self, client):
        response = client.get("/mcp/tools", params={"locationId": "loc_1"}, headers=AUTH_HEADERS)

        assert response.status_code == 200
        data = response.json()
        assert data["supportedCategories"] == ["conversations", "calendars", "blog"]
        assert data["mcpEndpoint"] == "https://crm.test/mcp/"
        names = [tool["name"] for tool in data["tools"]]
        assert "view-contacts" not in names
        assert len(names) == 23

    def test_list_tools_requires_location(self, client):
        response = client.get("/mcp/tools", headers=AUTH_HEADERS)

        assert response.status_code == 400
        assert response.json()["error"] == "LOCATION_ID_REQUIRED"

    def test_list_category(self, client):
        response = client.get("/mcp/calendars/tools", headers={"authorization": f"Bearer {API_KEY}"})

        assert response.status_code == 200
        assert response.json()["category"] == "calendars"

    def test_list_unsupported_category(self, client):
        response = client.get("/mcp/contacts/tools", headers=AUTH_HEADERS)

        assert response.status_code == 404
        assert response.json()["error"] == "CATEGORY_NOT_FOUND"


class TestProxy:
    """End-to-end tests for POST /mcp/proxy/{tool}."""

    def test_proxy_success(self, client, http_client):
        http_client.post.return_value = _response(200, {"calendars": [{"id": "cal_1"}]})

        response = client.post(
            "/mcp/proxy/view-calendars",
            json={"locationId": "loc_1", "limit": 5},
            headers=AUTH_HEADERS,
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "data": {"calendars": [{"id": "cal_1"}]},
            "tool": "view-calendars",
            "category": "calendars",
        }
        call = http_client.post.call_args
        assert call.args[0] == "https://crm.test/mcp/calendars_view-calendars"
        assert call.kwargs["json"] == {"limit": 5}
        assert call.kwargs["headers"]["locationId"] == "loc_1"
        assert call.kwargs["headers"]["Authorization"] == f"Bearer {API_KEY}"

    def test_proxy_sets_rate_limit_headers(self, client, http_client):
        http_client.post.return_value = _response(200, {})

        response = client.post("/mcp/proxy/view-calendars", json={"locationId": "loc_1"}, headers=AUTH_HEADERS)

        assert response.headers["X-RateLimit-Limit"] == "100"
        assert response.headers["X-RateLimit-Remaining"] == "99"

    def test_proxy_missing_location(self, client, http_client):
        response = client.post("/mcp/proxy/view-calendars", json={}, headers=AUTH_HEADERS)

        assert response.status_code == 400
        assert response.json()["error"] == "LOCATION_ID_REQUIRED"
        http_client.post.assert_not_called()

    def test_proxy_unknown_tool(self, client, http_client):
        response = client.post("/mcp/proxy/no-such-tool", json={"locationId": "loc_1"}, headers=AUTH_HEADERS)

        assert response.status_code == 404
        data = response.json()
        assert data["error"] == "TOOL_NOT_FOUND"
        assert "send-message" in data["availableTools"]
        http_client.post.assert_not_called()

    def test_proxy_validation_error(self, client, http_client):
        response = client.post("/mcp/proxy/send-message", json={"locationId": "loc_1"}, headers=AUTH_HEADERS)

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "VALIDATION_ERROR"
        assert data["errors"] == [
            "Missing required parameter: conversationId",
            "Missing required parameter: message",
        ]
        http_client.post.assert_not_called()

    def test_proxy_forbidden_category(self, client, http_client):
        """Test known tools outside the proxied categories are refused."""
        response = client.post("/mcp/proxy/view-contacts", json={"locationId": "loc_1"}, headers=AUTH_HEADERS)

        assert response.status_code == 403
        assert response.json()["error"] == "FORBIDDEN_CATEGORY"
        http_client.post.assert_not_called()

    def test_proxy_forbidden_category_with_session_only(self, client, http_client, settings):
        """Test the category check wins over the missing vendor key."""
        token = create_session_token("loc_1", fingerprint_credential(API_KEY), settings=settings)

        response = client.post(
            "/mcp/proxy/view-contacts",
            json={"locationId": "loc_1"},
            headers={"x-session-token": token},
        )

        assert response.status_code == 403
        assert response.json()["error"] == "FORBIDDEN_CATEGORY"
        http_client.post.assert_not_called()

    def test_proxy_non_object_body(self, client, http_client):
        response = client.post("/mcp/proxy/view-calendars", json=[1, 2], headers=AUTH_HEADERS)

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "VALIDATION_ERROR"
        assert data["errors"]
        assert "detail" not in data
        http_client.post.assert_not_called()

    def test_proxy_downstream_status_passthrough(self, client, http_client):
        http_client.post.return_value = _response(422, {"message": "calendarId invalid"})

        response = client.post(
            "/mcp/proxy/edit-calendars",
            json={"locationId": "loc_1", "calendarId": "cal_x"},
            headers=AUTH_HEADERS,
        )

        assert response.status_code == 422
        data = response.json()
        assert data["message"] == "MCP request failed"
        assert data["details"] == {"message": "calendarId invalid"}

    def test_proxy_with_session_token(self, client, http_client, settings):
        http_client.post.return_value = _response(200, {"ok": True})
        token = create_session_token("loc_1", fingerprint_credential(API_KEY), settings=settings)

        response = client.post(
            "/mcp/proxy/view-calendars",
            json={"locationId": "loc_1"},
            headers={"x-session-token": token, "x-api-key": API_KEY},
        )

        assert response.status_code == 200

    def test_proxy_session_location_mismatch(self, client, http_client, settings):
        token = create_session_token("loc_1", fingerprint_credential(API_KEY), settings=settings)

        response = client.post(
            "/mcp/proxy/view-calendars",
            json={"locationId": "loc_2"},
            headers={"x-session-token": token, "x-api-key": API_KEY},
        )

        assert response.status_code == 403
        assert response.json()["error"] == "LOCATION_MISMATCH"
        http_client.post.assert_not_called()

    def test_proxy_session_without_vendor_key(self, client, http_client, settings):
        token = create_session_token("loc_1", fingerprint_credential(API_KEY), settings=settings)

        response = client.post(
            "/mcp/proxy/view-calendars",
            json={"locationId": "loc_1"},
            headers={"x-session-token": token},
        )

        assert response.status_code == 401
        http_client.post.assert_not_called()


class TestDirectory:
    def test_directory(self, client):
        response = client.get("/directory", headers=AUTH_HEADERS)

        assert response.status_code == 200
        assert response.json()["serverInfo"]["totalTools"] == 25

    def test_directory_invalid_category(self, client):
        response = client.get("/directory", params={"category": "invoices"}, headers=AUTH_HEADERS)

        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_CATEGORY"

    def test_unknown_tool(self, client):
        response = client.get("/directory/tool/unknown-name", headers=AUTH_HEADERS)

        assert response.status_code == 404
        assert response.json()["availableTools"]

    def test_tool_usage(self, client):
        response = client.get("/directory/tool/send-message", headers=AUTH_HEADERS)

        assert response.status_code == 200
        assert response.json()["usage"]["exampleRequest"]["message"] == "example-message"

    def test_category_unknown_format(self, client):
        response = client.get("/directory/category/blog", params={"format": "bogus"}, headers=AUTH_HEADERS)

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "VALIDATION_ERROR"
        assert any(error.startswith("query.format") for error in data["errors"])

    def test_search_requires_query(self, client):
        response = client.get("/directory/search", headers=AUTH_HEADERS)

        assert response.status_code == 400
        assert response.json()["error"] == "QUERY_REQUIRED"


class TestRateLimiting:
    def test_limit_exceeded(self, make_client, settings):
        """Test requests past the limit get 429 with Retry-After."""
        client = make_client(settings.model_copy(update={"RATE_LIMIT_MAX_REQUESTS": 2}))

        for _ in range(2):
            assert client.get("/auth/requirements").status_code == 200
        response = client.get("/auth/requirements")

        assert response.status_code == 429
        assert response.json()["error"] == "RATE_LIMIT_EXCEEDED"
        assert int(response.headers["Retry-After"]) >= 1
