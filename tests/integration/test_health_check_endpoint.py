"""Integration tests for POST /api/health-check."""

import httpx
import pytest

from mcpmonitor.core.store import MetricsStore
from tests.helpers import FakeClock

pytestmark = [pytest.mark.api, pytest.mark.tier(2)]

GITHUB_REPORT = {
    "serviceId": "github",
    "serviceName": "GitHub MCP",
    "status": "healthy",
    "responseTime": 42,
}


class TestHealthCheckEndpoint:
    @pytest.mark.tra("API.HealthCheck.Accepted")
    async def test_valid_report_is_recorded(
        self, client: httpx.AsyncClient, store: MetricsStore, clock: FakeClock
    ) -> None:
        response = await client.post("/api/health-check", json=GITHUB_REPORT)

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Health check recorded",
        }
        record = store.get("github")
        assert record is not None
        assert record.status == "healthy"
        assert record.response_time == 42
        assert record.last_checked == clock.now
        assert record.checks_count == 1

    @pytest.mark.tra("API.HealthCheck.CountsRequest")
    async def test_request_is_counted(
        self, client: httpx.AsyncClient, store: MetricsStore
    ) -> None:
        await client.post("/api/health-check", json=GITHUB_REPORT)
        await client.post("/api/health-check", json=GITHUB_REPORT)

        assert store.counters().total_requests == 2
        assert store.counters().error_count == 0
        assert store.get("github").checks_count == 2

    @pytest.mark.tra("API.HealthCheck.LegacyFieldNames")
    async def test_server_field_spelling_is_accepted(
        self, client: httpx.AsyncClient, store: MetricsStore
    ) -> None:
        response = await client.post(
            "/api/health-check",
            json={"serverId": "sqlite", "serverName": "SQLite MCP", "status": "ok"},
        )

        assert response.status_code == 200
        assert store.get("sqlite").name == "SQLite MCP"

    @pytest.mark.tra("API.HealthCheck.Error")
    async def test_error_message_is_stored(
        self, client: httpx.AsyncClient, store: MetricsStore
    ) -> None:
        await client.post(
            "/api/health-check",
            json={
                "serviceId": "postgres",
                "serviceName": "PostgreSQL MCP",
                "status": "unhealthy",
                "error": "connection refused",
            },
        )

        assert store.get("postgres").error == "connection refused"


class TestHealthCheckValidation:
    @pytest.mark.tra("API.HealthCheck.MissingFields")
    @pytest.mark.parametrize("missing", ["serviceId", "serviceName", "status"])
    async def test_missing_field_returns_400(
        self, client: httpx.AsyncClient, store: MetricsStore, missing: str
    ) -> None:
        body = {k: v for k, v in GITHUB_REPORT.items() if k != missing}

        response = await client.post("/api/health-check", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields"}
        assert store.services() == {}
        assert store.counters().error_count == 1
        assert store.counters().total_requests == 1

    @pytest.mark.tra("API.HealthCheck.NegativeLatency")
    async def test_negative_response_time_returns_400(
        self, client: httpx.AsyncClient, store: MetricsStore
    ) -> None:
        response = await client.post(
            "/api/health-check", json={**GITHUB_REPORT, "responseTime": -5}
        )

        assert response.status_code == 400
        assert response.json() == {
            "error": "responseTime must be a finite non-negative number"
        }
        assert store.get("github") is None

    @pytest.mark.tra("API.HealthCheck.MalformedBody")
    @pytest.mark.parametrize(
        "content",
        [b"not json", b'{"serviceId": "github", "responseTime": "fast"}', b"[1, 2]"],
    )
    async def test_malformed_body_returns_400(
        self, client: httpx.AsyncClient, store: MetricsStore, content: bytes
    ) -> None:
        response = await client.post(
            "/api/health-check",
            content=content,
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request body"}
        assert store.counters().error_count == 1
        assert store.services() == {}

    @pytest.mark.tra("API.HealthCheck.NonFiniteLatency")
    @pytest.mark.parametrize("literal", [b"NaN", b"Infinity", b"-Infinity"])
    async def test_non_finite_response_time_returns_400(
        self, client: httpx.AsyncClient, store: MetricsStore, literal: bytes
    ) -> None:
        content = (
            b'{"serviceId": "github", "serviceName": "GitHub MCP",'
            b' "status": "healthy", "responseTime": ' + literal + b"}"
        )

        response = await client.post(
            "/api/health-check",
            content=content,
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {
            "error": "responseTime must be a finite non-negative number"
        }
        assert store.get("github") is None

    @pytest.mark.tra("API.HealthCheck.StrictLatencyType")
    @pytest.mark.parametrize("response_time", [True, False, "42"])
    async def test_non_numeric_response_time_returns_400(
        self, client: httpx.AsyncClient, store: MetricsStore, response_time: object
    ) -> None:
        """Booleans and numeric strings are not coerced into latencies."""
        response = await client.post(
            "/api/health-check", json={**GITHUB_REPORT, "responseTime": response_time}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request body"}
        assert store.get("github") is None
