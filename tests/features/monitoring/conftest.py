"""BDD step definitions for health report aggregation features.

Requests go through fastapi's TestClient without entering its context
manager, so the lifespan (logging setup, background sampler) never runs
and every scenario controls sampling explicitly.
"""

from dataclasses import dataclass, field
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient
from pytest_bdd import given, parsers, then, when

from mcpmonitor.adapters.storage.ring_buffer import RingBufferLogStorage
from mcpmonitor.app import create_app
from mcpmonitor.config import MonitorSettings
from mcpmonitor.core.store import MetricsStore
from tests.helpers import FakeClock


@dataclass
class MonitorScenarioContext:
    """State shared between the steps of one scenario."""

    clock: FakeClock = field(default_factory=FakeClock)
    store: MetricsStore | None = None
    client: TestClient | None = None
    response: httpx.Response | None = None
    sample_timestamps: list[float] = field(default_factory=list)

    def post_report(self, body: dict[str, Any]) -> None:
        assert self.client is not None
        self.response = self.client.post("/api/health-check", json=body)


@pytest.fixture
def ctx() -> MonitorScenarioContext:
    """Fresh scenario context for each test."""
    return MonitorScenarioContext()


# === Background Steps ===
@given("a running monitor")
def step_running_monitor(ctx: MonitorScenarioContext) -> None:
    ctx.store = MetricsStore(clock=ctx.clock)
    settings = MonitorSettings(
        _env_file=None, log_backend="memory", async_log_writes=False
    )
    app = create_app(settings, store=ctx.store, log_storage=RingBufferLogStorage())
    ctx.client = TestClient(app)


# === Report Steps ===
@when(
    parsers.parse(
        'the service "{service_id}" named "{name}" reports "{status}" in {ms:d} ms'
    )
)
def step_report(
    ctx: MonitorScenarioContext, service_id: str, name: str, status: str, ms: int
) -> None:
    ctx.post_report(
        {
            "serviceId": service_id,
            "serviceName": name,
            "status": status,
            "responseTime": ms,
        }
    )
    assert ctx.response is not None and ctx.response.status_code == 200


@when(
    parsers.parse(
        'a report for "{service_id}" named "{name}" is posted without a status'
    )
)
def step_report_without_status(
    ctx: MonitorScenarioContext, service_id: str, name: str
) -> None:
    ctx.post_report({"serviceId": service_id, "serviceName": name})


# === Read Steps ===
@when(parsers.parse('the service detail for "{service_id}" is requested'))
def step_request_detail(ctx: MonitorScenarioContext, service_id: str) -> None:
    assert ctx.client is not None
    ctx.response = ctx.client.get(f"/api/metrics/{service_id}")


@when("the current metrics are requested")
def step_request_metrics(ctx: MonitorScenarioContext) -> None:
    assert ctx.client is not None
    ctx.response = ctx.client.get("/api/metrics")


@when(parsers.parse("{n:d} samples are taken"))
def step_take_samples(ctx: MonitorScenarioContext, n: int) -> None:
    assert ctx.store is not None
    for _ in range(n):
        ctx.clock.advance(30)
        ctx.sample_timestamps.append(ctx.store.sample().timestamp)


# === Assertion Steps ===
@then(parsers.parse("the response status is {code:d}"))
def step_response_status(ctx: MonitorScenarioContext, code: int) -> None:
    assert ctx.response is not None
    assert ctx.response.status_code == code


@then(parsers.parse('the response error is "{message}"'))
def step_response_error(ctx: MonitorScenarioContext, message: str) -> None:
    assert ctx.response is not None
    assert ctx.response.json() == {"error": message}


@then(parsers.parse('the detail shows status "{status}" after {checks:d} check'))
def step_detail_status(ctx: MonitorScenarioContext, status: str, checks: int) -> None:
    assert ctx.response is not None
    body = ctx.response.json()
    assert body["status"] == status
    assert body["checksCount"] == checks


@then(parsers.parse("the detail shows a response time of {ms:d} ms"))
def step_detail_response_time(ctx: MonitorScenarioContext, ms: int) -> None:
    assert ctx.response is not None
    assert ctx.response.json()["responseTime"] == ms


@then(parsers.parse("the error count is {n:d}"))
def step_error_count(ctx: MonitorScenarioContext, n: int) -> None:
    assert ctx.store is not None
    assert ctx.store.counters().error_count == n


@then(parsers.parse('no record exists for "{service_id}"'))
def step_no_record(ctx: MonitorScenarioContext, service_id: str) -> None:
    assert ctx.store is not None
    assert ctx.store.get(service_id) is None


@then(parsers.parse("the history holds {n:d} samples in chronological order"))
def step_history_holds(ctx: MonitorScenarioContext, n: int) -> None:
    assert ctx.store is not None
    history = ctx.store.history(ctx.store.capacity)
    assert len(history) == n
    assert [s.timestamp for s in history] == ctx.sample_timestamps[-n:]


@then(parsers.parse("the snapshot shows {servers:d} servers with {healthy:d} healthy"))
def step_snapshot_counts(
    ctx: MonitorScenarioContext, servers: int, healthy: int
) -> None:
    assert ctx.response is not None
    current = ctx.response.json()["current"]
    assert current["serverCount"] == servers
    assert current["healthyCount"] == healthy
