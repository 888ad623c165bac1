"""HTTP health probe for MCP servers.

Polls each configured server's ``/health`` endpoint and feeds the outcome
through the ingestor, exactly like an external agent posting to
``/api/health-check`` would.
"""

import asyncio
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass

import httpx

from mcpmonitor.core.ingestor import HealthReportIngestor
from mcpmonitor.core.models import ServiceStatus
from mcpmonitor.core.store import MetricsStore
from mcpmonitor.runtime.periodic import PeriodicTask

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT_SECONDS = 5.0


@dataclass(frozen=True)
class ProbeTarget:
    """A server to poll: display name and base URL."""

    name: str
    url: str

    @property
    def health_url(self) -> str:
        return f"{self.url.rstrip('/')}/health"


DEFAULT_TARGETS: dict[str, ProbeTarget] = {
    "github": ProbeTarget("GitHub MCP", "http://github-mcp:8080"),
    "sqlite": ProbeTarget("SQLite MCP", "http://sqlite-mcp:8080"),
    "filesystem": ProbeTarget("Filesystem MCP", "http://filesystem-mcp:8080"),
    "memory": ProbeTarget("Memory MCP", "http://memory-mcp:8080"),
    "postgres": ProbeTarget("PostgreSQL MCP", "http://postgres-mcp:8080"),
    "web": ProbeTarget("Web Search MCP", "http://web-mcp:8080"),
}


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one probe request."""

    status: str
    response_time: float | None = None
    error: str | None = None


class HealthProbe(PeriodicTask):
    """Periodically checks every target and reports the result.

    Args:
        store: Store in which targets are registered on start.
        ingestor: Write path for the probe's reports.
        targets: Service id to target mapping.
        interval_seconds: Delay between polling rounds.
        timeout_seconds: Per-request timeout.
        transport: Optional httpx transport (used by tests).
    """

    name = "health probe"

    def __init__(
        self,
        store: MetricsStore,
        ingestor: HealthReportIngestor,
        targets: Mapping[str, ProbeTarget],
        interval_seconds: float = 30.0,
        timeout_seconds: float = DEFAULT_PROBE_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(interval_seconds)
        self._store = store
        self._ingestor = ingestor
        self._targets = dict(targets)
        self._timeout = timeout_seconds
        self._transport = transport

    async def start(self) -> None:
        for service_id, target in self._targets.items():
            self._store.register(service_id, target.name)
        await super().start()

    async def check(
        self, client: httpx.AsyncClient, target: ProbeTarget
    ) -> ProbeResult:
        """Request a target's health endpoint and classify the answer."""
        started = time.perf_counter()
        try:
            response = await client.get(target.health_url)
        except httpx.HTTPError as exc:
            return ProbeResult(
                status=ServiceStatus.UNHEALTHY.value,
                error=str(exc) or type(exc).__name__,
            )
        elapsed_ms = round((time.perf_counter() - started) * 1000, 1)
        if response.status_code == 200:
            return ProbeResult(ServiceStatus.HEALTHY.value, response_time=elapsed_ms)
        return ProbeResult(
            status=ServiceStatus.UNHEALTHY.value,
            response_time=elapsed_ms,
            error=f"HTTP {response.status_code}",
        )

    async def _check_safely(
        self, client: httpx.AsyncClient, target: ProbeTarget
    ) -> ProbeResult:
        try:
            return await self.check(client, target)
        except Exception as exc:
            logger.warning(
                "Probe of %s failed unexpectedly", target.name, exc_info=True
            )
            return ProbeResult(status=ServiceStatus.ERROR.value, error=str(exc))

    async def tick(self) -> None:
        """Check every target concurrently and submit the results."""
        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport
        ) as client:
            results = await asyncio.gather(
                *(self._check_safely(client, t) for t in self._targets.values())
            )
        for (service_id, target), result in zip(
            self._targets.items(), results, strict=True
        ):
            self._ingestor.submit_report(
                service_id,
                target.name,
                result.status,
                response_time=result.response_time,
                error=result.error,
            )
