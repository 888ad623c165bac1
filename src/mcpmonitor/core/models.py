"""Core domain models for health aggregation and rolling metrics."""

from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Any


class ServiceStatus(StrEnum):
    """Well-known health states.

    Reports may carry any non-empty status string; these are the values the
    monitoring system itself produces and recognises.
    """

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    UNKNOWN = "unknown"
    ERROR = "error"


@dataclass(frozen=True)
class LogEntry:
    """A structured log entry.

    Attributes:
        timestamp: Unix timestamp in seconds.
        level: Lowercase log level (e.g., info, warn, error).
        message: The log message.
        data: Optional structured payload.
    """

    timestamp: float
    level: str
    message: str
    data: dict[str, Any] | None = None


@dataclass(frozen=True)
class ServiceRecord:
    """Current health state of one monitored service.

    Records are immutable; every report produces a new value that replaces
    the previous one in the store's table.

    Attributes:
        service_id: Stable key identifying the service.
        name: Display name.
        status: Last reported status, stored exactly as reported.
        response_time: Last observed latency in milliseconds.
        error: Last reported error message.
        last_checked: Unix timestamp of the last report, None if never checked.
        checks_count: Number of reports recorded so far.
    """

    service_id: str
    name: str
    status: str = ServiceStatus.UNKNOWN.value
    response_time: float | None = None
    error: str | None = None
    last_checked: float | None = None
    checks_count: int = 0

    @property
    def is_healthy(self) -> bool:
        """Only the exact status ``healthy`` counts as healthy."""
        return self.status == ServiceStatus.HEALTHY.value

    def with_report(
        self,
        name: str,
        status: str,
        response_time: float | None,
        error: str | None,
        checked_at: float,
    ) -> "ServiceRecord":
        """Return a new record with one more check applied.

        The last-checked timestamp never moves backwards, even if the wall
        clock does.
        """
        if self.last_checked is not None:
            checked_at = max(checked_at, self.last_checked)
        return replace(
            self,
            name=name,
            status=status,
            response_time=response_time,
            error=error,
            last_checked=checked_at,
            checks_count=self.checks_count + 1,
        )


@dataclass(frozen=True)
class SystemSample:
    """Immutable point-in-time aggregate of system-wide health.

    Attributes:
        timestamp: Unix timestamp of the capture.
        uptime: Seconds since process start at capture time.
        total_requests: Cumulative request counter.
        error_count: Cumulative error counter.
        server_count: Number of tracked services.
        healthy_count: Number of services whose status is ``healthy``.
    """

    timestamp: float
    uptime: float
    total_requests: int
    error_count: int
    server_count: int
    healthy_count: int


@dataclass(frozen=True)
class SystemCounters:
    """Copy of the process-wide counters at one instant."""

    started_at: float
    total_requests: int = 0
    error_count: int = 0
    last_update: float | None = None


@dataclass(frozen=True)
class Snapshot:
    """Atomic read of the whole store.

    Attributes:
        timestamp: Unix timestamp of the read.
        uptime: Seconds since process start.
        counters: Process-wide counters at read time.
        services: Copy of the service table keyed by service id.
        history: Trailing window of samples, oldest first.
    """

    timestamp: float
    uptime: float
    counters: SystemCounters
    services: dict[str, ServiceRecord] = field(default_factory=dict)
    history: list[SystemSample] = field(default_factory=list)

    @property
    def server_count(self) -> int:
        return len(self.services)

    @property
    def healthy_count(self) -> int:
        return sum(1 for record in self.services.values() if record.is_healthy)


@dataclass(frozen=True)
class HistoryPoint:
    """One entry of a service's derived history."""

    timestamp: float
    status: str
    response_time: float | None


@dataclass(frozen=True)
class ServiceDetail:
    """A service record paired with its derived history.

    The history reuses the record's current status and response time for
    every sample timestamp; per-service history is not retained.
    """

    record: ServiceRecord
    history: list[HistoryPoint] = field(default_factory=list)
