"""Metrics store: current service state plus bounded rolling history.

The store is the single owner of the service table, the sample history and
the process-wide counters. It is safe to share between request threads,
the periodic sampler and any other caller:

- One coarse lock guards table membership, counters and history. Every
  snapshot and sample is computed while holding it, so no read ever mixes
  values observed at different instants.
- A per-service lock serializes the read-modify-replace of one record
  together with its audit log write, so entries for the same service are
  logged in the order the reports were applied. Reports for different
  services only contend on the brief table swap.

Audit entries go through the standard ``logging`` module; the Log Sink is
attached as a handler (see ``mcpmonitor.adapters.logging``), so a failing
sink never undoes or blocks a state update.
"""

import logging
import threading
import time
from collections import deque
from collections.abc import Callable

from mcpmonitor.core.exceptions import NotFoundError
from mcpmonitor.core.models import (
    HistoryPoint,
    ServiceDetail,
    ServiceRecord,
    Snapshot,
    SystemCounters,
    SystemSample,
)

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_CAPACITY = 100
DEFAULT_HISTORY_WINDOW = 20


class MetricsStore:
    """Lock-guarded aggregate of service records, counters and samples.

    Args:
        capacity: Maximum number of samples retained (oldest evicted first).
        window: Default number of samples returned by reads.
        clock: Source of Unix timestamps in seconds.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_HISTORY_CAPACITY,
        window: int = DEFAULT_HISTORY_WINDOW,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._clock = clock
        self._capacity = capacity
        self._window = window
        self._lock = threading.Lock()
        self._services: dict[str, ServiceRecord] = {}
        self._service_locks: dict[str, threading.Lock] = {}
        self._history: deque[SystemSample] = deque(maxlen=capacity)
        self._started_at = clock()
        self._total_requests = 0
        self._error_count = 0
        self._last_update: float | None = None

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def window(self) -> int:
        return self._window

    @property
    def started_at(self) -> float:
        return self._started_at

    def uptime(self) -> float:
        """Seconds elapsed since the store was created."""
        return max(self._clock() - self._started_at, 0.0)

    # --- Counters ---

    def record_request(self) -> int:
        """Increment the total-request counter and return its new value."""
        with self._lock:
            self._total_requests += 1
            return self._total_requests

    def record_error(self) -> int:
        """Increment the error counter and return its new value."""
        with self._lock:
            self._error_count += 1
            return self._error_count

    def counters(self) -> SystemCounters:
        """Return a copy of the process-wide counters."""
        with self._lock:
            return self._counters_locked()

    def _counters_locked(self) -> SystemCounters:
        return SystemCounters(
            started_at=self._started_at,
            total_requests=self._total_requests,
            error_count=self._error_count,
            last_update=self._last_update,
        )

    # --- Service records ---

    def _lock_for(self, service_id: str) -> threading.Lock:
        with self._lock:
            lock = self._service_locks.get(service_id)
            if lock is None:
                lock = self._service_locks[service_id] = threading.Lock()
            return lock

    def register(self, service_id: str, name: str) -> ServiceRecord:
        """Create an ``unknown`` record for an unseen service id.

        Returns:
            The new record, or the existing one if the id is already known.
        """
        with self._lock:
            existing = self._services.get(service_id)
            if existing is not None:
                return existing
            record = ServiceRecord(service_id=service_id, name=name)
            self._services[service_id] = record
        logger.info(
            "Registered %s",
            name,
            extra={"serviceId": service_id, "status": record.status},
        )
        return record

    def record(
        self,
        service_id: str,
        name: str,
        status: str,
        response_time: float | None = None,
        error: str | None = None,
    ) -> ServiceRecord:
        """Apply one health observation to a service record.

        Creates the record on first sight, otherwise replaces it with an
        updated copy. Inputs are assumed valid; validation belongs to the
        ingestor.

        Returns:
            The record now stored for the service.
        """
        with self._lock_for(service_id):
            checked_at = self._clock()
            with self._lock:
                previous = self._services.get(service_id) or ServiceRecord(
                    service_id=service_id, name=name
                )
                record = previous.with_report(
                    name=name,
                    status=status,
                    response_time=response_time,
                    error=error,
                    checked_at=checked_at,
                )
                self._services[service_id] = record
            logger.info(
                "Health check for %s",
                name,
                extra={
                    "serviceId": service_id,
                    "status": status,
                    "responseTime": response_time,
                    "error": error,
                },
            )
        return record

    # --- Samples ---

    def _capture_locked(self, now: float) -> SystemSample:
        sample = SystemSample(
            timestamp=now,
            uptime=max(now - self._started_at, 0.0),
            total_requests=self._total_requests,
            error_count=self._error_count,
            server_count=len(self._services),
            healthy_count=sum(1 for r in self._services.values() if r.is_healthy),
        )
        self._history.append(sample)
        self._last_update = now
        return sample

    def _log_sample(self, sample: SystemSample) -> None:
        logger.info(
            "Metrics collected",
            extra={
                "uptime": sample.uptime,
                "totalRequests": sample.total_requests,
                "errorCount": sample.error_count,
                "servers": sample.server_count,
                "healthyServers": sample.healthy_count,
            },
        )

    def sample(self) -> SystemSample:
        """Capture one SystemSample and append it to the history.

        The oldest sample is evicted once the history exceeds capacity.
        """
        with self._lock:
            sample = self._capture_locked(self._clock())
        self._log_sample(sample)
        return sample

    def current_snapshot(self) -> Snapshot:
        """Return the whole store as one atomic read.

        Taking a snapshot also records a fresh sample, so the history grows
        on every read. Callers that need side-effect-free reads should use
        ``history()`` or ``counters()`` instead.
        """
        with self._lock:
            now = self._clock()
            sample = self._capture_locked(now)
            snapshot = Snapshot(
                timestamp=now,
                uptime=sample.uptime,
                counters=self._counters_locked(),
                services=dict(self._services),
                history=self._window_locked(self._window),
            )
        self._log_sample(sample)
        return snapshot

    def _window_locked(self, window_size: int) -> list[SystemSample]:
        if window_size <= 0:
            return []
        return list(self._history)[-window_size:]

    def history(self, window_size: int | None = None) -> list[SystemSample]:
        """Return the most recent samples, oldest first.

        Args:
            window_size: Number of samples wanted. Defaults to the store's
                window; never more than the retained capacity.
        """
        if window_size is None:
            window_size = self._window
        with self._lock:
            return self._window_locked(window_size)

    def service_detail(
        self, service_id: str, window_size: int | None = None
    ) -> ServiceDetail:
        """Return a service record with its derived history.

        The derived history pairs each recent sample timestamp with the
        record's current status and response time.

        Raises:
            NotFoundError: If the service id was never seen.
        """
        if window_size is None:
            window_size = self._window
        with self._lock:
            record = self._services.get(service_id)
            if record is None:
                raise NotFoundError()
            samples = self._window_locked(window_size)
        return ServiceDetail(
            record=record,
            history=[
                HistoryPoint(
                    timestamp=sample.timestamp,
                    status=record.status,
                    response_time=record.response_time,
                )
                for sample in samples
            ],
        )

    def get(self, service_id: str) -> ServiceRecord | None:
        """Return the current record for a service id, if any."""
        with self._lock:
            return self._services.get(service_id)

    def services(self) -> dict[str, ServiceRecord]:
        """Return a copy of the service table."""
        with self._lock:
            return dict(self._services)
