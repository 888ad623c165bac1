"""Periodic sampler feeding the store's rolling history."""

from mcpmonitor.core.store import MetricsStore
from mcpmonitor.runtime.periodic import PeriodicTask

DEFAULT_SAMPLE_INTERVAL_SECONDS = 30.0


class PeriodicSampler(PeriodicTask):
    """Calls ``MetricsStore.sample()`` on a fixed interval.

    History keeps accruing even when nobody reads the metrics endpoint.
    """

    name = "metrics sampler"

    def __init__(
        self,
        store: MetricsStore,
        interval_seconds: float = DEFAULT_SAMPLE_INTERVAL_SECONDS,
    ) -> None:
        super().__init__(interval_seconds)
        self._store = store

    async def tick(self) -> None:
        self._store.sample()
