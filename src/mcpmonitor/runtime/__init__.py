"""Background tasks running alongside the HTTP server."""

from mcpmonitor.runtime.periodic import PeriodicTask
from mcpmonitor.runtime.sampler import PeriodicSampler

__all__ = ["PeriodicSampler", "PeriodicTask"]
