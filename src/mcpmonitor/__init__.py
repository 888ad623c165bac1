"""mcpmonitor - health aggregation and rolling metrics for MCP servers."""

__version__ = "1.0.0"

from mcpmonitor.core.exceptions import (  # noqa: E402
    InternalError,
    MonitorError,
    NotFoundError,
    ValidationError,
)
from mcpmonitor.core.ingestor import HealthReportIngestor  # noqa: E402
from mcpmonitor.core.models import (  # noqa: E402
    LogEntry,
    ServiceRecord,
    ServiceStatus,
    Snapshot,
    SystemSample,
)
from mcpmonitor.core.store import MetricsStore  # noqa: E402

__all__ = [
    "HealthReportIngestor",
    "InternalError",
    "LogEntry",
    "MetricsStore",
    "MonitorError",
    "NotFoundError",
    "ServiceRecord",
    "ServiceStatus",
    "Snapshot",
    "SystemSample",
    "ValidationError",
    "__version__",
]
