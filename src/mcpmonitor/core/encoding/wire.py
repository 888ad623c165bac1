"""JSON wire format for the HTTP read surface.

Timestamps and uptime are integer epoch milliseconds; keys are camelCase.
"""

from typing import Any

from mcpmonitor.core.encoding.ndjson import entry_to_dict
from mcpmonitor.core.models import (
    LogEntry,
    ServiceDetail,
    ServiceRecord,
    Snapshot,
    SystemSample,
)


def to_millis(seconds: float | None) -> int | None:
    """Convert seconds to integer milliseconds, passing None through."""
    if seconds is None:
        return None
    return int(seconds * 1000)


def encode_service_record(record: ServiceRecord) -> dict[str, Any]:
    return {
        "name": record.name,
        "status": record.status,
        "responseTime": record.response_time,
        "error": record.error,
        "lastChecked": to_millis(record.last_checked),
        "checksCount": record.checks_count,
    }


def encode_sample(sample: SystemSample) -> dict[str, Any]:
    return {
        "timestamp": to_millis(sample.timestamp),
        "uptime": to_millis(sample.uptime),
        "totalRequests": sample.total_requests,
        "errorCount": sample.error_count,
        "servers": sample.server_count,
        "healthyServers": sample.healthy_count,
    }


def encode_snapshot(snapshot: Snapshot) -> dict[str, Any]:
    """Encode a snapshot as ``{"current": {...}, "history": [...]}``."""
    return {
        "current": {
            "timestamp": to_millis(snapshot.timestamp),
            "uptime": to_millis(snapshot.uptime),
            "totalRequests": snapshot.counters.total_requests,
            "errorCount": snapshot.counters.error_count,
            "servers": {
                service_id: encode_service_record(record)
                for service_id, record in snapshot.services.items()
            },
            "serverCount": snapshot.server_count,
            "healthyCount": snapshot.healthy_count,
        },
        "history": [encode_sample(sample) for sample in snapshot.history],
    }


def encode_service_detail(detail: ServiceDetail) -> dict[str, Any]:
    """Encode a service record flattened alongside its derived history."""
    return {
        "serviceId": detail.record.service_id,
        **encode_service_record(detail.record),
        "history": [
            {
                "timestamp": to_millis(point.timestamp),
                "status": point.status,
                "responseTime": point.response_time,
            }
            for point in detail.history
        ],
    }


def encode_log_page(
    entries: list[LogEntry], total: int, filtered: bool
) -> dict[str, Any]:
    """Encode one page of the log query result."""
    return {
        "logs": [entry_to_dict(entry) for entry in entries],
        "total": total,
        "filtered": filtered,
    }
