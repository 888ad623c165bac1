"""NDJSON encoding for the Log Sink file format.

Each log entry is one JSON object per line::

    {"timestamp": "2024-01-01T00:00:00.000Z", "level": "info",
     "message": "...", "data": {...}}
"""

import json
from collections.abc import Iterable
from datetime import UTC, datetime

from mcpmonitor.core.logs import normalize_level
from mcpmonitor.core.models import LogEntry


def format_timestamp(timestamp: float) -> str:
    """Format a Unix timestamp as ISO-8601 UTC with millisecond precision."""
    moment = datetime.fromtimestamp(timestamp, tz=UTC)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str | float | int) -> float:
    """Parse an ISO-8601 string (or a raw epoch number) into a Unix timestamp."""
    if isinstance(value, (int, float)):
        return float(value)
    return datetime.fromisoformat(value).timestamp()


def entry_to_dict(entry: LogEntry) -> dict[str, object]:
    """Convert a log entry to its JSON object form."""
    return {
        "timestamp": format_timestamp(entry.timestamp),
        "level": entry.level,
        "message": entry.message,
        "data": entry.data,
    }


def encode_log_entry(entry: LogEntry) -> str:
    """Encode one log entry as a single NDJSON line, newline included."""
    return json.dumps(entry_to_dict(entry), default=str) + "\n"


def decode_log_line(line: str) -> LogEntry | None:
    """Decode one NDJSON line.

    Returns:
        The LogEntry, or None for blank or malformed lines.
    """
    line = line.strip()
    if not line:
        return None
    try:
        obj = json.loads(line)
        data = obj.get("data")
        return LogEntry(
            timestamp=parse_timestamp(obj["timestamp"]),
            level=normalize_level(str(obj["level"])),
            message=str(obj["message"]),
            data=data if isinstance(data, dict) else None,
        )
    except (ValueError, KeyError, TypeError, AttributeError):
        return None


def decode_logs(lines: Iterable[str]) -> list[LogEntry]:
    """Decode NDJSON lines, skipping any that cannot be parsed."""
    entries = []
    for line in lines:
        entry = decode_log_line(line)
        if entry is not None:
            entries.append(entry)
    return entries
