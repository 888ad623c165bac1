"""Entry selection shared by the log storage adapters."""

from collections.abc import Iterable

from mcpmonitor.core.logs import normalize_level
from mcpmonitor.core.models import LogEntry


def select_entries(
    entries: Iterable[LogEntry], level: str | None = None
) -> list[LogEntry]:
    """Filter entries by level, keeping append order.

    Args:
        entries: Entries in append order.
        level: Keep entries whose level matches, case-insensitively.
    """
    if not level:
        return list(entries)
    wanted = normalize_level(level)
    return [entry for entry in entries if normalize_level(entry.level) == wanted]
