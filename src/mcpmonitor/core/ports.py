"""Port interfaces for log sink adapters.

The core depends only on these protocols, not on concrete storage.
"""

from collections.abc import AsyncIterable
from typing import Protocol, runtime_checkable

from mcpmonitor.core.models import LogEntry


@runtime_checkable
class LogStoragePort(Protocol):
    """Port for the append-only Log Sink.

    Adapters implementing this protocol can store and retrieve log entries.
    Examples: NDJSONFileLogStorage, RingBufferLogStorage.
    """

    async def write(self, entry: LogEntry) -> None:
        """Append a log entry."""
        ...

    def read(self, level: str | None = None) -> AsyncIterable[LogEntry]:
        """Read stored log entries.

        Args:
            level: Optional level filter, matched case-insensitively.

        Returns:
            Async iterable of LogEntry objects, oldest first.
        """
        ...

    def write_sync(self, entry: LogEntry) -> None:
        """Synchronous append for non-async contexts (logging handlers)."""
        ...

    def read_sync(self, level: str | None = None) -> list[LogEntry]:
        """Synchronous read for non-async contexts."""
        ...
