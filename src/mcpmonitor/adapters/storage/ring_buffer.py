"""Ring buffer storage adapter for logs.

Provides bounded in-memory storage that automatically evicts oldest
entries when the buffer is full. Useful for tests and ephemeral
deployments that need predictable memory usage.
"""

import threading
from collections import deque
from collections.abc import AsyncIterable

from mcpmonitor.adapters.storage.filters import select_entries
from mcpmonitor.core.models import LogEntry


class RingBufferLogStorage:
    """Ring buffer implementation of LogStoragePort.

    Stores log entries in a fixed-size circular buffer. When the buffer
    is full, the oldest entry is automatically evicted to make room for
    new entries.

    Args:
        max_size: Maximum number of entries to store.
    """

    def __init__(self, max_size: int = 1000) -> None:
        self._buffer: deque[LogEntry] = deque(maxlen=max_size)
        self._lock = threading.Lock()

    async def write(self, entry: LogEntry) -> None:
        """Write a log entry to storage."""
        self.write_sync(entry)

    async def read(self, level: str | None = None) -> AsyncIterable[LogEntry]:
        """Read buffered log entries, oldest first."""
        for entry in self.read_sync(level=level):
            yield entry

    def write_sync(self, entry: LogEntry) -> None:
        """Synchronous write for non-async contexts."""
        with self._lock:
            self._buffer.append(entry)

    def read_sync(self, level: str | None = None) -> list[LogEntry]:
        """Synchronous read for non-async contexts."""
        with self._lock:
            entries = list(self._buffer)
        return select_entries(entries, level=level)
