"""Append-only NDJSON file storage adapter for logs.

Each entry is appended as one JSON line to a single file inside the log
directory. The directory is created when the storage is constructed.
Malformed lines are skipped on read, so a partially written trailing line
never breaks the query surface.
"""

import asyncio
import threading
from collections.abc import AsyncIterable
from pathlib import Path

from mcpmonitor.adapters.storage.filters import select_entries
from mcpmonitor.core.encoding.ndjson import decode_logs, encode_log_entry
from mcpmonitor.core.models import LogEntry

DEFAULT_LOG_FILE_NAME = "mcp-monitoring.log"


class NDJSONFileLogStorage:
    """NDJSON file implementation of LogStoragePort.

    Sync methods do the file I/O; async methods run them in a worker
    thread so the event loop is never blocked on disk.

    Args:
        log_dir: Directory holding the log file. Created if absent.
        file_name: Name of the log file inside ``log_dir``.
    """

    def __init__(
        self, log_dir: str | Path, file_name: str = DEFAULT_LOG_FILE_NAME
    ) -> None:
        self._log_dir = Path(log_dir)
        self._log_dir.mkdir(parents=True, exist_ok=True)
        self._path = self._log_dir / file_name
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def write(self, entry: LogEntry) -> None:
        """Append a log entry to the file."""
        await asyncio.to_thread(self.write_sync, entry)

    async def read(self, level: str | None = None) -> AsyncIterable[LogEntry]:
        """Read log entries in file order."""
        entries = await asyncio.to_thread(self.read_sync, level)
        for entry in entries:
            yield entry

    def write_sync(self, entry: LogEntry) -> None:
        """Synchronous append for non-async contexts (logging handlers)."""
        line = encode_log_entry(entry)
        with self._lock, self._path.open("a", encoding="utf-8") as fh:
            fh.write(line)

    def read_sync(self, level: str | None = None) -> list[LogEntry]:
        """Synchronous read for non-async contexts.

        A log file that does not exist yet reads as empty. Bytes that are not
        valid UTF-8 are replaced per line; a line left unparseable is skipped.
        """
        try:
            with self._lock, self._path.open("rb") as fh:
                raw_lines = fh.readlines()
        except FileNotFoundError:
            return []
        lines = [raw.decode("utf-8", errors="replace") for raw in raw_lines]
        return select_entries(decode_logs(lines), level=level)
