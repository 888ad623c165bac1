"""Test doubles shared across test modules."""

from collections.abc import AsyncIterable

from mcpmonitor.adapters.storage.ring_buffer import RingBufferLogStorage
from mcpmonitor.core.models import LogEntry


class FakeClock:
    """Deterministic clock returning a controllable Unix timestamp."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FailingLogStorage(RingBufferLogStorage):
    """Log Sink whose writes always fail."""

    def write_sync(self, entry: LogEntry) -> None:
        raise OSError("log volume unavailable")


class UnreadableLogStorage(RingBufferLogStorage):
    """Log Sink whose reads always fail."""

    async def read(self, level: str | None = None) -> AsyncIterable[LogEntry]:
        raise OSError("log volume unavailable")
        yield  # pragma: no cover
