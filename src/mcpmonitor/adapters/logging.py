"""Python logging handler adapter for the Log Sink.

This adapter bridges Python's standard library logging module to the
LogStoragePort, so every record emitted under the ``mcpmonitor`` logger
(state transitions, samples, boundary errors) lands in the Log Sink.
"""

import copy
import logging
import logging.handlers
import queue
import sys
import traceback
from dataclasses import dataclass, field
from typing import Any

from mcpmonitor.core.logs import normalize_level
from mcpmonitor.core.models import LogEntry
from mcpmonitor.core.ports import LogStoragePort

ROOT_LOGGER_NAME = "mcpmonitor"
CONSOLE_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"

# Standard LogRecord attributes that should not be treated as extra fields
_STANDARD_LOGRECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)

_PAYLOAD_TYPES = (str, int, float, bool, type(None))


def record_to_entry(record: logging.LogRecord) -> LogEntry:
    """Convert a LogRecord to a LogEntry.

    Extra fields passed via ``extra=`` become the entry's data payload;
    exception info, when present, is captured alongside them.
    """
    data: dict[str, Any] = {}
    for key, value in record.__dict__.items():
        if key not in _STANDARD_LOGRECORD_ATTRS and isinstance(value, _PAYLOAD_TYPES):
            data[key] = value

    if record.exc_info:
        exc_type, exc_value, exc_tb = record.exc_info
        if exc_type is not None:
            data["exc_type"] = exc_type.__name__
        if exc_value is not None:
            data["exc_message"] = str(exc_value)
        if exc_tb is not None:
            data["exc_traceback"] = "".join(
                traceback.format_exception(exc_type, exc_value, exc_tb)
            )

    return LogEntry(
        timestamp=record.created,
        level=normalize_level(record.levelname),
        message=record.getMessage(),
        data=data or None,
    )


class LogSinkHandler(logging.Handler):
    """Logging handler that writes log records to a LogStoragePort.

    A failing sink never propagates into the caller: the failure is
    reported through ``Handler.handleError`` and the record is dropped.

    Example:
        ```python
        storage = NDJSONFileLogStorage("/logs")
        logging.getLogger("mcpmonitor").addHandler(LogSinkHandler(storage))
        ```
    """

    def __init__(self, storage: LogStoragePort, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self._storage = storage

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a log record to the storage backend."""
        try:
            entry = getattr(record, "sink_entry", None) or record_to_entry(record)
            self._storage.write_sync(entry)
        except Exception:
            self.handleError(record)


class SinkQueueHandler(logging.handlers.QueueHandler):
    """QueueHandler that converts records to LogEntry before queueing.

    The stock handler flattens exception info into the message; converting
    first keeps the structured exception fields for the sink.
    """

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        entry = record_to_entry(record)
        prepared = copy.copy(record)
        prepared.sink_entry = entry
        prepared.msg = entry.message
        prepared.args = None
        prepared.exc_info = None
        prepared.exc_text = None
        return prepared


@dataclass
class LoggingSetup:
    """Handlers installed by ``configure_logging``, for later teardown."""

    logger: logging.Logger
    handlers: list[logging.Handler] = field(default_factory=list)
    listener: logging.handlers.QueueListener | None = None

    def shutdown(self) -> None:
        """Flush queued records and detach every installed handler.

        Safe to call more than once.
        """
        if self.listener is not None:
            self.listener.stop()
            self.listener = None
        for handler in self.handlers:
            self.logger.removeHandler(handler)
            handler.close()
        self.handlers.clear()


def configure_logging(
    storage: LogStoragePort,
    level: str = "INFO",
    async_writes: bool = True,
    console: bool = True,
) -> LoggingSetup:
    """Attach console output and the Log Sink to the package logger.

    Args:
        storage: Log Sink receiving every record.
        level: Threshold for the package logger.
        async_writes: Queue sink writes onto a listener thread instead of
            writing inline. The single queue keeps records in emit order.
        console: Also write records to stderr.

    Returns:
        LoggingSetup whose ``shutdown()`` undoes the configuration.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level.upper())
    setup = LoggingSetup(logger=logger)

    if console:
        stream = logging.StreamHandler(sys.stderr)
        stream.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        setup.handlers.append(stream)

    sink = LogSinkHandler(storage)
    if async_writes:
        records: queue.SimpleQueue[logging.LogRecord] = queue.SimpleQueue()
        setup.listener = logging.handlers.QueueListener(
            records, sink, respect_handler_level=True
        )
        setup.listener.start()
        setup.handlers.append(SinkQueueHandler(records))
    else:
        setup.handlers.append(sink)

    for handler in setup.handlers:
        logger.addHandler(handler)
    return setup
