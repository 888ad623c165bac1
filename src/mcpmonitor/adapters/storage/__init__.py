"""Storage adapters implementing core ports."""

from mcpmonitor.adapters.storage.ndjson_file import NDJSONFileLogStorage
from mcpmonitor.adapters.storage.ring_buffer import RingBufferLogStorage

__all__ = [
    "NDJSONFileLogStorage",
    "RingBufferLogStorage",
]
