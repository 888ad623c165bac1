"""Shared test fixtures for all test modules."""

import logging
from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import httpx
import pytest

from mcpmonitor.adapters.logging import ROOT_LOGGER_NAME, LogSinkHandler
from mcpmonitor.adapters.storage.ring_buffer import RingBufferLogStorage
from mcpmonitor.app import create_app
from mcpmonitor.config import MonitorSettings
from mcpmonitor.core.ingestor import HealthReportIngestor
from mcpmonitor.core.store import MetricsStore
from tests.helpers import FakeClock


@pytest.fixture
def clock() -> FakeClock:
    """Provide a fake clock starting at a fixed timestamp."""
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> MetricsStore:
    """Provide an empty metrics store driven by the fake clock."""
    return MetricsStore(clock=clock)


@pytest.fixture
def ingestor(store: MetricsStore) -> HealthReportIngestor:
    """Provide an ingestor writing into the store fixture."""
    return HealthReportIngestor(store)


@pytest.fixture
def log_storage() -> RingBufferLogStorage:
    """Provide an empty in-memory Log Sink."""
    return RingBufferLogStorage(max_size=500)


@pytest.fixture
def log_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for NDJSON log files."""
    return tmp_path / "logs"


@pytest.fixture
def settings() -> MonitorSettings:
    """Settings isolated from the environment and any .env file."""
    return MonitorSettings(
        _env_file=None,
        port=8080,
        log_backend="memory",
        async_log_writes=False,
        probe_enabled=False,
    )


@pytest.fixture
def sink_logging(log_storage: RingBufferLogStorage) -> Generator[RingBufferLogStorage]:
    """Route the package logger into the log_storage fixture, inline.

    Returns the storage so tests can assert on what the store logged.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    handler = LogSinkHandler(log_storage)
    previous_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    try:
        yield log_storage
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous_level)


# === ASGI Test Fixtures ===


@pytest.fixture
def asgi_test_client():
    """Factory fixture that creates an httpx.AsyncClient for ASGI testing.

    Usage:
        async def test_something(asgi_test_client):
            async with asgi_test_client(app) as client:
                response = await client.get("/api/health")
    """

    def _get_client(app):
        """Return an AsyncClient context manager for the given app."""
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        )

    return _get_client


@pytest.fixture
def app(
    settings: MonitorSettings,
    store: MetricsStore,
    log_storage: RingBufferLogStorage,
):
    """Monitoring app wired to the store and log_storage fixtures.

    The lifespan does not run under ASGITransport, so no background task
    or logging configuration is started.
    """
    return create_app(settings, store=store, log_storage=log_storage)


@pytest.fixture
async def client(app, asgi_test_client) -> AsyncGenerator[httpx.AsyncClient]:
    """AsyncClient bound to the app fixture."""
    async with asgi_test_client(app) as client:
        yield client
