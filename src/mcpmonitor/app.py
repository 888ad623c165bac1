"""FastAPI application setup.

Wires the store, ingestor, Log Sink and background tasks into one app.
The lifespan starts logging, takes an initial sample and launches the
sampler (and the probe, when enabled); shutdown stops them in reverse.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from mcpmonitor import __version__
from mcpmonitor.adapters.frameworks.asgi import RequestAccountingMiddleware
from mcpmonitor.adapters.frameworks.fastapi import (
    create_monitor_router,
    install_error_handlers,
)
from mcpmonitor.adapters.logging import configure_logging
from mcpmonitor.adapters.probe import HealthProbe
from mcpmonitor.adapters.storage import NDJSONFileLogStorage, RingBufferLogStorage
from mcpmonitor.config import MonitorSettings, get_settings
from mcpmonitor.core.ingestor import HealthReportIngestor
from mcpmonitor.core.ports import LogStoragePort
from mcpmonitor.core.store import MetricsStore
from mcpmonitor.runtime.periodic import PeriodicTask
from mcpmonitor.runtime.sampler import PeriodicSampler

logger = logging.getLogger(__name__)


def create_log_storage(settings: MonitorSettings) -> LogStoragePort:
    """Build the Log Sink selected by ``LOG_BACKEND``."""
    if settings.log_backend == "memory":
        return RingBufferLogStorage(max_size=settings.log_buffer_size)
    return NDJSONFileLogStorage(settings.log_dir, settings.log_file_name)


def create_app(
    settings: MonitorSettings | None = None,
    *,
    store: MetricsStore | None = None,
    log_storage: LogStoragePort | None = None,
) -> FastAPI:
    """Create and configure the monitoring FastAPI application.

    Args:
        settings: Configuration; loaded from the environment when omitted.
        store: Metrics store to serve; a fresh one when omitted.
        log_storage: Log Sink; built from settings when omitted.

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or get_settings()
    if store is None:
        store = MetricsStore(
            capacity=settings.history_capacity, window=settings.history_window
        )
    if log_storage is None:
        log_storage = create_log_storage(settings)
    ingestor = HealthReportIngestor(store)

    background: list[PeriodicTask] = [
        PeriodicSampler(store, interval_seconds=settings.sample_interval_seconds)
    ]
    if settings.probe_enabled:
        background.append(
            HealthProbe(
                store,
                ingestor,
                settings.probe_targets,
                interval_seconds=settings.probe_interval_seconds,
                timeout_seconds=settings.probe_timeout_seconds,
            )
        )

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        """Start logging and background tasks; stop them on shutdown."""
        logging_setup = configure_logging(
            log_storage,
            level=settings.log_level,
            async_writes=settings.async_log_writes,
        )
        logger.info("MCP monitoring server running on port %s", settings.port)
        store.sample()
        for task in background:
            await task.start()
        try:
            yield
        finally:
            for task in reversed(background):
                await task.stop()
            logger.info("Server closed")
            logging_setup.shutdown()

    app = FastAPI(title="MCP Monitoring", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.ingestor = ingestor
    app.state.log_storage = log_storage
    app.state.background = background

    app.include_router(create_monitor_router(store, ingestor, log_storage))
    install_error_handlers(app, store)
    app.add_middleware(RequestAccountingMiddleware, store=store)
    return app
