"""FastAPI adapter for the monitoring API."""

import logging
import time
from typing import Any

from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
)

from mcpmonitor import __version__
from mcpmonitor.adapters.frameworks.query_params import (
    _parse_level_param,
    _parse_limit_param,
)
from mcpmonitor.core.encoding.wire import (
    encode_log_page,
    encode_service_detail,
    encode_snapshot,
    to_millis,
)
from mcpmonitor.core.exceptions import InternalError, MonitorError
from mcpmonitor.core.ingestor import HealthReportIngestor
from mcpmonitor.core.ports import LogStoragePort
from mcpmonitor.core.store import MetricsStore

logger = logging.getLogger(__name__)


class HealthCheckRequest(BaseModel):
    """Body of POST /api/health-check.

    Every field is optional at this layer so that missing fields surface
    as the ingestor's ValidationError rather than a schema error. The
    ``serverId``/``serverName`` spellings are accepted for older agents.
    ``responseTime`` is strict: booleans and numeric strings are rejected.
    """

    model_config = ConfigDict(extra="ignore")

    service_id: str | None = Field(
        default=None, validation_alias=AliasChoices("serviceId", "serverId")
    )
    service_name: str | None = Field(
        default=None, validation_alias=AliasChoices("serviceName", "serverName")
    )
    status: str | None = None
    response_time: StrictInt | StrictFloat | None = Field(
        default=None, validation_alias="responseTime"
    )
    error: str | None = None


def create_monitor_router(
    store: MetricsStore,
    ingestor: HealthReportIngestor,
    log_storage: LogStoragePort,
) -> APIRouter:
    """Create a FastAPI router with the /api endpoints.

    Args:
        store: Metrics store serving snapshots and history.
        ingestor: Write path for health reports.
        log_storage: Log Sink backing the log query.

    Returns:
        APIRouter mounted under ``/api``.
    """
    router = APIRouter(prefix="/api")

    @router.post("/health-check")
    def submit_health_check(report: HealthCheckRequest) -> dict[str, Any]:
        """Record one health observation."""
        ingestor.submit_report(
            report.service_id,
            report.service_name,
            report.status,
            response_time=report.response_time,
            error=report.error,
        )
        return {"success": True, "message": "Health check recorded"}

    @router.get("/metrics")
    def get_metrics() -> dict[str, Any]:
        """Return the current snapshot plus the trailing history window."""
        return encode_snapshot(store.current_snapshot())

    @router.get("/metrics/{service_id}")
    def get_service_metrics(service_id: str) -> dict[str, Any]:
        """Return one service record and its derived history."""
        return encode_service_detail(store.service_detail(service_id))

    @router.get("/logs")
    async def get_logs(
        limit: str | None = Query(default=None),
        level: str | None = Query(default=None),
    ) -> dict[str, Any]:
        """Return the most recent log entries, optionally filtered by level.

        Args:
            limit: Maximum entries returned (default 100).
            level: Only entries with this level, case-insensitive.
        """
        wanted_level = _parse_level_param(level)
        max_entries = _parse_limit_param(limit)
        try:
            entries = [e async for e in log_storage.read(level=wanted_level)]
        except OSError as exc:
            raise InternalError("Failed to read logs") from exc
        return encode_log_page(
            entries[-max_entries:],
            total=len(entries),
            filtered=wanted_level is not None,
        )

    @router.get("/health")
    def get_health() -> dict[str, Any]:
        """Liveness probe for the monitoring service itself."""
        return {
            "status": "healthy",
            "timestamp": to_millis(time.time()),
            "uptime": to_millis(store.uptime()),
            "version": __version__,
        }

    return router


def install_error_handlers(app: FastAPI, store: MetricsStore) -> None:
    """Map the error taxonomy onto HTTP responses.

    Every handled error increments the store's error counter exactly once.
    """

    async def handle_monitor_error(_request: Request, exc: Exception) -> JSONResponse:
        assert isinstance(exc, MonitorError)
        store.record_error()
        if exc.status_code >= 500:
            logger.error(exc.public_message, exc_info=exc.__cause__ or exc)
        return JSONResponse({"error": exc.public_message}, status_code=exc.status_code)

    async def handle_request_validation(
        _request: Request, exc: Exception
    ) -> JSONResponse:
        store.record_error()
        logger.warning("Rejected malformed request body: %s", exc)
        return JSONResponse({"error": "Invalid request body"}, status_code=400)

    app.add_exception_handler(MonitorError, handle_monitor_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
