"""Health report ingestion: validation in front of the metrics store."""

import math
from numbers import Real
from typing import TypeGuard

from mcpmonitor.core.exceptions import ValidationError
from mcpmonitor.core.models import ServiceRecord
from mcpmonitor.core.store import MetricsStore


def _present(value: object) -> TypeGuard[str]:
    return isinstance(value, str) and bool(value.strip())


class HealthReportIngestor:
    """Validates externally submitted health observations and applies them.

    Status strings are accepted as reported; any non-empty value is stored,
    but only ``healthy`` counts towards the healthy aggregate.
    """

    def __init__(self, store: MetricsStore) -> None:
        self._store = store

    def submit_report(
        self,
        service_id: str | None,
        service_name: str | None,
        status: str | None,
        response_time: float | None = None,
        error: str | None = None,
    ) -> ServiceRecord:
        """Validate one report and record it.

        Args:
            service_id: Stable service key.
            service_name: Display name.
            status: Reported status.
            response_time: Optional latency in milliseconds.
            error: Optional error message.

        Returns:
            The updated service record.

        Raises:
            ValidationError: If a required field is missing or a field is
                malformed. Nothing is recorded in that case.
        """
        if not (_present(service_id) and _present(service_name) and _present(status)):
            raise ValidationError("Missing required fields")
        if response_time is not None and (
            isinstance(response_time, bool)
            or not isinstance(response_time, Real)
            or not math.isfinite(response_time)
            or response_time < 0
        ):
            raise ValidationError("responseTime must be a finite non-negative number")
        if error is not None and not isinstance(error, str):
            raise ValidationError("error must be a string")

        return self._store.record(
            service_id,
            service_name,
            status,
            response_time=response_time,
            error=error,
        )
