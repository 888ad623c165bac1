"""Service configuration loaded from the environment."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mcpmonitor.adapters.probe import DEFAULT_TARGETS, ProbeTarget


class MonitorSettings(BaseSettings):
    """Settings for the monitoring service.

    Every field maps to the environment variable of the same name in upper
    case (``PORT``, ``LOG_DIR``, ...). A ``.env`` file in the working
    directory is read as well. ``PROBE_TARGETS`` takes a JSON object of
    ``{"id": {"name": ..., "url": ...}}``.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)

    log_dir: str = "logs"
    log_file_name: str = "mcp-monitoring.log"
    log_backend: Literal["file", "memory"] = "file"
    log_buffer_size: int = Field(default=1000, ge=1)
    log_level: str = "INFO"
    async_log_writes: bool = True

    sample_interval_seconds: float = Field(default=30.0, gt=0)
    history_capacity: int = Field(default=100, ge=1)
    history_window: int = Field(default=20, ge=1)

    probe_enabled: bool = False
    probe_interval_seconds: float = Field(default=30.0, gt=0)
    probe_timeout_seconds: float = Field(default=5.0, gt=0)
    probe_targets: dict[str, ProbeTarget] = Field(
        default_factory=lambda: dict(DEFAULT_TARGETS)
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level = (value or "INFO").upper()
        if level not in valid_levels:
            raise ValueError(f"log_level must be one of {sorted(valid_levels)}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> MonitorSettings:
    """Return the process-wide settings, loaded once."""
    return MonitorSettings()
