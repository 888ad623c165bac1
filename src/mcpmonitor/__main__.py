"""Run the monitoring service under uvicorn.

Usage:
    python -m mcpmonitor
    mcp-monitor

Configuration comes from the environment (``PORT``, ``LOG_DIR``, ...).
"""

import uvicorn

from mcpmonitor.app import create_app
from mcpmonitor.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
