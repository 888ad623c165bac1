"""ASGI middleware accounting for every request crossing the API boundary.

Counts requests before they execute and converts unexpected exceptions
into a generic 500 response, so no fault inside a handler ever reaches
the server or leaks internal detail to the caller.
"""

import fnmatch
import json
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from mcpmonitor.core.store import MetricsStore

logger = logging.getLogger(__name__)

# ASGI type aliases
Scope = dict[str, Any]
Receive = Callable[[], Coroutine[Any, Any, dict[str, Any]]]
Send = Callable[[dict[str, Any]], Coroutine[Any, Any, None]]
ASGIApp = Callable[[Scope, Receive, Send], Coroutine[Any, Any, None]]

INTERNAL_ERROR_BODY = {"error": "Internal server error"}


async def _send_response(
    send: Send, status: int, content_type: str, body: str
) -> None:
    """Send an HTTP response with headers and body.

    Args:
        send: ASGI send callable for writing response.
        status: HTTP status code.
        content_type: Content-Type header value.
        body: Response body as string (will be encoded to bytes).
    """
    payload = body.encode()
    headers = [
        (b"content-type", content_type.encode()),
        (b"content-length", str(len(payload)).encode()),
    ]
    await send({"type": "http.response.start", "status": status, "headers": headers})
    await send({"type": "http.response.body", "body": payload})


class RequestAccountingMiddleware:
    """ASGI middleware feeding the store's request and error counters.

    Requests whose path matches ``include_paths`` are counted before the
    wrapped app runs. Any exception escaping the app is logged, counted as
    an error, and answered with a generic JSON 500 (unless a response has
    already started, in which case the connection is simply closed).
    """

    def __init__(
        self,
        app: ASGIApp,
        store: MetricsStore,
        include_paths: list[str] | None = None,
    ) -> None:
        """Initialize the middleware.

        Args:
            app: The ASGI application to wrap.
            store: Store owning the request and error counters.
            include_paths: Paths to count. Supports exact matches and
                wildcard patterns (default: ``["/api/*"]``).
        """
        self.app = app
        self.store = store
        self.include_paths = include_paths or ["/api/*"]

    def _path_included(self, path: str) -> bool:
        """Check if path matches any pattern in include_paths."""
        return any(fnmatch.fnmatch(path, pattern) for pattern in self.include_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI callable interface that processes requests through the wrapped app."""
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        if self._path_included(scope["path"]):
            self.store.record_request()

        started = False

        async def wrapped_send(message: dict[str, Any]) -> None:
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await self.app(scope, receive, wrapped_send)
        except Exception:
            self.store.record_error()
            logger.exception(
                "Server error", extra={"method": scope["method"], "path": scope["path"]}
            )
            if not started:
                await _send_response(
                    send, 500, "application/json", json.dumps(INTERNAL_ERROR_BODY)
                )
