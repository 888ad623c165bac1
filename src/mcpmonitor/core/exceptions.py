"""Error taxonomy shared by the core and its adapters."""


class MonitorError(Exception):
    """Base class for errors surfaced at the request boundary.

    Attributes:
        status_code: HTTP status the boundary answers with.
        public_message: Message safe to return to callers.
    """

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.public_message = message or self.default_message
        super().__init__(self.public_message)


class ValidationError(MonitorError):
    """Missing or malformed input."""

    status_code = 400
    default_message = "Missing required fields"


class NotFoundError(MonitorError):
    """Reference to a service id that was never seen."""

    status_code = 404
    default_message = "Server not found"


class InternalError(MonitorError):
    """Unexpected fault, reported without internal detail."""

    status_code = 500
