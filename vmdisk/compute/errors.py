"""Errors raised by the compute API client and its pollers."""


class ComputeError(Exception):
    """Base exception for compute API errors."""


class ComputeAPIError(ComputeError):
    """The API answered with a non-success status."""

    def __init__(self, status_code: int, message: str = "", *, response_body: str = ""):
        self.status_code = status_code
        self.message = message
        self.response_body = response_body
        super().__init__(f"API error {status_code}: {message}")


class ComputeNotFoundError(ComputeAPIError):
    """Requested resource does not exist (404)."""

    def __init__(self, message: str = "Not found", **kwargs):
        super().__init__(404, message, **kwargs)


class ComputeTimeoutError(ComputeError):
    """Request timed out at the transport level after all retries."""


class WaitTimeoutError(ComputeError):
    """A poller did not observe the expected state within its timeout."""

    def __init__(self, message: str, timeout: float, last_status: str | None = None):
        self.timeout = timeout
        self.last_status = last_status
        super().__init__(message)


class EventFailedError(ComputeError):
    """A watched event finished with status 'failed'."""

    def __init__(self, event):
        self.event = event
        super().__init__(f"event {event.id} ({event.action}) failed")
