from typing import Optional


class DelayQueueError(Exception):
    """Base exception for delay queue client errors."""
    pass


class ClassNotFoundError(DelayQueueError):
    """Handler identifier is not registered."""
    pass


class SubClassError(DelayQueueError):
    """Handler identifier is registered but is not a job handler."""
    pass


class InvalidResponseError(DelayQueueError):
    """Server response is missing required fields or is not JSON."""
    pass


class OperationError(DelayQueueError):
    """Server reported a non-zero status code."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class TransportError(DelayQueueError):
    """Request could not be completed (connection error, timeout, ...)."""
    pass
