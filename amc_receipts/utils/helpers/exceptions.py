"""Exception hierarchy for the AMC receipt service."""


class AmcError(Exception):
    """Base class for errors raised by receipt workflows."""


class BackendError(AmcError):
    """Raised when the backend data store cannot be read or written.

    Attributes:
        operation: Logical backend operation that failed (e.g. "list_receipts")
        status_code: HTTP status returned by a remote backend, if any
    """

    def __init__(self, message: str, operation: str = "", status_code: int = None):
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code


class ReceiptSubmissionError(AmcError):
    """Raised when a new receipt is rejected before or during the write."""

    def __init__(self, message: str, payload: dict = None, retryable: bool = False):
        super().__init__(message)
        self.payload = payload or {}
        self.retryable = retryable


class ConfigurationError(AmcError):
    """Raised when configuration loading encounters issues."""
