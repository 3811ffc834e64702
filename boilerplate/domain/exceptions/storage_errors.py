"""Storage layer exceptions raised by repository implementations."""


class StorageError(Exception):
    """
    Base exception for persistence failures.

    Repositories wrap every driver or connectivity failure in a StorageError
    that names the operation being attempted. The original exception is
    chained as ``__cause__``.
    """

    def __init__(self, operation: str, message: str | None = None):
        """
        Initialize storage exception.

        Args:
            operation: What the repository was doing (e.g. "create user")
            message: Optional detail about the failure
        """
        self.operation = operation
        self.message = message or "storage operation failed"
        super().__init__(f"failed to {operation}: {self.message}")


class RecordNotFoundError(StorageError):
    """Raised when no row matches the requested key."""

    def __init__(self, operation: str, message: str = "no rows in result set"):
        super().__init__(operation, message)


class DuplicateRecordError(StorageError):
    """Raised when a write violates a unique constraint."""

    def __init__(self, operation: str, message: str = "unique constraint violated"):
        super().__init__(operation, message)
