"""Translation of storage failures into the application error taxonomy."""

from boilerplate.domain.exceptions import (
    AppError,
    DuplicateRecordError,
    RecordNotFoundError,
    StorageError,
)


def translate_storage_error(exc: StorageError, resource: str = "Resource") -> AppError:
    """
    Classify a repository failure as an AppError.

    Args:
        exc: The storage error raised by a repository
        resource: Name used in client-facing messages (e.g. "User")

    Returns:
        NOT_FOUND for missing rows, CONFLICT for unique violations and
        INTERNAL_ERROR for everything else. Internal errors carry a generic
        message so driver and SQL details never reach the client.
    """
    if isinstance(exc, RecordNotFoundError):
        return AppError.not_found(resource)

    if isinstance(exc, DuplicateRecordError):
        return AppError.conflict(f"{resource} already exists")

    return AppError.internal()
