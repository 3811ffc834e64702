"""Domain exceptions - application error taxonomy and storage failures."""

from boilerplate.domain.exceptions.app_error import (
    DEFAULT_MESSAGES,
    ERROR_CODE_TO_HTTP_STATUS,
    AppError,
    ErrorCode,
    get_http_status_for_error_code,
)
from boilerplate.domain.exceptions.storage_errors import (
    DuplicateRecordError,
    RecordNotFoundError,
    StorageError,
)

__all__ = [
    "AppError",
    "ErrorCode",
    "ERROR_CODE_TO_HTTP_STATUS",
    "DEFAULT_MESSAGES",
    "get_http_status_for_error_code",
    "StorageError",
    "RecordNotFoundError",
    "DuplicateRecordError",
]
