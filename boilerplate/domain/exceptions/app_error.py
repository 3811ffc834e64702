"""Application error taxonomy.

Every failure that reaches a client is described by an AppError: a stable,
machine-readable code, a human-readable message and the HTTP status the code
maps to. The codes are a public contract for API consumers, so they never
change once released.

To add a new code:
1. Add a member to ErrorCode
2. Add its status to ERROR_CODE_TO_HTTP_STATUS and a default message to
   DEFAULT_MESSAGES
"""

from enum import StrEnum
from http import HTTPStatus
from typing import Any


class ErrorCode(StrEnum):
    """Closed set of error codes exposed on the wire."""

    VALIDATION = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    INTERNAL = "INTERNAL_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    CONFLICT = "CONFLICT"
    TOO_MANY_REQUESTS = "TOO_MANY_REQUESTS"


# Map error codes to HTTP status codes
ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION: HTTPStatus.BAD_REQUEST,
    ErrorCode.NOT_FOUND: HTTPStatus.NOT_FOUND,
    ErrorCode.UNAUTHORIZED: HTTPStatus.UNAUTHORIZED,
    ErrorCode.FORBIDDEN: HTTPStatus.FORBIDDEN,
    ErrorCode.INTERNAL: HTTPStatus.INTERNAL_SERVER_ERROR,
    ErrorCode.BAD_REQUEST: HTTPStatus.BAD_REQUEST,
    ErrorCode.CONFLICT: HTTPStatus.CONFLICT,
    ErrorCode.TOO_MANY_REQUESTS: HTTPStatus.TOO_MANY_REQUESTS,
}

DEFAULT_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.VALIDATION: "Validation failed",
    ErrorCode.NOT_FOUND: "Resource not found",
    ErrorCode.UNAUTHORIZED: "Unauthorized",
    ErrorCode.FORBIDDEN: "Forbidden",
    ErrorCode.INTERNAL: "Internal server error",
    ErrorCode.BAD_REQUEST: "Bad request",
    ErrorCode.CONFLICT: "Resource conflict",
    ErrorCode.TOO_MANY_REQUESTS: "Too many requests",
}


def get_http_status_for_error_code(code: ErrorCode | str) -> int:
    """
    Get HTTP status code for a given error code.

    Args:
        code: The error code (enum member or its string value)

    Returns:
        HTTP status code

    Raises:
        ValueError: If the code is not part of the taxonomy
    """
    return int(ERROR_CODE_TO_HTTP_STATUS[ErrorCode(code)])


class AppError(Exception):
    """
    Structured failure carrying a stable code, a message and an HTTP status.

    An AppError is immutable: its attributes are read-only properties.
    It is raised where the failure is detected, propagated unchanged, and
    rendered to a response exactly once by the presentation layer.

    Usage:
        raise AppError.not_found("User")
        raise AppError.validation("email is not a valid email")
        raise AppError(ErrorCode.CONFLICT, "Email already registered", 409)
    """

    def __init__(self, code: ErrorCode | str, message: str, status: int):
        """
        Initialize application error.

        Args:
            code: Machine-readable error code
            message: Human-readable error message
            status: HTTP status code sent to the client
        """
        self._code = ErrorCode(code)
        self._message = message
        self._status = int(status)
        super().__init__(message)

    @property
    def code(self) -> ErrorCode:
        return self._code

    @property
    def message(self) -> str:
        return self._message

    @property
    def status(self) -> int:
        return self._status

    def __repr__(self) -> str:
        return (
            f"AppError(code={self._code.value!r}, message={self._message!r}, "
            f"status={self._status!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert error to the JSON body sent to clients."""
        return {"code": self._code.value, "message": self._message}

    @classmethod
    def from_code(cls, code: ErrorCode | str, message: str | None = None) -> "AppError":
        """Create an error whose status is derived from its code."""
        code = ErrorCode(code)
        return cls(
            code,
            message if message is not None else DEFAULT_MESSAGES[code],
            get_http_status_for_error_code(code),
        )

    @classmethod
    def validation(cls, message: str) -> "AppError":
        return cls.from_code(ErrorCode.VALIDATION, message)

    @classmethod
    def not_found(cls, resource: str) -> "AppError":
        """Create a not found error, e.g. ``not_found("User")`` -> "User not found"."""
        return cls.from_code(ErrorCode.NOT_FOUND, f"{resource} not found")

    @classmethod
    def internal(cls, message: str | None = None) -> "AppError":
        return cls.from_code(ErrorCode.INTERNAL, message)

    @classmethod
    def bad_request(cls, message: str | None = None) -> "AppError":
        return cls.from_code(ErrorCode.BAD_REQUEST, message)

    @classmethod
    def conflict(cls, message: str | None = None) -> "AppError":
        return cls.from_code(ErrorCode.CONFLICT, message)

    @classmethod
    def unauthorized(cls, message: str | None = None) -> "AppError":
        return cls.from_code(ErrorCode.UNAUTHORIZED, message)

    @classmethod
    def forbidden(cls, message: str | None = None) -> "AppError":
        return cls.from_code(ErrorCode.FORBIDDEN, message)

    @classmethod
    def too_many_requests(cls, message: str | None = None) -> "AppError":
        return cls.from_code(ErrorCode.TOO_MANY_REQUESTS, message)
