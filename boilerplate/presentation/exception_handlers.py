"""Exception handlers for converting exceptions to HTTP responses.

Every handled failure reaches the client in the same shape:

    {"code": "NOT_FOUND", "message": "User not found"}

AppError is the single conversion point: services raise it, and
app_error_handler renders it. Framework errors (request validation, routing
HTTPExceptions) are first converted to an AppError so they share the shape.
Anything else is left to RecoveryMiddleware.
"""

import logging
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from boilerplate.domain.exceptions import AppError, ErrorCode

logger = logging.getLogger(__name__)

ROUTE_NOT_FOUND_MESSAGE = "route not found"

# Closest error code for framework-raised HTTP statuses
HTTP_STATUS_TO_ERROR_CODE: dict[int, ErrorCode] = {
    HTTPStatus.BAD_REQUEST: ErrorCode.BAD_REQUEST,
    HTTPStatus.UNAUTHORIZED: ErrorCode.UNAUTHORIZED,
    HTTPStatus.FORBIDDEN: ErrorCode.FORBIDDEN,
    HTTPStatus.NOT_FOUND: ErrorCode.NOT_FOUND,
    HTTPStatus.METHOD_NOT_ALLOWED: ErrorCode.NOT_FOUND,
    HTTPStatus.CONFLICT: ErrorCode.CONFLICT,
    HTTPStatus.UNPROCESSABLE_ENTITY: ErrorCode.VALIDATION,
    HTTPStatus.TOO_MANY_REQUESTS: ErrorCode.TOO_MANY_REQUESTS,
}


def error_response(
    error: AppError,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Render an AppError as the standard JSON error body."""
    content = error.to_dict()
    if details:
        content["details"] = details
    return JSONResponse(status_code=error.status, content=content, headers=headers)


def _field_name(location: tuple[int | str, ...]) -> str:
    # Drop the "body"/"query"/"path" prefix FastAPI puts in front of the field
    parts = [str(part) for part in location[1:]] or [str(part) for part in location]
    return ".".join(parts)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """
    Handle ALL application errors.

    The HTTP status comes from the error itself (derived from its code).
    Server-side failures are logged here, once, with their cause.
    """
    if exc.status >= HTTPStatus.INTERNAL_SERVER_ERROR:
        logger.error(
            "request failed",
            extra={
                "method": request.method,
                "path": request.url.path,
                "code": exc.code.value,
            },
            exc_info=exc,
        )

    return error_response(exc)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors from request data.

    Returns VALIDATION_ERROR/400 with one message per invalid field:

        {"code": "VALIDATION_ERROR", "message": "Validation failed",
         "details": {"email": "value is not a valid email address: ..."}}
    """
    details: dict[str, str] = {}
    for error in exc.errors():
        # Keep the first message reported for each field
        details.setdefault(_field_name(tuple(error["loc"])), error["msg"])

    return error_response(AppError.validation("Validation failed"), details)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """
    Handle HTTPExceptions raised by the framework (routing, dependencies).

    Unknown paths and unregistered methods on known paths are both answered
    with 404 NOT_FOUND "route not found". A 404 raised by endpoint code with
    its own detail keeps that detail.
    """
    code = HTTP_STATUS_TO_ERROR_CODE.get(exc.status_code)
    if code is None:
        code = ErrorCode.INTERNAL if exc.status_code >= 500 else ErrorCode.BAD_REQUEST

    message = exc.detail if isinstance(exc.detail, str) else None
    # Starlette uses the bare status phrase when routing fails
    if code is ErrorCode.NOT_FOUND and message == HTTPStatus(exc.status_code).phrase:
        message = ROUTE_NOT_FOUND_MESSAGE

    error = AppError.from_code(code, message)

    return error_response(error)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers on the application.

    No handler is registered for ``Exception``: unexpected errors propagate
    to RecoveryMiddleware.
    """
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
