"""HTTP middleware chain.

A middleware wraps the next handler: it can act before and after it, or
answer the request itself without calling it. ``chain()`` composes them so
the first middleware listed is the outermost:

    compose = chain(RecoveryMiddleware(), RequestLoggingMiddleware())
    handler = compose(terminal_handler)

MiddlewareChain installs one composed chain into a FastAPI application.
"""

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Iterable, Sequence

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from boilerplate.domain.exceptions import AppError
from boilerplate.presentation.exception_handlers import error_response

logger = logging.getLogger(__name__)

Handler = Callable[[Request], Awaitable[Response]]

DEFAULT_CORS_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS")
DEFAULT_CORS_HEADERS = ("Content-Type", "Authorization")
DEFAULT_CORS_MAX_AGE = 86400


class Middleware(ABC):
    """Interceptor around the rest of the request pipeline."""

    @abstractmethod
    async def handle(self, request: Request, call_next: Handler) -> Response:
        """Process the request, usually by awaiting ``call_next(request)``."""
        pass


def _bind(middleware: Middleware, call_next: Handler) -> Handler:
    async def handler(request: Request) -> Response:
        return await middleware.handle(request, call_next)

    return handler


def chain(*middlewares: Middleware) -> Callable[[Handler], Handler]:
    """
    Compose middlewares right to left around a terminal handler.

    ``chain(a, b, c)(h)`` behaves as ``a(b(c(h)))``: ``a`` sees the request
    first and the response last.
    """

    def compose(final: Handler) -> Handler:
        handler = final
        for middleware in reversed(middlewares):
            handler = _bind(middleware, handler)
        return handler

    return compose


class MiddlewareChain(BaseHTTPMiddleware):
    """Starlette adapter running a composed chain in front of the application."""

    def __init__(self, app: ASGIApp, middlewares: Sequence[Middleware]):
        super().__init__(app)
        self._compose = chain(*middlewares)

    async def dispatch(self, request: Request, call_next: Handler) -> Response:
        return await self._compose(call_next)(request)


class RecoveryMiddleware(Middleware):
    """
    Turn any unhandled exception into a 500 INTERNAL_ERROR response.

    Must be the outermost middleware so faults raised by the other
    middlewares are caught too. In debug mode the response names the
    exception class; tracebacks only ever go to the log.

    When given the CORS policy, the 500 carries the same CORS headers a
    normal response would have, since the inner CORS stage never sees it.
    """

    def __init__(self, debug: bool = False, cors: "CORSMiddleware | None" = None):
        self._debug = debug
        self._cors = cors

    async def handle(self, request: Request, call_next: Handler) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(
                "unhandled exception while serving request",
                extra={"method": request.method, "path": request.url.path},
                exc_info=exc,
            )
            details = {"exception": type(exc).__name__} if self._debug else None
            headers = self._cors.response_headers(request) if self._cors else None
            return error_response(AppError.internal(), details, headers)


class RequestLoggingMiddleware(Middleware):
    """Log one line per request with its outcome and duration."""

    async def handle(self, request: Request, call_next: Handler) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - start) * 1000, 3)

        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        logger.log(
            level,
            "request completed",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": duration_ms,
                "client": request.client.host if request.client else None,
            },
        )
        return response


class CORSMiddleware(Middleware):
    """
    Add CORS headers to every response and answer preflight requests.

    The request Origin is echoed back only when it is on the allow-list,
    or when the allow-list contains ``*``. ``OPTIONS`` requests get an
    empty 204 without reaching the router.
    """

    def __init__(
        self,
        allowed_origins: Iterable[str],
        allowed_methods: Iterable[str] = DEFAULT_CORS_METHODS,
        allowed_headers: Iterable[str] = DEFAULT_CORS_HEADERS,
        max_age: int = DEFAULT_CORS_MAX_AGE,
    ):
        self._allowed_origins = frozenset(allowed_origins)
        self._allow_any = "*" in self._allowed_origins
        self._headers = {
            "Vary": "Origin",
            "Access-Control-Allow-Methods": ", ".join(allowed_methods),
            "Access-Control-Allow-Headers": ", ".join(allowed_headers),
            "Access-Control-Max-Age": str(max_age),
        }

    def is_allowed(self, origin: str | None) -> bool:
        if not origin:
            return False
        return self._allow_any or origin in self._allowed_origins

    def response_headers(self, request: Request) -> dict[str, str]:
        """CORS headers for the response to ``request``."""
        headers = dict(self._headers)
        origin = request.headers.get("origin")
        if self.is_allowed(origin):
            headers["Access-Control-Allow-Origin"] = origin
        return headers

    async def handle(self, request: Request, call_next: Handler) -> Response:
        if request.method == "OPTIONS":
            response = Response(status_code=204)
        else:
            response = await call_next(request)

        response.headers.update(self.response_headers(request))
        return response
