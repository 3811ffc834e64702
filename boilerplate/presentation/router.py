"""Route registration."""

from collections.abc import Callable
from typing import Any

from fastapi import APIRouter, FastAPI
from fastapi.routing import APIRoute

from boilerplate.infrastructure.config.settings import Settings
from boilerplate.presentation.api.v1 import users

API_V1_PREFIX = "/api/v1"


class DuplicateRouteError(Exception):
    """Raised when a method and path pair is registered twice."""

    def __init__(self, method: str, path: str):
        self.method = method
        self.path = path
        super().__init__(f"route already registered: {method} {path}")


class Router:
    """
    Map (method, path) pairs to endpoints.

    Each pair can only be registered once; requests that match no pair are
    answered with 404 NOT_FOUND by the exception handlers.

    Usage:
        router = Router(settings)
        router.setup_routes()
        router.mount(app)
    """

    def __init__(self, settings: Settings):
        self._settings = settings
        self._api_router = APIRouter()
        self._registered: set[tuple[str, str]] = set()

    @property
    def routes(self) -> set[tuple[str, str]]:
        """Registered (method, path) pairs."""
        return set(self._registered)

    def _claim(self, pairs: list[tuple[str, str]]) -> None:
        for method, path in pairs:
            if (method, path) in self._registered or pairs.count((method, path)) > 1:
                raise DuplicateRouteError(method, path)
        self._registered.update(pairs)

    def add(self, method: str, path: str, endpoint: Callable[..., Any], **kwargs: Any) -> None:
        """
        Register one endpoint.

        Args:
            method: HTTP method, e.g. "GET"
            path: URL path, may contain parameters like ``/users/{user_id}``
            endpoint: Path operation function
            **kwargs: Passed to ``APIRouter.add_api_route``

        Raises:
            DuplicateRouteError: If the method and path are already registered
        """
        method = method.upper()
        self._claim([(method, path)])
        self._api_router.add_api_route(path, endpoint, methods=[method], **kwargs)

    def include(self, api_router: APIRouter, prefix: str = "") -> None:
        """
        Register every route of a sub-router under ``prefix``.

        Raises:
            DuplicateRouteError: If any of its routes is already registered
        """
        pairs = [
            (method, prefix + route.path)
            for route in api_router.routes
            if isinstance(route, APIRoute)
            for method in sorted(route.methods)
        ]
        self._claim(pairs)
        self._api_router.include_router(api_router, prefix=prefix)

    def setup_routes(self) -> None:
        """Register the service endpoints."""
        settings = self._settings

        async def health_check() -> dict[str, str]:
            """Liveness check."""
            return {"status": "healthy", "service": settings.app_name}

        async def status() -> dict[str, str]:
            """Service status and version."""
            return {"status": "running", "version": settings.app_version}

        self.add("GET", "/health", health_check, tags=["system"])
        self.add("GET", f"{API_V1_PREFIX}/status", status, tags=["system"])
        self.include(users.router, prefix=API_V1_PREFIX)

    def mount(self, app: FastAPI) -> None:
        """Attach the registered routes to the application."""
        app.include_router(self._api_router)
