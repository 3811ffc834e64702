"""FastAPI application entry point."""

import asyncio
import logging
import signal
from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import ValidationError

from boilerplate.domain.repositories.user_repository import IUserRepository
from boilerplate.infrastructure.config.settings import Settings, get_settings
from boilerplate.infrastructure.logger import configure_logging
from boilerplate.infrastructure.persistence.database import (
    DatabaseConnectionError,
    close_database,
    create_database_engine,
    create_schema,
    create_session_factory,
    verify_connection,
)
from boilerplate.infrastructure.repositories import SQLAlchemyUserRepository
from boilerplate.infrastructure.server import (
    Server,
    ServerStartError,
    ShutdownTimeoutError,
)
from boilerplate.presentation.error_schemas import ErrorResponse
from boilerplate.presentation.exception_handlers import register_exception_handlers
from boilerplate.presentation.middleware import (
    CORSMiddleware,
    MiddlewareChain,
    RecoveryMiddleware,
    RequestLoggingMiddleware,
)
from boilerplate.presentation.router import Router

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    user_repository: IUserRepository | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Application settings (defaults to ``get_settings()``)
        user_repository: Storage used by the user endpoints

    Returns:
        Application with middleware, exception handlers and routes installed
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="HTTP service boilerplate following Clean Architecture principles",
        version=settings.app_version,
        debug=settings.debug,
    )
    app.state.settings = settings
    app.state.user_repository = user_repository

    # Recovery wraps everything so it also catches faults in logging and CORS
    cors = CORSMiddleware(settings.cors_origins_list)
    app.add_middleware(
        MiddlewareChain,
        middlewares=[
            RecoveryMiddleware(debug=settings.debug, cors=cors),
            RequestLoggingMiddleware(),
            cors,
        ],
    )

    register_exception_handlers(app)

    router = Router(settings)
    router.setup_routes()
    router.mount(app)

    app.openapi = lambda: custom_openapi(app)  # type: ignore[method-assign]
    return app


def custom_openapi(app: FastAPI) -> dict[str, Any]:
    """
    Customize OpenAPI schema to use our error format.

    Request validation failures are answered with 400 and an ErrorResponse
    body, so the default 422/HTTPValidationError entries are replaced.
    """
    # Return cached schema if it exists
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )

    schemas = openapi_schema.setdefault("components", {}).setdefault("schemas", {})
    schemas.pop("HTTPValidationError", None)
    schemas.pop("ValidationError", None)
    error_schema = ErrorResponse.model_json_schema(ref_template="#/components/schemas/{model}")
    schemas.update(error_schema.pop("$defs", {}))
    schemas.setdefault("ErrorResponse", error_schema)

    for path_data in openapi_schema.get("paths", {}).values():
        for operation in path_data.values():
            if isinstance(operation, dict) and "422" in operation.get("responses", {}):
                del operation["responses"]["422"]
                operation["responses"]["400"] = {
                    "description": "Validation Error",
                    "content": {
                        "application/json": {
                            "schema": {"$ref": "#/components/schemas/ErrorResponse"}
                        }
                    },
                }

    app.openapi_schema = openapi_schema
    return app.openapi_schema


async def serve(settings: Settings) -> None:
    """
    Run the service until SIGINT or SIGTERM.

    Start-up order: database pool (pinged), optional schema creation,
    application, HTTP server. Shutdown runs in reverse: the server drains
    in-flight requests for up to ``shutdown_timeout`` seconds, and only then
    is the pool closed.

    Raises:
        DatabaseConnectionError: If the database is unreachable at start-up
        ServerStartError: If the listener cannot be bound
        ShutdownTimeoutError: If requests outlived the grace period
    """
    engine = create_database_engine(settings)
    loop = asyncio.get_running_loop()
    stop_requested = asyncio.Event()

    try:
        await verify_connection(engine)
        if settings.db_create_schema:
            await create_schema(engine)

        repository = SQLAlchemyUserRepository(create_session_factory(engine))
        server = Server(settings, create_app(settings, repository))

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, stop_requested.set)

        server_task = asyncio.create_task(server.start())
        signal_task = asyncio.create_task(stop_requested.wait())
        await asyncio.wait({server_task, signal_task}, return_when=asyncio.FIRST_COMPLETED)

        if server_task.done():
            signal_task.cancel()
            # Re-raises ServerStartError
            server_task.result()
            return

        logger.info("shutdown signal received")
        await server.stop(timeout=settings.shutdown_timeout)
        await server_task
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)
        await close_database(engine)

    logger.info("server exited")


def run() -> None:
    """Console entry point. Exits with status 1 when start-up or shutdown fails."""
    try:
        settings = get_settings()
    except ValidationError as exc:
        logging.basicConfig(level=logging.ERROR)
        logger.error("invalid configuration", exc_info=exc)
        raise SystemExit(1) from exc

    configure_logging(settings)

    try:
        asyncio.run(serve(settings))
    except (DatabaseConnectionError, ServerStartError) as exc:
        logger.critical("failed to start server", exc_info=exc)
        raise SystemExit(1) from exc
    except ShutdownTimeoutError as exc:
        logger.critical("server forced to shutdown", exc_info=exc)
        raise SystemExit(1) from exc
