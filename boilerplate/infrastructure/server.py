"""HTTP server lifecycle built on uvicorn."""

import asyncio
import logging
from collections.abc import Iterator
from contextlib import contextmanager

import uvicorn
from fastapi import FastAPI
from starlette.types import ASGIApp, Receive, Scope, Send

from boilerplate.infrastructure.config.settings import Settings

logger = logging.getLogger(__name__)

# Seconds; uvicorn treats a zero graceful shutdown timeout as "wait forever"
MIN_GRACE_PERIOD = 0.001


class ServerStartError(Exception):
    """Raised when the server cannot bind its listener or fails during startup."""


class ShutdownTimeoutError(Exception):
    """Raised when in-flight requests outlive the shutdown grace period."""


class _UvicornServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to the owning process."""

    def install_signal_handlers(self) -> None:
        pass

    @contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield


class Server:
    """
    Serve an ASGI application on the configured host and port.

    ``start()`` runs until ``stop()`` is called from another task:

        server = Server(settings, app)
        task = asyncio.create_task(server.start())
        ...
        await server.stop(timeout=settings.shutdown_timeout)
        await task
    """

    def __init__(self, settings: Settings, app: FastAPI):
        self._host = settings.server_host
        self._port = settings.server_port
        config = uvicorn.Config(
            self._track_requests(app),
            host=self._host,
            port=self._port,
            timeout_keep_alive=settings.server_idle_timeout,
            timeout_graceful_shutdown=settings.shutdown_timeout,
            log_config=None,
            access_log=False,
            server_header=False,
        )
        self._server = _UvicornServer(config)
        self._serving = False
        self._done = asyncio.Event()
        self._in_flight = 0
        self._idle = asyncio.Event()
        self._idle.set()
        self._cancelled = 0

    def _track_requests(self, app: ASGIApp) -> ASGIApp:
        """Wrap ``app`` to count running requests and those cut off by shutdown."""

        async def tracked(scope: Scope, receive: Receive, send: Send) -> None:
            if scope["type"] != "http":
                await app(scope, receive, send)
                return

            self._in_flight += 1
            self._idle.clear()
            try:
                await app(scope, receive, send)
            except asyncio.CancelledError:
                self._cancelled += 1
                raise
            finally:
                self._in_flight -= 1
                if not self._in_flight:
                    self._idle.set()

        return tracked

    @property
    def started(self) -> bool:
        """True once the listener is bound and accepting connections."""
        return self._server.started

    @property
    def bound_port(self) -> int | None:
        """Port the listener is bound to (useful when configured with port 0)."""
        if not self._server.started or not self._server.servers:
            return None
        return self._server.servers[0].sockets[0].getsockname()[1]

    async def start(self) -> None:
        """
        Bind the listener and serve until stopped.

        Raises:
            ServerStartError: If the address cannot be bound or startup fails
        """
        logger.info("starting HTTP server", extra={"host": self._host, "port": self._port})
        self._serving = True
        try:
            await self._server.serve()
        except SystemExit as exc:
            # uvicorn exits the process when the bind fails
            raise ServerStartError(
                f"failed to start HTTP server on {self._host}:{self._port}"
            ) from exc
        finally:
            self._done.set()

        if not self._server.started:
            raise ServerStartError("HTTP server stopped during startup")

    async def stop(self, timeout: float) -> None:
        """
        Stop accepting connections and wait for in-flight requests.

        uvicorn cancels the requests still running after ``timeout`` seconds.

        Raises:
            ShutdownTimeoutError: If requests were still running at the deadline
        """
        if not self._serving:
            return

        logger.info("shutting down HTTP server")
        self._server.config.timeout_graceful_shutdown = max(timeout, MIN_GRACE_PERIOD)
        self._server.should_exit = True

        await self._done.wait()
        # Cancelled requests unwind after uvicorn returns
        await self._idle.wait()

        if self._cancelled:
            raise ShutdownTimeoutError(
                f"shutdown exceeded {timeout}s with {self._cancelled} request(s) in flight"
            )

        logger.info("HTTP server stopped")
