"""
uvicorn-backed API listener.

uvicorn normally installs its own SIGINT/SIGTERM handling; here signals
belong to the lifecycle controller, which drives should_exit/force_exit.
"""

import asyncio
import contextlib
import logging
from typing import Optional

import uvicorn

from skeleton.domain.exceptions import ListenerError
from skeleton.domain.services import IListener

logger = logging.getLogger(__name__)

STARTUP_POLL_INTERVAL = 0.05


class ControlledServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to its owner."""

    def install_signal_handlers(self) -> None:
        # uvicorn < 0.29
        pass

    @contextlib.contextmanager
    def capture_signals(self):
        # uvicorn >= 0.29
        yield


class UvicornListener(IListener):
    """
    Serves an ASGI app with uvicorn until told to stop.

    stop_accepting() closes the listening sockets and lets in-flight
    requests finish; abort() abandons whatever is still running.
    """

    def __init__(
        self,
        app,
        host: str,
        port: int,
        timeout_keep_alive: int = 5,
    ):
        """
        Initialize listener.

        Args:
            app: ASGI application
            host: Host to bind to
            port: Port to bind to (0 picks a free port)
            timeout_keep_alive: Seconds to keep idle connections open
        """
        self.host = host
        self.port = port
        config = uvicorn.Config(
            app,
            host=host,
            port=port,
            lifespan="on",
            access_log=False,
            log_config=None,
            timeout_keep_alive=timeout_keep_alive,
        )
        self.server = ControlledServer(config)
        self._serve_task: Optional[asyncio.Task] = None

    @property
    def serve_task(self) -> Optional[asyncio.Task]:
        return self._serve_task

    @property
    def bound_port(self) -> int:
        """Actual port after binding (useful when port=0)."""
        for server in self.server.servers:
            for sock in server.sockets:
                return sock.getsockname()[1]
        return self.port

    async def start(self) -> None:
        """
        Start serving and wait until the socket is bound.

        Raises:
            ListenerError: If the server exits during startup
        """
        if self._serve_task is not None:
            raise ListenerError("listener already started")

        self._serve_task = asyncio.create_task(self.server.serve(), name="api-listener")

        while not self.server.started:
            if self._serve_task.done():
                exc = None if self._serve_task.cancelled() else self._serve_task.exception()
                raise ListenerError(f"listener exited during startup: {exc}") from exc
            await asyncio.sleep(STARTUP_POLL_INTERVAL)

        logger.info(
            "api listener started",
            extra={"fields": {"address": f"{self.host}:{self.bound_port}"}},
        )

    def stop_accepting(self) -> None:
        self.server.should_exit = True

    async def wait_closed(self) -> None:
        if self._serve_task is None:
            return
        # Shielded so a bounded wait that times out does not cancel uvicorn's own shutdown.
        await asyncio.shield(self._serve_task)

    def abort(self) -> None:
        self.server.force_exit = True
