"""
Prometheus scrape endpoint.

Serves one registry at /metrics on a dedicated port, separate from the
API listener, from a WSGI server running in a daemon thread.
"""

import logging
import threading
from typing import Optional
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import REGISTRY, CollectorRegistry, make_wsgi_app

logger = logging.getLogger(__name__)


class _ScrapeRequestHandler(WSGIRequestHandler):
    def log_message(self, format, *args):
        # default writes every scrape to stderr
        logger.debug("metrics scrape", extra={"fields": {"request": format % args}})


class MetricsServer:
    """
    Standalone /metrics server.

    Example:
        sink = PrometheusMetricsSink()
        server = MetricsServer(port=9090, registry=sink.registry)
        server.start_in_background()
        ...
        server.shutdown()

    Attributes:
        host: Bind host
        port: Bind port; updated to the real port once bound (port 0)
        registry: Registry exposed to scrapers
    """

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = 9090,
        registry: Optional[CollectorRegistry] = None,
    ) -> None:
        self.host = host
        self.port = port
        self.registry = registry if registry is not None else REGISTRY
        self._httpd: Optional[WSGIServer] = None
        self._thread: Optional[threading.Thread] = None

    def _bind(self) -> WSGIServer:
        try:
            httpd = make_server(
                self.host,
                self.port,
                make_wsgi_app(self.registry),
                handler_class=_ScrapeRequestHandler,
            )
        except OSError as e:
            logger.error(
                "metrics server failed to bind",
                extra={"fields": {"address": f"{self.host}:{self.port}", "error": str(e)}},
            )
            raise

        self.port = httpd.server_port
        self._httpd = httpd
        return httpd

    def start(self) -> None:
        """
        Serve in the calling thread until shutdown() is called elsewhere.

        Raises:
            OSError: If the port cannot be bound
        """
        httpd = self._bind()
        logger.info("metrics server listening", extra={"fields": {"url": self.url}})
        httpd.serve_forever()

    def start_in_background(self) -> None:
        """
        Bind in the calling thread, then serve from a daemon thread.

        Bind errors surface here rather than inside the thread.

        Raises:
            OSError: If the port cannot be bound
        """
        httpd = self._bind()
        self._thread = threading.Thread(
            target=httpd.serve_forever,
            name="MetricsServer",
            daemon=True,
        )
        self._thread.start()
        logger.info("metrics server listening", extra={"fields": {"url": self.url}})

    def shutdown(self) -> None:
        """Stop serving and release the port. Safe to call more than once."""
        httpd, self._httpd = self._httpd, None
        if httpd is None:
            return

        httpd.shutdown()
        httpd.server_close()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None
        logger.info("metrics server stopped")

    @property
    def is_running(self) -> bool:
        return self._httpd is not None

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}/metrics"
