"""
Request logging and latency middleware for FastAPI.
"""

import time
from datetime import datetime, timezone
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from skeleton.domain.services import IMetricsSink
from skeleton.infrastructure.monitoring.logger import get_logger

logger = get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every API call and records its latency.

    Errors collected on `request.state.errors` while the request was
    handled are reported with the call and raise the log level to ERROR.
    """

    def __init__(self, app: ASGIApp, metrics_sink: IMetricsSink):
        super().__init__(app)
        self.metrics_sink = metrics_sink

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request, then log it and observe its latency.

        Args:
            request: FastAPI request
            call_next: Next middleware/handler

        Returns:
            Response from handler
        """
        path = request.url.path
        query = request.url.query
        start = datetime.now(timezone.utc)
        started_at = time.perf_counter()

        request.state.errors = []

        try:
            response = await call_next(request)
        except Exception as e:
            self.metrics_sink.observe_latency(path, 500, time.perf_counter() - started_at)
            logger.error(
                "errors on API request",
                exc_info=True,
                extra={
                    "fields": {
                        "path": path,
                        "query": query,
                        "status-code": 500,
                        "start": start.isoformat(),
                        "errors": list(request.state.errors) + [str(e)],
                    }
                },
            )
            raise

        self.metrics_sink.observe_latency(
            path, response.status_code, time.perf_counter() - started_at
        )

        fields = {
            "path": path,
            "query": query,
            "status-code": response.status_code,
            "start": start.isoformat(),
        }
        errors = request.state.errors
        if errors:
            fields["errors"] = list(errors)
            logger.error("errors on API request", extra={"fields": fields})
        else:
            logger.info("api call complete", extra={"fields": fields})

        return response
