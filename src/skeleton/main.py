"""
Skeleton - REST API service skeleton

Composes the FastAPI application from its collaborators and runs it
under the lifecycle controller until a termination signal arrives.
"""

import asyncio
from typing import Callable, List, Optional, Sequence

from fastapi import FastAPI

from skeleton import __version__, version
from skeleton.config.settings import Settings
from skeleton.di import Container
from skeleton.domain.exceptions import ListenerError, ShutdownTimeoutError
from skeleton.domain.services import IMetricsSink
from skeleton.infrastructure.auth import MultiTokenVerifier
from skeleton.infrastructure.lifecycle import LifecycleController
from skeleton.infrastructure.monitoring import (
    MetricsServer,
    PrometheusMetricsSink,
    TracingConfig,
    TracingManager,
    get_logger,
)
from skeleton.infrastructure.server import UvicornListener
from skeleton.presentation.api.middleware import (
    RequestLoggingMiddleware,
    register_exception_handlers,
)
from skeleton.presentation.api.routes import (
    DEFAULT_API_ROUTES,
    ApiRoute,
    build_api_router,
    health,
)
from skeleton.presentation.api.routes import version as version_routes

logger = get_logger(__name__)

AppOption = Callable[["SkeletonApp"], None]


def with_metrics_sink(sink: IMetricsSink) -> AppOption:
    """Use `sink` instead of a fresh Prometheus sink."""

    def apply(app: "SkeletonApp") -> None:
        app.metrics_sink = sink

    return apply


def with_auth_verifier(verifier: Optional[MultiTokenVerifier]) -> AppOption:
    """Use `verifier` instead of one built from the jwt_auth settings."""

    def apply(app: "SkeletonApp") -> None:
        app.auth_verifier = verifier
        app._auth_verifier_set = True

    return apply


def with_api_route(route: ApiRoute) -> AppOption:
    """Serve an extra dispatched route next to the default ones."""

    def apply(app: "SkeletonApp") -> None:
        app.api_routes.append(route)

    return apply


def create_app(container: Container, api_routes: Sequence[ApiRoute]) -> FastAPI:
    """
    Application factory - creates and configures the FastAPI app.

    Args:
        container: Shared collaborators, stored on app.state
        api_routes: Dispatched routes served below /api

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Skeleton",
        description="REST API service skeleton",
        version=__version__,
        debug=container.settings.developer_mode,
    )
    app.state.container = container

    app.add_middleware(RequestLoggingMiddleware, metrics_sink=container.metrics_sink)
    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(version_routes.router, prefix="/api")
    app.include_router(build_api_router(api_routes), prefix="/api")

    return app


class SkeletonApp:
    """
    Skeleton application orchestrator.

    Applies options in order, then fills in whatever they left unset:
    a Prometheus metrics sink and a token verifier built from settings.

    Attributes:
        settings: Application settings
        container: DI container shared with the request pipeline
        api: FastAPI application
    """

    def __init__(self, settings: Settings, *options: AppOption):
        self.settings = settings
        self.metrics_sink: Optional[IMetricsSink] = None
        self.auth_verifier: Optional[MultiTokenVerifier] = None
        self._auth_verifier_set = False
        self.api_routes: List[ApiRoute] = list(DEFAULT_API_ROUTES)

        for option in options:
            option(self)

        if self.metrics_sink is None:
            self.metrics_sink = PrometheusMetricsSink()
        if not self._auth_verifier_set:
            self.auth_verifier = MultiTokenVerifier.from_configs(settings.jwt_auth)

        self.container = Container(
            settings,
            metrics_sink=self.metrics_sink,
            auth_verifier=self.auth_verifier,
        )
        self.api = create_app(self.container, self.api_routes)

        logger.debug(
            "app composed",
            extra={
                "fields": {
                    "routes": [route.path for route in self.api_routes],
                    "auth_enabled": self.container.auth_enabled,
                }
            },
        )


def _start_metrics_server(settings: Settings, sink: IMetricsSink) -> MetricsServer:
    metrics_server = MetricsServer(
        host=settings.metrics_host,
        port=settings.metrics_port,
        registry=getattr(sink, "registry", None),
    )
    metrics_server.start_in_background()
    logger.info(
        "metrics server started",
        extra={"fields": {"url": metrics_server.url}},
    )
    return metrics_server


async def run_server(settings: Settings, app: Optional[SkeletonApp] = None) -> None:
    """
    Serve the API until termination is requested, then drain it.

    Args:
        settings: Application settings
        app: Prebuilt application (built from settings if None)

    Raises:
        ListenerError: If the listener stops before termination was requested
        ShutdownError: If draining the listener failed
    """
    skeleton_app = app if app is not None else SkeletonApp(settings)

    listener = UvicornListener(
        skeleton_app.api,
        host=settings.listen_host,
        port=settings.listen_port,
    )
    controller = LifecycleController(listener)
    tracing: Optional[TracingManager] = None
    metrics_server: Optional[MetricsServer] = None

    try:
        if settings.tracing_enabled:
            tracing = TracingManager(TracingConfig.from_settings(settings))
            tracing.setup()
        if settings.metrics_enabled:
            metrics_server = _start_metrics_server(settings, skeleton_app.metrics_sink)

        controller.start()
        await listener.start()

        logger.info(
            "app initialized",
            extra={"fields": {"version": str(version.current())}},
        )

        termination = asyncio.create_task(controller.wait_for_termination())
        done, _ = await asyncio.wait(
            {termination, listener.serve_task},
            return_when=asyncio.FIRST_COMPLETED,
        )

        if termination not in done:
            termination.cancel()
            serve_task = listener.serve_task
            cause = None if serve_task.cancelled() else serve_task.exception()
            raise ListenerError(
                f"api listener stopped before termination was requested: {cause}"
            ) from cause

        logger.info(
            "signaled to terminate",
            extra={"fields": {"reason": termination.result()}},
        )

        try:
            await controller.shutdown(settings.shutdown_timeout)
        except ShutdownTimeoutError as e:
            logger.error("shutdown did not complete", extra={"fields": {"error": e.message}})
    finally:
        controller.restore_signal_handlers()
        if metrics_server is not None:
            metrics_server.shutdown()
        if tracing is not None:
            tracing.shutdown()

    logger.info("OK, done.", extra={"fields": controller.get_status()})


def serve(settings: Settings) -> None:
    """
    Run the server on a fresh event loop.

    Blocks until the server has shut down.
    """
    asyncio.run(run_server(settings))
