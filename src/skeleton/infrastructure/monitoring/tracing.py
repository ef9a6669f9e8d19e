"""
OpenTelemetry tracing for the API server.

The dispatcher always creates spans through get_tracer(); until a
TracingManager installs an SDK provider those spans are no-ops.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)

from skeleton import APP_NAME, __version__

logger = logging.getLogger(__name__)

EXPORTER_TYPES = ("console", "otlp")


@dataclass
class TracingConfig:
    """
    Tracing configuration.

    Attributes:
        service_name: Reported service.name (e.g. 'skeleton-api-server')
        exporter_type: 'console' or 'otlp'
        otlp_endpoint: OTLP/HTTP traces URL, required for 'otlp'
        environment: Reported deployment environment
    """

    service_name: str
    exporter_type: str = "console"
    otlp_endpoint: Optional[str] = None
    environment: str = "production"

    @classmethod
    def from_settings(cls, settings) -> "TracingConfig":
        return cls(
            service_name=f"{APP_NAME}-api-server",
            exporter_type=settings.tracing_exporter,
            otlp_endpoint=settings.otlp_endpoint,
            environment="development" if settings.developer_mode else "production",
        )


def build_span_exporter(config: TracingConfig) -> SpanExporter:
    """
    Create the span exporter named by the config.

    Raises:
        ValueError: If the exporter type is unknown or OTLP has no endpoint
    """
    if config.exporter_type == "console":
        return ConsoleSpanExporter(service_name=config.service_name)

    if config.exporter_type == "otlp":
        if not config.otlp_endpoint:
            raise ValueError("otlp_endpoint required for the otlp exporter")
        return OTLPSpanExporter(endpoint=config.otlp_endpoint)

    raise ValueError(
        f"unknown exporter type {config.exporter_type!r}, expected one of {EXPORTER_TYPES}"
    )


class TracingManager:
    """
    Owns the SDK tracer provider for the lifetime of the server.

    setup() installs it, shutdown() flushes pending spans and releases it.
    """

    def __init__(self, config: TracingConfig):
        self.config = config
        self.tracer_provider: Optional[TracerProvider] = None
        self.tracer: Optional[trace.Tracer] = None

    def setup(self, set_global: bool = True) -> trace.Tracer:
        """
        Install a tracer provider exporting through the configured exporter.

        Args:
            set_global: Register the provider process-wide, which is what
                makes get_tracer() spans real

        Returns:
            Tracer from the new provider

        Raises:
            ValueError: If the exporter cannot be built
        """
        if self.tracer is not None:
            logger.warning("tracing already set up")
            return self.tracer

        exporter = build_span_exporter(self.config)

        provider = TracerProvider(
            resource=Resource.create(
                {
                    "service.name": self.config.service_name,
                    "service.version": __version__,
                    "deployment.environment": self.config.environment,
                }
            )
        )
        provider.add_span_processor(BatchSpanProcessor(exporter))

        if set_global:
            trace.set_tracer_provider(provider)

        self.tracer_provider = provider
        self.tracer = provider.get_tracer(APP_NAME, __version__)

        logger.info(
            "tracing enabled",
            extra={
                "fields": {
                    "service": self.config.service_name,
                    "exporter": self.config.exporter_type,
                }
            },
        )
        return self.tracer

    def shutdown(self) -> None:
        """Flush pending spans and drop the provider."""
        if self.tracer_provider is None:
            return

        self.tracer_provider.shutdown()
        self.tracer_provider = None
        self.tracer = None
        logger.info("tracing shut down")

    @property
    def is_initialized(self) -> bool:
        return self.tracer is not None


def get_tracer(name: Optional[str] = None) -> trace.Tracer:
    """Tracer from the process-wide provider (no-op until set up)."""
    return trace.get_tracer(name or APP_NAME)
