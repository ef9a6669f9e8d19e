"""
Monitoring infrastructure for Skeleton.

Provides:
- Structured logging
- Prometheus metrics sink and /metrics server
- OpenTelemetry tracing
"""

from skeleton.infrastructure.monitoring.logger import (
    JSONFormatter,
    get_logger,
    setup_logging,
)
from skeleton.infrastructure.monitoring.metrics import PrometheusMetricsSink
from skeleton.infrastructure.monitoring.metrics_server import MetricsServer
from skeleton.infrastructure.monitoring.tracing import (
    TracingConfig,
    TracingManager,
    get_tracer,
)

__all__ = [
    "JSONFormatter",
    "MetricsServer",
    "PrometheusMetricsSink",
    "TracingConfig",
    "TracingManager",
    "get_logger",
    "get_tracer",
    "setup_logging",
]
