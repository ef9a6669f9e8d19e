"""
Prometheus metrics collection.
"""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram

from skeleton import APP_NAME
from skeleton.domain.services import IMetricsSink

# Buckets between 25ms and 10s
API_LATENCY_BUCKETS = (0.025, 0.05, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0, 7.5, 10.0)


class PrometheusMetricsSink(IMetricsSink):
    """
    Metrics sink backed by prometheus_client.

    Owns its registry so several sinks (one per app, one per test) can
    coexist in a process. prometheus_client updates are thread-safe.

    Series:
        {namespace}_api_latency_seconds{endpoint, response_code}
        {namespace}_dependencies_errors_total{dependency_name, operation}
    """

    def __init__(
        self,
        registry: Optional[CollectorRegistry] = None,
        namespace: str = APP_NAME,
    ):
        """
        Initialize metrics sink.

        Args:
            registry: Registry to register metrics in (fresh one if None)
            namespace: Metric name prefix
        """
        self.registry = registry if registry is not None else CollectorRegistry()
        self.namespace = namespace

        self.api_latency_seconds = Histogram(
            "latency_seconds",
            "api latency measurements in seconds",
            ["endpoint", "response_code"],
            namespace=namespace,
            subsystem="api",
            buckets=API_LATENCY_BUCKETS,
            registry=self.registry,
        )
        self.dependency_errors_total = Counter(
            "errors_total",
            f"a count of all errors attempting to reach {namespace} dependencies",
            ["dependency_name", "operation"],
            namespace=namespace,
            subsystem="dependencies",
            registry=self.registry,
        )

    def observe_latency(
        self, endpoint: str, status_code: int, seconds: float
    ) -> None:
        self.api_latency_seconds.labels(
            endpoint=endpoint,
            response_code=str(status_code),
        ).observe(seconds)

    def increment_error(self, dependency: str, operation: str) -> None:
        self.dependency_errors_total.labels(
            dependency_name=dependency,
            operation=operation,
        ).inc()
