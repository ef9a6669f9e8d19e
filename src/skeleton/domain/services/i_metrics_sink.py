"""
Metrics sink service interface.
"""

from abc import ABC, abstractmethod


class IMetricsSink(ABC):
    """
    Abstract sink for API and dependency metrics.

    Injected into the request pipeline instead of a process-wide global.
    Implementations must be safe to call from concurrent requests.
    """

    @abstractmethod
    def observe_latency(
        self, endpoint: str, status_code: int, seconds: float
    ) -> None:
        """
        Record the latency and outcome of one API call.

        Args:
            endpoint: Logical endpoint path
            status_code: Final HTTP status code
            seconds: Wall-clock time from entry to response
        """

    @abstractmethod
    def increment_error(self, dependency: str, operation: str) -> None:
        """
        Count a failed call to an external dependency.

        Args:
            dependency: Dependency name (e.g. "fleetdb")
            operation: Operation that failed
        """
