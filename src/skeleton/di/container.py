"""
Dependency Injection container for Skeleton.

Holds the shared collaborators handed to the request pipeline. Stored on
the FastAPI app state rather than in a module global.
"""

from typing import Optional

from skeleton.config.settings import Settings
from skeleton.domain.services import IMetricsSink
from skeleton.infrastructure.auth import MultiTokenVerifier


class Container:
    """
    Dependency Injection container.

    Attributes:
        settings: Application settings
        metrics_sink: Sink for latency and dependency error metrics
        auth_verifier: Token verifier, None when auth is disabled
    """

    def __init__(
        self,
        settings: Settings,
        metrics_sink: IMetricsSink,
        auth_verifier: Optional[MultiTokenVerifier] = None,
    ):
        """
        Initialize container.

        Args:
            settings: Application settings
            metrics_sink: Metrics sink
            auth_verifier: Optional token verifier
        """
        self.settings = settings
        self.metrics_sink = metrics_sink
        self.auth_verifier = auth_verifier

    @property
    def auth_enabled(self) -> bool:
        return self.auth_verifier is not None
