"""
Domain services package.
"""

from skeleton.domain.services.i_listener import IListener
from skeleton.domain.services.i_metrics_sink import IMetricsSink

__all__ = [
    "IListener",
    "IMetricsSink",
]
