"""
Skeleton - REST service template.

Provides a request dispatcher that adapts plain domain handlers to
FastAPI endpoints, a lifecycle controller for signal-driven graceful
shutdown, Prometheus metrics, structured logging and JWT scope checks.
"""

__version__ = "0.1.0"

APP_NAME = "skeleton"

__all__ = ["APP_NAME", "__version__"]
