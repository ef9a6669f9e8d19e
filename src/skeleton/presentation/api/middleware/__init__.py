"""
API middleware for Skeleton.
"""

from skeleton.presentation.api.middleware.auth import require_scopes
from skeleton.presentation.api.middleware.error_handler import (
    ROUTE_NOT_FOUND_MESSAGE,
    register_exception_handlers,
)
from skeleton.presentation.api.middleware.request_logging import (
    RequestLoggingMiddleware,
)

__all__ = [
    "ROUTE_NOT_FOUND_MESSAGE",
    "RequestLoggingMiddleware",
    "register_exception_handlers",
    "require_scopes",
]
