"""
Domain exceptions for Skeleton.
"""

from skeleton.domain.exceptions.auth_exceptions import (
    AuthenticationError,
    AuthorizationError,
    TokenExpiredError,
    TokenInvalidError,
)
from skeleton.domain.exceptions.base import (
    ApiError,
    ConfigurationError,
    EnvelopeStateError,
    RequestDecodeError,
    SkeletonException,
)
from skeleton.domain.exceptions.lifecycle_exceptions import (
    LifecycleError,
    ListenerError,
    ShutdownError,
    ShutdownTimeoutError,
)

__all__ = [
    "ApiError",
    "AuthenticationError",
    "AuthorizationError",
    "ConfigurationError",
    "EnvelopeStateError",
    "LifecycleError",
    "ListenerError",
    "RequestDecodeError",
    "ShutdownError",
    "ShutdownTimeoutError",
    "SkeletonException",
    "TokenExpiredError",
    "TokenInvalidError",
]
