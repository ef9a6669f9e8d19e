"""
Lifecycle and listener exceptions.
"""

from skeleton.domain.exceptions.base import SkeletonException


class LifecycleError(SkeletonException):
    """Raised on illegal use of the lifecycle controller."""

    def __init__(self, message: str):
        super().__init__(message, code="LIFECYCLE_ERROR")


class ShutdownError(SkeletonException):
    """Raised when the listener fails while draining."""

    def __init__(self, message: str, code: str = "SHUTDOWN_ERROR"):
        super().__init__(message, code=code)


class ShutdownTimeoutError(ShutdownError):
    """Raised when in-flight work did not drain within the shutdown bound."""

    def __init__(self, timeout: float):
        super().__init__(
            f"shutdown timed out after {timeout:g}s with requests in flight",
            code="SHUTDOWN_TIMEOUT",
        )
        self.timeout = timeout


class ListenerError(SkeletonException):
    """Raised when the HTTP listener stops before termination was requested."""

    def __init__(self, message: str):
        super().__init__(message, code="LISTENER_ERROR")
