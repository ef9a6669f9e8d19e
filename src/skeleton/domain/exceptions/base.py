"""
Base domain exceptions.
"""

from typing import Optional


class SkeletonException(Exception):
    """Base exception for all Skeleton errors."""

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class ConfigurationError(SkeletonException):
    """Raised when configuration cannot be loaded or is invalid."""

    def __init__(self, message: str):
        super().__init__(message, code="CONFIGURATION_ERROR")


class RequestDecodeError(SkeletonException):
    """Raised when a request body is not a JSON object."""

    def __init__(self, message: str):
        super().__init__(message, code="DECODE_ERROR")


class ApiError(SkeletonException):
    """Raised by domain handlers to report a business failure."""

    def __init__(self, message: str):
        super().__init__(message, code="API_ERROR")


class EnvelopeStateError(SkeletonException):
    """Raised when an API call envelope is resolved twice or read unresolved."""

    def __init__(self, message: str):
        super().__init__(message, code="ENVELOPE_STATE_ERROR")
