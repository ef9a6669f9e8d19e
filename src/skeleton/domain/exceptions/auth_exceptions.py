"""
Authentication and authorization exceptions.
"""

from typing import List, Optional

from skeleton.domain.exceptions.base import SkeletonException


class AuthenticationError(SkeletonException):
    """Base exception for authentication errors."""

    def __init__(self, message: str = "authentication failed"):
        super().__init__(message, code="AUTHENTICATION_ERROR")


class TokenExpiredError(AuthenticationError):
    """Raised when JWT token has expired."""

    def __init__(self, message: str = "token expired"):
        super().__init__(message)


class TokenInvalidError(AuthenticationError):
    """Raised when JWT token is invalid."""

    def __init__(self, message: str = "invalid token"):
        super().__init__(message)


class AuthorizationError(SkeletonException):
    """Raised when a valid token does not carry any required scope."""

    def __init__(
        self,
        message: str,
        subject: Optional[str] = None,
        required_scopes: Optional[List[str]] = None,
    ):
        """
        Initialize AuthorizationError.

        Args:
            message: Error message
            subject: Optional token subject
            required_scopes: Scopes the route accepts
        """
        super().__init__(message, code="AUTHORIZATION_ERROR")
        self.subject = subject
        self.required_scopes = list(required_scopes or [])
