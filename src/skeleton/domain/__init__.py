"""
Domain layer for Skeleton.
"""

from skeleton.domain.api_call import ApiCall, ApiHandler

__all__ = ["ApiCall", "ApiHandler"]
