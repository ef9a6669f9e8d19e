"""
HTTP API layer for Skeleton.
"""

from skeleton.presentation.api.dispatcher import wrap_api_call

__all__ = ["wrap_api_call"]
