"""
Service lifecycle management.

Handles signal-driven, bounded shutdown of the API listener.
"""

from skeleton.infrastructure.lifecycle.lifecycle_controller import (
    LifecycleController,
    LifecycleState,
)

__all__ = [
    "LifecycleController",
    "LifecycleState",
]
