"""
HTTP listener infrastructure.
"""

from skeleton.infrastructure.server.uvicorn_listener import (
    ControlledServer,
    UvicornListener,
)

__all__ = ["ControlledServer", "UvicornListener"]
