"""
Configuration for Skeleton.
"""

from skeleton.config.settings import (
    JWTAuthConfig,
    Settings,
    load_config,
    parse_listen_address,
)

__all__ = ["JWTAuthConfig", "Settings", "load_config", "parse_listen_address"]
