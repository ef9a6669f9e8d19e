"""
API routes for Skeleton.
"""

from skeleton.presentation.api.routes import health, version
from skeleton.presentation.api.routes.api import (
    DEFAULT_API_ROUTES,
    ApiRoute,
    build_api_router,
)

__all__ = ["DEFAULT_API_ROUTES", "ApiRoute", "build_api_router", "health", "version"]
