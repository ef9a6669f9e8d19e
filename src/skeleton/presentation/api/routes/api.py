"""
Dispatched API routes.

Each ApiRoute binds a domain handler to a POST path through the request
dispatcher, guarded by the scopes it requires.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence, Type

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from skeleton.application.handlers import api_echo, api_error
from skeleton.domain.scopes import create_scopes
from skeleton.presentation.api.dispatcher import wrap_api_call
from skeleton.presentation.api.middleware.auth import require_scopes


@dataclass
class ApiRoute:
    """
    A domain handler exposed as POST {prefix}{path}.

    Attributes:
        path: Route path below the API prefix
        handler: Domain handler
        scopes: Scopes accepted by the route (any one suffices)
        schema: Optional pydantic model the request body is validated into
    """

    path: str
    handler: Callable[[Any], Any]
    scopes: List[str] = field(default_factory=list)
    schema: Optional[Type[BaseModel]] = None


DEFAULT_API_ROUTES = (
    ApiRoute("/echo", api_echo, create_scopes("response")),
    ApiRoute("/error", api_error, create_scopes("response")),
)


def build_api_router(routes: Sequence[ApiRoute]) -> APIRouter:
    """
    Build a router serving the given dispatched routes.

    Args:
        routes: Routes to register

    Returns:
        APIRouter with one POST endpoint per route
    """
    router = APIRouter(tags=["api"])

    for route in routes:
        router.add_api_route(
            route.path,
            wrap_api_call(route.handler, route.schema),
            methods=["POST"],
            dependencies=[Depends(require_scopes(route.scopes))],
        )

    return router
