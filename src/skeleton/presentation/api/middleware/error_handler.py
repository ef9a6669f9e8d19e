"""
Exception handlers mapping errors to framework-level JSON responses.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from skeleton.domain.exceptions import AuthenticationError, AuthorizationError
from skeleton.infrastructure.monitoring.logger import get_logger

logger = get_logger(__name__)

ROUTE_NOT_FOUND_MESSAGE = "invalid request - route not found"


async def authentication_error_handler(
    request: Request, exc: AuthenticationError
) -> JSONResponse:
    logger.debug(
        "authentication failed",
        extra={"fields": {"path": request.url.path, "reason": exc.message}},
    )
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"message": exc.message},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def authorization_error_handler(
    request: Request, exc: AuthorizationError
) -> JSONResponse:
    logger.debug(
        "authorization failed",
        extra={
            "fields": {
                "path": request.url.path,
                "subject": exc.subject,
                "required_scopes": exc.required_scopes,
            }
        },
    )
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"message": exc.message},
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """
    Render HTTP errors raised by routing as {"message": ...}.

    Unknown routes get the fixed route-not-found message.
    """
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        message = ROUTE_NOT_FOUND_MESSAGE
    else:
        message = str(exc.detail)

    return JSONResponse(
        status_code=exc.status_code,
        content={"message": message},
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the app."""
    app.add_exception_handler(AuthenticationError, authentication_error_handler)
    app.add_exception_handler(AuthorizationError, authorization_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
