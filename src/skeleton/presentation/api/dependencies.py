"""
FastAPI dependencies for Skeleton API.
"""

from starlette.requests import HTTPConnection

from skeleton.di import Container


def get_container(connection: HTTPConnection) -> Container:
    """
    Get the DI container attached to the application.

    Args:
        connection: Current request

    Returns:
        Container instance

    Raises:
        RuntimeError: If container not initialized
    """
    container = getattr(connection.app.state, "container", None)
    if container is None:
        raise RuntimeError("Container not initialized")
    return container
