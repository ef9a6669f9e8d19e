"""
Health check API routes.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, status

router = APIRouter(prefix="/_health", tags=["health"])


@router.get("/liveness", status_code=status.HTTP_200_OK)
async def liveness_probe():
    """
    Liveness probe endpoint.

    Answers while the process can serve requests, with no dependency
    checks.

    Returns:
        Current server time
    """
    return {"time": datetime.now(timezone.utc).isoformat()}
