"""
Build version route.
"""

from fastapi import APIRouter

from skeleton import version

router = APIRouter(tags=["version"])


@router.get("/version")
async def get_version():
    """Return the running build's version descriptor."""
    return version.current().to_dict()
