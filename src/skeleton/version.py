"""
Build version information.

Values are injected at image build time through environment variables
(SKELETON_GIT_COMMIT, SKELETON_GIT_BRANCH, SKELETON_GIT_SUMMARY,
SKELETON_BUILD_DATE, SKELETON_APP_VERSION).
"""

import json
import os
import platform
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from skeleton import __version__

ENV_PREFIX = "SKELETON_"


@dataclass(frozen=True)
class Version:
    """Version descriptor served by /api/version and `skeleton version`."""

    git_commit: str
    git_branch: str
    git_summary: str
    build_date: str
    app_version: str
    python_version: str

    def __str__(self) -> str:
        return (
            f"version={self.app_version} ref={self.git_commit} "
            f"branch={self.git_branch} built={self.build_date}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)


def current() -> Version:
    """
    Get the running build's version.

    Returns:
        Version populated from the environment
    """
    return Version(
        git_commit=os.getenv(f"{ENV_PREFIX}GIT_COMMIT", ""),
        git_branch=os.getenv(f"{ENV_PREFIX}GIT_BRANCH", ""),
        git_summary=os.getenv(f"{ENV_PREFIX}GIT_SUMMARY", ""),
        build_date=os.getenv(f"{ENV_PREFIX}BUILD_DATE", ""),
        app_version=os.getenv(f"{ENV_PREFIX}APP_VERSION", __version__),
        python_version=platform.python_version(),
    )
