"""
Error handler.

Always fails; shows how a handler reports an error to the dispatcher.
"""

from typing import Any, Dict

from skeleton.domain.exceptions import ApiError

ERROR_MESSAGE = "bad times"


def api_error(_payload: Dict[str, Any]) -> Dict[str, Any]:
    """Ignore the payload and raise ApiError."""
    raise ApiError(ERROR_MESSAGE)
