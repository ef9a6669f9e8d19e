"""
Echo handler.
"""

from typing import Any, Dict


def api_echo(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Return a shallow copy of the request payload.

    Args:
        payload: Decoded request body

    Returns:
        New mapping with the same keys and values
    """
    return dict(payload)
