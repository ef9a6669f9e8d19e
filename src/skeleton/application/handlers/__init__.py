"""
Domain handlers served through the request dispatcher.
"""

from skeleton.application.handlers.echo import api_echo
from skeleton.application.handlers.error import ERROR_MESSAGE, api_error

__all__ = ["ERROR_MESSAGE", "api_echo", "api_error"]
