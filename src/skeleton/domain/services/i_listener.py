"""
Listener service interface.
"""

from abc import ABC, abstractmethod


class IListener(ABC):
    """
    Abstract transport listener drained by the lifecycle controller.
    """

    @abstractmethod
    async def start(self) -> None:
        """Begin accepting connections. Returns once the listener is bound."""

    @abstractmethod
    def stop_accepting(self) -> None:
        """Stop accepting new connections; in-flight work continues."""

    @abstractmethod
    async def wait_closed(self) -> None:
        """Wait until all in-flight work has finished and the listener is closed."""

    @abstractmethod
    def abort(self) -> None:
        """Abandon in-flight work. Responses still pending may be lost."""
