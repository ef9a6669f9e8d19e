"""
Lifecycle controller.

Handles:
- Signal registration (SIGTERM, SIGINT)
- Termination request tracking
- Bounded drain of the active listener
"""

import asyncio
import logging
import signal
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Sequence

from skeleton.domain.exceptions import (
    LifecycleError,
    ShutdownError,
    ShutdownTimeoutError,
)
from skeleton.domain.services import IListener

logger = logging.getLogger(__name__)


class LifecycleState(Enum):
    """Lifecycle state enum."""

    RUNNING = "running"
    TERMINATION_REQUESTED = "termination_requested"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"
    SHUTDOWN_TIMED_OUT = "shutdown_timed_out"


_TRANSITIONS = {
    LifecycleState.RUNNING: {
        LifecycleState.TERMINATION_REQUESTED,
        LifecycleState.SHUTTING_DOWN,
    },
    LifecycleState.TERMINATION_REQUESTED: {LifecycleState.SHUTTING_DOWN},
    LifecycleState.SHUTTING_DOWN: {
        LifecycleState.STOPPED,
        LifecycleState.SHUTDOWN_TIMED_OUT,
    },
    LifecycleState.STOPPED: set(),
    LifecycleState.SHUTDOWN_TIMED_OUT: set(),
}


class LifecycleController:
    """
    Coordinates signal-triggered, bounded shutdown of the service.

    Sequence:
    1. start() registers SIGTERM/SIGINT handlers before serving
    2. wait_for_termination() suspends until the first signal
    3. shutdown(timeout) stops the listener accepting and drains in-flight
       requests, giving up after the bound

    States move one way only:
        RUNNING -> TERMINATION_REQUESTED -> SHUTTING_DOWN
            -> STOPPED | SHUTDOWN_TIMED_OUT

    Attributes:
        state: Current lifecycle state
        listener: Listener drained on shutdown
        termination_reason: Signal name or reason that requested termination
        termination_requested_at: When termination was requested
    """

    def __init__(
        self,
        listener: Optional[IListener] = None,
        signals: Sequence[signal.Signals] = (signal.SIGTERM, signal.SIGINT),
    ):
        """
        Initialize lifecycle controller.

        Args:
            listener: Listener to drain on shutdown
            signals: Signals that request termination
        """
        self.listener = listener
        self.signals = tuple(signals)

        self.state = LifecycleState.RUNNING
        self.termination_reason: Optional[str] = None
        self.termination_requested_at: Optional[datetime] = None
        self.shutdown_completed_at: Optional[datetime] = None

        self._termination = asyncio.Event()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._started = False

    def start(self) -> None:
        """
        Register signal handlers on the running event loop.

        Must be called exactly once, before the listener starts accepting.

        Raises:
            LifecycleError: If already started or no loop is running
        """
        if self._started:
            raise LifecycleError("lifecycle controller already started")

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            raise LifecycleError(
                "lifecycle controller must be started inside a running event loop"
            ) from None

        for sig in self.signals:
            loop.add_signal_handler(sig, self.request_termination, sig.name)

        self._loop = loop
        self._started = True
        logger.debug(
            "signal handlers registered",
            extra={"fields": {"signals": [s.name for s in self.signals]}},
        )

    def restore_signal_handlers(self) -> None:
        """Remove the handlers installed by start()."""
        if self._loop is None:
            return

        for sig in self.signals:
            self._loop.remove_signal_handler(sig)
        self._loop = None

    def request_termination(self, reason: str = "manual") -> None:
        """
        Request termination.

        Only the first request transitions the controller; later ones
        are logged and ignored.

        Args:
            reason: Signal name or other reason
        """
        if self.state != LifecycleState.RUNNING:
            logger.warning(
                "termination already requested, ignoring",
                extra={"fields": {"reason": reason, "state": self.state.value}},
            )
            return

        self._transition(LifecycleState.TERMINATION_REQUESTED)
        self.termination_reason = reason
        self.termination_requested_at = datetime.now(timezone.utc)
        logger.info("termination requested", extra={"fields": {"reason": reason}})
        self._termination.set()

    @property
    def termination_requested(self) -> bool:
        return self._termination.is_set()

    async def wait_for_termination(self) -> str:
        """
        Wait until termination is requested.

        Returns:
            The termination reason
        """
        await self._termination.wait()
        return self.termination_reason

    async def shutdown(self, timeout: float) -> None:
        """
        Stop accepting connections and drain in-flight work.

        Never blocks longer than `timeout`. Work still in flight when
        the bound elapses is abandoned.

        Args:
            timeout: Maximum seconds to wait for in-flight work

        Raises:
            LifecycleError: If there is no listener or shutdown already ran
            ShutdownTimeoutError: If the bound elapsed before draining
            ShutdownError: If the listener failed while draining
        """
        if self.listener is None:
            raise LifecycleError("no listener to shut down")

        self._transition(LifecycleState.SHUTTING_DOWN)
        logger.info("shutting down listener", extra={"fields": {"timeout": timeout}})

        self.listener.stop_accepting()

        try:
            await asyncio.wait_for(self.listener.wait_closed(), timeout=timeout)
        except asyncio.TimeoutError:
            self._transition(LifecycleState.SHUTDOWN_TIMED_OUT)
            self.shutdown_completed_at = datetime.now(timezone.utc)
            self.listener.abort()
            logger.error(
                "shutdown timed out, abandoning in-flight requests",
                extra={"fields": {"timeout": timeout}},
            )
            raise ShutdownTimeoutError(timeout) from None
        except Exception as e:
            self._transition(LifecycleState.STOPPED)
            self.shutdown_completed_at = datetime.now(timezone.utc)
            raise ShutdownError(f"listener failed while draining: {e}") from e

        self._transition(LifecycleState.STOPPED)
        self.shutdown_completed_at = datetime.now(timezone.utc)
        logger.info("listener stopped")

    def _transition(self, new_state: LifecycleState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise LifecycleError(
                f"illegal lifecycle transition {self.state.value} -> {new_state.value}"
            )
        self.state = new_state

    def get_status(self) -> dict:
        """
        Get lifecycle status information.

        Returns:
            Dictionary with lifecycle status details
        """
        return {
            "state": self.state.value,
            "termination_reason": self.termination_reason,
            "termination_requested_at": (
                self.termination_requested_at.isoformat()
                if self.termination_requested_at
                else None
            ),
            "shutdown_completed_at": (
                self.shutdown_completed_at.isoformat()
                if self.shutdown_completed_at
                else None
            ),
        }
