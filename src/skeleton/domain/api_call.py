"""
API call envelope.

Pairs a decoded request mapping with the outcome of one domain handler
invocation.
"""

from typing import Any, Callable, Dict, Optional

from skeleton.domain.exceptions import EnvelopeStateError

# A domain handler takes the decoded request mapping and returns a
# JSON-serializable mapping, or raises to report a failure.
ApiHandler = Callable[[Dict[str, Any]], Dict[str, Any]]


class ApiCall:
    """
    Envelope for a single API call.

    Resolves to exactly one outcome: a result mapping or an error.
    Created per request and never shared.

    Attributes:
        payload: Decoded request body
        result: Handler result (set on success)
        error: Handler error (set on failure)
    """

    def __init__(self, payload: Dict[str, Any]):
        """
        Initialize ApiCall.

        Args:
            payload: Decoded request body
        """
        self.payload = payload
        self.result: Optional[Dict[str, Any]] = None
        self.error: Optional[BaseException] = None
        self._resolved = False

    @property
    def resolved(self) -> bool:
        """Whether an outcome has been recorded."""
        return self._resolved

    @property
    def succeeded(self) -> bool:
        """Whether the call resolved with a result."""
        self._require_resolved()
        return self.error is None

    def resolve(self, result: Dict[str, Any]) -> None:
        """
        Record a successful outcome.

        Args:
            result: Result mapping returned by the handler

        Raises:
            EnvelopeStateError: If the call is already resolved
        """
        self._require_unresolved()
        self.result = result
        self._resolved = True

    def fail(self, error: BaseException) -> None:
        """
        Record a failed outcome. Any partial result is discarded.

        Args:
            error: Exception raised by the handler

        Raises:
            EnvelopeStateError: If the call is already resolved
        """
        self._require_unresolved()
        self.result = None
        self.error = error
        self._resolved = True

    @property
    def status_code(self) -> int:
        """HTTP status for the outcome: 200 on success, 500 on failure."""
        return 200 if self.succeeded else 500

    def response_body(self) -> Dict[str, Any]:
        """
        Build the JSON body for the outcome.

        Returns:
            The result mapping, or {"error": message} on failure
        """
        if self.succeeded:
            return self.result if self.result is not None else {}
        return {"error": error_message(self.error)}

    def _require_resolved(self) -> None:
        if not self._resolved:
            raise EnvelopeStateError("api call has not been resolved")

    def _require_unresolved(self) -> None:
        if self._resolved:
            raise EnvelopeStateError("api call is already resolved")

    def __repr__(self) -> str:
        if not self._resolved:
            outcome = "pending"
        elif self.error is None:
            outcome = "ok"
        else:
            outcome = f"error={error_message(self.error)!r}"
        return f"ApiCall(keys={sorted(self.payload)}, {outcome})"


def error_message(error: BaseException) -> str:
    """Human-readable message for an exception."""
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error) or error.__class__.__name__
