"""Custom exceptions for lropoll."""
from typing import Optional, Union

# gRPC status code reported when a failure carries a message but no code.
UNKNOWN_CODE = 2


class LROException(Exception):
    """Base exception for all lropoll-specific exceptions."""

    pass


class InvalidStateTransitionError(LROException):
    """Raised when attempting an invalid operation state transition."""

    pass


class NotReadyError(LROException):
    """Raised when reading the result of an operation that is not done yet."""

    pass


class DecodeError(LROException):
    """Raised when a result or metadata payload cannot be decoded. Never retried."""

    pass


class PollTimeoutError(LROException):
    """
    Raised when the client-side deadline or attempt budget runs out.

    The operation may still be running server-side.
    """

    def __init__(self, message: str, attempts: int, elapsed: float):
        super().__init__(message)
        self.attempts = attempts
        self.elapsed = elapsed


class PollTransportError(LROException):
    """Raised when operation status could not be fetched within the retry budget."""

    def __init__(self, message: str, attempts: int = 0):
        super().__init__(message)
        self.attempts = attempts


class PollCancelledError(LROException):
    """Raised when polling stops because cancellation was requested."""

    pass


class ConcurrentPollError(LROException):
    """Raised when a handle is already being polled by another caller."""

    pass


class OperationFailedError(LROException):
    """
    The operation itself finished with a remote-reported error.

    This is the operation's outcome, not a client-side fault.
    """

    def __init__(self, code: int, message: str, operation_id: Optional[str] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.operation_id = operation_id

    def __str__(self) -> str:
        """Return code and message."""
        return f"[{self.code}] {self.message}"


class RpcError(LROException):
    """Raised by an RPC invoker when a call fails (error envelope or transport)."""

    def __init__(self, code: Union[int, str], message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        """Return code and message."""
        return f"{self.code}: {self.message}"
