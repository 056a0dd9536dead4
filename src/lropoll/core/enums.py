"""Core enumerations for long-running operation tracking."""
from enum import Enum


class OperationState(str, Enum):
    """
    Operation handle states.

    State flow:
        PENDING → SUCCEEDED
                → FAILED

    SUCCEEDED and FAILED are terminal; a handle never leaves them.
    """

    PENDING = "PENDING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"

    def __str__(self) -> str:
        """Return string representation of the enum value."""
        return self.value


class PollOutcome(str, Enum):
    """
    How a poll session ended, used as a metrics label.

    - SUCCEEDED: Operation finished with a result
    - FAILED: Operation finished with a remote-reported error
    - TIMEOUT: Client gave up, operation still pending
    - TRANSPORT_ERROR: Status could not be fetched within the budget
    - DECODE_ERROR: A payload could not be decoded
    - CANCELLED: Client stopped polling after requesting cancellation
    - ABORTED: Session ended by an unexpected exception
    """

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMEOUT = "timeout"
    TRANSPORT_ERROR = "transport_error"
    DECODE_ERROR = "decode_error"
    CANCELLED = "cancelled"
    ABORTED = "aborted"

    def __str__(self) -> str:
        """Return string representation of the enum value."""
        return self.value


class DataProtectionMode(str, Enum):
    """
    Data protection modes accepted by failover_instance.

    - LIMITED_DATA_LOSS: Failover only if replication lag is within limits
    - FORCE_DATA_LOSS: Failover regardless of replication lag
    """

    DATA_PROTECTION_MODE_UNSPECIFIED = "DATA_PROTECTION_MODE_UNSPECIFIED"
    LIMITED_DATA_LOSS = "LIMITED_DATA_LOSS"
    FORCE_DATA_LOSS = "FORCE_DATA_LOSS"

    def __str__(self) -> str:
        """Return string representation of the enum value."""
        return self.value
