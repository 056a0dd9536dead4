"""Operation handle for an in-flight server-side operation."""
import logging
from typing import Any, Awaitable, Callable, Optional, TYPE_CHECKING
from lropoll.core.enums import OperationState
from lropoll.core.exceptions import (
    ConcurrentPollError,
    DecodeError,
    LROException,
    NotReadyError,
    OperationFailedError,
    PollTransportError,
)
from lropoll.observability.metrics import record_cancel_request
from lropoll.operation.descriptor import Decoder, OperationDescriptor
from lropoll.operation.models import OperationFailure, PollOptions, RawStatus
from lropoll.services.state_machine import OperationStateMachine

if TYPE_CHECKING:
    from lropoll.operation.poller import OperationPoller

logger = logging.getLogger(__name__)

StatusFetcher = Callable[[str], Awaitable[RawStatus]]
Canceller = Callable[[str], Awaitable[None]]


class Operation:
    """
    Handle for a long-running operation.

    Created by an invoker right after the triggering call returns. Only the
    poller mutates it (through apply_status); once done it never changes.
    A handle must not be polled by two callers at once.
    """

    def __init__(
        self,
        operation_id: str,
        descriptor: OperationDescriptor,
        fetcher: Optional[StatusFetcher] = None,
        canceller: Optional[Canceller] = None,
        metadata: Any = None,
    ):
        """
        Initialize a pending operation handle.

        Args:
            operation_id: Opaque id assigned by the remote service
            descriptor: Decode hooks for the method that started the operation
            fetcher: Optional status fetcher used by wait()
            canceller: Optional remote cancel call used by cancel()
            metadata: Initial (already decoded) metadata
        """
        self.operation_id = operation_id
        self.descriptor = descriptor
        self.fetcher = fetcher
        self.canceller = canceller

        self.state = OperationState.PENDING
        self._result: Any = None
        self._metadata: Any = metadata
        self._failure: Optional[OperationFailure] = None

        self._cancel_requested = False
        self._polling = False

    @classmethod
    def from_raw(
        cls,
        operation_id: str,
        status: RawStatus,
        descriptor: OperationDescriptor,
        fetcher: Optional[StatusFetcher] = None,
        canceller: Optional[Canceller] = None,
    ) -> "Operation":
        """
        Create a handle from the initial raw status of an operation.

        The initial status may already be terminal.

        Raises:
            DecodeError: If an initial payload cannot be decoded
        """
        operation = cls(operation_id, descriptor, fetcher=fetcher, canceller=canceller)
        operation.apply_status(status)
        return operation

    @property
    def done(self) -> bool:
        return OperationStateMachine.is_terminal(self.state)

    @property
    def failed(self) -> bool:
        return self.state == OperationState.FAILED

    @property
    def failure(self) -> Optional[OperationFailure]:
        return self._failure

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_requested

    @property
    def polling(self) -> bool:
        return self._polling

    def begin_poll(self) -> None:
        """
        Mark the handle as borrowed by a poll session.

        Raises:
            ConcurrentPollError: If another session is already polling it
        """
        if self._polling:
            raise ConcurrentPollError(
                f"Operation {self.operation_id} is already being polled"
            )
        self._polling = True

    def end_poll(self) -> None:
        """Release the handle at the end of a poll session."""
        self._polling = False

    def acknowledge_cancel(self) -> None:
        """Clear the cancel flag once a poll session has stopped because of it."""
        self._cancel_requested = False

    def is_done(self) -> bool:
        """Return the current known completion state without polling."""
        return self.done

    def get_result(self) -> Any:
        """
        Get the decoded result of a finished operation.

        Returns:
            Any: Decoded result (None for operations with an empty response)

        Raises:
            NotReadyError: If the operation is not done
            OperationFailedError: If the operation finished with an error
        """
        if not self.done:
            raise NotReadyError(f"Operation {self.operation_id} is not done yet")
        if self._failure is not None:
            raise OperationFailedError(
                self._failure.code, self._failure.message, self.operation_id
            )
        return self._result

    def get_metadata(self) -> Any:
        """Return the latest known metadata snapshot. Never raises."""
        return self._metadata

    async def cancel(self) -> None:
        """
        Request cancellation of the operation.

        Sets the cooperative cancel flag consulted by the poller, then asks the
        remote service to cancel. The remote side may still complete the
        operation; later polls observe the outcome.

        Raises:
            PollTransportError: If the remote cancel call fails
        """
        if self.done:
            return

        self._cancel_requested = True
        record_cancel_request(self.descriptor.method)
        if self.canceller is None:
            return

        logger.info(f"Requesting cancellation of operation {self.operation_id}")
        try:
            await self.canceller(self.operation_id)
        except Exception as e:
            raise PollTransportError(
                f"Failed to cancel operation {self.operation_id}: {e}"
            ) from e

    async def wait(
        self,
        options: Optional[PollOptions] = None,
        poller: Optional["OperationPoller"] = None,
    ) -> Any:
        """
        Poll until done with the bound fetcher and return the result.

        Args:
            options: Poll options (defaults from settings)
            poller: Poller to use (a fresh one if not provided)

        Returns:
            Any: Decoded result
        """
        if self.fetcher is None:
            raise LROException(
                f"Operation {self.operation_id} has no status fetcher bound"
            )

        from lropoll.operation.poller import OperationPoller

        poller = poller or OperationPoller()
        await poller.poll(self, self.fetcher, options)
        return self.get_result()

    def apply_status(self, status: RawStatus) -> bool:
        """
        Apply a raw status fetched from the remote service.

        Payloads are decoded before any state changes, so a decode failure
        leaves the handle untouched. A done handle ignores further statuses.

        Args:
            status: Raw status to apply

        Returns:
            bool: True if this status made the handle terminal

        Raises:
            DecodeError: If a payload cannot be decoded
        """
        if self.done:
            return False

        metadata = self._metadata
        if status.metadata:
            metadata = self._decode(self.descriptor.decode_metadata, status.metadata, "metadata")

        if not status.done:
            self._metadata = metadata
            return False

        result = None
        failure = None
        if status.failed:
            failure = OperationFailure.from_status(status)
            new_state = OperationState.FAILED
        else:
            if status.result:
                result = self._decode(self.descriptor.decode_result, status.result, "result")
            new_state = OperationState.SUCCEEDED

        OperationStateMachine.validate_transition(self.state, new_state)
        self._metadata = metadata
        self._result = result
        self._failure = failure
        self.state = new_state
        return True

    def _decode(self, hook: Optional[Decoder], payload: bytes, kind: str) -> Any:
        if hook is None:
            return payload
        try:
            return hook(payload)
        except DecodeError:
            raise
        except Exception as e:
            raise DecodeError(
                f"Failed to decode {kind} of operation {self.operation_id} "
                f"({self.descriptor.method}): {e}"
            ) from e

    def __repr__(self) -> str:
        return f"<Operation {self.operation_id} {self.descriptor.method} {self.state}>"
