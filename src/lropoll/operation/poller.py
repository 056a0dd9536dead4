"""Operation poller driving handles to a terminal state."""
import asyncio
import logging
import time
from typing import Awaitable, Callable, Dict, Optional, Type
from lropoll.core.enums import PollOutcome
from lropoll.core.exceptions import (
    DecodeError,
    LROException,
    OperationFailedError,
    PollCancelledError,
    PollTimeoutError,
    PollTransportError,
)
from lropoll.observability.metrics import (
    record_poll_attempt,
    record_poll_finished,
    record_transport_error,
)
from lropoll.operation.handle import Operation, StatusFetcher
from lropoll.operation.models import PollAttempt, PollOptions
from lropoll.services.backoff import BackoffSchedule

logger = logging.getLogger(__name__)

OUTCOMES: Dict[Type[LROException], PollOutcome] = {
    OperationFailedError: PollOutcome.FAILED,
    PollTimeoutError: PollOutcome.TIMEOUT,
    PollTransportError: PollOutcome.TRANSPORT_ERROR,
    DecodeError: PollOutcome.DECODE_ERROR,
    PollCancelledError: PollOutcome.CANCELLED,
}


class OperationPoller:
    """
    Polls operation status with exponential backoff until a terminal state.

    Transport errors from the status fetcher are retried with the same
    backoff as a pending status. Decode errors end the session at once.
    Cancellation is cooperative: the flag is checked before each fetch and
    after each fetch, an in-flight fetch is never interrupted.
    """

    def __init__(
        self,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize operation poller.

        Args:
            sleep: Coroutine function used for backoff sleeps
            clock: Monotonic clock in seconds used for timeouts
        """
        self.sleep = sleep
        self.clock = clock

    async def poll(
        self,
        operation: Operation,
        status_fetcher: StatusFetcher,
        options: Optional[PollOptions] = None,
    ) -> Operation:
        """
        Poll an operation until it is done.

        Args:
            operation: Handle to drive to completion
            status_fetcher: Async callable operation_id -> RawStatus
            options: Backoff and budget options (defaults from settings)

        Returns:
            Operation: The same handle, now done and succeeded

        Raises:
            OperationFailedError: Operation finished with a remote error
            PollTimeoutError: Deadline or attempt budget exhausted
            PollTransportError: Status could not be fetched within the budget
            DecodeError: A payload could not be decoded
            PollCancelledError: Cancellation was requested
            ConcurrentPollError: Handle is already being polled
        """
        if operation.is_done():
            return operation

        options = options or PollOptions.from_settings()
        method = operation.descriptor.method
        started = self.clock()
        outcome = PollOutcome.ABORTED

        operation.begin_poll()
        try:
            await self._poll_loop(operation, status_fetcher, options, started)
            outcome = PollOutcome.SUCCEEDED
        except LROException as e:
            outcome = OUTCOMES.get(type(e), PollOutcome.FAILED)
            raise
        except asyncio.CancelledError:
            outcome = PollOutcome.CANCELLED
            raise
        finally:
            operation.end_poll()
            record_poll_finished(method, outcome.value, self.clock() - started)

        return operation

    async def _poll_loop(
        self,
        operation: Operation,
        status_fetcher: StatusFetcher,
        options: PollOptions,
        started: float,
    ) -> None:
        """
        Main polling loop.

        Fetches status, applies it, and sleeps with backoff until the handle
        is terminal or a budget runs out.
        """
        method = operation.descriptor.method
        schedule = BackoffSchedule(
            initial_delay=options.initial_delay,
            max_delay=options.max_delay,
            multiplier=options.multiplier,
        )
        delays = schedule.delays()
        attempt = PollAttempt(number=0, elapsed=0.0)
        cancel_deadline: Optional[float] = None

        while True:
            cancel_deadline = self._check_cancel(
                operation, options, self.clock() - started, cancel_deadline
            )

            attempt.number += 1
            record_poll_attempt(method)
            try:
                status = await status_fetcher(operation.operation_id)
            except Exception as e:
                attempt.status = None
                attempt.transport_error = e
                record_transport_error(method)
                logger.warning(
                    f"Status fetch {attempt.number} for operation "
                    f"{operation.operation_id} failed: {e}"
                )
            else:
                attempt.status = status
                attempt.transport_error = None
                if operation.apply_status(status):
                    logger.info(
                        f"Operation {operation.operation_id} finished after "
                        f"{attempt.number} attempts: {operation.state}"
                    )
                    # Raises OperationFailedError for a remote failure
                    operation.get_result()
                    return

            attempt.elapsed = self.clock() - started
            cancel_deadline = self._check_cancel(
                operation, options, attempt.elapsed, cancel_deadline
            )
            self._check_budget(operation, options, attempt)

            delay = next(delays)
            logger.debug(
                f"Operation {operation.operation_id} pending, "
                f"next poll in {delay:.2f}s"
            )
            await self.sleep(delay)

    def _check_cancel(
        self,
        operation: Operation,
        options: PollOptions,
        elapsed: float,
        cancel_deadline: Optional[float],
    ) -> Optional[float]:
        """
        Stop polling once cancellation was requested and the grace period ran out.

        Returns:
            Optional[float]: Elapsed time at which polling stops, None if not cancelled
        """
        if not operation.cancel_requested:
            return None

        if cancel_deadline is None:
            cancel_deadline = elapsed + options.cancel_grace_period
        if elapsed >= cancel_deadline:
            operation.acknowledge_cancel()
            logger.info(f"Stopped polling cancelled operation {operation.operation_id}")
            raise PollCancelledError(
                f"Polling of operation {operation.operation_id} cancelled"
            )
        return cancel_deadline

    def _check_budget(
        self,
        operation: Operation,
        options: PollOptions,
        attempt: PollAttempt,
    ) -> None:
        """Raise once max_attempts or total_timeout is exhausted."""
        out_of_attempts = (
            options.max_attempts is not None and attempt.number >= options.max_attempts
        )
        out_of_time = (
            options.total_timeout is not None and attempt.elapsed >= options.total_timeout
        )
        if not (out_of_attempts or out_of_time):
            return

        if attempt.transport_error is not None:
            raise PollTransportError(
                f"Could not fetch status of operation {operation.operation_id} "
                f"after {attempt.number} attempts: {attempt.transport_error}",
                attempts=attempt.number,
            ) from attempt.transport_error

        raise PollTimeoutError(
            f"Operation {operation.operation_id} still pending after "
            f"{attempt.number} attempts ({attempt.elapsed:.1f}s)",
            attempts=attempt.number,
            elapsed=attempt.elapsed,
        )
