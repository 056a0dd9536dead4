"""Backoff schedule for spacing operation status polls."""
from typing import Iterator, Optional


class BackoffSchedule:
    """Exponential backoff between polls, capped at a maximum delay."""

    def __init__(
        self,
        initial_delay: float = 0.5,
        max_delay: float = 45.0,
        multiplier: float = 1.5,
    ):
        """
        Initialize backoff schedule.

        Args:
            initial_delay: First delay in seconds
            max_delay: Maximum delay in seconds
            multiplier: Growth factor applied after each delay, must be > 1

        Raises:
            ValueError: If any parameter is out of range
        """
        if initial_delay <= 0:
            raise ValueError("initial_delay must be positive")
        if max_delay < initial_delay:
            raise ValueError("max_delay must not be smaller than initial_delay")
        if multiplier <= 1:
            raise ValueError("multiplier must be greater than 1")

        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self.multiplier = multiplier

    def next_delay(self, delay: float) -> float:
        """Grow delay by the multiplier, capped at max_delay."""
        return min(delay * self.multiplier, self.max_delay)

    def delays(self, limit: Optional[int] = None) -> Iterator[float]:
        """
        Yield successive delays: initial_delay, initial_delay * multiplier, ...

        Args:
            limit: Optional number of delays to yield (infinite if None)

        Yields:
            float: Delay in seconds
        """
        delay = self.initial_delay
        count = 0
        while limit is None or count < limit:
            yield delay
            delay = self.next_delay(delay)
            count += 1
