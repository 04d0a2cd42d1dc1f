"""
Bounded exponential backoff with jitter.

Delay for attempt n:
    delay = min_delay * (factor ^ n)
    with jitter: uniform in [min_delay, delay]
    clamped to [min_delay, max_delay]

Example with min=2s, max=10s, factor=1.1 (no jitter):
    2.0s → 2.2s → 2.42s → ... → 10s (reached at attempt 17)
"""

import random
from typing import Optional


# Task status polling configuration
DEFAULT_MIN_DELAY_SECONDS = 2.0
DEFAULT_MAX_DELAY_SECONDS = 10.0
DEFAULT_FACTOR = 1.1


class Backoff:
    """
    Stateful delay generator.

    One instance belongs to one run; the attempt counter only moves
    forward until reset().
    """

    def __init__(
        self,
        min_delay: float = DEFAULT_MIN_DELAY_SECONDS,
        max_delay: float = DEFAULT_MAX_DELAY_SECONDS,
        factor: float = DEFAULT_FACTOR,
        jitter: bool = True,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize Backoff.

        Args:
            min_delay: Smallest delay in seconds
            max_delay: Largest delay in seconds
            factor: Growth factor per attempt
            jitter: Randomize each delay between min_delay and the computed value
            rng: Random source (injectable for testing)
        """
        if min_delay < 0:
            raise ValueError(f"min_delay must be >= 0, got {min_delay}")
        if factor < 1:
            raise ValueError(f"factor must be >= 1, got {factor}")

        self.min_delay = min_delay
        self.max_delay = max_delay
        self.factor = factor
        self.jitter = jitter
        self._rng = rng or random.Random()
        self._attempt = 0

    @property
    def attempt(self) -> int:
        """Number of delays handed out since the last reset."""
        return self._attempt

    def for_attempt(self, attempt: int) -> float:
        """Calculate the delay for a given attempt number without advancing."""
        if self.min_delay >= self.max_delay:
            return self.max_delay

        try:
            delay = self.min_delay * (self.factor ** attempt)
        except OverflowError:
            return self.max_delay

        if self.jitter:
            delay = self._rng.random() * (delay - self.min_delay) + self.min_delay

        return max(self.min_delay, min(delay, self.max_delay))

    def duration(self) -> float:
        """Return the next delay and advance the attempt counter."""
        delay = self.for_attempt(self._attempt)
        self._attempt += 1
        return delay

    def reset(self) -> None:
        """Start again from the minimum delay."""
        self._attempt = 0
