"""Bounded retry policy applied to every queued write."""

from pydantic import BaseModel, Field


class RetryPolicy(BaseModel):
    """Retry ceiling and exponential backoff.

    Attributes:
        max_attempts: Failed retries after which an item is dropped.
        base_delay: Delay in seconds after the first failure.
        multiplier: Growth factor between consecutive delays.
        max_delay: Upper bound for any delay.
    """

    max_attempts: int = Field(default=5, ge=1)
    base_delay: float = Field(default=1.0, ge=0.0)
    multiplier: float = Field(default=2.0, ge=1.0)
    max_delay: float = Field(default=30.0, ge=0.0)

    def should_drop(self, attempts: int) -> bool:
        """Whether an item with this many failed attempts is given up."""
        return attempts >= self.max_attempts

    def delay_for(self, attempts: int) -> float:
        """Seconds to wait before the next attempt after `attempts` failures."""
        if attempts <= 0:
            return 0.0
        return min(self.base_delay * self.multiplier ** (attempts - 1), self.max_delay)

    def is_ready(self, attempts: int, last_attempt_at: float | None, now: float) -> bool:
        """Whether the backoff window since the last attempt has passed."""
        if last_attempt_at is None:
            return True
        return now >= last_attempt_at + self.delay_for(attempts)
