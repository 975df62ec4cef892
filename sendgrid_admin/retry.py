"""Rate-limit aware retry for SendGrid operations.

Provisioning runs many mutating calls back to back and SendGrid throttles
them with 429. ``retry_on_rate_limit`` re-runs an operation while it keeps
reporting RateLimitedError, backing off exponentially, until a caller
supplied ``Deadline`` runs out or is cancelled.

Example:
    deadline = Deadline(timeout=300)
    key = await retry_on_rate_limit(
        lambda: client.api_keys.create("ci", ["mail.send"]),
        deadline,
    )
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

import structlog

from sendgrid_admin.config import RetryConfig
from sendgrid_admin.errors import DeadlineExceededError, RateLimitedError

logger = structlog.get_logger()

T = TypeVar("T")


@dataclass(frozen=True)
class BackoffPolicy:
    """Exponential backoff with a cap."""

    initial_interval: float = 0.5
    max_interval: float = 10.0
    backoff_factor: float = 2.0

    @classmethod
    def from_config(cls, config: RetryConfig) -> BackoffPolicy:
        return cls(
            initial_interval=config.initial_interval,
            max_interval=config.max_interval,
            backoff_factor=config.backoff_factor,
        )

    def delay(self, attempt: int) -> float:
        # attempt is the zero-based index of the retry about to happen
        try:
            delay = self.initial_interval * (self.backoff_factor**attempt)
        except OverflowError:
            return self.max_interval
        return min(delay, self.max_interval)


class Deadline:
    """Time budget plus cancellation flag for one retried operation.

    Create it inside the running event loop that will await it.
    """

    def __init__(
        self,
        timeout: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize deadline.

        Args:
            timeout: Seconds from now until the deadline expires
            clock: Monotonic clock, injectable for tests
        """
        self._clock = clock
        self._timeout = timeout
        self._expires_at = clock() + timeout
        self._cancelled = asyncio.Event()

    @property
    def timeout(self) -> float:
        return self._timeout

    def remaining(self) -> float:
        """Seconds left, never negative."""
        return max(0.0, self._expires_at - self._clock())

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self.cancelled or self.remaining() <= 0

    def cancel(self) -> None:
        """Stop retrying; wakes any sleep in progress."""
        self._cancelled.set()

    async def sleep(self, seconds: float) -> bool:
        """Sleep up to ``seconds``, cut short by expiry or cancellation.

        Returns:
            True if the full delay elapsed with time left on the deadline
        """
        remaining = self.remaining()
        if self.cancelled or remaining <= 0:
            return False
        if seconds >= remaining:
            await self._wait(remaining)
            return False
        return not await self._wait(seconds)

    async def _wait(self, seconds: float) -> bool:
        # True when woken by cancel()
        try:
            await asyncio.wait_for(self._cancelled.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True


async def retry_on_rate_limit(
    action: Callable[[], Awaitable[T]],
    deadline: Deadline,
    *,
    policy: BackoffPolicy | None = None,
) -> T:
    """Run ``action`` until it stops being rate limited.

    Only RateLimitedError triggers a retry. Results and every other
    exception are returned or raised as soon as they happen.

    Args:
        action: Zero-argument callable producing the awaitable to run
        deadline: Budget for all attempts and sleeps together
        policy: Backoff between attempts (default: BackoffPolicy())

    Returns:
        Whatever ``action`` eventually returns

    Raises:
        DeadlineExceededError: If the deadline expires or is cancelled
            before a non-rate-limited outcome; chained from the last
            RateLimitedError when there was one
    """
    policy = policy or BackoffPolicy()
    log = logger.bind(component="retry")
    last_error: RateLimitedError | None = None
    attempt = 0

    while True:
        if deadline.expired:
            break

        try:
            result = await action()
        except RateLimitedError as exc:
            last_error = exc
        else:
            if attempt:
                log.info("retry.succeeded", attempts=attempt + 1)
            return result

        delay = policy.delay(attempt)
        attempt += 1
        log.info(
            "retry.rate_limited",
            attempt=attempt,
            delay_s=delay,
            remaining_s=round(deadline.remaining(), 3),
        )
        if not await deadline.sleep(delay):
            break

    reason = "cancelled" if deadline.cancelled else "expired"
    log.warning("retry.deadline_exceeded", attempts=attempt, reason=reason)
    raise DeadlineExceededError(
        message=f"Deadline {reason} after {attempt} rate-limited attempt(s)",
        details={"attempts": attempt, "timeout_s": deadline.timeout, "reason": reason},
    ) from last_error
