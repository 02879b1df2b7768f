"""
Token bucket rate limiter shared by all calls of one client.

Tokens accumulate at a constant rate up to the burst capacity and each
request consumes one. Acquisition is reservation based: a caller takes
its token immediately (the balance may go negative) and then sleeps for
the time the deficit takes to refill. Concurrent callers therefore queue
in arrival order without polling, and only the reservation itself runs
under the lock.

A reservation abandoned by cancellation is refunded only while it is
the newest one. Once a later caller has queued behind it, its slot is
forfeited, since the later caller's wait was computed assuming it.
"""

import threading
import time
from typing import Callable, Dict, Optional, Tuple

from ..config.logger_module import log_debug, log_info
from .transport_cancel import CancelToken
from .transport_errors import CanceledError


# (seconds, cancel token or None) -> True if canceled during the wait
Waiter = Callable[[float, Optional[CancelToken]], bool]


def _default_waiter(seconds: float, cancel: Optional[CancelToken]) -> bool:
    if cancel is None:
        time.sleep(seconds)
        return False
    return cancel.wait(seconds)


class TokenBucketRateLimiter:
    """
    Thread-safe token bucket rate limiter.

    The bucket starts full. With the default capacity of one token, N
    acquisitions at rate R take at least (N - 1) / R seconds.
    """

    def __init__(self,
                 rate_per_second: float = 10.0,
                 burst_capacity: int = 1,
                 clock: Callable[[], float] = time.monotonic,
                 waiter: Optional[Waiter] = None):
        """
        Initialize the rate limiter.

        Args:
            rate_per_second: Tokens added per second (average rate)
            burst_capacity: Maximum tokens in bucket (burst allowance)
            clock: Monotonic clock, replaceable in tests
            waiter: Sleeps for the given seconds or until the token is canceled
        """
        if rate_per_second <= 0:
            raise ValueError(f"rate_per_second must be positive, got {rate_per_second}")
        if burst_capacity < 1:
            raise ValueError(f"burst_capacity must be at least 1, got {burst_capacity}")

        self.rate_per_second = rate_per_second
        self.burst_capacity = burst_capacity
        self._clock = clock
        self._wait = waiter or _default_waiter
        self._lock = threading.Lock()

        self.tokens = float(burst_capacity)
        self.last_update = clock()
        self._issued = 0

        log_info(
            f"RateLimiter initialized: {rate_per_second}/sec, "
            f"burst capacity: {burst_capacity}"
        )

    def _refill_tokens(self) -> None:
        """Refill tokens based on elapsed time. Caller holds the lock."""
        current_time = self._clock()
        elapsed = current_time - self.last_update

        if elapsed > 0:
            self.tokens = min(self.tokens + elapsed * self.rate_per_second, self.burst_capacity)
            self.last_update = current_time

    def _reserve(self) -> Tuple[float, int]:
        """Take one token; return the wait for it and the reservation number."""
        with self._lock:
            self._refill_tokens()
            self.tokens -= 1.0
            self._issued += 1
            wait_time = 0.0 if self.tokens >= 0 else -self.tokens / self.rate_per_second
            return wait_time, self._issued

    def release(self, reservation: int) -> bool:
        """
        Give back a token that was reserved but will not be used.

        Args:
            reservation: Number returned by acquire

        Returns:
            True if the token went back to the bucket, False if a later
            reservation already depends on its slot
        """
        with self._lock:
            if reservation != self._issued:
                return False
            self._refill_tokens()
            self.tokens = min(self.tokens + 1.0, self.burst_capacity)
            return True

    def acquire(self, cancel: Optional[CancelToken] = None) -> int:
        """
        Block until a token is granted.

        Args:
            cancel: Optional token; canceling it abandons the wait

        Returns:
            The reservation number, accepted by release

        Raises:
            CanceledError: If cancel fires before the token is granted
        """
        if cancel is not None and cancel.canceled:
            raise CanceledError(cancel.reason)

        wait_time, reservation = self._reserve()
        if wait_time <= 0:
            return reservation

        log_debug(f"Rate limited, waiting {wait_time:.3f}s for a token")

        if self._wait(wait_time, cancel):
            self.release(reservation)
            raise CanceledError(cancel.reason if cancel is not None else "canceled")

        return reservation

    def try_acquire(self) -> bool:
        """
        Take a token only if one is available now.

        Returns:
            True if a token was taken, False otherwise
        """
        with self._lock:
            self._refill_tokens()
            if self.tokens >= 1.0:
                self.tokens -= 1.0
                return True
            return False

    def get_available_tokens(self) -> float:
        """Get current number of available tokens (negative while callers queue)."""
        with self._lock:
            self._refill_tokens()
            return self.tokens

    def get_wait_time(self) -> float:
        """
        Calculate how long a new caller would wait, without reserving.

        Returns:
            Estimated wait time in seconds (0 if a token is available)
        """
        with self._lock:
            self._refill_tokens()
            if self.tokens >= 1.0:
                return 0.0
            return (1.0 - self.tokens) / self.rate_per_second

    def get_status(self) -> Dict[str, float]:
        """Current bucket state for diagnostics."""
        return {
            "available_tokens": self.get_available_tokens(),
            "wait_time_seconds": self.get_wait_time(),
        }
