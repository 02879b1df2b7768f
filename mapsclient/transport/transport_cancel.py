"""
Cancellation tokens for dispatched calls.

A CancelToken is shared between the caller and the dispatcher. The
caller may cancel it explicitly from any thread, or give it a deadline;
the dispatcher checks it before the call, waits on it while rate
limited, and races it against the in-flight HTTP request.
"""

import threading
import time
from typing import Callable, List, Optional


CANCELED = "canceled"
DEADLINE_EXCEEDED = "deadline exceeded"


class CancelToken:
    """Thread-safe cancellation signal with an optional deadline."""

    def __init__(self,
                 timeout: Optional[float] = None,
                 clock: Callable[[], float] = time.monotonic):
        """
        Args:
            timeout: Seconds from now after which the token counts as canceled
            clock: Monotonic clock used for the deadline
        """
        self._clock = clock
        self._deadline = clock() + timeout if timeout is not None else None
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[], None]] = []
        self._reason: Optional[str] = None

    def cancel(self, reason: str = CANCELED) -> None:
        """Cancel the token and wake every waiter. Later calls are no-ops."""
        with self._lock:
            if self._event.is_set():
                return
            self._reason = reason
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []

        for callback in callbacks:
            callback()

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    def remaining(self) -> Optional[float]:
        """Seconds until the deadline (never negative), or None without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._clock())

    @property
    def canceled(self) -> bool:
        if self._event.is_set():
            return True
        return self._deadline is not None and self._clock() >= self._deadline

    @property
    def reason(self) -> Optional[str]:
        if self._event.is_set():
            return self._reason
        if self.canceled:
            return DEADLINE_EXCEEDED
        return None

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until canceled, the deadline passes, or timeout elapses.

        Returns:
            True if the token is canceled when the wait ends
        """
        remaining = self.remaining()
        if remaining is not None and (timeout is None or remaining <= timeout):
            # Either the event fired or the deadline was reached
            self._event.wait(remaining)
            return True
        return self._event.wait(timeout)

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """
        Register a callback run when cancel() is called.

        Runs immediately if the token is already explicitly canceled.
        Deadlines do not trigger callbacks; waiters use remaining() for them.

        Returns:
            A function that unregisters the callback
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)

                def remove():
                    with self._lock:
                        if callback in self._callbacks:
                            self._callbacks.remove(callback)

                return remove

        callback()
        return lambda: None
