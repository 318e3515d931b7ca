import threading
import time
from typing import Optional

from httpcall.exceptions import CallCancelledError, DeadlineExceededError


class CallContext:
    """
    Cancellation and deadline context for a single call.

    A context may carry a deadline (an absolute time on the monotonic clock) and can be
    cancelled from another thread. The transport checks it right before sending and derives
    the request timeout from the time remaining until the deadline. A request already in flight
    is bounded by that timeout rather than interrupted.

    Attributes:
    ----------
    deadline: float, optional
        Monotonic time after which the call must not start, or None for no deadline.
    """

    def __init__(self, deadline: Optional[float] = None):
        self.deadline = deadline
        self._cancelled = threading.Event()

    @classmethod
    def background(cls) -> "CallContext":
        """Return a context that is never cancelled and has no deadline."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> "CallContext":
        """Return a context whose deadline is ``seconds`` from now."""
        if seconds <= 0:
            raise ValueError(f"Timeout must be positive, got {seconds}")
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> Optional[float]:
        """Seconds left until the deadline, None without a deadline."""
        if self.deadline is None:
            return None
        return max(self.deadline - time.monotonic(), 0.0)

    def check(self) -> None:
        """
        Raise if the context can no longer be used to start a request.

        Raises:
        -------
        CallCancelledError:
            If the context was cancelled.
        DeadlineExceededError:
            If the deadline has passed.
        """
        if self.cancelled:
            raise CallCancelledError("context cancelled")
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise DeadlineExceededError("context deadline exceeded")
