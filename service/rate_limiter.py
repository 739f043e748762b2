import threading
import time
from typing import Any, Callable, Optional, TypeVar

T = TypeVar("T")


class RateLimiter:
    """Admits scheduled calls in submission order, spacing their start times.

    At least `min_time` seconds separate the start of one admitted call from
    the start of the next, however many threads submit at once.
    """

    def __init__(
        self,
        min_time: float = 0.8,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if min_time < 0:
            raise ValueError("min_time must be >= 0")
        self.min_time = min_time
        self._clock = clock
        self._sleep = sleep
        self._cond = threading.Condition()
        self._next_ticket = 0
        self._now_serving = 0
        self._last_start: Optional[float] = None

    @property
    def pending(self) -> int:
        """Number of submitted calls not yet admitted, including one waiting out its slot."""
        with self._cond:
            return self._next_ticket - self._now_serving

    def schedule(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        with self._cond:
            ticket = self._next_ticket
            self._next_ticket += 1
            while ticket != self._now_serving:
                self._cond.wait()
        try:
            self._wait_for_slot()
        finally:
            with self._cond:
                self._now_serving += 1
                self._cond.notify_all()
        return fn(*args, **kwargs)

    def _wait_for_slot(self) -> None:
        # Only the ticket holder gets here, so _last_start needs no lock.
        if self._last_start is not None:
            remaining = self.min_time - (self._clock() - self._last_start)
            if remaining > 0:
                self._sleep(remaining)
        self._last_start = self._clock()
