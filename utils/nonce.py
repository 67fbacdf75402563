#Description: Monotonic nonce source shared by every request signed with one credential set.

import time
from threading import Lock


class NonceSource:
    """Thread-safe, strictly increasing nonce generator.

    Values follow the wall clock in nanoseconds, but never repeat or go
    backwards: when two calls land on the same tick (or the clock steps back)
    the previous value plus one is returned instead.
    """

    def __init__(self, clock=time.time_ns):
        self._clock = clock
        self._last = 0
        self._lock = Lock()

    def __call__(self) -> int:
        with self._lock:
            now = self._clock()
            self._last = max(now, self._last + 1)
            return self._last
