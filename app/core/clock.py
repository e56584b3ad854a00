import threading
import time
from collections.abc import Callable


class MonotonicClock:
    """Whole-second timestamps that never go backwards.

    The ledger never reads a clock; the HTTP host reads this once per request
    and passes the value in as ``now``.
    """

    def __init__(self, source: Callable[[], float] = time.time):
        self._source = source
        self._last = 0
        self._lock = threading.Lock()

    def now(self) -> int:
        with self._lock:
            current = max(int(self._source()), self._last)
            self._last = current
            return current


clock = MonotonicClock()
