from collections.abc import Callable
from threading import Lock
from typing import TypeVar

from storyblok.adapters.clock import SystemClock
from storyblok.core.ports.time import TimePort

T = TypeVar("T")

WINDOW_SECONDS = 1.0


class Throttle:
    def __init__(
        self,
        requests_per_second: int = 5,
        time_port: TimePort | None = None,
    ):
        if requests_per_second <= 0:
            raise ValueError("requests_per_second must be greater than zero")
        self.requests_per_second = requests_per_second
        self._time = time_port if time_port is not None else SystemClock()
        self._history: list[float] = []
        self._lock = Lock()

    def _cleanup(self, now: float) -> None:
        cutoff = now - WINDOW_SECONDS
        self._history = [t for t in self._history if t > cutoff]

    def try_acquire(self) -> bool:
        """
        Check if a request may start now.
        If allowed, records the request and returns True.
        If denied, returns False.
        """
        with self._lock:
            now = self._time.monotonic()
            self._cleanup(now)
            if len(self._history) >= self.requests_per_second:
                return False
            self._history.append(now)
            return True

    def wait_time(self) -> float:
        """Seconds until the oldest request leaves the window."""
        with self._lock:
            now = self._time.monotonic()
            self._cleanup(now)
            if len(self._history) < self.requests_per_second:
                return 0.0
            return max(0.0, self._history[0] + WINDOW_SECONDS - now)

    def acquire(self) -> None:
        """Block until a request slot is free, then take it."""
        while not self.try_acquire():
            self._time.sleep(self.wait_time())

    def execute(self, fn: Callable[[], T]) -> T:
        self.acquire()
        return fn()
