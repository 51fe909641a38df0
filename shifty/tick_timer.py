"""
Fixed-cadence tick timer for the runner loop.

Holds exactly one pending deadline. The callback runs on the caller's
thread, and the next deadline is only armed after it returns, so a slow
tick can never overlap the next one.
"""

import time
from typing import Callable, Optional


class TickTimer:
    """
    Repeating timer driven from a single-threaded loop.

    Usage:
        timer = TickTimer(30.0, service.on_tick)
        timer.start()
        timer.run_forever()   # until cancel() or Ctrl+C
    """

    def __init__(
        self,
        interval_sec: float,
        callback: Callable[[], object],
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize tick timer.

        Args:
            interval_sec: Seconds between ticks
            callback: Called once per tick (no arguments)
            clock: Monotonic clock
            sleep: Sleep function (injectable for tests)
        """
        if interval_sec <= 0:
            raise ValueError("interval_sec must be positive")

        self.interval_sec = interval_sec
        self.callback = callback
        self.clock = clock
        self.sleep = sleep

        self._next_fire: Optional[float] = None
        self._in_callback = False
        self.tick_count = 0

    @property
    def pending(self) -> bool:
        return self._next_fire is not None

    def start(self):
        """Arm the first tick one interval from now."""
        self._next_fire = self.clock() + self.interval_sec

    def cancel(self):
        """Drop the pending tick; run_forever() returns after the current one."""
        self._next_fire = None

    def seconds_until_next(self) -> Optional[float]:
        if self._next_fire is None:
            return None
        return max(0.0, self._next_fire - self.clock())

    def run_pending(self) -> bool:
        """
        Fire the callback if the deadline passed.

        Returns:
            True if the callback ran
        """
        if self._next_fire is None or self._in_callback:
            return False
        if self.clock() < self._next_fire:
            return False

        self._in_callback = True
        try:
            self.callback()
        finally:
            self._in_callback = False
            self.tick_count += 1
            if self._next_fire is not None:
                self._next_fire = self.clock() + self.interval_sec

        return True

    def run_forever(self):
        """Sleep/fire loop until cancel() is called."""
        while self._next_fire is not None:
            self.sleep(self.seconds_until_next() or 0.0)
            self.run_pending()
