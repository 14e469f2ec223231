import time
from typing import Callable, Optional


class WallClock:
    """Run-time clock that excludes the intervals the agent spent stopped.

    The clock reads 0 until the first ``start()``. While stopped the reading
    is frozen; the next ``start()`` shifts the origin by the length of the
    pause so the reported figure only grows while the agent runs.
    """

    def __init__(self, time_source: Callable[[], float] = time.monotonic):
        self._now = time_source
        self._offset: Optional[float] = None
        self._paused_at: Optional[float] = None

    @property
    def is_paused(self) -> bool:
        return self._paused_at is not None

    def start(self) -> float:
        """Resume the clock. Returns how many seconds it had been stopped."""
        now = self._now()
        paused = 0.0
        if self._offset is None:
            self._offset = now
        elif self._paused_at is not None:
            paused = now - self._paused_at
            self._offset += paused
        self._paused_at = None
        return paused

    def stop(self) -> None:
        if self._paused_at is not None:
            return
        now = self._now()
        if self._offset is None:
            self._offset = now
        self._paused_at = now

    def wall_clock(self) -> float:
        """Seconds of run time since the first start."""
        if self._offset is None:
            return 0.0
        reference = self._paused_at if self._paused_at is not None else self._now()
        return reference - self._offset

    def reset(self) -> None:
        """Read 0 again. A running clock keeps running from the new origin."""
        if self._offset is not None and self._paused_at is None:
            self._offset = self._now()
        else:
            self._offset = None
        self._paused_at = None
