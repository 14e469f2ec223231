"""
Decides on each runtime update whether a sample should be collected.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Union

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class CyclePeriod:
    """Sample on every ``cycles``-th update."""

    cycles: int


@dataclass(frozen=True)
class ElapsedPeriod:
    """Sample every ``millis`` milliseconds of elapsed time."""

    millis: int


Period = Union[CyclePeriod, ElapsedPeriod]

DEFAULT_PERIOD = CyclePeriod(5000)


class SampleScheduler:
    """Counts runtime updates and signals when it is time to sample.

    ``on_update`` must be called exactly once per decision cycle even when
    the result is ignored, so the cycle cadence stays aligned with the
    runtime. The counter also advances while sampling is disabled.
    """

    def __init__(
        self,
        period: Period = DEFAULT_PERIOD,
        time_source: Callable[[], float] = time.monotonic,
    ) -> None:
        self._now = time_source
        self._period: Period = DEFAULT_PERIOD
        self._count = 0
        self._last_trigger_ms: Optional[float] = None
        self.set_period(period)

    @property
    def period(self) -> Period:
        return self._period

    @property
    def invocation_count(self) -> int:
        return self._count

    def set_period(self, period: Period) -> None:
        """Switch sampling policy. Re-arms the timer, keeps the counter."""
        if isinstance(period, CyclePeriod):
            value = period.cycles
        elif isinstance(period, ElapsedPeriod):
            value = period.millis
        else:
            raise TypeError(f"Unsupported sampling period: {period!r}")
        if value <= 0:
            LOG.warning("Sampling period %r is not positive; sampling is inert", period)
        self._period = period
        self._last_trigger_ms = None

    def on_update(self, enabled: bool = True) -> bool:
        """Advance the counter and report whether a sample is due."""
        self._count += 1
        if not enabled:
            return False

        period = self._period
        if isinstance(period, CyclePeriod):
            if period.cycles < 1:
                return False
            return self._count % period.cycles == 0

        now_ms = self._now() * 1000.0
        if self._last_trigger_ms is None:
            self._last_trigger_ms = now_ms
            return False
        if period.millis <= 0:
            return False
        delta_ms = now_ms - self._last_trigger_ms
        LOG.debug("Delta millis: %.3f", delta_ms)
        if delta_ms >= period.millis:
            # fixed cadence measured from the arm time
            self._last_trigger_ms += period.millis
            return True
        return False

    def resume(self, paused_seconds: float) -> None:
        """Move the elapsed timer past a pause of ``paused_seconds``."""
        if self._last_trigger_ms is not None and paused_seconds > 0:
            self._last_trigger_ms += paused_seconds * 1000.0

    def reset(self) -> None:
        self._count = 0
        self._last_trigger_ms = None
