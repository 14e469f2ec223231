"""
Per-interval accounting over monotonically increasing agent counters.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict

from ..runtime.snapshot import COUNTER_FIELDS, CounterSnapshot

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntervalStats:
    """Activity of one agent between two consecutive samples."""

    agent_name: str
    wall_clock: float
    decision_cycles: int
    delta_cycles: int
    kernel_seconds: float
    kernel_seconds_per_dc: float
    cpu_seconds: float
    production_firings: int
    kernel_seconds_per_pf: float
    wm_current: int
    wm_mean: float
    wm_max: int
    wm_additions: int
    wm_removals: int
    memory_seconds: float
    memory_seconds_per_dc: float
    memory_retrieves: int
    memory_queries: int
    memory_stores: int


def _per(value: float, divisor: float) -> float:
    return value / divisor if divisor > 0 else 0.0


class DeltaAccumulator:
    """Turns absolute counter snapshots into per-interval deltas and rates.

    ``compute`` is side-effect free; the retained previous values only move
    forward on ``commit``, so a sample that fails half way leaves the next
    delta consistent.
    """

    def __init__(self) -> None:
        self._previous: Dict[str, float] = {}
        self.reset()

    @property
    def previous(self) -> Dict[str, float]:
        return dict(self._previous)

    def reset(self) -> None:
        """Forget previous values.

        The next sample reports the full absolute counters as its deltas. If
        the runtime did not reset its own counters at the same time this shows
        up as a one-off jump in the data.
        """
        self._previous = {name: 0 for name in COUNTER_FIELDS}

    def compute(self, snapshot: CounterSnapshot, wall_clock: float = 0.0) -> IntervalStats:
        current = snapshot.counters()
        deltas = {name: current[name] - self._previous[name] for name in COUNTER_FIELDS}

        regressed = [name for name, delta in deltas.items() if delta < 0]
        if regressed:
            LOG.warning(
                "Counters went backwards for agent %r (%s); was the runtime reinitialized without a reset?",
                snapshot.agent_name,
                ", ".join(regressed),
            )

        delta_dc = deltas["decision_cycles"]
        delta_pf = deltas["production_firings"]
        delta_kernel = deltas["kernel_seconds"]

        return IntervalStats(
            agent_name=snapshot.agent_name,
            wall_clock=wall_clock,
            decision_cycles=snapshot.decision_cycles,
            delta_cycles=delta_dc,
            kernel_seconds=delta_kernel,
            kernel_seconds_per_dc=_per(delta_kernel, delta_dc),
            cpu_seconds=deltas["cpu_seconds"],
            production_firings=delta_pf,
            kernel_seconds_per_pf=_per(delta_kernel, delta_pf),
            wm_current=snapshot.wm_current,
            wm_mean=_per(deltas["wm_count"], delta_dc),
            wm_max=snapshot.wm_max,
            wm_additions=deltas["wm_additions"],
            wm_removals=deltas["wm_removals"],
            memory_seconds=deltas["memory_seconds"],
            memory_seconds_per_dc=_per(deltas["memory_seconds"], delta_dc),
            memory_retrieves=deltas["memory_retrieves"],
            memory_queries=deltas["memory_queries"],
            memory_stores=deltas["memory_stores"],
        )

    def commit(self, snapshot: CounterSnapshot) -> None:
        self._previous = snapshot.counters()

    def update(self, snapshot: CounterSnapshot, wall_clock: float = 0.0) -> IntervalStats:
        """Compute the interval ending at ``snapshot`` and commit it."""
        stats = self.compute(snapshot, wall_clock)
        self.commit(snapshot)
        return stats
