"""
Host-facing data collector for agent runtimes.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from os import PathLike
from typing import Any, BinaryIO, Callable, Dict, Optional, Union

from ..exceptions import CollectorError
from ..runtime.sources import SnapshotLike, read_snapshot
from .accumulator import DeltaAccumulator, IntervalStats
from .clock import WallClock
from .compression import open_sink
from .config import CollectorConfig
from .scheduler import CyclePeriod, ElapsedPeriod, SampleScheduler
from .writer import CsvWriter, build_settings

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class CollectResult:
    """Outcome of one ``collect`` call."""

    written: bool
    stats: Optional[IntervalStats] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class DataCollector:
    """Collects statistics on agents as they run and writes them as CSV.

    Wire it to three runtime events: call ``on_start`` when the runtime
    starts, ``on_stop`` when it stops, and ``on_update_event`` once per
    decision cycle. Whenever ``on_update_event`` returns True call
    ``collect`` once for each agent. Nothing is written until a sink is bound
    with ``set_output_stream`` or ``open_output``.

    Rows are not flushed during a run. The sink is flushed by ``on_stop`` and
    by every ``collect`` made while stopped, so collecting once more from the
    stop handler leaves a complete file. Call ``flush`` now and then on long
    runs to bound what an abrupt exit can lose.

    None of the event methods raise; failures are logged and, for
    ``collect``, reported in the returned ``CollectResult``. All methods
    must be called from the thread that owns the runtime's event loop.

    Example:
        >>> collector = DataCollector(CollectorConfig.by_cycles(10))
        >>> collector.set_output_stream(sys.stdout)
        >>> collector.on_start()
        >>> if collector.on_update_event():
        ...     collector.collect(agent_source)
    """

    def __init__(
        self,
        config: Optional[CollectorConfig] = None,
        time_source: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = replace(config) if config is not None else CollectorConfig()
        self.clock = WallClock(time_source)
        self.scheduler = SampleScheduler(self.config.schedule(), time_source)
        self.writer = CsvWriter()
        self._accumulators: Dict[str, DeltaAccumulator] = {}
        self._owned_sink: Optional[BinaryIO] = None

    def __enter__(self) -> "DataCollector":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    @property
    def is_enabled(self) -> bool:
        return self.writer.is_enabled

    @property
    def invocation_count(self) -> int:
        return self.scheduler.invocation_count

    def wall_clock(self) -> float:
        return self.clock.wall_clock()

    def accumulator(self, agent_name: str) -> DeltaAccumulator:
        accumulator = self._accumulators.get(agent_name)
        if accumulator is None:
            accumulator = DeltaAccumulator()
            self._accumulators[agent_name] = accumulator
        return accumulator

    def set_output_stream(self, sink: Any) -> None:
        """Write to ``sink`` from now on; ``None`` disables collection.

        Binding the object already in use is a no-op. A different sink gets
        its own header line and settings field on its first row.
        """
        owned = self._owned_sink
        self.writer.bind(sink)
        if owned is not None and sink is not owned:
            self._owned_sink = None
            try:
                owned.close()
            except Exception as exc:
                LOG.warning("Failed to close output file: %s", exc)

    def open_output(self, path: Union[str, "PathLike[str]"], append: bool = False) -> BinaryIO:
        """Open ``path`` with the configured compression and write to it.

        The collector closes the file on ``close`` or when another sink is
        bound.
        """
        sink = open_sink(path, self.config.compression_algorithm, append=append)
        self.set_output_stream(sink)
        self._owned_sink = sink
        return sink

    def close(self) -> None:
        """Flush and, if the collector opened it, close the output file."""
        self.flush()
        if self._owned_sink is not None:
            self.set_output_stream(None)

    def set_period_cycles(self, cycles: int) -> None:
        """Have ``on_update_event`` return True every ``cycles`` calls."""
        self.config.with_period_cycles(cycles)
        self.scheduler.set_period(CyclePeriod(cycles))

    def set_period_millis(self, millis: int) -> None:
        """Have ``on_update_event`` return True every ``millis`` milliseconds."""
        self.config.with_period_millis(millis)
        self.scheduler.set_period(ElapsedPeriod(millis))

    def set_additional_settings(self, settings: Optional[str]) -> None:
        """Append free text to the settings field, or clear it with None."""
        self.config.with_additional_settings(settings)

    def reset(self) -> None:
        """Restart the clock, the cycle counter and all deltas.

        Good for use after the runtime was reinitialized. The current sink
        keeps its header; bind a new sink to start a new file.
        """
        self.flush()
        try:
            self.clock.reset()
        except Exception:
            LOG.exception("Failed to reset the wall clock")
        self.scheduler.reset()
        self._accumulators.clear()

    def on_start(self) -> None:
        """Start the wall clock. Call on the runtime's start event.

        Time spent stopped does not count toward the next elapsed sample.
        """
        try:
            paused = self.clock.start()
            self.scheduler.resume(paused)
        except Exception:
            LOG.exception("Failed to start the wall clock")

    def on_stop(self) -> None:
        """Stop the wall clock and flush. Call on the runtime's stop event."""
        try:
            self.clock.stop()
        except Exception:
            LOG.exception("Failed to stop the wall clock")
        self.flush()

    def on_update_event(self) -> bool:
        """Call every decision cycle; True means ``collect`` is due."""
        try:
            return self.scheduler.on_update(self.is_enabled)
        except Exception:
            LOG.exception("Failed to evaluate the sampling schedule")
            return False

    def collect(self, source: SnapshotLike) -> CollectResult:
        """Read one agent's counters and write a row without flushing.

        ``source`` is a ``CounterSnapshot``, a ``CounterSource``, a stats
        mapping or an agent object read through ``AccessorSource``. The
        agent's previous values only advance once the row was written.
        """
        if not self.is_enabled:
            return CollectResult(written=False)

        LOG.debug("Collecting data.")
        try:
            snapshot = read_snapshot(source)
            accumulator = self.accumulator(snapshot.agent_name)
            stats = accumulator.compute(snapshot, self.clock.wall_clock())
            additional = self.config.additional_settings
            self.writer.write(stats, settings=lambda: build_settings(snapshot, additional))
            accumulator.commit(snapshot)
        except CollectorError as exc:
            LOG.warning("Sample dropped: %s", exc)
            return CollectResult(written=False, error=exc)
        except Exception as exc:
            LOG.exception("Unexpected error while collecting data")
            return CollectResult(written=False, error=exc)

        # flush only if stopped
        if self.clock.is_paused:
            try:
                self.writer.flush()
            except CollectorError as exc:
                LOG.warning("Sample written but not flushed: %s", exc)
                return CollectResult(written=True, stats=stats, error=exc)
        return CollectResult(written=True, stats=stats)

    def flush(self) -> None:
        """Flush the sink."""
        try:
            self.writer.flush()
        except CollectorError as exc:
            LOG.warning("%s", exc)
