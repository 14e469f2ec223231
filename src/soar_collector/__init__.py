"""
soar-data-collector: periodic performance statistics for agent runtimes.

Samples counters from a running cognitive-agent runtime every n decision
cycles or every n milliseconds and writes per-interval deltas and rates as
CSV rows.
"""

from soar_collector.core import collecting
from soar_collector.core.collector import CollectResult, DataCollector
from soar_collector.core.config import CollectorConfig
from soar_collector.core.scheduler import CyclePeriod, ElapsedPeriod
from soar_collector.exceptions import CollectorError, SinkWriteError, SnapshotReadError
from soar_collector.runtime import (
    AccessorSource,
    CounterSnapshot,
    CounterSource,
    MappingSource,
    StaticSource,
)

__version__ = "0.1.0"

__all__ = [
    "AccessorSource",
    "CollectResult",
    "CollectorConfig",
    "CollectorError",
    "CounterSnapshot",
    "CounterSource",
    "CyclePeriod",
    "DataCollector",
    "ElapsedPeriod",
    "MappingSource",
    "SinkWriteError",
    "SnapshotReadError",
    "StaticSource",
    "collecting",
    "__version__",
]
