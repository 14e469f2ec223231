"""Counter snapshots and the adapters that read them from agent runtimes."""

from .snapshot import COUNTER_FIELDS, CounterSnapshot
from .sources import (
    AccessorSource,
    CounterSource,
    MappingSource,
    SnapshotLike,
    StaticSource,
    read_snapshot,
)

__all__ = [
    "COUNTER_FIELDS",
    "AccessorSource",
    "CounterSnapshot",
    "CounterSource",
    "MappingSource",
    "SnapshotLike",
    "StaticSource",
    "read_snapshot",
]
