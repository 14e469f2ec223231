"""
Adapters that turn a concrete agent runtime into counter snapshots.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, Sequence, Union, runtime_checkable

from ..exceptions import SnapshotReadError
from .snapshot import CounterSnapshot

_MISSING = object()

DEFAULT_ALIASES: Dict[str, tuple[str, ...]] = {
    "agent_name": ("agent_name", "name", "get_name", "GetAgentName"),
    "decision_cycles": ("decision_cycles", "GetDecisionCycleCounter"),
}


@runtime_checkable
class CounterSource(Protocol):
    """Anything that can produce a snapshot of an agent's counters on demand."""

    def snapshot(self) -> CounterSnapshot: ...


SnapshotLike = Union[CounterSnapshot, CounterSource, Mapping[str, Any]]


class StaticSource:
    """Always returns the same snapshot. Handy for tests and replays."""

    def __init__(self, snapshot: CounterSnapshot) -> None:
        self._snapshot = snapshot

    def snapshot(self) -> CounterSnapshot:
        return self._snapshot


class MappingSource:
    """Wrap a callable returning a stats mapping, e.g. a runtime's stats dict."""

    def __init__(self, fetch: Callable[[], Mapping[str, Any]], agent_name: Optional[str] = None) -> None:
        self._fetch = fetch
        self._agent_name = agent_name

    def snapshot(self) -> CounterSnapshot:
        values = dict(self._fetch())
        if self._agent_name is not None:
            values.setdefault("agent_name", self._agent_name)
        return CounterSnapshot.from_mapping(values)


class AccessorSource:
    """Read counters from named accessors on an agent object.

    Each snapshot field is looked up through its aliases in order; the first
    attribute found wins and is called when it is callable. Fields the agent
    does not expose are reported with their default value. An accessor that
    exists but raises is a read failure.
    """

    def __init__(self, agent: Any, aliases: Optional[Mapping[str, Sequence[str]]] = None) -> None:
        self.agent = agent
        self.aliases: Dict[str, tuple[str, ...]] = dict(DEFAULT_ALIASES)
        for name, names in (aliases or {}).items():
            self.aliases[name] = tuple(names)

    def snapshot(self) -> CounterSnapshot:
        values: Dict[str, Any] = {}
        for item in fields(CounterSnapshot):
            value = self._read(item.name)
            if value is not _MISSING:
                values[item.name] = value
        return CounterSnapshot.from_mapping(values)

    def _read(self, name: str) -> Any:
        for attr in self.aliases.get(name, (name,)):
            accessor = getattr(self.agent, attr, _MISSING)
            if accessor is _MISSING:
                continue
            return accessor() if callable(accessor) else accessor
        return _MISSING


def read_snapshot(source: SnapshotLike) -> CounterSnapshot:
    """Resolve anything accepted by ``collect`` into a snapshot.

    Raises:
        SnapshotReadError: if the runtime could not be read.
    """
    try:
        if isinstance(source, CounterSnapshot):
            return source
        if isinstance(source, Mapping):
            return CounterSnapshot.from_mapping(source)
        if isinstance(source, CounterSource):
            snapshot = source.snapshot()
        else:
            snapshot = AccessorSource(source).snapshot()
    except SnapshotReadError:
        raise
    except Exception as exc:
        raise SnapshotReadError(f"Failed to read counters: {exc}") from exc
    if not isinstance(snapshot, CounterSnapshot):
        raise SnapshotReadError(
            f"Counter source returned {type(snapshot).__name__}, expected CounterSnapshot"
        )
    return snapshot
