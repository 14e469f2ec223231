"""
Counter snapshots read from an agent runtime.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping

COUNTER_FIELDS: tuple[str, ...] = (
    "decision_cycles",
    "kernel_seconds",
    "cpu_seconds",
    "production_firings",
    "wm_count",
    "wm_additions",
    "wm_removals",
    "memory_seconds",
    "memory_retrieves",
    "memory_queries",
    "memory_stores",
)

_TRUE_FLAGS = {"1", "true", "yes", "on", "enabled"}
_FALSE_FLAGS = {"", "0", "false", "no", "off", "disabled"}


@dataclass(frozen=True)
class CounterSnapshot:
    """Absolute reading of an agent's statistics at one point in time.

    Counters in ``COUNTER_FIELDS`` never decrease while the runtime keeps
    running. ``wm_current`` and ``wm_max`` are gauges and are reported as-is.
    Times are in seconds.
    """

    agent_name: str = ""
    decision_cycles: int = 0
    kernel_seconds: float = 0.0
    cpu_seconds: float = 0.0
    production_firings: int = 0
    wm_current: int = 0
    wm_max: int = 0
    wm_count: int = 0
    wm_additions: int = 0
    wm_removals: int = 0
    memory_seconds: float = 0.0
    memory_retrieves: int = 0
    memory_queries: int = 0
    memory_stores: int = 0
    learning_enabled: bool = False
    episodic_learning_enabled: bool = False
    memory_learning_enabled: bool = False

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "CounterSnapshot":
        """Build a snapshot from a stats mapping.

        Unknown keys are ignored; missing or ``None`` values fall back to the
        field default. Numbers given as strings are parsed and learning flags
        accept the usual on/off spellings.
        """
        kwargs: Dict[str, Any] = {}
        for item in fields(cls):
            raw = values.get(item.name)
            if raw is None:
                continue
            kwargs[item.name] = _coerce(item.name, raw, item.default)
        return cls(**kwargs)

    def counters(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in COUNTER_FIELDS}


def _coerce(name: str, raw: Any, default: Any) -> Any:
    if isinstance(default, bool):
        return _coerce_flag(name, raw)
    if isinstance(default, int):
        if isinstance(raw, str):
            raw = raw.strip()
            return int(float(raw)) if raw else 0
        return int(raw)
    if isinstance(default, float):
        if isinstance(raw, str):
            raw = raw.strip()
            return float(raw) if raw else 0.0
        return float(raw)
    return str(raw)


def _coerce_flag(name: str, raw: Any) -> bool:
    if isinstance(raw, str):
        text = raw.strip().lower()
        if text in _TRUE_FLAGS:
            return True
        if text in _FALSE_FLAGS:
            return False
        raise ValueError(f"Unrecognised value for {name}: {raw!r}")
    return bool(raw)
