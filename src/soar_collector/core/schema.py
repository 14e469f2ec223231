"""
Column layout of the collector CSV.

The layout is built once and shared; rows are rendered by walking the
columns in order and applying each column's formatter to ``IntervalStats``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Tuple

from .accumulator import IntervalStats


def _fixed(value: float) -> str:
    return f"{value:f}"


def _integer(value: int) -> str:
    return f"{int(value):d}"


@dataclass(frozen=True)
class Column:
    name: str
    attribute: str
    formatter: Callable[..., str]

    def render(self, stats: IntervalStats) -> str:
        return self.formatter(getattr(stats, self.attribute))


SCHEMA: Tuple[Column, ...] = (
    Column("agent", "agent_name", str),
    Column("wall clock", "wall_clock", _fixed),
    Column("dc num", "decision_cycles", _integer),
    Column("kernel time", "kernel_seconds", _fixed),
    Column("avg time/dc", "kernel_seconds_per_dc", _fixed),
    Column("cpu time", "cpu_seconds", _fixed),
    Column("pf total", "production_firings", _integer),
    Column("avg time/pf", "kernel_seconds_per_pf", _fixed),
    Column("wm current", "wm_current", _integer),
    Column("wm mean", "wm_mean", _fixed),
    Column("wm max", "wm_max", _integer),
    Column("wm additions", "wm_additions", _integer),
    Column("wm removals", "wm_removals", _integer),
    Column("memory-subsystem time", "memory_seconds", _fixed),
    Column("memory-subsystem time per dc", "memory_seconds_per_dc", _fixed),
    Column("memory retrieves", "memory_retrieves", _integer),
    Column("memory queries", "memory_queries", _integer),
    Column("memory stores", "memory_stores", _integer),
)

SETTINGS_COLUMN = "settings"

HEADER: Tuple[str, ...] = tuple(column.name for column in SCHEMA) + (SETTINGS_COLUMN,)


def render_row(stats: IntervalStats) -> list[str]:
    return [column.render(stats) for column in SCHEMA]
