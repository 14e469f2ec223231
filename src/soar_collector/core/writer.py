"""
CSV serialization of interval statistics to a caller-owned sink.
"""

from __future__ import annotations

import csv
import io
import logging
from datetime import datetime
from typing import Any, Callable, Optional

from ..exceptions import SinkWriteError
from ..runtime.snapshot import CounterSnapshot
from .accumulator import IntervalStats
from .schema import HEADER, render_row

LOG = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def build_settings(
    snapshot: CounterSnapshot,
    additional: Optional[str] = None,
    now: Optional[datetime] = None,
) -> str:
    """Describe the agent configuration the numbers were collected under."""
    stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    parts = [
        stamp,
        f"Learning is {'enabled' if snapshot.learning_enabled else 'disabled'}",
        f"epmem learning {'on' if snapshot.episodic_learning_enabled else 'off'}",
        f"smem learning {'on' if snapshot.memory_learning_enabled else 'off'}",
    ]
    if additional:
        parts.append(additional)
    return ",".join(parts)


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


class CsvWriter:
    """Writes one CSV line per sample without flushing.

    The header goes out lazily with the first row written to a sink, and that
    first row alone carries the quoted settings field. Binding a different
    sink starts over with a new header and settings field. Text sinks receive
    ``str``; anything else is treated as a binary stream and gets UTF-8.
    """

    def __init__(self, sink: Any = None) -> None:
        self._sink: Any = None
        self._text = True
        self._header_written = False
        self._settings_written = False
        self.bind(sink)

    @property
    def sink(self) -> Any:
        return self._sink

    @property
    def is_enabled(self) -> bool:
        return self._sink is not None

    @property
    def header_written(self) -> bool:
        return self._header_written

    @property
    def settings_written(self) -> bool:
        return self._settings_written

    def bind(self, sink: Any) -> None:
        """Direct output to ``sink``; ``None`` disables writing."""
        if sink is self._sink:
            return
        previous = self._sink
        if previous is not None:
            try:
                previous.flush()
            except Exception as exc:
                LOG.warning("Failed to flush previous sink on rebind: %s", exc)
        self._sink = sink
        self._text = isinstance(sink, io.TextIOBase)
        self._header_written = False
        self._settings_written = False

    def write(
        self,
        stats: IntervalStats,
        settings: Optional[Callable[[], str]] = None,
    ) -> bool:
        """Serialize ``stats`` as one row. Returns False when disabled.

        Raises:
            SinkWriteError: if the sink rejects the data.
        """
        if self._sink is None:
            return False

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        if not self._header_written:
            writer.writerow(HEADER)
        writer.writerow(render_row(stats))

        with_settings = not self._settings_written
        text = buffer.getvalue()
        if with_settings:
            field = settings() if settings is not None else ""
            text = text[:-1] + "," + _quote(field) + "\n"

        try:
            self._sink.write(text if self._text else text.encode("utf-8"))
        except Exception as exc:
            raise SinkWriteError(f"Failed to write sample for {stats.agent_name!r}: {exc}") from exc

        self._header_written = True
        if with_settings:
            self._settings_written = True
        return True

    def flush(self) -> None:
        if self._sink is None:
            return
        try:
            self._sink.flush()
        except Exception as exc:
            raise SinkWriteError(f"Failed to flush sink: {exc}") from exc
