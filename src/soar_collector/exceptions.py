"""Custom exceptions used by the soar_collector package."""


class CollectorError(RuntimeError):
    """Base class for data collection errors."""


class SnapshotReadError(CollectorError):
    """Raised when counters cannot be read from the agent runtime."""


class SinkWriteError(CollectorError):
    """Raised when a row cannot be written to or flushed on the output sink."""
