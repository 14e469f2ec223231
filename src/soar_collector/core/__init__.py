from contextlib import contextmanager
from os import PathLike
from typing import Optional, Union

from .collector import CollectResult, DataCollector
from .config import CollectorConfig


@contextmanager
def collecting(
    output_path: Optional[Union[str, PathLike[str]]] = None,
    output_dir: str = "./stats",
    config: Optional[CollectorConfig] = None,
    prefix: str = "",
    auto_timestamp: bool = True,
    append: bool = False,
):
    """Context manager that writes a collector CSV to a file.

    Args:
        output_path: Full output file path (auto-generated when None).
        output_dir: Directory for auto-generated paths (when output_path is None).
        config: Collector configuration (defaults to every 5000 cycles, no compression).
        prefix: Prefix for auto-generated filenames (default: "").
        auto_timestamp: Append timestamp to the filename when True.
        append: Append to an existing file instead of truncating it.

    Yields:
        DataCollector: Collector bound to the opened file.

    Example:
        >>> with collecting(config=CollectorConfig.by_millis(500)) as collector:
        ...     kernel.register_handlers(collector)
        ...     kernel.run_forever()
    """
    import os
    from datetime import datetime

    if config is None:
        config = CollectorConfig()

    if output_path is None:
        os.makedirs(output_dir, exist_ok=True)

        parts = []
        if prefix:
            parts.append(prefix)
        if auto_timestamp:
            parts.append(datetime.now().strftime("%Y%m%d_%H%M%S"))
        if not parts:
            parts.append("stats")

        suffix = {"lz4": ".csv.lz4", "zstd": ".csv.zst"}.get(config.compression_algorithm, ".csv")
        output_path = os.path.join(output_dir, "_".join(parts) + suffix)

    collector = DataCollector(config)
    collector.open_output(output_path, append=append)
    try:
        yield collector
    finally:
        collector.close()


__all__ = ["CollectResult", "CollectorConfig", "DataCollector", "collecting"]
