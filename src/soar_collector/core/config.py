from dataclasses import dataclass
from typing import Optional

from .scheduler import CyclePeriod, ElapsedPeriod, Period


@dataclass
class CollectorConfig:
    """Configuration for the agent data collector.

    ``period_millis`` takes precedence over ``period_cycles`` when set.
    Non-positive periods are accepted and leave the collector inert.
    """

    period_cycles: int = 5000
    period_millis: Optional[int] = None
    additional_settings: Optional[str] = None
    compression_algorithm: str = "none"

    def __post_init__(self):
        if self.compression_algorithm not in ["lz4", "zstd", "none"]:
            raise ValueError("Compression algorithm must be 'lz4', 'zstd', or 'none'")

    @classmethod
    def by_cycles(cls, cycles: int) -> "CollectorConfig":
        """Sample every ``cycles`` decision cycles."""
        return cls(period_cycles=cycles)

    @classmethod
    def by_millis(cls, millis: int) -> "CollectorConfig":
        """Sample every ``millis`` milliseconds of run time."""
        return cls(period_millis=millis)

    def schedule(self) -> Period:
        if self.period_millis is not None:
            return ElapsedPeriod(self.period_millis)
        return CyclePeriod(self.period_cycles)

    def with_period_cycles(self, cycles: int) -> "CollectorConfig":
        """Switch to decision cycle sampling.

        Args:
            cycles: Sample every this many decision cycles

        Returns:
            Self for method chaining
        """
        self.period_cycles = cycles
        self.period_millis = None
        return self

    def with_period_millis(self, millis: int) -> "CollectorConfig":
        """Switch to elapsed time sampling.

        Args:
            millis: Sample every this many milliseconds

        Returns:
            Self for method chaining
        """
        self.period_millis = millis
        return self

    def with_additional_settings(self, settings: Optional[str]) -> "CollectorConfig":
        """Override the free text appended to the settings field.

        Args:
            settings: Text without double quotes, or None to clear

        Returns:
            Self for method chaining
        """
        self.additional_settings = settings
        return self

    def with_compression(self, algo: str) -> "CollectorConfig":
        """Override compression algorithm used by ``DataCollector.open``.

        Args:
            algo: Compression algorithm ('none', 'lz4', 'zstd')

        Returns:
            Self for method chaining
        """
        if algo not in ["lz4", "zstd", "none"]:
            raise ValueError("Compression algorithm must be 'lz4', 'zstd', or 'none'")
        self.compression_algorithm = algo
        return self
