import os
from abc import ABC, abstractmethod
from os import PathLike
from typing import BinaryIO, Union

import lz4.frame
import zstandard as zstd

PathType = Union[str, "PathLike[str]"]


class CompressionStrategy(ABC):
    @abstractmethod
    def open_writer(self, path: PathType, append: bool = False) -> BinaryIO: ...

    @abstractmethod
    def open_reader(self, path: PathType) -> BinaryIO: ...


class LZ4Strategy(CompressionStrategy):
    def __init__(self, compression_level: int = 1):
        self.compression_level = compression_level

    def open_writer(self, path: PathType, append: bool = False) -> BinaryIO:
        # appending starts a new frame; lz4 readers handle concatenated frames
        return lz4.frame.open(
            path, "ab" if append else "wb", compression_level=self.compression_level
        )

    def open_reader(self, path: PathType) -> BinaryIO:
        return lz4.frame.open(path, "rb")


class ZstdStrategy(CompressionStrategy):
    def __init__(self, compression_level: int = 3):
        self.compression_level = compression_level

    def open_writer(self, path: PathType, append: bool = False) -> BinaryIO:
        return zstd.open(path, "ab" if append else "wb", cctx=zstd.ZstdCompressor(level=self.compression_level))

    def open_reader(self, path: PathType) -> BinaryIO:
        return zstd.ZstdDecompressor().stream_reader(
            open(path, "rb"), read_across_frames=True, closefd=True
        )


class NoneStrategy(CompressionStrategy):
    """Plain uncompressed file."""

    def open_writer(self, path: PathType, append: bool = False) -> BinaryIO:
        return open(path, "ab" if append else "wb")

    def open_reader(self, path: PathType) -> BinaryIO:
        return open(path, "rb")


STRATEGIES = {
    "lz4": LZ4Strategy(),
    "zstd": ZstdStrategy(),
    "none": NoneStrategy(),
}


def _strategy(algo: str) -> CompressionStrategy:
    if algo not in STRATEGIES:
        raise ValueError(f"Unsupported compression algorithm: {algo}. Options: {list(STRATEGIES)}")
    return STRATEGIES[algo]


def open_sink(path: PathType, compression: str = "none", append: bool = False) -> BinaryIO:
    """Open a binary sink suitable for ``DataCollector.set_output_stream``.

    The caller owns the returned file and must close it; with lz4 and zstd
    the compressed frame is only complete after ``close()``.
    """
    return _strategy(compression).open_writer(os.fspath(path), append=append)


def open_source(path: PathType, compression: str = "none") -> BinaryIO:
    """Open a collector output file for reading, decompressing as needed."""
    return _strategy(compression).open_reader(os.fspath(path))
