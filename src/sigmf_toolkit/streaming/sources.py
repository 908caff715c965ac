"""Byte source adapters used for bounded-memory reads."""

from __future__ import annotations

import io
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Iterator

logger = logging.getLogger(__name__)


class ByteSource(ABC):
    """A sized byte container that can be read sequentially.

    ``open`` hands out a fresh binary reader; callers always wrap it in a
    ``with`` block so the reader is released on every exit path.
    """

    read_size: int = 65536

    @property
    @abstractmethod
    def size(self) -> int:
        ...

    @abstractmethod
    def open(self) -> BinaryIO:
        ...

    def iter_chunks(self, start: int = 0, end: int | None = None) -> Iterator[bytes]:
        """Yield consecutive byte ranges covering ``[start, end)``."""

        end = self.size if end is None else min(end, self.size)
        if start >= end:
            return
        with self.open() as handle:
            handle.seek(start)
            remaining = end - start
            while remaining > 0:
                chunk = handle.read(min(self.read_size, remaining))
                if not chunk:
                    break
                remaining -= len(chunk)
                yield chunk

    def read_range(self, start: int, end: int) -> bytes:
        end = min(end, self.size)
        if start >= end:
            return b""
        with self.open() as handle:
            handle.seek(start)
            return handle.read(end - start)

    def read_all(self) -> bytes:
        return self.read_range(0, self.size)


class BytesSource(ByteSource):
    """In-memory source over a bytes-like object."""

    def __init__(self, data: bytes | bytearray | memoryview, read_size: int = 65536) -> None:
        if read_size <= 0:
            raise ValueError("read_size must be positive")
        self._data = bytes(data)
        self.read_size = int(read_size)

    @property
    def size(self) -> int:
        return len(self._data)

    def open(self) -> BinaryIO:
        return io.BytesIO(self._data)


class FileSource(ByteSource):
    """Source backed by a file on disk."""

    def __init__(self, path: str | Path, read_size: int = 1024 * 1024) -> None:
        if read_size <= 0:
            raise ValueError("read_size must be positive")
        self.path = Path(path)
        if not self.path.exists():
            raise FileNotFoundError(self.path)
        self.read_size = int(read_size)

    @property
    def size(self) -> int:
        return self.path.stat().st_size

    def open(self) -> BinaryIO:
        logger.debug("opening %s", self.path)
        return self.path.open("rb")


def as_source(obj: ByteSource | bytes | bytearray | memoryview | str | Path) -> ByteSource:
    """Factory for byte sources based on the type of ``obj``."""

    if isinstance(obj, ByteSource):
        return obj
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return BytesSource(obj)
    if isinstance(obj, (str, Path)):
        return FileSource(obj)
    raise TypeError(f"Cannot read bytes from {type(obj).__name__}")
