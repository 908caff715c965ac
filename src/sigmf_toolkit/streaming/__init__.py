"""Streaming helpers for reading samples from large byte sources."""

from .buffering import AlignedByteBuffer
from .chunked import read_samples_from_source, stream_samples
from .sources import ByteSource, BytesSource, FileSource, as_source

__all__ = [
    "AlignedByteBuffer",
    "ByteSource",
    "BytesSource",
    "FileSource",
    "as_source",
    "read_samples_from_source",
    "stream_samples",
]
