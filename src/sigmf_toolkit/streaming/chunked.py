"""Chunked sample decoding for sources larger than memory."""

from __future__ import annotations

import logging
from contextlib import closing
from typing import Callable, Iterator

import numpy as np

from ..config import DEFAULT_CHUNK_SAMPLES, DEFAULT_DIRECT_READ_THRESHOLD
from ..datatypes import DatatypeInfo, parse_datatype
from ..samples import SampleData, read_samples
from .buffering import AlignedByteBuffer
from .sources import ByteSource, as_source

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def stream_samples(
    source: ByteSource | bytes | bytearray | memoryview | str,
    datatype: str,
    chunk_samples: int = DEFAULT_CHUNK_SAMPLES,
) -> Iterator[SampleData]:
    """Lazily decode ``source`` into chunks of whole samples.

    Bytes are accumulated until at least ``chunk_samples`` samples are
    available (or the source runs dry), then every whole sample held is
    decoded and yielded. A trailing fragment shorter than one sample is
    dropped. An empty source yields nothing.

    The datatype is validated before the first chunk is requested.
    """

    info = parse_datatype(datatype)
    if chunk_samples <= 0:
        raise ValueError("chunk_samples must be positive")
    return _iter_chunks(as_source(source), info, int(chunk_samples))


def _iter_chunks(source: ByteSource, info: DatatypeInfo, chunk_samples: int) -> Iterator[SampleData]:
    chunk_bytes = chunk_samples * info.bytes_per_sample
    buffer = AlignedByteBuffer(info.bytes_per_sample)
    emitted = 0

    with closing(source.iter_chunks()) as pieces:
        exhausted = False
        while not exhausted:
            while len(buffer) < chunk_bytes:
                piece = next(pieces, None)
                if piece is None:
                    exhausted = True
                    break
                buffer.extend(piece)

            if buffer.whole_samples:
                chunk = read_samples(buffer.take(), info.datatype)
                emitted += chunk.sample_count
                yield chunk

    if len(buffer):
        logger.debug("dropping %d trailing bytes shorter than one %s sample", len(buffer), info.datatype)
    logger.debug("streamed %d samples of %s", emitted, info.datatype)


def read_samples_from_source(
    source: ByteSource | bytes | bytearray | memoryview | str,
    datatype: str,
    *,
    offset: int = 0,
    count: int | None = None,
    on_progress: ProgressCallback | None = None,
    direct_read_threshold: int = DEFAULT_DIRECT_READ_THRESHOLD,
) -> SampleData:
    """Decode a window of samples from a byte source.

    Windows smaller than ``direct_read_threshold`` bytes are sliced out and
    decoded in one pass; larger windows are streamed through a whole-sample
    buffer into a preallocated array. Both paths return the same result and
    report ``on_progress(bytes_read, total_bytes)``.
    """

    info = parse_datatype(datatype)
    src = as_source(source)

    byte_offset = max(0, int(offset)) * info.bytes_per_sample
    available = max(0, src.size - byte_offset) // info.bytes_per_sample
    sample_count = available if count is None else max(0, min(int(count), available))
    bytes_to_read = sample_count * info.bytes_per_sample

    if bytes_to_read < direct_read_threshold:
        logger.debug("direct read of %d bytes", bytes_to_read)
        data = src.read_range(byte_offset, byte_offset + bytes_to_read)
        if on_progress is not None:
            on_progress(bytes_to_read, bytes_to_read)
        return read_samples(data, datatype, count=sample_count)

    logger.debug("chunked read of %d bytes", bytes_to_read)
    per_sample = 2 if info.is_complex else 1
    values = np.empty(sample_count * per_sample, dtype=np.float64)
    buffer = AlignedByteBuffer(info.bytes_per_sample)
    samples_read = 0
    bytes_read = 0

    with closing(src.iter_chunks(byte_offset, byte_offset + bytes_to_read)) as pieces:
        for piece in pieces:
            buffer.extend(piece)
            block = buffer.take(sample_count - samples_read)
            if block:
                decoded = read_samples(block, datatype)
                start = samples_read * per_sample
                values[start : start + decoded.values.size] = decoded.values
                samples_read += decoded.sample_count
            bytes_read += len(piece)
            if on_progress is not None:
                on_progress(bytes_read, bytes_to_read)

    return SampleData(
        values=values[: samples_read * per_sample],
        sample_count=samples_read,
        datatype_info=info,
    )
