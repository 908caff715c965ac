"""Byte accumulation that only ever releases whole samples."""

from __future__ import annotations


class AlignedByteBuffer:
    """Growing byte buffer that hands out data in whole-sample multiples.

    Bytes of a sample split across two source reads stay buffered until the
    rest of the sample arrives.
    """

    def __init__(self, bytes_per_sample: int) -> None:
        if bytes_per_sample <= 0:
            raise ValueError("bytes_per_sample must be positive")
        self.bytes_per_sample = int(bytes_per_sample)
        self._buffer = bytearray()

    def extend(self, data: bytes | bytearray | memoryview) -> None:
        self._buffer.extend(data)

    @property
    def whole_samples(self) -> int:
        return len(self._buffer) // self.bytes_per_sample

    def take(self, max_samples: int | None = None) -> bytes:
        """Remove and return the longest whole-sample prefix.

        ``max_samples`` caps the number of samples released.
        """

        samples = self.whole_samples
        if max_samples is not None:
            samples = min(samples, max(0, int(max_samples)))
        size = samples * self.bytes_per_sample
        prefix = bytes(self._buffer[:size])
        del self._buffer[:size]
        return prefix

    def reset(self) -> None:
        self._buffer.clear()

    def __len__(self) -> int:
        return len(self._buffer)
