"""SHA-512 digests of datasets and metadata files."""

from __future__ import annotations

import hashlib
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict

from .config import DEFAULT_HASH_CHUNK_SIZE
from .streaming.sources import ByteSource, as_source

logger = logging.getLogger(__name__)

HashInput = bytes | bytearray | memoryview | ByteSource | str | Path


@dataclass
class HashVerificationResult:
    valid: bool
    expected: str
    actual: str
    duration_ms: float

    def as_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "expected": self.expected,
            "actual": self.actual,
            "duration_ms": self.duration_ms,
        }


def sha512(data: HashInput) -> str:
    """Lowercase hex SHA-512 of bytes, a byte source or a file path."""

    if isinstance(data, (bytes, bytearray, memoryview)):
        return hashlib.sha512(data).hexdigest()
    return sha512_streaming(as_source(data))


def sha512_streaming(
    source: HashInput,
    on_progress: Callable[[int, int], None] | None = None,
    chunk_size: int = DEFAULT_HASH_CHUNK_SIZE,
) -> str:
    """Digest ``source`` incrementally, ``chunk_size`` bytes at a time."""

    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    src = as_source(source)
    total = src.size
    digest = hashlib.sha512()
    bytes_read = 0

    with src.open() as handle:
        while True:
            chunk = handle.read(chunk_size)
            if not chunk:
                break
            digest.update(chunk)
            bytes_read += len(chunk)
            if on_progress is not None:
                on_progress(bytes_read, total)

    logger.debug("hashed %d bytes", bytes_read)
    return digest.hexdigest()


def verify_sha512(data: HashInput, expected: str) -> bool:
    return sha512(data) == expected.lower()


def verify_hash_detailed(data: HashInput, expected: str) -> HashVerificationResult:
    started = time.perf_counter()
    actual = sha512(data)
    duration_ms = (time.perf_counter() - started) * 1000.0
    expected = expected.lower()
    return HashVerificationResult(
        valid=actual == expected,
        expected=expected,
        actual=actual,
        duration_ms=duration_ms,
    )
