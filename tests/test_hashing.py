from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from sigmf_toolkit import BytesSource, sha512, sha512_streaming, verify_hash_detailed, verify_sha512

ABC_DIGEST = hashlib.sha512(b"abc").hexdigest()


def test_sha512_of_bytes_is_lowercase_hex() -> None:
    digest = sha512(b"abc")

    assert digest == ABC_DIGEST
    assert len(digest) == 128
    assert digest == digest.lower()


def test_sha512_accepts_sources_and_paths(tmp_path: Path) -> None:
    path = tmp_path / "data.bin"
    path.write_bytes(b"abc")

    assert sha512(path) == ABC_DIGEST
    assert sha512(str(path)) == ABC_DIGEST
    assert sha512(BytesSource(b"abc")) == ABC_DIGEST
    assert sha512(bytearray(b"abc")) == ABC_DIGEST


def test_streaming_digest_matches_and_reports_progress() -> None:
    payload = bytes(range(256)) * 40
    progress: list[tuple[int, int]] = []

    digest = sha512_streaming(payload, on_progress=lambda done, total: progress.append((done, total)), chunk_size=1000)

    assert digest == hashlib.sha512(payload).hexdigest()
    assert len(progress) == 11
    assert progress[-1] == (len(payload), len(payload))


def test_streaming_rejects_bad_chunk_size() -> None:
    with pytest.raises(ValueError):
        sha512_streaming(b"abc", chunk_size=0)


def test_verify_is_case_insensitive() -> None:
    assert verify_sha512(b"abc", ABC_DIGEST.upper())
    assert not verify_sha512(b"abd", ABC_DIGEST)


def test_verify_hash_detailed() -> None:
    result = verify_hash_detailed(b"abc", ABC_DIGEST.upper())

    assert result.valid is True
    assert result.expected == ABC_DIGEST
    assert result.actual == ABC_DIGEST
    assert result.duration_ms >= 0.0
    assert result.as_dict()["valid"] is True
