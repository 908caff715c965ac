"""Binary sample codec for every SigMF datatype."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

import numpy as np

from .datatypes import DatatypeInfo, parse_datatype
from .errors import NotComplexDatatype

BytesLike = bytes | bytearray | memoryview


@dataclass(frozen=True)
class ComplexSample:
    """One I/Q pair."""

    i: float
    q: float

    def __complex__(self) -> complex:
        return complex(self.i, self.q)


@dataclass
class SampleData:
    """Decoded samples.

    ``values`` is a float64 array holding either one value per sample or, for
    complex datatypes, interleaved ``[I0, Q0, I1, Q1, ...]`` components.
    """

    values: np.ndarray
    sample_count: int
    datatype_info: DatatypeInfo

    @property
    def real(self) -> np.ndarray | None:
        return None if self.datatype_info.is_complex else self.values

    @property
    def complex(self) -> np.ndarray | None:
        return self.values if self.datatype_info.is_complex else None

    def to_complex(self) -> np.ndarray:
        if not self.datatype_info.is_complex:
            return self.values.astype(np.complex128)
        return self.values.view(np.complex128)

    def __len__(self) -> int:
        return self.sample_count


def _decode_components(buffer: BytesLike, info: DatatypeInfo, byte_offset: int, sample_count: int) -> np.ndarray:
    if sample_count <= 0:
        return np.zeros(0, dtype=np.float64)
    components_per_sample = 2 if info.is_complex else 1
    raw = np.frombuffer(
        buffer,
        dtype=info.component_dtype,
        count=sample_count * components_per_sample,
        offset=byte_offset,
    )
    return raw.astype(np.float64)


def _encode_components(components: np.ndarray, info: DatatypeInfo) -> bytes:
    dtype = info.component_dtype
    values = np.asarray(components, dtype=np.float64)
    if info.format == "int":
        # integer stores truncate toward zero and wrap modulo 2**bits
        values = np.nan_to_num(values, nan=0.0, posinf=0.0, neginf=0.0)
        wrapped = np.fmod(np.trunc(values), 2.0 ** info.bits_per_component)
        encoded = wrapped.astype(np.int64).astype(dtype)
    else:
        encoded = values.astype(dtype)
    return encoded.tobytes()


def read_samples(
    buffer: BytesLike,
    datatype: str,
    *,
    offset: int = 0,
    count: int | None = None,
) -> SampleData:
    """Decode samples from ``buffer``.

    ``offset`` and ``count`` are expressed in samples. Windows that fall past
    the end of the buffer decode to zero samples instead of failing.
    """

    info = parse_datatype(datatype)
    byte_offset = max(0, int(offset)) * info.bytes_per_sample
    available = max(0, (memoryview(buffer).nbytes - byte_offset) // info.bytes_per_sample)
    sample_count = available if count is None else max(0, min(int(count), available))

    values = _decode_components(buffer, info, byte_offset, sample_count)
    return SampleData(values=values, sample_count=sample_count, datatype_info=info)


def write_samples(samples: Sequence[float] | np.ndarray, datatype: str) -> bytes:
    """Encode samples into the binary layout of ``datatype``.

    For complex datatypes ``samples`` is an interleaved I/Q sequence; a numpy
    complex array is interleaved automatically.
    """

    info = parse_datatype(datatype)
    arr = np.asarray(samples)
    if np.iscomplexobj(arr):
        if not info.is_complex:
            raise NotComplexDatatype(datatype)
        arr = interleave(arr.real, arr.imag)
    arr = arr.reshape(-1)
    if info.is_complex and arr.size % 2:
        raise ValueError(f"{datatype} needs an even number of interleaved components (got {arr.size})")
    return _encode_components(arr, info)


def _pair(sample: Any) -> tuple[float, float]:
    if isinstance(sample, ComplexSample):
        return sample.i, sample.q
    if isinstance(sample, Mapping):
        return float(sample["i"]), float(sample["q"])
    if isinstance(sample, (complex, np.complexfloating)):
        return float(sample.real), float(sample.imag)
    i, q = sample
    return float(i), float(q)


def write_samples_complex(samples: Iterable[Any], datatype: str) -> bytes:
    """Encode pre-paired I/Q values.

    Accepts :class:`ComplexSample` objects, ``{"i": .., "q": ..}`` mappings,
    Python complex numbers or 2-tuples.
    """

    info = parse_datatype(datatype)
    if not info.is_complex:
        raise NotComplexDatatype(datatype)
    pairs = [_pair(sample) for sample in samples]
    components = np.asarray(pairs, dtype=np.float64).reshape(-1)
    return _encode_components(components, info)


def get_complex_sample(values: Sequence[float] | np.ndarray, index: int) -> ComplexSample:
    return ComplexSample(i=float(values[index * 2]), q=float(values[index * 2 + 1]))


def magnitude(sample: ComplexSample) -> float:
    return math.hypot(sample.i, sample.q)


def phase(sample: ComplexSample) -> float:
    """Phase in radians within ``[-pi, pi]``."""
    return math.atan2(sample.q, sample.i)


def _pairs(values: Sequence[float] | np.ndarray) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float64)
    return arr[: arr.size - arr.size % 2].reshape(-1, 2)


def magnitudes(values: Sequence[float] | np.ndarray) -> np.ndarray:
    pairs = _pairs(values)
    return np.hypot(pairs[:, 0], pairs[:, 1])


def phases(values: Sequence[float] | np.ndarray) -> np.ndarray:
    pairs = _pairs(values)
    return np.arctan2(pairs[:, 1], pairs[:, 0])


def deinterleave(values: Sequence[float] | np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    pairs = _pairs(values)
    return pairs[:, 0].copy(), pairs[:, 1].copy()


def interleave(i: Sequence[float] | np.ndarray, q: Sequence[float] | np.ndarray) -> np.ndarray:
    i_arr = np.asarray(i, dtype=np.float64).reshape(-1)
    q_arr = np.asarray(q, dtype=np.float64).reshape(-1)
    if i_arr.size != q_arr.size:
        raise ValueError("I and Q arrays must have the same length")
    result = np.empty(i_arr.size * 2, dtype=np.float64)
    result[0::2] = i_arr
    result[1::2] = q_arr
    return result
