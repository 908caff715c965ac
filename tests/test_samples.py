from __future__ import annotations

import math

import numpy as np
import pytest

from sigmf_toolkit import (
    ComplexSample,
    NotComplexDatatype,
    deinterleave,
    get_complex_sample,
    interleave,
    magnitude,
    magnitudes,
    phase,
    phases,
    read_samples,
    write_samples,
    write_samples_complex,
)

FLOAT_TOKENS = ["cf32_le", "cf32_be", "cf64_le", "cf64_be", "rf32_le", "rf32_be", "rf64_le", "rf64_be"]
SIGNED_TOKENS = ["ci32_le", "ci32_be", "ci16_le", "ci16_be", "ci8", "ri32_le", "ri32_be", "ri16_le", "ri16_be", "ri8"]
UNSIGNED_TOKENS = ["cu32_le", "cu32_be", "cu16_le", "cu16_be", "cu8", "ru32_le", "ru32_be", "ru16_le", "ru16_be", "ru8"]


def test_cu8_bytes_decode_to_interleaved_pairs() -> None:
    decoded = read_samples(bytes([128, 64, 255, 0]), "cu8")

    assert decoded.sample_count == 2
    assert len(decoded) == 2
    assert decoded.complex is not None
    assert decoded.real is None
    assert decoded.complex.tolist() == [128.0, 64.0, 255.0, 0.0]
    assert decoded.values.dtype == np.float64


@pytest.mark.parametrize("token", FLOAT_TOKENS)
def test_float_round_trip(token: str) -> None:
    values = [0.5, -1.25, 3.0, 1000.0]
    decoded = read_samples(write_samples(values, token), token)
    assert decoded.values.tolist() == pytest.approx(values)


@pytest.mark.parametrize("token", SIGNED_TOKENS)
def test_signed_round_trip(token: str) -> None:
    values = [-5, 7, 0, 100]
    decoded = read_samples(write_samples(values, token), token)
    assert decoded.values.tolist() == values


@pytest.mark.parametrize("token", UNSIGNED_TOKENS)
def test_unsigned_round_trip(token: str) -> None:
    values = [5, 7, 0, 200]
    decoded = read_samples(write_samples(values, token), token)
    assert decoded.values.tolist() == values


def test_encoded_length_matches_bytes_per_sample() -> None:
    assert len(write_samples([1.0, 2.0, 3.0, 4.0], "cf64_le")) == 2 * 16
    assert len(write_samples([1, 2, 3], "ri16_le")) == 3 * 2


def test_byte_order_follows_suffix() -> None:
    assert write_samples([1], "ri16_be") == b"\x00\x01"
    assert write_samples([1], "ri16_le") == b"\x01\x00"
    assert read_samples(b"\x00\x01", "ru16_be").values.tolist() == [1.0]


def test_offset_and_count_are_in_samples() -> None:
    buffer = write_samples([1, 2, 3, 4, 5], "ri16_le")

    window = read_samples(buffer, "ri16_le", offset=1, count=2)

    assert window.sample_count == 2
    assert window.values.tolist() == [2.0, 3.0]


def test_count_is_clamped_to_available_samples() -> None:
    buffer = write_samples([1, 2, 3], "ri32_le")
    assert read_samples(buffer, "ri32_le", offset=1, count=10).values.tolist() == [2.0, 3.0]


def test_out_of_range_offset_yields_zero_samples() -> None:
    buffer = write_samples([1, 2], "cf32_le")

    decoded = read_samples(buffer, "cf32_le", offset=5)

    assert decoded.sample_count == 0
    assert decoded.values.size == 0


def test_partial_trailing_sample_is_ignored() -> None:
    buffer = write_samples([1, 2], "ri16_le") + b"\x07"
    assert read_samples(buffer, "ri16_le").sample_count == 2


def test_empty_buffer_decodes_to_nothing() -> None:
    assert read_samples(b"", "cf32_le").sample_count == 0


def test_integer_encode_truncates_and_wraps() -> None:
    encoded = write_samples([1.9, -1.9, 300.0], "ri8")

    assert encoded == bytes([1, 255, 44])
    assert read_samples(encoded, "ri8").values.tolist() == [1.0, -1.0, 44.0]


def test_integer_wrap_holds_beyond_int64_range() -> None:
    encoded = write_samples([1e20, 2.0**63 + 2048, -(2.0**63) - 2048], "ri32_le")

    assert read_samples(encoded, "ri32_le").values.tolist() == [1661992960.0, 2048.0, -2048.0]


def test_nan_encodes_as_zero_for_integers() -> None:
    assert write_samples([float("nan"), float("inf")], "ri16_le") == bytes(4)


def test_odd_component_count_rejected_for_complex() -> None:
    with pytest.raises(ValueError):
        write_samples([1.0, 2.0, 3.0], "cf32_le")


def test_numpy_complex_input_is_interleaved() -> None:
    samples = np.array([1 + 2j, -3 - 4j], dtype=np.complex64)

    decoded = read_samples(write_samples(samples, "cf32_le"), "cf32_le")

    assert decoded.values.tolist() == [1.0, 2.0, -3.0, -4.0]
    assert decoded.to_complex().tolist() == [1 + 2j, -3 - 4j]


def test_numpy_complex_input_rejected_for_real_type() -> None:
    with pytest.raises(NotComplexDatatype):
        write_samples(np.array([1 + 1j]), "rf32_le")


def test_write_samples_complex_accepts_several_pair_shapes() -> None:
    samples = [ComplexSample(1.0, 2.0), {"i": 3, "q": 4}, complex(5, 6), (7, 8)]

    decoded = read_samples(write_samples_complex(samples, "ci16_le"), "ci16_le")

    assert decoded.values.tolist() == [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0]


def test_write_samples_complex_requires_complex_type() -> None:
    with pytest.raises(NotComplexDatatype):
        write_samples_complex([ComplexSample(1.0, 2.0)], "rf32_le")


def test_real_decode_to_complex_has_zero_imaginary_part() -> None:
    decoded = read_samples(write_samples([1.0, -2.0], "rf32_le"), "rf32_le")
    assert decoded.real is not None
    assert decoded.to_complex().tolist() == [1 + 0j, -2 + 0j]


def test_complex_helpers() -> None:
    values = [3.0, 4.0, 0.0, 1.0]

    first = get_complex_sample(values, 0)
    second = get_complex_sample(values, 1)

    assert first == ComplexSample(3.0, 4.0)
    assert magnitude(first) == pytest.approx(5.0)
    assert phase(second) == pytest.approx(math.pi / 2)
    assert magnitudes(values).tolist() == pytest.approx([5.0, 1.0])
    assert phases(values).tolist() == pytest.approx([math.atan2(4.0, 3.0), math.pi / 2])


def test_interleave_and_deinterleave() -> None:
    merged = interleave([1.0, 2.0], [3.0, 4.0])
    assert merged.tolist() == [1.0, 3.0, 2.0, 4.0]

    i, q = deinterleave(merged)
    assert i.tolist() == [1.0, 2.0]
    assert q.tolist() == [3.0, 4.0]

    with pytest.raises(ValueError):
        interleave([1.0], [1.0, 2.0])
