"""Parsing of SigMF datatype tokens such as ``cf32_le`` or ``ru8``."""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

import numpy as np

from .errors import InvalidDatatype

DATATYPE_PATTERN = re.compile(r"^(c|r)(f32|f64|i32|i16|u32|u16|i8|u8)(_le|_be)?$", re.ASCII)

# (format, signed, bits) -> numpy kind/itemsize
COMPONENT_KINDS: dict[tuple[str, bool, int], str] = {
    ("float", True, 32): "f4",
    ("float", True, 64): "f8",
    ("int", True, 8): "i1",
    ("int", True, 16): "i2",
    ("int", True, 32): "i4",
    ("int", False, 8): "u1",
    ("int", False, 16): "u2",
    ("int", False, 32): "u4",
}


@dataclass(frozen=True)
class DatatypeInfo:
    """Structured description of a datatype token."""

    is_complex: bool
    format: Literal["float", "int"]
    signed: bool
    bits_per_component: int
    bytes_per_component: int
    bytes_per_sample: int
    little_endian: bool | None
    datatype: str

    @property
    def byteorder(self) -> str:
        if self.little_endian is None:
            return "|"
        return "<" if self.little_endian else ">"

    @property
    def component_dtype(self) -> np.dtype:
        """numpy dtype of a single I, Q or real component on the wire."""
        kind = COMPONENT_KINDS[(self.format, self.signed, self.bits_per_component)]
        return np.dtype(self.byteorder + kind)

    def as_dict(self) -> dict[str, object]:
        return {
            "datatype": self.datatype,
            "is_complex": self.is_complex,
            "format": self.format,
            "signed": self.signed,
            "bits_per_component": self.bits_per_component,
            "bytes_per_component": self.bytes_per_component,
            "bytes_per_sample": self.bytes_per_sample,
            "little_endian": self.little_endian,
        }


def is_valid_datatype(token: object) -> bool:
    return isinstance(token, str) and DATATYPE_PATTERN.fullmatch(token) is not None


def parse_datatype(token: str) -> DatatypeInfo:
    """Parse a datatype token into a :class:`DatatypeInfo`.

    Raises :class:`InvalidDatatype` when the token does not match
    ``[c|r][f32|f64|i32|i16|u32|u16|i8|u8][_le|_be]``. The endianness of
    8-bit components is never recorded, even when a suffix is present.
    """

    if not isinstance(token, str):
        raise InvalidDatatype(token)
    return _parse(token)


@lru_cache(maxsize=64)
def _parse(token: str) -> DatatypeInfo:
    match = DATATYPE_PATTERN.fullmatch(token)
    if match is None:
        raise InvalidDatatype(token)

    complex_or_real, type_str, endian = match.groups()
    bits = int(type_str[1:])
    bytes_per_component = bits // 8
    is_complex = complex_or_real == "c"

    return DatatypeInfo(
        is_complex=is_complex,
        format="float" if type_str[0] == "f" else "int",
        signed=type_str[0] in ("f", "i"),
        bits_per_component=bits,
        bytes_per_component=bytes_per_component,
        bytes_per_sample=bytes_per_component * (2 if is_complex else 1),
        little_endian=(endian == "_le") if bits > 8 else None,
        datatype=token,
    )
