"""Values exchanged with the archive layer."""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator


class ArchiveEntry(BaseModel):
    """One recording inside an archive: base name, metadata document and raw samples."""

    name: str
    metadata: Dict[str, Any]
    data: bytes = b""

    @field_validator("data", mode="before")
    @classmethod
    def _coerce_bytes(cls, value: Any) -> bytes:
        if value is None:
            return b""
        if isinstance(value, (bytearray, memoryview)):
            return bytes(value)
        return value


class PreparedFiles(BaseModel):
    """Serialized ``.sigmf-meta`` text and ``.sigmf-data`` bytes ready to be saved."""

    meta: str
    data: bytes = Field(default=b"")

    @field_validator("data", mode="before")
    @classmethod
    def _coerce_bytes(cls, value: Any) -> bytes:
        if isinstance(value, (bytearray, memoryview)):
            return bytes(value)
        return value
