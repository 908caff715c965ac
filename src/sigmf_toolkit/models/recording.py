"""Auxiliary recording descriptors."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NonConformingOptions(BaseModel):
    """Describes a dataset file that does not follow the ``.sigmf-data`` layout."""

    dataset: str
    trailing_bytes: Optional[int] = Field(default=None, ge=0)
    metadata_only: Optional[bool] = None

    @field_validator("dataset")
    @classmethod
    def _ensure_filename(cls, value: str) -> str:
        if not value:
            raise ValueError("dataset filename must not be empty")
        return value


class RecordingRef(BaseModel):
    """Reference from a collection to a recording's metadata file."""

    model_config = ConfigDict(extra="allow")

    name: str
    hash: str

    @field_validator("hash")
    @classmethod
    def _lowercase(cls, value: str) -> str:
        return value.lower()
