"""Toolkit settings loaded from YAML/JSON files and the environment."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_CHUNK_SAMPLES = 65536
DEFAULT_DIRECT_READ_THRESHOLD = 50 * 1024 * 1024
DEFAULT_HASH_CHUNK_SIZE = 10 * 1024 * 1024

ENV_PREFIX = "SIGMF_TOOLKIT_"


class ToolkitSettings(BaseModel):
    """Tunables shared by the library entry points and the CLI."""

    model_config = ConfigDict(extra="forbid")

    chunk_samples: int = Field(default=DEFAULT_CHUNK_SAMPLES, gt=0)
    direct_read_threshold: int = Field(default=DEFAULT_DIRECT_READ_THRESHOLD, ge=0)
    hash_chunk_size: int = Field(default=DEFAULT_HASH_CHUNK_SIZE, gt=0)
    json_indent: int = Field(default=2, ge=0)
    log_level: str = "INFO"
    json_logs: bool = False

    @field_validator("log_level")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level {value!r}")
        return level


def _read_settings_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")

    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        loaded = json.loads(text)
    else:
        loaded = yaml.safe_load(text)
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Settings file {path} must contain a mapping")
    return loaded


def _env_overrides(environ: Mapping[str, str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for name in ToolkitSettings.model_fields:
        raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is not None:
            overrides[name] = raw
    return overrides


def load_settings(path: str | Path | None = None, environ: Mapping[str, str] | None = None) -> ToolkitSettings:
    """Build settings from an optional file, then ``SIGMF_TOOLKIT_*`` variables.

    Environment values win over file values. Raw strings from the environment
    are coerced by pydantic, so ``SIGMF_TOOLKIT_JSON_LOGS=true`` works as
    expected.
    """

    data: Dict[str, Any] = {}
    if path is not None:
        data.update(_read_settings_file(Path(path)))
    data.update(_env_overrides(os.environ if environ is None else environ))
    return ToolkitSettings.model_validate(data)
