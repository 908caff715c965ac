from __future__ import annotations

"""Tabular views and quick summaries of a recording."""

from typing import Any

import pandas as pd

from .errors import InvalidDatatype
from .extensions import get_used_extensions
from .metadata import Recording
from .validation import is_number

SAMPLE_START = "core:sample_start"


def _frame(segments: list[dict[str, Any]]) -> pd.DataFrame:
    rows = [segment for segment in segments if isinstance(segment, dict)]
    if not rows:
        return pd.DataFrame(columns=[SAMPLE_START])
    return pd.DataFrame.from_records(rows)


def captures_frame(recording: Recording) -> pd.DataFrame:
    """One row per capture segment, one column per key."""
    return _frame(recording.captures)


def annotations_frame(recording: Recording) -> pd.DataFrame:
    """One row per annotation, one column per key."""
    return _frame(recording.annotations)


def _span(frame: pd.DataFrame, low_column: str, high_column: str) -> dict[str, float] | None:
    if low_column not in frame.columns or high_column not in frame.columns:
        return None
    low = pd.to_numeric(frame[low_column], errors="coerce").dropna()
    high = pd.to_numeric(frame[high_column], errors="coerce").dropna()
    if low.empty or high.empty:
        return None
    return {"min": float(low.min()), "max": float(high.max())}


def summarize_recording(recording: Recording, data_size: int | None = None) -> dict[str, Any]:
    """Summarize datatype, segment counts, frequency coverage and validity.

    ``data_size`` is the size of the dataset in bytes; when given, the number
    of samples per channel and (with a sample rate) the duration are derived
    from it.
    """

    try:
        info = recording.get_datatype_info()
    except InvalidDatatype:
        info = None

    sample_rate = recording.sample_rate
    num_channels = recording.num_channels
    captures = captures_frame(recording)
    annotations = annotations_frame(recording)

    sample_count = None
    duration_s = None
    if data_size is not None and info is not None and is_number(num_channels) and num_channels > 0:
        sample_count = int(data_size) // (info.bytes_per_sample * int(num_channels))
        if is_number(sample_rate) and sample_rate > 0:
            duration_s = sample_count / float(sample_rate)

    labels: dict[str, int] = {}
    if "core:label" in annotations.columns:
        labels = {str(k): int(v) for k, v in annotations["core:label"].dropna().value_counts().items()}

    result = recording.validate()
    return {
        "datatype": info.as_dict() if info is not None else {"datatype": recording.global_info.get("core:datatype")},
        "version": recording.global_info.get("core:version"),
        "sample_rate": sample_rate,
        "num_channels": num_channels,
        "captures": int(len(recording.captures)),
        "annotations": int(len(recording.annotations)),
        "sample_count": sample_count,
        "duration_s": duration_s,
        "capture_frequency": _span(captures, "core:frequency", "core:frequency"),
        "annotated_frequency": _span(annotations, "core:freq_lower_edge", "core:freq_upper_edge"),
        "labels": labels,
        "extensions": sorted(get_used_extensions(recording.to_metadata())),
        "valid": result.valid,
        "error_count": len(result.errors),
    }
