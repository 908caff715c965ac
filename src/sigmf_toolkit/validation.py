"""Rule engine that checks SigMF metadata documents.

Every rule is evaluated independently and findings are returned as
:class:`~sigmf_toolkit.models.ValidationIssue` records. Nothing in here raises
for malformed documents; callers inspect the returned
:class:`~sigmf_toolkit.models.ValidationResult` instead.
"""

from __future__ import annotations

import math
import re
from numbers import Real
from typing import Any, List, Mapping, Sequence

from .datatypes import is_valid_datatype
from .models import ValidationIssue, ValidationResult

VERSION_PATTERN = re.compile(r"^\d+\.\d+\.\d+")
ISO8601_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z", re.ASCII)
UUID_PATTERN = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE)
HEX_PATTERN = re.compile(r"[0-9a-f]+", re.IGNORECASE)

MAX_SAMPLE_RATE = 1e12
MAX_FREQUENCY = 1e12
SHA512_HEX_LENGTH = 128

_MISSING = object()


def is_number(value: Any) -> bool:
    """JSON-number check: real numbers, excluding booleans."""
    return isinstance(value, Real) and not isinstance(value, bool)


def is_integer(value: Any) -> bool:
    """Integral JSON number; ``3.0`` counts, ``3.5`` and ``True`` do not."""
    if not is_number(value):
        return False
    if isinstance(value, int):
        return True
    return math.isfinite(value) and float(value).is_integer()


def is_sha512_hex(value: Any) -> bool:
    return (
        isinstance(value, str)
        and len(value) == SHA512_HEX_LENGTH
        and HEX_PATTERN.fullmatch(value) is not None
    )


def validate_geolocation(point: Any, path: str) -> List[ValidationIssue]:
    """Check a GeoJSON Point: ``{"type": "Point", "coordinates": [lon, lat(, alt)]}``."""

    issues: List[ValidationIssue] = []
    if not isinstance(point, Mapping):
        issues.append(ValidationIssue(path=path, message="must be an object", value=point))
        return issues

    if point.get("type") != "Point":
        issues.append(ValidationIssue(path=f"{path}.type", message="must be 'Point'", value=point.get("type")))

    coordinates = point.get("coordinates")
    if not isinstance(coordinates, (list, tuple)):
        issues.append(ValidationIssue(path=f"{path}.coordinates", message="must be an array", value=coordinates))
        return issues

    if len(coordinates) not in (2, 3):
        issues.append(
            ValidationIssue(
                path=f"{path}.coordinates",
                message="must have 2 or 3 elements [lon, lat] or [lon, lat, alt]",
                value=list(coordinates),
            )
        )
        return issues

    lon, lat = coordinates[0], coordinates[1]
    if not is_number(lon) or not -180 <= lon <= 180:
        issues.append(
            ValidationIssue(path=f"{path}.coordinates[0]", message="longitude must be between -180 and 180", value=lon)
        )
    if not is_number(lat) or not -90 <= lat <= 90:
        issues.append(
            ValidationIssue(path=f"{path}.coordinates[1]", message="latitude must be between -90 and 90", value=lat)
        )
    if len(coordinates) == 3 and not is_number(coordinates[2]):
        issues.append(
            ValidationIssue(path=f"{path}.coordinates[2]", message="altitude must be a number", value=coordinates[2])
        )
    return issues


def _validate_global(info: Mapping[str, Any]) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []

    datatype = info.get("core:datatype")
    if datatype is None or datatype == "":
        issues.append(ValidationIssue(path="global.core:datatype", message="is required"))
    elif not is_valid_datatype(datatype):
        issues.append(ValidationIssue(path="global.core:datatype", message="is not a valid datatype", value=datatype))

    version = info.get("core:version")
    if version is None or version == "":
        issues.append(ValidationIssue(path="global.core:version", message="is required"))
    elif not isinstance(version, str) or not VERSION_PATTERN.match(version):
        issues.append(ValidationIssue(path="global.core:version", message="must match pattern X.Y.Z", value=version))

    sample_rate = info.get("core:sample_rate", _MISSING)
    if sample_rate is not _MISSING:
        if not is_number(sample_rate) or not sample_rate > 0:
            issues.append(
                ValidationIssue(path="global.core:sample_rate", message="must be a positive number", value=sample_rate)
            )
        elif sample_rate > MAX_SAMPLE_RATE:
            issues.append(ValidationIssue(path="global.core:sample_rate", message="must be ≤ 1e12", value=sample_rate))

    num_channels = info.get("core:num_channels", _MISSING)
    if num_channels is not _MISSING and (not is_integer(num_channels) or num_channels < 1):
        issues.append(
            ValidationIssue(path="global.core:num_channels", message="must be a positive integer", value=num_channels)
        )

    offset = info.get("core:offset", _MISSING)
    if offset is not _MISSING and (not is_integer(offset) or offset < 0):
        issues.append(ValidationIssue(path="global.core:offset", message="must be a non-negative integer", value=offset))

    digest = info.get("core:sha512", _MISSING)
    if digest is not _MISSING:
        if not isinstance(digest, str) or len(digest) != SHA512_HEX_LENGTH:
            issues.append(
                ValidationIssue(
                    path="global.core:sha512", message=f"must be {SHA512_HEX_LENGTH} hex characters", value=digest
                )
            )
        elif not HEX_PATTERN.fullmatch(digest):
            issues.append(
                ValidationIssue(path="global.core:sha512", message="must contain only hex characters", value=digest)
            )

    if "core:geolocation" in info:
        issues.extend(validate_geolocation(info["core:geolocation"], "global.core:geolocation"))

    return issues


def _check_sample_start(
    segment: Mapping[str, Any],
    path: str,
    kind: str,
    last_start: float,
    issues: List[ValidationIssue],
) -> float:
    """Validate ``core:sample_start`` and return the start later entries are compared with."""

    if "core:sample_start" not in segment:
        issues.append(ValidationIssue(path=f"{path}.core:sample_start", message="is required"))
        return last_start

    start = segment["core:sample_start"]
    if not is_integer(start) or start < 0:
        issues.append(
            ValidationIssue(path=f"{path}.core:sample_start", message="must be a non-negative integer", value=start)
        )
        return last_start
    if start < last_start:
        issues.append(
            ValidationIssue(
                path=f"{path}.core:sample_start",
                message=f"{kind} must be sorted by sample_start ascending",
                value=start,
            )
        )
    return start


def _validate_captures(captures: Sequence[Any]) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    last_start: float = -1

    for index, capture in enumerate(captures):
        path = f"captures[{index}]"
        if not isinstance(capture, Mapping):
            issues.append(ValidationIssue(path=path, message="must be an object", value=capture))
            continue

        last_start = _check_sample_start(capture, path, "captures", last_start, issues)

        if "core:datetime" in capture:
            stamp = capture["core:datetime"]
            if not isinstance(stamp, str) or not ISO8601_PATTERN.fullmatch(stamp):
                issues.append(
                    ValidationIssue(
                        path=f"{path}.core:datetime",
                        message="must be ISO-8601 UTC format (YYYY-MM-DDTHH:MM:SS.SSSZ)",
                        value=stamp,
                    )
                )

        if "core:frequency" in capture:
            frequency = capture["core:frequency"]
            if not is_number(frequency) or not abs(frequency) <= MAX_FREQUENCY:
                issues.append(
                    ValidationIssue(
                        path=f"{path}.core:frequency",
                        message="must be a number between -1e12 and 1e12",
                        value=frequency,
                    )
                )

        if "core:geolocation" in capture:
            issues.extend(validate_geolocation(capture["core:geolocation"], f"{path}.core:geolocation"))

    return issues


def _validate_annotations(annotations: Sequence[Any]) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    last_start: float = -1

    for index, annotation in enumerate(annotations):
        path = f"annotations[{index}]"
        if not isinstance(annotation, Mapping):
            issues.append(ValidationIssue(path=path, message="must be an object", value=annotation))
            continue

        last_start = _check_sample_start(annotation, path, "annotations", last_start, issues)

        if "core:sample_count" in annotation:
            count = annotation["core:sample_count"]
            if not is_integer(count) or count < 0:
                issues.append(
                    ValidationIssue(path=f"{path}.core:sample_count", message="must be a non-negative integer", value=count)
                )

        has_lower = "core:freq_lower_edge" in annotation
        has_upper = "core:freq_upper_edge" in annotation
        if has_lower != has_upper:
            issues.append(
                ValidationIssue(
                    path=path,
                    message="core:freq_lower_edge and core:freq_upper_edge must both be present or absent",
                )
            )
        elif has_lower:
            lower = annotation["core:freq_lower_edge"]
            upper = annotation["core:freq_upper_edge"]
            if not is_number(lower):
                issues.append(ValidationIssue(path=f"{path}.core:freq_lower_edge", message="must be a number", value=lower))
            if not is_number(upper):
                issues.append(ValidationIssue(path=f"{path}.core:freq_upper_edge", message="must be a number", value=upper))
            if is_number(lower) and is_number(upper) and lower > upper:
                issues.append(
                    ValidationIssue(
                        path=path,
                        message="core:freq_lower_edge must be ≤ core:freq_upper_edge",
                        value={"lower": lower, "upper": upper},
                    )
                )

        if "core:uuid" in annotation:
            uuid = annotation["core:uuid"]
            if not isinstance(uuid, str) or not UUID_PATTERN.fullmatch(uuid):
                issues.append(ValidationIssue(path=f"{path}.core:uuid", message="must be a valid UUID", value=uuid))

    return issues


def validate_metadata(
    global_info: Mapping[str, Any],
    captures: Sequence[Any],
    annotations: Sequence[Any],
) -> ValidationResult:
    """Validate a metadata document split into its three sections.

    Findings are ordered global first, then captures, then annotations, each
    in sequence order.
    """

    issues = _validate_global(global_info)
    issues.extend(_validate_captures(captures))
    issues.extend(_validate_annotations(annotations))
    return ValidationResult.from_issues(issues)
