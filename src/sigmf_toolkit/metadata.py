"""SigMF recording metadata model.

A :class:`Recording` holds the three sections of a ``.sigmf-meta`` document
as plain ordered dictionaries so extension keys (``namespace:field``) survive
parse, edit and serialize untouched. Typed accessors are thin helpers over the
same dictionaries.
"""

from __future__ import annotations

import copy
import json
import logging
import math
from typing import Any, Dict, List, Mapping, Optional

from .datatypes import DatatypeInfo, parse_datatype
from .errors import InvalidFieldKey, MissingGlobal, MissingRequiredField
from .extensions import ExtensionRegistry, validate_extension_fields
from .models import ExtensionDeclaration, NonConformingOptions, ValidationResult
from .validation import is_number, validate_metadata

logger = logging.getLogger(__name__)

SIGMF_VERSION = "1.2.0"


def _sort_key(segment: Mapping[str, Any]) -> float:
    start = segment.get("core:sample_start")
    return start if is_number(start) and not math.isnan(start) else math.inf


def _check_extension_key(key: str) -> None:
    if ":" not in key:
        raise InvalidFieldKey(key)


def _declaration_dict(extension: ExtensionDeclaration | Mapping[str, Any]) -> Dict[str, Any]:
    if isinstance(extension, ExtensionDeclaration):
        return extension.as_dict()
    return dict(extension)


class Recording:
    """Global info, capture segments and annotations of one SigMF recording."""

    def __init__(
        self,
        datatype: str,
        *,
        version: str = SIGMF_VERSION,
        sample_rate: float | None = None,
        author: str | None = None,
        description: str | None = None,
        hw: str | None = None,
        license: str | None = None,
        num_channels: int | None = None,
        recorder: str | None = None,
        geolocation: Mapping[str, Any] | None = None,
        extensions: List[ExtensionDeclaration | Mapping[str, Any]] | None = None,
        non_conforming: NonConformingOptions | Mapping[str, Any] | None = None,
    ) -> None:
        parse_datatype(datatype)
        self.global_info: Dict[str, Any] = {"core:datatype": datatype, "core:version": version}

        optional = {
            "core:sample_rate": sample_rate,
            "core:author": author,
            "core:description": description,
            "core:hw": hw,
            "core:license": license,
            "core:num_channels": num_channels,
            "core:recorder": recorder,
            "core:geolocation": dict(geolocation) if geolocation is not None else None,
        }
        self.global_info.update({key: value for key, value in optional.items() if value is not None})

        if extensions is not None:
            self.global_info["core:extensions"] = [_declaration_dict(ext) for ext in extensions]

        if non_conforming is not None:
            ncd = (
                non_conforming
                if isinstance(non_conforming, NonConformingOptions)
                else NonConformingOptions.model_validate(non_conforming)
            )
            self.global_info["core:dataset"] = ncd.dataset
            if ncd.trailing_bytes is not None:
                self.global_info["core:trailing_bytes"] = ncd.trailing_bytes
            if ncd.metadata_only is not None:
                self.global_info["core:metadata_only"] = ncd.metadata_only

        self.captures: List[Dict[str, Any]] = []
        self.annotations: List[Dict[str, Any]] = []

    # ------------------------------------------------------------------ parsing
    @classmethod
    def from_json(cls, source: str | bytes | bytearray | Mapping[str, Any]) -> "Recording":
        """Hydrate a recording from JSON text or an already parsed document.

        Only ``global`` with ``core:datatype`` and ``core:version`` is
        required. Everything else is copied as-is and left for
        :meth:`validate` to judge; captures and annotations are not re-sorted.
        """

        data = json.loads(source) if isinstance(source, (str, bytes, bytearray)) else source
        global_info = data.get("global") if isinstance(data, Mapping) else None
        if not isinstance(global_info, Mapping):
            raise MissingGlobal()
        for field in ("core:datatype", "core:version"):
            if not global_info.get(field):
                raise MissingRequiredField(field)

        captures = data.get("captures")
        annotations = data.get("annotations")

        recording = cls.__new__(cls)
        recording.global_info = dict(global_info)
        recording.captures = list(captures) if isinstance(captures, list) else []
        recording.annotations = list(annotations) if isinstance(annotations, list) else []
        logger.debug(
            "loaded recording %s with %d captures and %d annotations",
            recording.global_info["core:datatype"],
            len(recording.captures),
            len(recording.annotations),
        )
        return recording

    @classmethod
    def from_metadata(cls, metadata: Mapping[str, Any]) -> "Recording":
        return cls.from_json(metadata)

    # ---------------------------------------------------------------- accessors
    @property
    def datatype(self) -> str:
        return self.global_info["core:datatype"]

    @datatype.setter
    def datatype(self, value: str) -> None:
        parse_datatype(value)
        self.global_info["core:datatype"] = value

    def get_datatype_info(self) -> DatatypeInfo:
        return parse_datatype(self.datatype)

    @property
    def version(self) -> str:
        return self.global_info["core:version"]

    @property
    def sample_rate(self) -> Optional[float]:
        return self.global_info.get("core:sample_rate")

    @sample_rate.setter
    def sample_rate(self, rate: float) -> None:
        self.global_info["core:sample_rate"] = rate

    @property
    def num_channels(self) -> int:
        return self.global_info.get("core:num_channels", 1)

    @property
    def sha512(self) -> Optional[str]:
        return self.global_info.get("core:sha512")

    @sha512.setter
    def sha512(self, digest: str) -> None:
        self.global_info["core:sha512"] = digest.lower()

    @property
    def dataset_filename(self) -> Optional[str]:
        return self.global_info.get("core:dataset")

    @dataset_filename.setter
    def dataset_filename(self, filename: str) -> None:
        self.global_info["core:dataset"] = filename

    @property
    def trailing_bytes(self) -> Optional[int]:
        return self.global_info.get("core:trailing_bytes")

    @trailing_bytes.setter
    def trailing_bytes(self, count: int) -> None:
        self.global_info["core:trailing_bytes"] = count

    @property
    def metadata_only(self) -> Optional[bool]:
        return self.global_info.get("core:metadata_only")

    @metadata_only.setter
    def metadata_only(self, flag: bool) -> None:
        self.global_info["core:metadata_only"] = flag

    @property
    def collection(self) -> Optional[str]:
        return self.global_info.get("core:collection")

    @collection.setter
    def collection(self, name: str) -> None:
        self.global_info["core:collection"] = name

    @property
    def extensions(self) -> List[Dict[str, Any]]:
        return self.global_info.get("core:extensions", [])

    def is_non_conforming(self) -> bool:
        if "core:dataset" in self.global_info or "core:trailing_bytes" in self.global_info:
            return True
        return any(
            is_number(capture.get("core:header_bytes")) and capture["core:header_bytes"] > 0
            for capture in self.captures
        )

    def is_metadata_only(self) -> bool:
        return self.global_info.get("core:metadata_only") is True

    def add_extension(self, extension: ExtensionDeclaration | Mapping[str, Any]) -> None:
        """Declare an extension namespace unless one with the same name exists."""
        declared = self.global_info.setdefault("core:extensions", [])
        entry = _declaration_dict(extension)
        if not any(existing.get("name") == entry.get("name") for existing in declared):
            declared.append(entry)

    def set_extension_field(self, key: str, value: Any) -> None:
        _check_extension_key(key)
        self.global_info[key] = value

    def get_extension_field(self, key: str) -> Any:
        return self.global_info.get(key)

    def calculate_data_size(self, sample_count: int) -> int:
        """Expected ``.sigmf-data`` size in bytes for ``sample_count`` samples."""
        return sample_count * self.get_datatype_info().bytes_per_sample * self.num_channels

    # ----------------------------------------------------------------- mutation
    def add_capture(
        self,
        sample_start: int,
        *,
        datetime: str | None = None,
        frequency: float | None = None,
        global_index: int | None = None,
        header_bytes: int | None = None,
        geolocation: Mapping[str, Any] | None = None,
        extra: Mapping[str, Any] | None = None,
    ) -> Dict[str, Any]:
        capture: Dict[str, Any] = {"core:sample_start": sample_start}
        optional = {
            "core:datetime": datetime,
            "core:frequency": frequency,
            "core:global_index": global_index,
            "core:header_bytes": header_bytes,
            "core:geolocation": dict(geolocation) if geolocation is not None else None,
        }
        capture.update({key: value for key, value in optional.items() if value is not None})
        capture.update(self._extension_fields(extra))

        self.captures.append(capture)
        self.captures.sort(key=_sort_key)
        return capture

    def add_annotation(
        self,
        sample_start: int,
        *,
        sample_count: int | None = None,
        freq_lower_edge: float | None = None,
        freq_upper_edge: float | None = None,
        label: str | None = None,
        comment: str | None = None,
        generator: str | None = None,
        uuid: str | None = None,
        extra: Mapping[str, Any] | None = None,
    ) -> Dict[str, Any]:
        annotation: Dict[str, Any] = {"core:sample_start": sample_start}
        optional = {
            "core:sample_count": sample_count,
            "core:freq_lower_edge": freq_lower_edge,
            "core:freq_upper_edge": freq_upper_edge,
            "core:label": label,
            "core:comment": comment,
            "core:generator": generator,
            "core:uuid": uuid,
        }
        annotation.update({key: value for key, value in optional.items() if value is not None})
        annotation.update(self._extension_fields(extra))

        self.annotations.append(annotation)
        self.annotations.sort(key=_sort_key)
        return annotation

    @staticmethod
    def _extension_fields(extra: Mapping[str, Any] | None) -> Dict[str, Any]:
        if not extra:
            return {}
        for key in extra:
            _check_extension_key(key)
        return dict(extra)

    # ---------------------------------------------------------- validate/output
    def validate(self, extensions: ExtensionRegistry | None = None) -> ValidationResult:
        """Check the recording; never raises.

        When ``extensions`` is given, fields of declared and registered
        extension namespaces are checked after the core rules.
        """

        result = validate_metadata(self.global_info, self.captures, self.annotations)
        if extensions is not None:
            result = result.extend(validate_extension_fields(self.to_metadata(), extensions))
        return result

    def to_metadata(self) -> Dict[str, Any]:
        """Independent snapshot of the document."""
        return {
            "global": copy.deepcopy(self.global_info),
            "captures": copy.deepcopy(self.captures),
            "annotations": copy.deepcopy(self.annotations),
        }

    def to_json(self, pretty: bool = True, indent: int = 2) -> str:
        if pretty:
            return json.dumps(self.to_metadata(), indent=indent, ensure_ascii=False)
        return json.dumps(self.to_metadata(), separators=(",", ":"), ensure_ascii=False)

    def __repr__(self) -> str:
        return (
            f"Recording(datatype={self.global_info.get('core:datatype')!r}, "
            f"captures={len(self.captures)}, annotations={len(self.annotations)})"
        )
