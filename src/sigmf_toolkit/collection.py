"""SigMF collections: groups of recordings referenced by metadata hash."""

from __future__ import annotations

import copy
import json
from typing import Any, Dict, List, Mapping, Optional

from .errors import InvalidFieldKey, MissingCollection, MissingRequiredField
from .hashing import sha512
from .metadata import SIGMF_VERSION, Recording
from .models import ExtensionDeclaration, RecordingRef, ValidationIssue, ValidationResult
from .validation import HEX_PATTERN, SHA512_HEX_LENGTH, VERSION_PATTERN


class Collection:
    """The ``collection`` object of a ``.sigmf-collection`` file."""

    def __init__(
        self,
        version: str = SIGMF_VERSION,
        description: str | None = None,
        author: str | None = None,
        collection_doi: str | None = None,
        license: str | None = None,
        extensions: List[ExtensionDeclaration | Mapping[str, Any]] | None = None,
    ) -> None:
        self.collection: Dict[str, Any] = {"core:version": version}
        optional = {
            "core:description": description,
            "core:author": author,
            "core:collection_doi": collection_doi,
            "core:license": license,
        }
        self.collection.update({key: value for key, value in optional.items() if value is not None})
        if extensions is not None:
            self.collection["core:extensions"] = [
                ext.as_dict() if isinstance(ext, ExtensionDeclaration) else dict(ext) for ext in extensions
            ]

    @classmethod
    def from_json(cls, source: str | bytes | bytearray | Mapping[str, Any]) -> "Collection":
        data = json.loads(source) if isinstance(source, (str, bytes, bytearray)) else source
        body = data.get("collection") if isinstance(data, Mapping) else None
        if not isinstance(body, Mapping):
            raise MissingCollection()
        if not body.get("core:version"):
            raise MissingRequiredField("core:version")

        collection = cls.__new__(cls)
        collection.collection = dict(body)
        return collection

    # ------------------------------------------------------------------ streams
    @property
    def streams(self) -> List[Dict[str, Any]]:
        return self.collection.get("core:streams", [])

    def add_recording(self, name: str, metadata_json: str | Recording) -> Dict[str, Any]:
        """Reference a recording by the SHA-512 of its ``.sigmf-meta`` text."""
        text = metadata_json.to_json() if isinstance(metadata_json, Recording) else metadata_json
        return self.add_recording_ref(RecordingRef(name=name, hash=sha512(text.encode("utf-8"))))

    def add_recording_ref(self, ref: RecordingRef | Mapping[str, Any]) -> Dict[str, Any]:
        entry = ref.model_dump() if isinstance(ref, RecordingRef) else dict(ref)
        self.collection.setdefault("core:streams", []).append(entry)
        return entry

    def remove_recording(self, name: str) -> bool:
        streams = self.collection.get("core:streams")
        if not streams:
            return False
        for index, ref in enumerate(streams):
            if isinstance(ref, Mapping) and ref.get("name") == name:
                del streams[index]
                return True
        return False

    def find_recording(self, name: str) -> Optional[Dict[str, Any]]:
        for ref in self.collection.get("core:streams") or []:
            if isinstance(ref, Mapping) and ref.get("name") == name:
                return ref
        return None

    # --------------------------------------------------------------- extensions
    def set_extension_field(self, key: str, value: Any) -> None:
        if ":" not in key:
            raise InvalidFieldKey(key)
        self.collection[key] = value

    def get_extension_field(self, key: str) -> Any:
        return self.collection.get(key)

    # ---------------------------------------------------------------- validate
    def validate(self) -> ValidationResult:
        issues: List[ValidationIssue] = []

        version = self.collection.get("core:version")
        if not version:
            issues.append(ValidationIssue(path="collection.core:version", message="is required"))
        elif not isinstance(version, str) or not VERSION_PATTERN.match(version):
            issues.append(ValidationIssue(path="collection.core:version", message="must match pattern X.Y.Z", value=version))

        if "core:streams" in self.collection:
            issues.extend(_validate_streams(self.collection["core:streams"]))
        if "core:extensions" in self.collection:
            issues.extend(_validate_declarations(self.collection["core:extensions"]))

        return ValidationResult.from_issues(issues)

    def to_metadata(self) -> Dict[str, Any]:
        return {"collection": copy.deepcopy(self.collection)}

    def to_json(self, pretty: bool = True, indent: int = 2) -> str:
        if pretty:
            return json.dumps(self.to_metadata(), indent=indent, ensure_ascii=False)
        return json.dumps(self.to_metadata(), separators=(",", ":"), ensure_ascii=False)


def _validate_streams(streams: Any) -> List[ValidationIssue]:
    if not isinstance(streams, list):
        return [ValidationIssue(path="collection.core:streams", message="must be an array", value=streams)]

    issues: List[ValidationIssue] = []
    for index, stream in enumerate(streams):
        path = f"collection.core:streams[{index}]"
        if not isinstance(stream, Mapping):
            issues.append(ValidationIssue(path=path, message="must be an object", value=stream))
            continue

        name = stream.get("name")
        if not name or not isinstance(name, str):
            issues.append(ValidationIssue(path=f"{path}.name", message="is required and must be a string", value=name))

        digest = stream.get("hash")
        if not digest or not isinstance(digest, str):
            issues.append(ValidationIssue(path=f"{path}.hash", message="is required and must be a string", value=digest))
        elif len(digest) != SHA512_HEX_LENGTH:
            issues.append(
                ValidationIssue(path=f"{path}.hash", message=f"must be {SHA512_HEX_LENGTH} hex characters", value=digest)
            )
        elif not HEX_PATTERN.fullmatch(digest):
            issues.append(ValidationIssue(path=f"{path}.hash", message="must contain only hex characters", value=digest))
    return issues


def _validate_declarations(extensions: Any) -> List[ValidationIssue]:
    if not isinstance(extensions, list):
        return [ValidationIssue(path="collection.core:extensions", message="must be an array", value=extensions)]

    issues: List[ValidationIssue] = []
    for index, ext in enumerate(extensions):
        path = f"collection.core:extensions[{index}]"
        if not isinstance(ext, Mapping):
            issues.append(ValidationIssue(path=path, message="must be an object", value=ext))
            continue
        for key in ("name", "version"):
            value = ext.get(key)
            if not value or not isinstance(value, str):
                issues.append(ValidationIssue(path=f"{path}.{key}", message="is required", value=value))
        if not isinstance(ext.get("optional"), bool):
            issues.append(ValidationIssue(path=f"{path}.optional", message="must be a boolean", value=ext.get("optional")))
    return issues
