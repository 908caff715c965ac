"""SigMF extension namespaces: registry, key helpers and field checks.

:class:`ExtensionRegistry` is the explicit object to pass around. The
module-level ``default_registry`` and its wrapper functions are a
process-wide convenience: whatever is registered there stays registered until
:func:`clear_extensions` is called. Core metadata validation never consults
any registry.
"""

from __future__ import annotations

from numbers import Real
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from .models import (
    ExtensionDeclaration,
    ExtensionDefinition,
    ExtensionFieldDef,
    ValidationIssue,
)


class ExtensionRegistry:
    """Mapping of namespace name to :class:`ExtensionDefinition`."""

    def __init__(self, definitions: Iterable[ExtensionDefinition] = ()) -> None:
        self._definitions: Dict[str, ExtensionDefinition] = {}
        for definition in definitions:
            self.register(definition)

    def register(self, definition: ExtensionDefinition | Mapping[str, Any]) -> ExtensionDefinition:
        if not isinstance(definition, ExtensionDefinition):
            definition = ExtensionDefinition.model_validate(definition)
        self._definitions[definition.name] = definition
        return definition

    def unregister(self, name: str) -> bool:
        return self._definitions.pop(name, None) is not None

    def get(self, name: str) -> Optional[ExtensionDefinition]:
        return self._definitions.get(name)

    def all(self) -> List[ExtensionDefinition]:
        return list(self._definitions.values())

    def clear(self) -> None:
        self._definitions.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)


default_registry = ExtensionRegistry()


def register_extension(definition: ExtensionDefinition | Mapping[str, Any]) -> ExtensionDefinition:
    return default_registry.register(definition)


def unregister_extension(name: str) -> bool:
    return default_registry.unregister(name)


def get_extension(name: str) -> Optional[ExtensionDefinition]:
    return default_registry.get(name)


def get_all_extensions() -> List[ExtensionDefinition]:
    return default_registry.all()


def has_extension(name: str) -> bool:
    return name in default_registry


def clear_extensions() -> None:
    default_registry.clear()


# ---------------------------------------------------------------------------
# Key helpers


def get_namespace(key: str) -> Optional[str]:
    """``"antenna:gain"`` -> ``"antenna"``; ``None`` when there is no namespace."""
    index = key.find(":")
    return key[:index] if index > 0 else None


def get_field_name(key: str) -> str:
    index = key.find(":")
    return key[index + 1 :] if index > 0 else key


def create_field_key(namespace: str, field_name: str) -> str:
    return f"{namespace}:{field_name}"


def create_extension_declaration(name: str, version: str, optional: bool = True) -> Dict[str, Any]:
    return ExtensionDeclaration(name=name, version=version, optional=optional).as_dict()


# ---------------------------------------------------------------------------
# Metadata checks


def _sections(metadata: Mapping[str, Any]) -> tuple[Mapping[str, Any], list, list]:
    global_info = metadata.get("global")
    captures = metadata.get("captures")
    annotations = metadata.get("annotations")
    return (
        global_info if isinstance(global_info, Mapping) else {},
        captures if isinstance(captures, list) else [],
        annotations if isinstance(annotations, list) else [],
    )


def _declared(global_info: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    declared = global_info.get("core:extensions")
    if not isinstance(declared, list):
        return []
    return [ext for ext in declared if isinstance(ext, Mapping)]


def _declaration_issues(global_info: Mapping[str, Any]) -> List[ValidationIssue]:
    declared = global_info.get("core:extensions")
    if declared is None:
        return []
    if not isinstance(declared, list):
        return [ValidationIssue(path="global.core:extensions", message="must be an array", value=declared)]
    return [
        ValidationIssue(path=f"global.core:extensions[{index}]", message="must be an object", value=ext)
        for index, ext in enumerate(declared)
        if not isinstance(ext, Mapping)
    ]


def get_used_extensions(metadata: Mapping[str, Any]) -> Set[str]:
    """Namespaces other than ``core`` that appear anywhere in ``metadata``."""

    global_info, captures, annotations = _sections(metadata)
    namespaces: Set[str] = set()
    for obj in (global_info, *captures, *annotations):
        if not isinstance(obj, Mapping):
            continue
        for key in obj:
            namespace = get_namespace(key)
            if namespace and namespace != "core":
                namespaces.add(namespace)
    return namespaces


def validate_extension_declarations(metadata: Mapping[str, Any]) -> List[ValidationIssue]:
    global_info, _, _ = _sections(metadata)
    declared = {ext.get("name") for ext in _declared(global_info) if isinstance(ext.get("name"), str)}
    return [
        ValidationIssue(
            path="global.core:extensions",
            message=f"Extension '{namespace}' is used but not declared in core:extensions",
            value=namespace,
        )
        for namespace in sorted(get_used_extensions(metadata))
        if namespace not in declared
    ]


def json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, Real):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def _check_object(
    obj: Any,
    path: str,
    fields: List[ExtensionFieldDef],
    namespace: str,
    issues: List[ValidationIssue],
) -> None:
    if not fields or not isinstance(obj, Mapping):
        return
    by_name = {field.name: field for field in fields}

    for field in fields:
        key = create_field_key(namespace, field.name)
        if field.required and key not in obj:
            issues.append(ValidationIssue(path=f"{path}.{key}", message="Required extension field is missing"))

    for key, value in obj.items():
        if get_namespace(key) != namespace:
            continue
        field = by_name.get(get_field_name(key))
        if field is None:
            continue
        actual = json_type(value)
        if actual != field.type:
            issues.append(
                ValidationIssue(
                    path=f"{path}.{key}",
                    message=f"Expected type '{field.type}' but got '{actual}'",
                    value=value,
                )
            )


def validate_extension_fields(
    metadata: Mapping[str, Any],
    registry: ExtensionRegistry | None = None,
) -> List[ValidationIssue]:
    """Check fields of declared extensions that ``registry`` knows about.

    Unknown fields inside a registered namespace are tolerated.
    """

    registry = default_registry if registry is None else registry
    global_info, captures, annotations = _sections(metadata)
    issues: List[ValidationIssue] = _declaration_issues(global_info)

    for declaration in _declared(global_info):
        name = declaration.get("name")
        definition = registry.get(name) if isinstance(name, str) else None
        if definition is None:
            continue
        _check_object(global_info, "global", definition.global_fields, name, issues)
        for index, capture in enumerate(captures):
            _check_object(capture, f"captures[{index}]", definition.capture_fields, name, issues)
        for index, annotation in enumerate(annotations):
            _check_object(annotation, f"annotations[{index}]", definition.annotation_fields, name, issues)
    return issues


def get_unsupported_required_extensions(metadata: Mapping[str, Any], supported: Iterable[str]) -> List[str]:
    """Names of non-optional declared extensions missing from ``supported``."""
    global_info, _, _ = _sections(metadata)
    supported = set(supported)
    return [
        ext.get("name")
        for ext in _declared(global_info)
        if not ext.get("optional", False) and isinstance(ext.get("name"), str) and ext.get("name") not in supported
    ]


# ---------------------------------------------------------------------------
# Common definitions


def _fields(*specs: tuple[str, str, str]) -> List[ExtensionFieldDef]:
    return [ExtensionFieldDef(name=name, type=kind, description=description) for name, kind, description in specs]


ANTENNA_EXTENSION = ExtensionDefinition(
    name="antenna",
    version="1.0.0",
    description="Describes antenna properties",
    global_fields=_fields(
        ("model", "string", "Antenna model name/number"),
        ("type", "string", "Antenna type (dipole, yagi, etc.)"),
        ("low_frequency", "number", "Low frequency of operating range in Hz"),
        ("high_frequency", "number", "High frequency of operating range in Hz"),
        ("gain", "number", "Antenna gain in dBi"),
        ("horizontal_gain_pattern", "array", "Horizontal gain pattern"),
        ("vertical_gain_pattern", "array", "Vertical gain pattern"),
        ("horizontal_beam_width", "number", "Horizontal 3dB beam width in degrees"),
        ("vertical_beam_width", "number", "Vertical 3dB beam width in degrees"),
        ("cross_polar_discrimination", "number", "Cross-polar discrimination in dB"),
        ("voltage_standing_wave_ratio", "number", "VSWR"),
        ("cable_loss", "number", "Cable loss in dB"),
        ("steerable", "boolean", "Whether the antenna is steerable"),
        ("mobile", "boolean", "Whether the antenna is mobile"),
        ("hagl", "number", "Height above ground level in meters"),
    ),
    capture_fields=_fields(
        ("azimuth_angle", "number", "Azimuth angle in degrees"),
        ("elevation_angle", "number", "Elevation angle in degrees"),
        ("polarization", "string", "Polarization (horizontal, vertical, etc.)"),
    ),
    collection_fields=_fields(
        ("hagl", "number", "Height above ground level in meters"),
        ("azimuth_angle", "number", "Azimuth angle in degrees"),
        ("elevation_angle", "number", "Elevation angle in degrees"),
    ),
)

CAPTURE_DETAILS_EXTENSION = ExtensionDefinition(
    name="capture_details",
    version="1.0.0",
    description="Additional capture metadata",
    capture_fields=_fields(
        ("acq_scale_factor", "number", "Acquisition scale factor"),
        ("attenuation", "number", "Attenuation in dB"),
        ("acquisition_bandwidth", "number", "Acquisition bandwidth in Hz"),
        ("start_capture", "string", "Start capture timestamp"),
        ("stop_capture", "string", "Stop capture timestamp"),
        ("source_file", "string", "Original source file"),
        ("gain", "number", "Receiver gain in dB"),
    ),
)


def register_common_extensions(registry: ExtensionRegistry | None = None) -> None:
    target = default_registry if registry is None else registry
    target.register(ANTENNA_EXTENSION)
    target.register(CAPTURE_DETAILS_EXTENSION)
