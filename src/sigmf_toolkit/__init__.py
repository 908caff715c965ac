"""SigMF recordings: sample codec, metadata model, validation and archives."""

from importlib.metadata import PackageNotFoundError, version

from .archive import (
    ARCHIVE_MIME_TYPE,
    create_archive,
    create_archive_from_recording,
    prepare_files,
    read_archive,
    stream_archive,
    write_archive,
    write_recording_files,
)
from .collection import Collection
from .config import ToolkitSettings, load_settings
from .datatypes import DatatypeInfo, is_valid_datatype, parse_datatype
from .errors import (
    ArchiveFormatError,
    InvalidDatatype,
    InvalidFieldKey,
    MissingCollection,
    MissingGlobal,
    MissingRequiredField,
    NotComplexDatatype,
    SigMFError,
)
from .extensions import (
    ANTENNA_EXTENSION,
    CAPTURE_DETAILS_EXTENSION,
    ExtensionRegistry,
    clear_extensions,
    create_extension_declaration,
    create_field_key,
    default_registry,
    get_all_extensions,
    get_extension,
    get_field_name,
    get_namespace,
    get_unsupported_required_extensions,
    get_used_extensions,
    has_extension,
    register_common_extensions,
    register_extension,
    unregister_extension,
    validate_extension_declarations,
    validate_extension_fields,
)
from .hashing import HashVerificationResult, sha512, sha512_streaming, verify_hash_detailed, verify_sha512
from .metadata import SIGMF_VERSION, Recording
from .models import (
    ArchiveEntry,
    ExtensionDeclaration,
    ExtensionDefinition,
    ExtensionFieldDef,
    NonConformingOptions,
    PreparedFiles,
    RecordingRef,
    ValidationIssue,
    ValidationResult,
)
from .samples import (
    ComplexSample,
    SampleData,
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
from .streaming import BytesSource, ByteSource, FileSource, read_samples_from_source, stream_samples
from .summary import annotations_frame, captures_frame, summarize_recording
from .validation import validate_geolocation, validate_metadata

try:
    __version__ = version("sigmf-toolkit")
except PackageNotFoundError:  # pragma: no cover - fallback for source checkouts
    __version__ = "0.1.0"

__all__ = [
    "ANTENNA_EXTENSION",
    "ARCHIVE_MIME_TYPE",
    "ArchiveEntry",
    "ArchiveFormatError",
    "ByteSource",
    "BytesSource",
    "CAPTURE_DETAILS_EXTENSION",
    "Collection",
    "ComplexSample",
    "DatatypeInfo",
    "ExtensionDeclaration",
    "ExtensionDefinition",
    "ExtensionFieldDef",
    "ExtensionRegistry",
    "FileSource",
    "HashVerificationResult",
    "InvalidDatatype",
    "InvalidFieldKey",
    "MissingCollection",
    "MissingGlobal",
    "MissingRequiredField",
    "NonConformingOptions",
    "NotComplexDatatype",
    "PreparedFiles",
    "Recording",
    "RecordingRef",
    "SIGMF_VERSION",
    "SampleData",
    "SigMFError",
    "ToolkitSettings",
    "ValidationIssue",
    "ValidationResult",
    "annotations_frame",
    "captures_frame",
    "clear_extensions",
    "create_archive",
    "create_archive_from_recording",
    "create_extension_declaration",
    "create_field_key",
    "default_registry",
    "deinterleave",
    "get_all_extensions",
    "get_complex_sample",
    "get_extension",
    "get_field_name",
    "get_namespace",
    "get_unsupported_required_extensions",
    "get_used_extensions",
    "has_extension",
    "interleave",
    "is_valid_datatype",
    "load_settings",
    "magnitude",
    "magnitudes",
    "parse_datatype",
    "phase",
    "phases",
    "prepare_files",
    "read_archive",
    "read_samples",
    "read_samples_from_source",
    "register_common_extensions",
    "register_extension",
    "sha512",
    "sha512_streaming",
    "stream_archive",
    "stream_samples",
    "summarize_recording",
    "unregister_extension",
    "validate_extension_declarations",
    "validate_extension_fields",
    "validate_geolocation",
    "validate_metadata",
    "verify_hash_detailed",
    "verify_sha512",
    "write_archive",
    "write_recording_files",
    "write_samples",
    "write_samples_complex",
]
