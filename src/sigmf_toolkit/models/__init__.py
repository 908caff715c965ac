"""Pydantic models shared across the toolkit."""

from .archive import ArchiveEntry, PreparedFiles
from .extensions import ExtensionDeclaration, ExtensionDefinition, ExtensionFieldDef
from .recording import NonConformingOptions, RecordingRef
from .validation import ValidationIssue, ValidationResult

__all__ = [
    "ArchiveEntry",
    "ExtensionDeclaration",
    "ExtensionDefinition",
    "ExtensionFieldDef",
    "NonConformingOptions",
    "PreparedFiles",
    "RecordingRef",
    "ValidationIssue",
    "ValidationResult",
]
