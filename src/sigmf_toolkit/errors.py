"""Exception types raised for malformed SigMF input."""

from __future__ import annotations


class SigMFError(Exception):
    """Base class for every error raised by the toolkit."""


class InvalidDatatype(SigMFError, ValueError):
    def __init__(self, datatype: object) -> None:
        super().__init__(f"Invalid datatype: {datatype!r}")
        self.datatype = datatype


class MissingGlobal(SigMFError, ValueError):
    def __init__(self) -> None:
        super().__init__("Invalid SigMF: missing or invalid global object")


class MissingRequiredField(SigMFError, ValueError):
    def __init__(self, field: str) -> None:
        super().__init__(f"Invalid SigMF: missing required field {field}")
        self.field = field


class MissingCollection(SigMFError, ValueError):
    def __init__(self) -> None:
        super().__init__("Invalid SigMF Collection: missing or invalid collection object")


class NotComplexDatatype(SigMFError, ValueError):
    def __init__(self, datatype: str) -> None:
        super().__init__(f"A complex datatype is required (got {datatype!r})")
        self.datatype = datatype


class InvalidFieldKey(SigMFError, ValueError):
    def __init__(self, key: str) -> None:
        super().__init__(f"Extension field must be in namespace:name format (got {key!r})")
        self.key = key


class ArchiveFormatError(SigMFError):
    """Raised for truncated or corrupt TAR data."""
