"""Structured validation findings."""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class ValidationIssue(BaseModel):
    """A single finding, addressed with a dotted/bracketed path."""

    path: str
    message: str
    value: Any = None

    def as_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "message": self.message, "value": self.value}

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


class ValidationResult(BaseModel):
    valid: bool
    errors: List[ValidationIssue] = Field(default_factory=list)

    @classmethod
    def from_issues(cls, issues: List[ValidationIssue]) -> "ValidationResult":
        return cls(valid=not issues, errors=list(issues))

    def extend(self, issues: List[ValidationIssue]) -> "ValidationResult":
        """Return a new result with ``issues`` appended after the current ones."""
        return ValidationResult.from_issues([*self.errors, *issues])

    def as_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "errors": [issue.as_dict() for issue in self.errors]}

    def __bool__(self) -> bool:
        return self.valid
