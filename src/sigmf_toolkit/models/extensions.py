"""Extension namespace definitions."""

from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

FieldType = Literal["string", "number", "boolean", "array", "object", "null"]


class ExtensionDeclaration(BaseModel):
    """Entry of a ``core:extensions`` array."""

    name: str
    version: str
    optional: bool = True

    def as_dict(self) -> dict[str, Any]:
        return {"name": self.name, "version": self.version, "optional": self.optional}


class ExtensionFieldDef(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: FieldType
    required: bool = False
    description: Optional[str] = None
    default: Any = None


class ExtensionDefinition(BaseModel):
    """Fields an extension namespace may add to each metadata object."""

    name: str
    version: str
    description: Optional[str] = None
    global_fields: List[ExtensionFieldDef] = Field(default_factory=list)
    capture_fields: List[ExtensionFieldDef] = Field(default_factory=list)
    annotation_fields: List[ExtensionFieldDef] = Field(default_factory=list)
    collection_fields: List[ExtensionFieldDef] = Field(default_factory=list)
