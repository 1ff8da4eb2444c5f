"""Core domain entities describing blueprint classes and their relationships."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AssetEntry(BaseModel):
    """One export read from the asset corpus.

    ``handle`` is owned by the corpus provider and is passed back to it when a
    class's default-value object is needed. The index never inspects it.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    package: str = Field(default="", description="Path of the package containing the export.")
    object_name: str = Field(..., min_length=1, description="Name of the exported object.")
    class_name: str = Field(
        ...,
        min_length=1,
        description="Type of the export, e.g. BlueprintGeneratedClass.",
    )
    super_name: str | None = Field(
        default=None,
        description="Name of the immediate superclass, absent for root classes.",
    )
    handle: Any = Field(default=None, exclude=True)

    @field_validator("object_name", "class_name")
    @classmethod
    def _strip_names(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("names must contain non-whitespace characters")
        return cleaned

    @field_validator("super_name")
    @classmethod
    def _normalize_super(cls, value: str | None) -> str | None:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None


@dataclass(frozen=True, slots=True)
class ClassRecord:
    """A class known to the hierarchy index.

    Records built from class-defining assets carry the provider ``handle``.
    Placeholder records stand in for superclasses that were only ever seen as
    someone's super (native engine classes, for example) and have none.
    """

    name: str
    super_name: str | None = None
    handle: Any = None
    derived_names: Tuple[str, ...] = ()
    placeholder: bool = False

    @property
    def is_placeholder(self) -> bool:
        return self.placeholder

    @property
    def is_root(self) -> bool:
        return self.super_name is None


@dataclass(frozen=True, slots=True)
class DescendantInfo:
    """A class yielded by descendant enumeration together with its super's handle."""

    name: str
    handle: Any
    super_handle: Any


__all__ = [
    "AssetEntry",
    "ClassRecord",
    "DescendantInfo",
]
