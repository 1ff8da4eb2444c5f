"""Blueprint hierarchy policy models."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field, field_validator


class HierarchyPolicy(BaseModel):
    """Configuration controlling how the class hierarchy is scanned and queried."""

    class_export_types: List[str] = Field(
        default_factory=lambda: ["BlueprintGeneratedClass"],
        min_length=1,
        description="Export class names that mark an asset as class-defining.",
    )
    asset_extensions: List[str] = Field(
        default_factory=lambda: [".uasset"],
        description="Package file extensions considered when scanning a manifest corpus.",
    )
    first_class_export_only: bool = Field(
        default=True,
        description="Stop reading a package after its first class-defining export.",
    )
    warn_on_duplicate_super: bool = Field(default=True)
    case_insensitive_properties: bool = Field(
        default=True,
        description="Match default-object property names without regard to case.",
    )

    @field_validator("class_export_types", mode="before")
    def _normalize_export_types(value: List[str]) -> List[str]:
        return [name.strip() for name in value if name and name.strip()]

    @field_validator("asset_extensions", mode="before")
    def _normalize_extensions(value: List[str]) -> List[str]:
        normalized: List[str] = []
        for extension in value:
            if not extension or not extension.strip():
                continue
            cleaned = extension.strip().lower()
            if not cleaned.startswith("."):
                cleaned = f".{cleaned}"
            normalized.append(cleaned)
        return normalized

    def is_class_export(self, class_name: str | None) -> bool:
        return class_name is not None and class_name in self.class_export_types

    def accepts_package(self, package: str) -> bool:
        if not self.asset_extensions:
            return True
        return package.lower().endswith(tuple(self.asset_extensions))
