"""Domain entities for the blueprint index."""

from .core import AssetEntry, ClassRecord, DescendantInfo

__all__ = [
    "AssetEntry",
    "ClassRecord",
    "DescendantInfo",
]
