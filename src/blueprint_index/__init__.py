"""Blueprint class inheritance index and ancestor resolution."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("blueprint-index")
except PackageNotFoundError:  # pragma: no cover - running from a source checkout
    __version__ = "0.1.0"

from .config.settings import Settings, get_settings
from .entities import AssetEntry, ClassRecord, DescendantInfo
from .errors import BlueprintIndexError, CorpusReadError
from .hierarchy import AncestorMatch, AncestryResolver, HierarchyIndex

__all__ = [
    "__version__",
    "Settings",
    "get_settings",
    "AssetEntry",
    "ClassRecord",
    "DescendantInfo",
    "BlueprintIndexError",
    "CorpusReadError",
    "HierarchyIndex",
    "AncestryResolver",
    "AncestorMatch",
]
