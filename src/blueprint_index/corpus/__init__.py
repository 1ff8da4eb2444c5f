"""Asset corpus providers consumed by the hierarchy index."""

from .base import AssetProvider, DataLoader, DefaultObject, make_loader
from .manifest import ManifestCorpus, ManifestHandle
from .memory import InMemoryCorpus

__all__ = [
    "AssetProvider",
    "DataLoader",
    "DefaultObject",
    "make_loader",
    "InMemoryCorpus",
    "ManifestCorpus",
    "ManifestHandle",
]
