"""Boundary between the hierarchy index and the asset corpus."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, Protocol, Sequence, runtime_checkable

from blueprint_index.entities.core import AssetEntry, ClassRecord

DefaultObject = Mapping[str, Any]
DataLoader = Callable[[ClassRecord], "DefaultObject | None"]


@runtime_checkable
class AssetProvider(Protocol):
    """Source of asset exports and their default-value objects.

    ``read_package`` may raise :class:`~blueprint_index.errors.CorpusReadError`
    for a package that cannot be read; the index skips such packages.
    ``load_default_object`` returns ``None`` when no object is available.
    """

    def iter_packages(self) -> Iterable[str]:
        ...

    def read_package(self, package: str) -> Sequence[AssetEntry]:
        ...

    def load_default_object(self, handle: Any) -> DefaultObject | None:
        ...


def make_loader(provider: AssetProvider) -> DataLoader:
    """Return a loader that materialises a record's default object via *provider*.

    Placeholder records have no handle and always load as ``None``.
    """

    def _load(record: ClassRecord) -> DefaultObject | None:
        if record.handle is None:
            return None
        return provider.load_default_object(record.handle)

    return _load


__all__ = ["AssetProvider", "DataLoader", "DefaultObject", "make_loader"]
