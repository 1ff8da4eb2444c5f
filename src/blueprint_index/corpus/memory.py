"""List-backed asset provider."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Sequence

from blueprint_index.entities.core import AssetEntry
from blueprint_index.errors import CorpusReadError

from .base import DefaultObject


class InMemoryCorpus:
    """Serve pre-built :class:`AssetEntry` values as a corpus.

    Entries sharing a ``package`` are grouped in discovery order; entries
    without one form a package of their own. Entries lacking a handle are
    given their object name as handle so ``defaults`` can be keyed by class
    name.
    """

    def __init__(
        self,
        entries: Iterable[AssetEntry],
        *,
        defaults: Mapping[Any, DefaultObject] | None = None,
        unreadable: Iterable[str] = (),
    ) -> None:
        self._packages: Dict[str, List[AssetEntry]] = {}
        for position, entry in enumerate(entries):
            if entry.handle is None:
                entry = entry.model_copy(update={"handle": entry.object_name})
            key = entry.package or f"<memory>/{position}"
            self._packages.setdefault(key, []).append(entry)
        self._defaults: Dict[Any, DefaultObject] = dict(defaults or {})
        self._unreadable = set(unreadable)

    def __len__(self) -> int:
        return len(self._packages)

    def iter_packages(self) -> Iterable[str]:
        return list(self._packages)

    def read_package(self, package: str) -> Sequence[AssetEntry]:
        if package in self._unreadable:
            raise CorpusReadError(package, "package marked unreadable")
        try:
            return list(self._packages[package])
        except KeyError as exc:
            raise CorpusReadError(package, "unknown package") from exc

    def load_default_object(self, handle: Any) -> DefaultObject | None:
        return self._defaults.get(handle)


__all__ = ["InMemoryCorpus"]
