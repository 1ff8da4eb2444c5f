"""Asset provider reading exported package metadata from JSON documents.

A manifest is a directory tree holding one JSON document per asset package,
named after the package with a ``.json`` suffix
(``Game/Blueprints/BP_Wolf.uasset.json``)::

    {
      "exports": [
        {
          "object_name": "BP_Wolf_C",
          "class_name": "BlueprintGeneratedClass",
          "super_name": "BP_Animal_C",
          "defaults": {"MaxHealth": 250.0}
        }
      ]
    }

``defaults`` holds the class default object's properties and may be omitted.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence

from pydantic import ValidationError

from blueprint_index.config.policies import HierarchyPolicy
from blueprint_index.entities.core import AssetEntry
from blueprint_index.errors import CorpusReadError
from blueprint_index.utils.logging import get_logger

from .base import DefaultObject

_LOGGER = get_logger(module=__name__)
_DOCUMENT_SUFFIX = ".json"


@dataclass(frozen=True, slots=True)
class ManifestHandle:
    """Locates one export inside a manifest package."""

    package: str
    object_name: str


class ManifestCorpus:
    """Read package documents from a manifest directory on demand.

    Documents are not kept after :meth:`read_package` returns. Only the
    ``defaults`` of class exports are retained, since those are the objects
    ancestor walks ask for later.
    """

    def __init__(self, root: str | Path, *, policy: HierarchyPolicy | None = None) -> None:
        self._root = Path(root)
        if not self._root.is_dir():
            raise FileNotFoundError(f"manifest directory not found: {self._root}")
        self._policy = policy or HierarchyPolicy()
        self._defaults: Dict[ManifestHandle, DefaultObject] = {}
        self._read_packages: set[str] = set()

    @property
    def root(self) -> Path:
        return self._root

    def iter_packages(self) -> Iterable[str]:
        packages: List[str] = []
        for path in sorted(self._root.rglob(f"*{_DOCUMENT_SUFFIX}")):
            package = path.relative_to(self._root).as_posix()[: -len(_DOCUMENT_SUFFIX)]
            if self._policy.accepts_package(package):
                packages.append(package)
        _LOGGER.debug("Discovered manifest packages", root=str(self._root), total=len(packages))
        return packages

    def read_package(self, package: str) -> Sequence[AssetEntry]:
        exports = self._read_exports(package)

        entries: List[AssetEntry] = []
        defaults: Dict[ManifestHandle, DefaultObject] = {}
        for export in exports:
            is_class = self._policy.is_class_export(export.get("class_name"))
            handle = ManifestHandle(package, str(export.get("object_name", "")))
            try:
                entry = AssetEntry(
                    package=package,
                    object_name=export.get("object_name", ""),
                    class_name=export.get("class_name", ""),
                    super_name=export.get("super_name"),
                    handle=handle,
                )
            except ValidationError as exc:
                if is_class:
                    raise CorpusReadError(
                        package, f"invalid export: {exc.errors()[0]['msg']}"
                    ) from exc
                _LOGGER.debug(
                    "Ignoring malformed non-class export",
                    package=package,
                    class_name=export.get("class_name"),
                )
                continue
            entries.append(entry)
            if is_class and isinstance(export.get("defaults"), dict):
                defaults.setdefault(handle, export["defaults"])

        self._defaults.update(defaults)
        self._read_packages.add(package)
        return entries

    def load_default_object(self, handle: Any) -> DefaultObject | None:
        if not isinstance(handle, ManifestHandle):
            return None
        cached = self._defaults.get(handle)
        if cached is not None or handle.package in self._read_packages:
            return cached
        try:
            exports = self._read_exports(handle.package)
        except CorpusReadError as exc:
            _LOGGER.warning(
                "Unable to load default object",
                package=handle.package,
                object_name=handle.object_name,
                reason=exc.reason,
            )
            return None
        for export in exports:
            if export.get("object_name") == handle.object_name:
                defaults = export.get("defaults")
                return defaults if isinstance(defaults, dict) else None
        return None

    def _read_exports(self, package: str) -> List[dict]:
        path = self._root / f"{package}{_DOCUMENT_SUFFIX}"
        try:
            with path.open("r", encoding="utf-8") as handle:
                document = json.load(handle)
        except OSError as exc:
            raise CorpusReadError(package, str(exc)) from exc
        except UnicodeDecodeError as exc:
            raise CorpusReadError(package, f"invalid encoding: {exc.reason}") from exc
        except json.JSONDecodeError as exc:
            raise CorpusReadError(package, f"invalid JSON: {exc.msg}") from exc
        if not isinstance(document, dict):
            raise CorpusReadError(package, "document must contain a mapping at the top level")
        exports = document.get("exports", [])
        if not isinstance(exports, list):
            raise CorpusReadError(package, "'exports' must be a list")
        if not all(isinstance(export, dict) for export in exports):
            raise CorpusReadError(package, "export entries must be objects")
        return exports


__all__ = ["ManifestCorpus", "ManifestHandle"]
