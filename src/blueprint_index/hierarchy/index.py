"""Class inheritance index built from a single scan of the asset corpus."""

from __future__ import annotations

from dataclasses import dataclass, field
from time import perf_counter
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping

from pydantic import ValidationError

from blueprint_index.config.policies import HierarchyPolicy
from blueprint_index.corpus.base import AssetProvider
from blueprint_index.entities.core import AssetEntry, ClassRecord
from blueprint_index.errors import CorpusReadError
from blueprint_index.utils.logging import get_logger

_LOGGER = get_logger(module=__name__)


@dataclass(slots=True)
class BuildReport:
    """Counters collected while building a :class:`HierarchyIndex`."""

    classes: int = 0
    placeholders: int = 0
    duplicates: int = 0
    conflicting_duplicates: int = 0
    skipped_exports: int = 0
    invalid_entries: int = 0
    unreadable_packages: List[str] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    def to_dict(self) -> dict:
        return {
            "classes": self.classes,
            "placeholders": self.placeholders,
            "duplicates": self.duplicates,
            "conflicting_duplicates": self.conflicting_duplicates,
            "skipped_exports": self.skipped_exports,
            "invalid_entries": self.invalid_entries,
            "unreadable_packages": list(self.unreadable_packages),
            "elapsed_seconds": self.elapsed_seconds,
        }


@dataclass(slots=True)
class _PendingClass:
    name: str
    super_name: str | None = None
    handle: Any = None
    derived: List[str] = field(default_factory=list)
    placeholder: bool = False

    def to_record(self) -> ClassRecord:
        return ClassRecord(
            name=self.name,
            super_name=self.super_name,
            handle=self.handle,
            derived_names=tuple(self.derived),
            placeholder=self.placeholder,
        )


class _HierarchyBuilder:
    """Accumulates class exports and links them once the scan completes."""

    def __init__(self, policy: HierarchyPolicy) -> None:
        self._policy = policy
        self._classes: Dict[str, _PendingClass] = {}
        self._report = BuildReport()

    @property
    def report(self) -> BuildReport:
        return self._report

    # ------------------------------------------------------------------
    # Phase 1: discovery
    # ------------------------------------------------------------------
    def scan(self, corpus: AssetProvider | Iterable[AssetEntry | Mapping[str, Any]]) -> None:
        if isinstance(corpus, AssetProvider):
            self._scan_provider(corpus)
        else:
            self._scan_entries(corpus)

    def _scan_provider(self, provider: AssetProvider) -> None:
        for package in provider.iter_packages():
            try:
                entries = provider.read_package(package)
            except CorpusReadError as exc:
                self._report.unreadable_packages.append(package)
                _LOGGER.warning(
                    "Skipping unreadable package",
                    package=package,
                    reason=exc.reason,
                )
                continue
            for entry in entries:
                if self._accept(entry) and self._policy.first_class_export_only:
                    break

    def _scan_entries(self, entries: Iterable[AssetEntry | Mapping[str, Any]]) -> None:
        class_packages: set[str] = set()
        for raw in entries:
            entry = self._coerce_entry(raw)
            if entry is None:
                continue
            if (
                self._policy.first_class_export_only
                and entry.package
                and entry.package in class_packages
            ):
                continue
            if self._accept(entry) and entry.package:
                class_packages.add(entry.package)

    def _coerce_entry(self, raw: AssetEntry | Mapping[str, Any]) -> AssetEntry | None:
        if isinstance(raw, AssetEntry):
            return raw
        try:
            return AssetEntry.model_validate(raw)
        except ValidationError as exc:
            self._report.invalid_entries += 1
            _LOGGER.warning(
                "Skipping malformed corpus entry",
                error=exc.errors()[0]["msg"] if exc.errors() else str(exc),
            )
            return None

    def _accept(self, entry: AssetEntry) -> bool:
        """Record *entry* if it defines a class; return whether it did."""

        if not self._policy.is_class_export(entry.class_name):
            self._report.skipped_exports += 1
            return False

        name = entry.object_name
        existing = self._classes.get(name)
        if existing is not None:
            self._report.duplicates += 1
            if existing.super_name != entry.super_name:
                self._report.conflicting_duplicates += 1
                if self._policy.warn_on_duplicate_super:
                    _LOGGER.warning(
                        "Class found multiple times with different super classes",
                        class_name=name,
                        kept_super=existing.super_name,
                        ignored_super=entry.super_name,
                        package=entry.package,
                    )
            return True

        self._classes[name] = _PendingClass(
            name=name,
            super_name=entry.super_name,
            handle=entry.handle,
        )
        return True

    # ------------------------------------------------------------------
    # Phases 2 and 3: linking and placeholder merge
    # ------------------------------------------------------------------
    def finish(self) -> Dict[str, ClassRecord]:
        placeholders: Dict[str, _PendingClass] = {}
        for name, pending in self._classes.items():
            super_name = pending.super_name
            if super_name is None:
                continue
            parent = self._classes.get(super_name)
            if parent is None:
                parent = placeholders.get(super_name)
                if parent is None:
                    parent = _PendingClass(name=super_name, placeholder=True)
                    placeholders[super_name] = parent
            parent.derived.append(name)

        self._report.classes = len(self._classes)
        self._report.placeholders = len(placeholders)

        merged: Dict[str, _PendingClass] = dict(self._classes)
        merged.update(placeholders)
        return {name: pending.to_record() for name, pending in merged.items()}


class HierarchyIndex:
    """Immutable ``name -> ClassRecord`` map covering every known class.

    Every class appears in the index, whether it was discovered as a
    class-defining asset or only referenced as another class's super. The
    ``derived_names`` of every record are complete regardless of the order in
    which the corpus was scanned.
    """

    def __init__(
        self,
        records: Mapping[str, ClassRecord],
        *,
        report: BuildReport | None = None,
    ) -> None:
        self._records: Mapping[str, ClassRecord] = MappingProxyType(dict(records))
        self._report = report or BuildReport(
            classes=sum(1 for record in records.values() if not record.is_placeholder),
            placeholders=sum(1 for record in records.values() if record.is_placeholder),
        )

    @classmethod
    def build(
        cls,
        corpus: AssetProvider | Iterable[AssetEntry | Mapping[str, Any]],
        *,
        policy: HierarchyPolicy | None = None,
    ) -> "HierarchyIndex":
        """Scan *corpus* once and return the linked index.

        ``corpus`` is either an :class:`AssetProvider` or an iterable of
        :class:`AssetEntry` values (or mappings validating as one). Unreadable
        packages, malformed entries and conflicting duplicates are logged and
        skipped; building never fails because of corpus content.
        """

        builder = _HierarchyBuilder(policy or HierarchyPolicy())
        _LOGGER.info("Loading blueprint hierarchy")
        start = perf_counter()
        builder.scan(corpus)
        records = builder.finish()
        report = builder.report
        report.elapsed_seconds = round(perf_counter() - start, 3)
        _LOGGER.info(
            "Blueprint hierarchy load completed",
            seconds=report.elapsed_seconds,
            classes=report.classes,
            placeholders=report.placeholders,
            duplicates=report.duplicates,
            unreadable=len(report.unreadable_packages),
        )
        return cls(records, report=report)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def __contains__(self, name: object) -> bool:
        return name in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    @property
    def report(self) -> BuildReport:
        return self._report

    def get(self, name: str) -> ClassRecord | None:
        return self._records.get(name)

    def names(self) -> List[str]:
        return list(self._records)

    def records(self) -> Iterator[ClassRecord]:
        yield from self._records.values()

    def roots(self) -> List[str]:
        return sorted(name for name, record in self._records.items() if record.is_root)

    def placeholders(self) -> List[str]:
        return sorted(name for name, record in self._records.items() if record.is_placeholder)

    # ------------------------------------------------------------------
    # Export helpers
    # ------------------------------------------------------------------
    def adjacency(self) -> Dict[str, List[str]]:
        """Return ``super -> sorted derived names`` for every class with subclasses."""

        return {
            name: sorted(record.derived_names)
            for name, record in sorted(self._records.items())
            if record.derived_names
        }

    def statistics(self) -> Dict[str, object]:
        """Return structural statistics for reports and manifests."""

        out_degrees = [len(record.derived_names) for record in self._records.values()]
        return {
            "node_count": len(self._records),
            "class_count": self._report.classes,
            "placeholder_count": self._report.placeholders,
            "root_count": sum(1 for record in self._records.values() if record.is_root),
            "edge_count": sum(out_degrees),
            "max_out_degree": max(out_degrees, default=0),
            "duplicates": self._report.duplicates,
            "conflicting_duplicates": self._report.conflicting_duplicates,
            "unreadable_packages": len(self._report.unreadable_packages),
        }


__all__ = ["HierarchyIndex", "BuildReport"]
