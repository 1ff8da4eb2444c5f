"""Traversals over a built :class:`HierarchyIndex`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Tuple

from blueprint_index.corpus.base import DataLoader, DefaultObject
from blueprint_index.entities.core import ClassRecord, DescendantInfo

from .index import HierarchyIndex

Predicate = Callable[[DefaultObject], bool]


@dataclass(frozen=True, slots=True)
class AncestorMatch:
    """Nearest ancestor (possibly the start class) accepted by a predicate."""

    record: ClassRecord
    data: DefaultObject
    depth: int

    @property
    def name(self) -> str:
        return self.record.name


class AncestryResolver:
    """Descendant enumeration and nearest-ancestor searches.

    The resolver only reads from the index, so one instance can be shared by
    every consumer for the rest of the run.
    """

    def __init__(self, index: HierarchyIndex) -> None:
        self._index = index

    @property
    def index(self) -> HierarchyIndex:
        return self._index

    def get_descendants(self, class_name: str) -> Iterator[DescendantInfo]:
        """Yield every class derived from *class_name*, depth-first pre-order.

        Each call starts a fresh traversal. Sibling order follows discovery
        order; callers needing a stable order should sort the results. An
        unknown class yields nothing.
        """

        root = self._index.get(class_name)
        if root is None:
            return
        stack: List[Tuple[ClassRecord, Iterator[str]]] = [(root, iter(root.derived_names))]
        while stack:
            parent, children = stack[-1]
            child_name = next(children, None)
            if child_name is None:
                stack.pop()
                continue
            child = self._index.get(child_name)
            if child is None:
                continue
            yield DescendantInfo(name=child.name, handle=child.handle, super_handle=parent.handle)
            stack.append((child, iter(child.derived_names)))

    def derived_name_set(self, *base_names: str) -> frozenset[str]:
        """Return the names of all classes derived from any of *base_names*."""

        names: set[str] = set()
        for base_name in base_names:
            names.update(info.name for info in self.get_descendants(base_name))
        return frozenset(names)

    def iter_ancestors(self, class_name: str) -> Iterator[ClassRecord]:
        """Yield *class_name*'s record followed by each superclass record toward the root."""

        record = self._index.get(class_name)
        while record is not None:
            yield record
            if record.super_name is None:
                return
            record = self._index.get(record.super_name)

    def find_ancestor(
        self,
        start_class_name: str,
        load_data: DataLoader,
        predicate: Predicate,
    ) -> AncestorMatch | None:
        """Return the nearest class, starting with *start_class_name*, whose data satisfies *predicate*.

        ``load_data`` materialises a record's default-value object and may
        return ``None``, in which case that level is skipped. ``predicate`` may
        record results into caller-owned state and returns ``True`` to stop
        the walk. Returns ``None`` when the class is unknown or no ancestor
        satisfies the predicate.
        """

        for depth, record in enumerate(self.iter_ancestors(start_class_name)):
            data = load_data(record)
            if data is None:
                continue
            if predicate(data):
                return AncestorMatch(record=record, data=data, depth=depth)
        return None

    def is_derived_from(self, class_name: str, ancestor_name: str) -> bool:
        """Return whether *ancestor_name* is *class_name* or one of its ancestors."""

        return any(record.name == ancestor_name for record in self.iter_ancestors(class_name))

    def is_derived_from_any(self, class_name: str, ancestor_names: Iterable[str]) -> bool:
        wanted = set(ancestor_names)
        if not wanted:
            return False
        return any(record.name in wanted for record in self.iter_ancestors(class_name))

    def ancestor_names(self, class_name: str) -> List[str]:
        return [record.name for record in self.iter_ancestors(class_name)]


__all__ = ["AncestryResolver", "AncestorMatch", "Predicate"]
