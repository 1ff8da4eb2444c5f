"""Resolve default-object properties through blueprint inheritance.

Most values a data miner wants are not set on the leaf class being inspected
but on some ancestor. These helpers walk from a class toward its root and keep
the value from the nearest class that sets each property.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from blueprint_index.corpus.base import DataLoader
from blueprint_index.utils.logging import get_logger

from .resolver import AncestryResolver

_LOGGER = get_logger(module=__name__)


@dataclass(slots=True)
class InheritedProperties:
    """Property values resolved for one class, keyed by the requested names."""

    class_name: str
    values: Dict[str, Any] = field(default_factory=dict)
    sources: Dict[str, str] = field(default_factory=dict)
    missing: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.missing

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)

    def to_dict(self) -> dict:
        return {
            "class_name": self.class_name,
            "values": dict(self.values),
            "sources": dict(self.sources),
            "missing": list(self.missing),
        }


def resolve_properties(
    resolver: AncestryResolver,
    class_name: str,
    property_names: Sequence[str],
    load_data: DataLoader,
    *,
    case_insensitive: bool = True,
) -> InheritedProperties:
    """Collect *property_names* from *class_name* and its ancestors, nearest first.

    The walk stops as soon as every requested property has been seen.
    Requested names absent on every ancestor are listed in ``missing``.
    """

    result = InheritedProperties(class_name=class_name)
    requested_names = list(dict.fromkeys(property_names))
    pending: Dict[str, List[str]] = {}
    for name in requested_names:
        pending.setdefault(_fold(name, case_insensitive), []).append(name)
    if not pending:
        return result

    for record in resolver.iter_ancestors(class_name):
        data = load_data(record)
        if data is None:
            continue
        for key, value in data.items():
            for requested in pending.pop(_fold(key, case_insensitive), ()):
                result.values[requested] = value
                result.sources[requested] = record.name
        if not pending:
            break

    result.missing = [name for name in requested_names if name not in result.values]
    return result


@dataclass(slots=True)
class SubclassObject:
    """A class derived from a queried base, with its resolved display data."""

    class_name: str
    name: str | None
    properties: InheritedProperties

    def sort_key(self) -> Tuple[bool, str, str]:
        return (self.name is not None, self.name or "", self.class_name)


def collect_subclass_objects(
    resolver: AncestryResolver,
    base_names: Iterable[str],
    name_property: str,
    load_data: DataLoader,
    *,
    additional_properties: Sequence[str] = (),
    case_insensitive: bool = True,
) -> List[SubclassObject]:
    """Return every class derived from *base_names* with its properties resolved.

    Results are sorted with unnamed classes first, then by display name and
    class name. A class reachable from several bases is reported once.
    """

    bases = list(base_names)
    wanted = [name_property, *[name for name in additional_properties if name != name_property]]
    seen: set[str] = set()
    objects: List[SubclassObject] = []
    for base_name in bases:
        for info in resolver.get_descendants(base_name):
            if info.name in seen:
                continue
            seen.add(info.name)
            properties = resolve_properties(
                resolver,
                info.name,
                wanted,
                load_data,
                case_insensitive=case_insensitive,
            )
            display = properties.get(name_property)
            objects.append(
                SubclassObject(
                    class_name=info.name,
                    name=None if display is None else str(display),
                    properties=properties,
                )
            )
    objects.sort(key=SubclassObject.sort_key)
    _LOGGER.debug(
        "Collected subclass objects",
        bases=bases,
        total=len(objects),
    )
    return objects


def _fold(name: str, case_insensitive: bool) -> str:
    return name.lower() if case_insensitive else name


__all__ = [
    "InheritedProperties",
    "SubclassObject",
    "resolve_properties",
    "collect_subclass_objects",
]
