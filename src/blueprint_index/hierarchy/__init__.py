"""Blueprint hierarchy public API."""

from __future__ import annotations

from .classify import ClassificationRule, classify
from .index import BuildReport, HierarchyIndex
from .io import export_hierarchy, write_statistics
from .main import load_hierarchy
from .properties import (
    InheritedProperties,
    SubclassObject,
    collect_subclass_objects,
    resolve_properties,
)
from .resolver import AncestorMatch, AncestryResolver

__all__ = [
    "HierarchyIndex",
    "BuildReport",
    "AncestryResolver",
    "AncestorMatch",
    "InheritedProperties",
    "SubclassObject",
    "resolve_properties",
    "collect_subclass_objects",
    "ClassificationRule",
    "classify",
    "export_hierarchy",
    "write_statistics",
    "load_hierarchy",
]
