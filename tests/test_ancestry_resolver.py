"""Tests for descendant enumeration and ancestor walks."""

from __future__ import annotations

from typing import Dict, List

import pytest

from blueprint_index.entities import ClassRecord
from blueprint_index.hierarchy import AncestryResolver, HierarchyIndex

from conftest import make_entry


@pytest.fixture()
def resolver() -> AncestryResolver:
    index = HierarchyIndex.build(
        [
            make_entry("Root", handle="h:Root"),
            make_entry("A", "Root", handle="h:A"),
            make_entry("B", "Root", handle="h:B"),
            make_entry("A1", "A", handle="h:A1"),
            make_entry("A2", "A", handle="h:A2"),
            make_entry("A1x", "A1", handle="h:A1x"),
            make_entry("Leaf", "Mid", handle="h:Leaf"),
            make_entry("Mid", "Top", handle="h:Mid"),
            make_entry("Top", "NativeBase", handle="h:Top"),
        ]
    )
    return AncestryResolver(index)


class RecordingLoader:
    """Loader returning canned default objects and remembering visit order."""

    def __init__(self, defaults: Dict[str, dict]) -> None:
        self.defaults = defaults
        self.visited: List[str] = []

    def __call__(self, record: ClassRecord) -> dict | None:
        self.visited.append(record.name)
        return self.defaults.get(record.name)


def test_descendants_are_depth_first_pre_order(resolver):
    names = [info.name for info in resolver.get_descendants("Root")]

    assert names == ["A", "A1", "A1x", "A2", "B"]


def test_descendants_carry_super_handles(resolver):
    infos = {info.name: info for info in resolver.get_descendants("Root")}

    assert infos["A"].handle == "h:A"
    assert infos["A"].super_handle == "h:Root"
    assert infos["A1x"].super_handle == "h:A1"


def test_descendants_of_placeholder_have_no_super_handle(resolver):
    infos = list(resolver.get_descendants("NativeBase"))

    assert [info.name for info in infos] == ["Top", "Mid", "Leaf"]
    assert infos[0].super_handle is None


def test_descendants_of_unknown_or_leaf_class_are_empty(resolver):
    assert list(resolver.get_descendants("DoesNotExist")) == []
    assert list(resolver.get_descendants("A1x")) == []


def test_each_call_is_a_fresh_traversal(resolver):
    partial = resolver.get_descendants("Root")
    assert next(partial).name == "A"

    assert len(list(resolver.get_descendants("Root"))) == 5
    assert [info.name for info in partial] == ["A1", "A1x", "A2", "B"]


def test_derived_name_set_unions_bases(resolver):
    assert resolver.derived_name_set("A", "Mid") == frozenset({"A1", "A2", "A1x", "Leaf"})
    assert resolver.derived_name_set() == frozenset()


def test_find_ancestor_accepts_start_class_without_visiting_ancestors(resolver):
    loader = RecordingLoader({"Leaf": {"MaxHealth": 10}, "Mid": {"MaxHealth": 20}})

    match = resolver.find_ancestor("Leaf", loader, lambda data: "MaxHealth" in data)

    assert match is not None
    assert match.name == "Leaf"
    assert match.depth == 0
    assert match.data == {"MaxHealth": 10}
    assert loader.visited == ["Leaf"]


def test_find_ancestor_returns_nearest_qualifying_ancestor(resolver):
    loader = RecordingLoader(
        {"Leaf": {"Other": 1}, "Mid": {"MaxHealth": 20}, "Top": {"MaxHealth": 30}}
    )

    match = resolver.find_ancestor("Leaf", loader, lambda data: "MaxHealth" in data)

    assert match is not None
    assert match.name == "Mid"
    assert match.depth == 1
    assert loader.visited == ["Leaf", "Mid"]


def test_find_ancestor_visits_every_ancestor_once_when_nothing_matches(resolver):
    loader = RecordingLoader({"Leaf": {}, "Mid": {}, "Top": {}})
    inspected: List[dict] = []

    def predicate(data: dict) -> bool:
        inspected.append(data)
        return False

    assert resolver.find_ancestor("Leaf", loader, predicate) is None
    assert loader.visited == ["Leaf", "Mid", "Top", "NativeBase"]
    # NativeBase is a placeholder without data, so the predicate is not called for it.
    assert len(inspected) == 3


def test_find_ancestor_skips_levels_without_data(resolver):
    loader = RecordingLoader({"Top": {"Name": "Top"}})

    match = resolver.find_ancestor("Leaf", loader, lambda data: True)

    assert match is not None
    assert match.name == "Top"
    assert loader.visited == ["Leaf", "Mid", "Top"]


def test_find_ancestor_predicate_can_fill_caller_state(resolver):
    loader = RecordingLoader(
        {"Leaf": {"Name": "Cub"}, "Mid": {"Name": "Adult", "Speed": 3}, "Top": {"Speed": 9}}
    )
    found: Dict[str, object] = {}

    def predicate(data: dict) -> bool:
        for key in ("Name", "Speed"):
            if key in data and key not in found:
                found[key] = data[key]
        return len(found) == 2

    match = resolver.find_ancestor("Leaf", loader, predicate)

    assert match is not None and match.name == "Mid"
    assert found == {"Name": "Cub", "Speed": 3}


def test_find_ancestor_unknown_start_does_not_load(resolver):
    loader = RecordingLoader({})

    assert resolver.find_ancestor("Ghost", loader, lambda data: True) is None
    assert loader.visited == []


def test_iter_ancestors_ends_at_root(resolver):
    assert resolver.ancestor_names("A1x") == ["A1x", "A1", "A", "Root"]
    assert resolver.ancestor_names("Leaf") == ["Leaf", "Mid", "Top", "NativeBase"]
    assert resolver.ancestor_names("Ghost") == []


def test_is_derived_from(resolver):
    assert resolver.is_derived_from("A1x", "Root")
    assert resolver.is_derived_from("A1x", "A1x")
    assert resolver.is_derived_from("Leaf", "NativeBase")
    assert not resolver.is_derived_from("A1x", "B")
    assert not resolver.is_derived_from("Root", "A")
    assert not resolver.is_derived_from("Ghost", "Root")


def test_is_derived_from_any(resolver):
    assert resolver.is_derived_from_any("A2", ["B", "A"])
    assert not resolver.is_derived_from_any("A2", ["B", "Mid"])
    assert not resolver.is_derived_from_any("A2", [])
