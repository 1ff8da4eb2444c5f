"""Coarse classification of classes by the ancestors they derive from."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from .resolver import AncestryResolver


@dataclass(frozen=True, slots=True)
class ClassificationRule:
    """Assign ``label`` to classes deriving from any of ``ancestors``."""

    label: str
    ancestors: Tuple[str, ...]

    @classmethod
    def of(cls, label: str, *ancestors: str) -> "ClassificationRule":
        return cls(label=label, ancestors=tuple(ancestors))


def classify(
    resolver: AncestryResolver,
    class_name: str,
    rules: Sequence[ClassificationRule],
    *,
    default: str = "unknown",
) -> str:
    """Return the label of the first rule matching *class_name*, or *default*.

    Rules are checked in order, so more specific rules belong before the
    broader ones they refine.
    """

    for rule in rules:
        if resolver.is_derived_from_any(class_name, rule.ancestors):
            return rule.label
    return default


__all__ = ["ClassificationRule", "classify"]
