"""I/O utilities for exporting a built hierarchy."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from blueprint_index.utils.helpers import ensure_directory, serialize_json
from blueprint_index.utils.logging import get_logger

from .index import HierarchyIndex

_LOGGER = get_logger(module=__name__)

GRAPH_FORMATS = ("json", "adjacency", "dot")


def export_hierarchy(
    index: HierarchyIndex,
    output_path: str | Path,
    *,
    format: str = "json",
) -> Path:
    path = Path(output_path)
    ensure_directory(path.parent)
    format = format.lower()
    if format == "json":
        payload = {
            "nodes": [
                {
                    "name": record.name,
                    "super": record.super_name,
                    "placeholder": record.is_placeholder,
                }
                for record in sorted(index.records(), key=lambda record: record.name)
            ],
            "edges": [
                {"parent": parent, "child": child}
                for parent, children in index.adjacency().items()
                for child in children
            ],
        }
        serialize_json(payload, path)
    elif format == "adjacency":
        serialize_json(index.adjacency(), path)
    elif format == "dot":
        lines = ["digraph hierarchy {"]
        for name in index.placeholders():
            lines.append(f'  "{_escape(name)}" [style=dashed];')
        for parent, children in index.adjacency().items():
            for child in children:
                lines.append(f'  "{_escape(parent)}" -> "{_escape(child)}";')
        lines.append("}")
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    else:
        raise ValueError(f"unsupported graph export format: {format}")
    _LOGGER.info(
        "Exported hierarchy graph",
        path=str(path),
        format=format,
    )
    return path.resolve()


def write_statistics(index: HierarchyIndex, output_path: str | Path) -> Path:
    path = Path(output_path)
    ensure_directory(path.parent)
    payload = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "stats": index.statistics(),
        "build": index.report.to_dict(),
    }
    serialize_json(payload, path)
    return path.resolve()


def _escape(name: str) -> str:
    return name.replace("\"", "\\\"")


__all__ = ["GRAPH_FORMATS", "export_hierarchy", "write_statistics"]
