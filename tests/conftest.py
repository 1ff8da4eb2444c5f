"""Shared fixtures for the blueprint index test-suite."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, List

import pytest
from loguru import logger

from blueprint_index.entities import AssetEntry


def make_entry(
    name: str,
    super_name: str | None = None,
    *,
    package: str = "",
    class_name: str = "BlueprintGeneratedClass",
    handle: Any = None,
) -> AssetEntry:
    return AssetEntry(
        package=package,
        object_name=name,
        class_name=class_name,
        super_name=super_name,
        handle=handle,
    )


def write_manifest(root: Path, packages: Dict[str, List[dict]]) -> Path:
    """Write one manifest document per package below *root*."""

    for package, exports in packages.items():
        path = root / f"{package}.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps({"exports": exports}), encoding="utf-8")
    return root


@pytest.fixture(autouse=True)
def _restore_log_sinks():
    yield
    logger.remove()
    logger.add(sys.stderr, level="WARNING")


@pytest.fixture()
def log_records() -> List[dict]:
    records: List[dict] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


def warnings_in(records: List[dict], message: str) -> List[dict]:
    return [
        record
        for record in records
        if record["level"].name == "WARNING" and record["message"] == message
    ]
