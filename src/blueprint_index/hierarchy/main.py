"""Public entry point for loading the blueprint hierarchy from a manifest."""

from __future__ import annotations

from pathlib import Path

from blueprint_index.config.settings import Settings, get_settings
from blueprint_index.corpus.manifest import ManifestCorpus
from blueprint_index.utils.logging import get_logger, log_timing, logging_context

from .index import HierarchyIndex
from .io import export_hierarchy, write_statistics

_LOGGER = get_logger(module=__name__)


def load_hierarchy(
    manifest_path: str | Path,
    *,
    settings: Settings | None = None,
    graph_export_path: str | Path | None = None,
    graph_format: str = "json",
    statistics_path: str | Path | None = None,
    run_id: str = "-",
) -> tuple[HierarchyIndex, ManifestCorpus]:
    """Build the hierarchy for the manifest at *manifest_path*.

    Returns the index together with the corpus it was built from, so callers
    can materialise default objects for the records they visit.
    """

    cfg = settings or get_settings()
    policy = cfg.policies.hierarchy
    corpus = ManifestCorpus(manifest_path, policy=policy)

    with logging_context(step="hierarchy", run_id=run_id), log_timing("hierarchy_build"):
        index = HierarchyIndex.build(corpus, policy=policy)

    if graph_export_path:
        export_hierarchy(index, graph_export_path, format=graph_format)
    if statistics_path:
        write_statistics(index, statistics_path)

    _LOGGER.info(
        "Hierarchy ready",
        manifest=str(Path(manifest_path).resolve()),
        nodes=len(index),
    )
    return index, corpus


__all__ = ["load_hierarchy"]
