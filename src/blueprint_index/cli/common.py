"""Shared helpers used across the blueprint index CLI."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, MutableMapping
from uuid import uuid4

import typer
from rich.console import Console
from rich.json import JSON as RichJSON
from rich.panel import Panel

from blueprint_index.config.settings import Settings
from blueprint_index.corpus.manifest import ManifestCorpus
from blueprint_index.hierarchy import AncestryResolver, HierarchyIndex, load_hierarchy
from blueprint_index.utils.logging import configure_logging, get_logger

console = Console()
_LOGGER = get_logger(module=__name__)


class CLIError(RuntimeError):
    """Exception raised for user-facing CLI errors."""


@dataclass(slots=True)
class CLIState:
    """State object attached to ``typer.Context`` for downstream commands."""

    settings: Settings
    overrides: Dict[str, Any]
    environment: str
    run_id: str
    verbose: bool


@dataclass(slots=True)
class LoadedHierarchy:
    index: HierarchyIndex
    corpus: ManifestCorpus
    resolver: AncestryResolver


def _merge_dict(dest: MutableMapping[str, Any], src: Mapping[str, Any]) -> None:
    for key, value in src.items():
        if isinstance(value, Mapping) and isinstance(dest.get(key), MutableMapping):
            _merge_dict(dest[key], value)  # type: ignore[index]
        elif isinstance(value, Mapping):
            dest[key] = dict(value)
        else:
            dest[key] = value


def parse_override(argument: str) -> Dict[str, Any]:
    """Parse dotted ``key=value`` overrides into nested dictionaries."""

    if "=" not in argument:
        raise typer.BadParameter("Overrides must be expressed as dotted.key=value")
    dotted, value = argument.split("=", 1)
    cursor: MutableMapping[str, Any] = {}
    current = cursor
    segments = [segment.strip() for segment in dotted.split(".") if segment.strip()]
    if not segments:
        raise typer.BadParameter("Override keys must not be empty")
    for segment in segments[:-1]:
        nested: Dict[str, Any] = {}
        current[segment] = nested
        current = nested
    try:
        parsed_value = json.loads(value)
    except json.JSONDecodeError:
        parsed_value = value
    current[segments[-1]] = parsed_value
    return cursor


def merge_overrides(overrides: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """Merge override dictionaries using deep semantics."""

    result: Dict[str, Any] = {}
    for override in overrides:
        _merge_dict(result, override)
    return result


def resolve_settings(environment: str | None, overrides: Dict[str, Any]) -> Settings:
    """Construct :class:`Settings` with environment and overrides applied."""

    payload = dict(overrides)
    if environment:
        payload["environment"] = environment
    return Settings(**payload)


def configure_state(
    ctx: typer.Context,
    *,
    environment: str | None,
    overrides: Iterable[Dict[str, Any]],
    run_id: str | None,
    verbose: bool,
) -> None:
    """Populate ``ctx.obj`` with :class:`CLIState` and install log sinks."""

    merged = merge_overrides(overrides)
    settings = resolve_settings(environment, merged)
    configure_logging(
        settings,
        level="DEBUG" if verbose else None,
        log_to_file=settings.create_dirs,
    )
    ctx.obj = CLIState(
        settings=settings,
        overrides=merged,
        environment=settings.environment,
        run_id=run_id or f"cli-{uuid4().hex[:8]}",
        verbose=verbose,
    )


def get_state(ctx: typer.Context) -> CLIState:
    """Return the previously configured :class:`CLIState`."""

    if ctx.obj is None:
        raise CLIError("CLI context is not initialised")
    if not isinstance(ctx.obj, CLIState):  # pragma: no cover
        raise CLIError("Unexpected CLI context payload")
    return ctx.obj


def render_panel(title: str, content: Mapping[str, Any]) -> None:
    """Render a JSON-like mapping inside a Rich panel."""

    console.print(Panel(RichJSON.from_data(content), title=title, border_style="cyan"))


def resolve_path(path: str | Path, *, must_exist: bool = True) -> Path:
    target = Path(path).expanduser().resolve()
    if must_exist and not target.exists():
        raise CLIError(f"Path does not exist: {target}")
    return target


def load_for_command(
    state: CLIState,
    manifest: Path,
    *,
    graph_export_path: Path | None = None,
    graph_format: str = "json",
    statistics_path: Path | None = None,
) -> LoadedHierarchy:
    """Build the hierarchy for a command, translating setup failures into :class:`CLIError`."""

    manifest_path = resolve_path(manifest)
    try:
        index, corpus = load_hierarchy(
            manifest_path,
            settings=state.settings,
            graph_export_path=graph_export_path,
            graph_format=graph_format,
            statistics_path=statistics_path,
            run_id=state.run_id,
        )
    except FileNotFoundError as exc:
        raise CLIError(str(exc)) from exc
    except ValueError as exc:
        raise CLIError(str(exc)) from exc
    return LoadedHierarchy(index=index, corpus=corpus, resolver=AncestryResolver(index))


__all__ = [
    "CLIError",
    "CLIState",
    "LoadedHierarchy",
    "console",
    "configure_state",
    "get_state",
    "load_for_command",
    "merge_overrides",
    "parse_override",
    "render_panel",
    "resolve_path",
    "resolve_settings",
]
