"""Primary Typer application wiring the blueprint index CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import typer
from rich.table import Table

from blueprint_index.corpus.base import make_loader
from blueprint_index.hierarchy.io import GRAPH_FORMATS
from blueprint_index.hierarchy.properties import resolve_properties

from .common import (
    CLIError,
    configure_state,
    console,
    get_state,
    load_for_command,
    parse_override,
    render_panel,
)

ErrorRenderer = Callable[[BaseException], Optional[typer.Exit]]


class IndexTyper(typer.Typer):
    """Typer application that renders registered exceptions instead of raising them.

    Handlers are looked up along the exception's MRO, so a handler for a base
    class also covers its subclasses unless a more specific one is registered.
    A handler returns the :class:`typer.Exit` to raise, or ``None`` to let the
    call return normally.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._error_renderers: Dict[type[BaseException], ErrorRenderer] = {}

    def exception_handler(
        self, exception_type: type[BaseException]
    ) -> Callable[[ErrorRenderer], ErrorRenderer]:
        def register(renderer: ErrorRenderer) -> ErrorRenderer:
            self._error_renderers[exception_type] = renderer
            return renderer

        return register

    def _renderer_for(self, exception: BaseException) -> ErrorRenderer | None:
        for klass in type(exception).__mro__:
            renderer = self._error_renderers.get(klass)
            if renderer is not None:
                return renderer
        return None

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        try:
            return super().__call__(*args, **kwargs)
        except Exception as exc:
            renderer = self._renderer_for(exc)
            if renderer is None:
                raise
            outcome = renderer(exc)
            if outcome is not None:
                raise outcome from exc
            return None


app = IndexTyper(
    add_completion=False,
    help="""
    Build the blueprint class hierarchy from an asset manifest and query
    descendants, ancestors and inherited default properties.
    """.strip(),
    no_args_is_help=True,
)


@app.exception_handler(CLIError)
def handle_cli_error(exception: CLIError) -> typer.Exit:
    """Render ``CLIError`` messages without stack traces."""

    console.print(f"[bold red]Error:[/bold red] {exception}")
    return typer.Exit(code=2)


@app.callback()
def main(
    ctx: typer.Context,
    environment: Optional[str] = typer.Option(
        None,
        "--environment",
        "-e",
        help="Active configuration environment (development, testing, production).",
        show_default=False,
    ),
    override: List[str] = typer.Option(  # noqa: B008 - Typer callback signature
        [],
        "--override",
        "-o",
        metavar="KEY=VALUE",
        help="Configuration override in dotted.key=value notation (repeatable).",
    ),
    run_id: Optional[str] = typer.Option(
        None,
        "--run-id",
        help="Explicit run identifier; defaults to a generated value.",
        show_default=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Emit debug logging and the resolved CLI context.",
    ),
) -> None:
    """Configure shared CLI state prior to executing subcommands."""

    overrides = [parse_override(item) for item in override]
    configure_state(
        ctx,
        environment=environment,
        overrides=overrides,
        run_id=run_id,
        verbose=verbose,
    )

    if verbose:
        state = ctx.obj
        table = Table(title="CLI Context", show_header=False, box=None)
        table.add_row("Environment", getattr(state, "environment", "<unknown>"))
        table.add_row("Run ID", getattr(state, "run_id", "<unset>"))
        table.add_row("Policy version", state.settings.policy_version)
        console.print(table)


ManifestArgument = typer.Argument(..., help="Manifest directory holding one JSON document per package.")


def _build_command(
    ctx: typer.Context,
    manifest: Path = ManifestArgument,
    graph: Optional[Path] = typer.Option(
        None, "--graph", help="Optional path for exporting the hierarchy graph."
    ),
    graph_format: str = typer.Option(
        "json", "--graph-format", help=f"Graph export format ({', '.join(GRAPH_FORMATS)})."
    ),
    stats: Optional[Path] = typer.Option(
        None, "--stats", help="Optional path for writing hierarchy statistics JSON."
    ),
) -> None:
    """Build the hierarchy and summarise it."""

    if graph_format.lower() not in GRAPH_FORMATS:
        raise CLIError(f"--graph-format must be one of: {', '.join(GRAPH_FORMATS)}")
    state = get_state(ctx)
    loaded = load_for_command(
        state,
        manifest,
        graph_export_path=graph,
        graph_format=graph_format,
        statistics_path=stats,
    )
    table = Table(title="Blueprint Hierarchy", show_header=False, box=None)
    for key, value in loaded.index.statistics().items():
        table.add_row(key.replace("_", " ").capitalize(), str(value))
    console.print(table)
    unreadable = loaded.index.report.unreadable_packages
    if unreadable:
        console.print(f"[yellow]{len(unreadable)} package(s) could not be read; see log for details.[/yellow]")


def _descendants_command(
    ctx: typer.Context,
    manifest: Path = ManifestArgument,
    class_name: str = typer.Argument(..., help="Base class whose descendants are listed."),
    sort: bool = typer.Option(False, "--sort", help="Sort results by class name."),
) -> None:
    """List every class derived from CLASS_NAME."""

    loaded = load_for_command(get_state(ctx), manifest)
    names = [info.name for info in loaded.resolver.get_descendants(class_name)]
    if sort:
        names.sort()
    if not names:
        console.print(f"[yellow]No classes derive from {class_name}.[/yellow]")
        return
    for name in names:
        console.print(name)


def _ancestors_command(
    ctx: typer.Context,
    manifest: Path = ManifestArgument,
    class_name: str = typer.Argument(..., help="Class whose ancestor chain is printed."),
) -> None:
    """Print CLASS_NAME followed by each ancestor up to its root."""

    loaded = load_for_command(get_state(ctx), manifest)
    chain = list(loaded.resolver.iter_ancestors(class_name))
    if not chain:
        raise CLIError(f"Class '{class_name}' is not part of the hierarchy")
    table = Table(title=f"Ancestors of {class_name}")
    table.add_column("Depth", justify="right")
    table.add_column("Class")
    table.add_column("Placeholder")
    for depth, record in enumerate(chain):
        table.add_row(str(depth), record.name, "yes" if record.is_placeholder else "")
    console.print(table)


def _is_derived_command(
    ctx: typer.Context,
    manifest: Path = ManifestArgument,
    class_name: str = typer.Argument(..., help="Class to test."),
    ancestor: str = typer.Argument(..., help="Candidate ancestor class."),
) -> None:
    """Exit with code 0 when CLASS_NAME derives from ANCESTOR, 1 otherwise."""

    loaded = load_for_command(get_state(ctx), manifest)
    derived = loaded.resolver.is_derived_from(class_name, ancestor)
    console.print("yes" if derived else "no")
    if not derived:
        raise typer.Exit(code=1)


def _resolve_command(
    ctx: typer.Context,
    manifest: Path = ManifestArgument,
    class_name: str = typer.Argument(..., help="Class whose properties are resolved."),
    properties: List[str] = typer.Argument(..., help="Property names to resolve."),
) -> None:
    """Resolve default-object properties through CLASS_NAME's ancestors."""

    state = get_state(ctx)
    loaded = load_for_command(state, manifest)
    if class_name not in loaded.index:
        raise CLIError(f"Class '{class_name}' is not part of the hierarchy")
    resolved = resolve_properties(
        loaded.resolver,
        class_name,
        properties,
        make_loader(loaded.corpus),
        case_insensitive=state.settings.policies.hierarchy.case_insensitive_properties,
    )
    render_panel(f"Properties of {class_name}", resolved.to_dict())


app.command("build")(_build_command)
app.command("descendants")(_descendants_command)
app.command("ancestors")(_ancestors_command)
app.command("is-derived")(_is_derived_command)
app.command("resolve")(_resolve_command)
