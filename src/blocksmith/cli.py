# src/blocksmith/cli.py
"""
blocksmith Command Line Interface (CLI).

This module implements the terminal front end using `typer` and `rich`. All
state lives in a JSON site file (schema, records, layouts, migration map);
each command loads it, runs the engine, and writes it back on success.

Usage
-----
    # Import blocks declared in a config file
    $ blocksmith import-blocks migrations/blocks.yml --site site.json

    # Give node 12 a layout field, then append the configured section to it
    $ blocksmith add-node 12
    $ blocksmith build-layout migrations/layout.yml 12

    # Inspect the result
    $ blocksmith show-layout 12
"""

from __future__ import annotations

import traceback
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from blocksmith.core.contracts.report import ImportReport
from blocksmith.core.errors import BlocksmithError
from blocksmith.core.store.schema import DictSchema
from blocksmith.core.store.site import Site, SiteFile
from blocksmith.pipelines.config import load_config
from blocksmith.pipelines.migrate import DEFAULT_MIGRATION_ID, Migrator

load_dotenv()

app = typer.Typer(
    help="blocksmith: materialize declarative blocks and fit them into page layouts.",
    rich_markup_mode="markdown",
)
console = Console()

SiteOption = Annotated[
    Path | None,
    typer.Option(
        "--site", "-s", help="Site file to read and write (default: BLOCKSMITH_SITE_FILE)."
    ),
]
ConfigArgument = Annotated[
    Path,
    typer.Argument(
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        help="Migration config file (YAML or JSON).",
    ),
]


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #


def _open_site(path: Path | None) -> tuple[SiteFile, Site]:
    site_file = SiteFile(path)
    return site_file, site_file.load()


def _merge_schema(site: Site, config: dict[str, Any]) -> None:
    """Register types declared in the config's ``schema`` block with the site."""
    raw = config.get("schema")
    if not raw:
        return
    declared = DictSchema.from_config(raw)
    for type_name in declared.types():
        site.schema.register(type_name, declared.fields_of(type_name))


def _render_report(title: str, report: ImportReport) -> None:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Processed", justify="right", style="green")
    table.add_column("Skipped", justify="right", style="yellow")
    table.add_column("Failed", justify="right", style="red")
    table.add_row(str(report.processed), str(report.skipped), str(report.failed))
    console.print(table)
    for line in report.messages():
        console.print(f" [red]•[/red] {escape(line)}")


def _fail(error: Exception, verbose: bool = False) -> typer.Exit:
    console.print(f"\n[bold red]❌ Error:[/bold red] {escape(str(error))}")
    if verbose:
        traceback.print_exc()
    return typer.Exit(code=1)


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #


@app.command("import-blocks")  # type: ignore[misc]
def import_blocks(
    config: ConfigArgument,
    site: SiteOption = None,
    migration_id: Annotated[
        str | None,
        typer.Option("--migration-id", "-m", help="Override the config's migration id."),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show full error tracebacks.")
    ] = False,
) -> None:
    """
    Materialize the `blocks` declared in CONFIG and record them in the migration map.

    Rows already imported under the same migration id are skipped.
    """
    try:
        site_file, state = _open_site(site)
        data = load_config(config)
        _merge_schema(state, data)
        migrator = Migrator(state.schema, state.store, state.migrations)
        mid = migration_id or data.get("migration_id") or DEFAULT_MIGRATION_ID
        report = migrator.import_blocks(data.get("blocks") or [], migration_id=mid)
        saved = site_file.save(state)
    except BlocksmithError as e:
        raise _fail(e, verbose) from e

    _render_report(f"Block import: {mid}", report)
    console.print(f"[dim]Site saved to: {saved}[/dim]")
    if report.failed:
        raise typer.Exit(code=1)


@app.command("build-layout")  # type: ignore[misc]
def build_layout(
    config: ConfigArgument,
    node_ids: Annotated[list[str], typer.Argument(help="Nodes to build the layout on.")],
    site: SiteOption = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show full error tracebacks.")
    ] = False,
) -> None:
    """
    Assemble the `sections` in CONFIG onto each node and save the layouts.

    With `append_mode: true` the components are appended to the section labelled
    `target_section` (created at the end of the layout when missing).
    """
    try:
        site_file, state = _open_site(site)
        data = load_config(config)
        _merge_schema(state, data)
        migrator = Migrator(state.schema, state.store, state.migrations)
        report = migrator.apply_layouts(node_ids, data)
        saved = site_file.save(state)
    except BlocksmithError as e:
        raise _fail(e, verbose) from e

    _render_report("Layout build", report)
    console.print(f"[dim]Site saved to: {saved}[/dim]")
    if report.failed:
        raise typer.Exit(code=1)


@app.command("add-node")  # type: ignore[misc]
def add_node(
    node_id: Annotated[str, typer.Argument(help="Node to give a layout field.")],
    site: SiteOption = None,
) -> None:
    """Give NODE_ID an empty layout field (existing layouts are left alone)."""
    try:
        site_file, state = _open_site(site)
        if node_id in state.store.nodes():
            console.print(f"[yellow]Node {node_id} already has a layout.[/yellow]")
            return
        state.store.add_node(node_id)
        site_file.save(state)
    except BlocksmithError as e:
        raise _fail(e) from e
    console.print(f"[green]Node {node_id} now has a layout field.[/green]")


@app.command("show-layout")  # type: ignore[misc]
def show_layout(
    node_id: Annotated[str, typer.Argument(help="Node whose layout to show.")],
    site: SiteOption = None,
) -> None:
    """Print NODE_ID's sections and their components, top to bottom."""
    try:
        _, state = _open_site(site)
        sections = state.store.load_layout(node_id)
    except BlocksmithError as e:
        raise _fail(e) from e

    if not sections:
        console.print(f"[dim]Node {node_id} has an empty layout.[/dim]")
        return
    for i, section in enumerate(sections):
        table = Table(show_header=True, header_style="bold")
        table.add_column("Region")
        table.add_column("Block")
        table.add_column("Label")
        table.add_column("Revision", justify="right")
        for component in section.components:
            cfg = component.configuration
            table.add_row(
                component.region,
                str(cfg.get("id", "")),
                escape(str(cfg.get("label", ""))),
                str(cfg.get("block_revision_id", "")),
            )
        title = section.label or f"Section {i + 1}"
        console.print(Panel(table, title=f"{title} ({section.layout_id})", border_style="cyan"))


if __name__ == "__main__":
    app()
