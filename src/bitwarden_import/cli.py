"""CLI module for the Bitwarden import tool.

This module provides the command-line interface using Typer with two commands:
- inspect: Convert an export and show the resulting groups and entries
- validate: Convert an export and report whether it imports cleanly
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from bitwarden_import.importer import ImportReport
from bitwarden_import.reader import BitwardenReader
from bitwarden_import.store import Group, Store

# Create Typer app
app = typer.Typer(
    name="bitwarden-import",
    help="Bitwarden JSON export converter",
    no_args_is_help=True,
)

# Rich console for output
console = Console()
error_console = Console(stderr=True)

# Logger for this module
logger = logging.getLogger(__name__)

SEVERITY_STYLES = {
    "info": "blue",
    "warning": "yellow",
    "error": "red",
}

ExportPath = Annotated[
    Path,
    typer.Argument(
        help="Path to the Bitwarden JSON export",
        exists=False,  # We validate in the reader for consistent error messages
        resolve_path=True,
    ),
]

LogLevel = Annotated[
    str,
    typer.Option(
        "--log-level",
        "-l",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
        envvar="BITWARDEN_IMPORT_LOG_LEVEL",
    ),
]


def _configure_logging(level: str, verbose: bool) -> None:
    """Configure logging from the --log-level and --verbose options."""
    if verbose:
        level = "DEBUG"
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        error_console.print(f"[red]Error:[/red] Invalid log level: {level}")
        raise typer.Exit(2)
    logging.basicConfig(
        level=numeric_level,
        format="%(name)s - %(levelname)s - %(message)s",
    )


def _convert(export_path: Path) -> tuple[Store, ImportReport]:
    """Run the reader and exit with an error message if it fails.

    Raises:
        typer.Exit: If the export cannot be read.
    """
    reader = BitwardenReader()
    store = reader.convert(export_path)
    if reader.has_error() or store is None:
        error_console.print(f"[red]Error:[/red] {escape(reader.error_string())} ({escape(str(export_path))})")
        raise typer.Exit(1)
    return store, reader.report


def _add_group_node(node: Tree, group: Group, show_passwords: bool) -> None:
    for entry in group.entries:
        label = f"[bold]{escape(entry.title) or '(untitled)'}[/bold]"
        if entry.username:
            label += f" [dim]{escape(entry.username)}[/dim]"
        if show_passwords and entry.password:
            label += f" [red]{escape(entry.password)}[/red]"
        if entry.url:
            label += f" [cyan]{escape(entry.url)}[/cyan]"
        if entry.tags:
            label += f" [magenta]({escape(', '.join(entry.tags))})[/magenta]"
        entry_node = node.add(label)
        for name, attribute in entry.attributes.items():
            value = "******" if attribute.protected and not show_passwords else attribute.value
            entry_node.add(f"[dim]{escape(name)}[/dim] = {escape(repr(value))}")
        if entry.totp is not None:
            entry_node.add(
                f"[dim]TOTP[/dim] {entry.totp.digits} digits / {entry.totp.period}s"
            )

    for child in group.groups:
        child_node = node.add(f"[bold blue]{escape(child.name) or '(unnamed)'}[/bold blue]")
        _add_group_node(child_node, child, show_passwords)


def _display_warnings(report: ImportReport) -> None:
    """Display import warnings as a table."""
    if not report.warnings:
        console.print("[green]No warnings[/green]")
        return

    table = Table(title="Import Warnings", show_header=True, header_style="bold")
    table.add_column("Severity")
    table.add_column("Category")
    table.add_column("Source")
    table.add_column("Message")

    for warning in report.warnings:
        style = SEVERITY_STYLES.get(warning.severity, "white")
        source = warning.entity_type or ""
        if warning.entity_id:
            source += f" {warning.entity_id}"
        table.add_row(
            f"[{style}]{warning.severity}[/{style}]",
            warning.category,
            escape(source),
            escape(warning.message),
        )

    console.print(table)


def _display_summary(report: ImportReport) -> None:
    """Display the report summary panel."""
    summary = report.summary()
    lines = [
        f"Groups created: {report.groups_created}",
        f"Entries created: {report.entries_created}",
        f"Entries in root group: {report.entries_in_root}",
        f"Warnings: {summary['total']} "
        f"(errors: {summary['by_severity']['error']}, "
        f"warnings: {summary['by_severity']['warning']}, "
        f"info: {summary['by_severity']['info']})",
    ]
    style = "red" if summary["has_blockers"] else "green"
    console.print(Panel("\n".join(lines), title="Import Summary", style=style))


@app.command()
def inspect(
    export_path: ExportPath,
    show_passwords: Annotated[
        bool,
        typer.Option(
            "--show-passwords",
            help="Show passwords and protected attribute values",
        ),
    ] = False,
    as_json: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Print the import report as JSON instead of a tree",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Show detailed progress",
        ),
    ] = False,
    log_level: LogLevel = "WARNING",
) -> None:
    """Convert an export and show the resulting groups and entries."""
    _configure_logging(log_level, verbose)
    store, report = _convert(export_path)

    if as_json:
        typer.echo(json.dumps(report.to_dict(), indent=2))
        return

    tree = Tree(f"[bold]{store.root_group.name}[/bold]")
    _add_group_node(tree, store.root_group, show_passwords)
    console.print(tree)
    console.print()
    _display_warnings(report)
    _display_summary(report)


@app.command()
def validate(
    export_path: ExportPath,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Show detailed progress",
        ),
    ] = False,
    log_level: LogLevel = "WARNING",
) -> None:
    """Convert an export and report whether it imports cleanly.

    Exits with code 1 when the export cannot be read or when any
    error-level warning (not a vault export, invalid JSON, encrypted
    export) was recorded.
    """
    _configure_logging(log_level, verbose)
    _, report = _convert(export_path)

    _display_summary(report)
    if report.has_blockers:
        _display_warnings(report)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
