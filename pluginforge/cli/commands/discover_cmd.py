"""``pluginforge discover`` — list extensions in initialization order.

Compiles and loads each module, so module top-level code runs, but no
extension is constructed or initialized.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from pluginforge.cli.commands._common import build_config
from pluginforge.core.pipeline import ExtensionPipeline
from pluginforge.models.reports import ModuleOutcome

console = Console()


def discover_cmd(
    sources: Path = typer.Option(
        None, "--sources", "-s", help="Sources root (one extension module per subdirectory)."
    ),
    references: Path = typer.Option(
        None, "--references", "-r", help="Directory of reference archives."
    ),
) -> None:
    """Show discovered extensions without initializing them."""
    config = build_config(sources, references)
    pipeline = ExtensionPipeline(config=config)
    pipeline.prepare()

    table = Table(title="Discovered Extensions")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Module", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Version", style="green")
    table.add_column("Author")
    table.add_column("Order", justify="right")
    table.add_column("Type", overflow="fold")

    position = 0
    for directory in pipeline.source_directories():
        report = pipeline.discover_only(directory)
        if report.outcome != ModuleOutcome.DISCOVERED:
            table.add_row(
                "", Text(report.module_name), Text(report.outcome.value, style="yellow"),
                "", "", "", Text(report.error or ""),
            )
            continue
        for ext in report.extensions:
            position += 1
            table.add_row(
                str(position), Text(report.module_name), Text(ext.name), Text(ext.version),
                Text(ext.author), str(ext.order), Text(ext.qualified_name),
            )

    if table.row_count == 0:
        console.print("[dim]No extension modules found.[/dim]")
        return
    console.print(table)
