"""``pluginforge check`` — compile every source directory without loading it.

Nothing is executed: the command only aggregates, resolves references and
compiles.  Diagnostics go to stderr; exits 1 if any module fails.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from pluginforge.cli.commands._common import build_config
from pluginforge.core.hasher import image_digest
from pluginforge.core.pipeline import ExtensionPipeline

console = Console()


def check_cmd(
    sources: Path = typer.Option(
        None, "--sources", "-s", help="Sources root (one extension module per subdirectory)."
    ),
    references: Path = typer.Option(
        None, "--references", "-r", help="Directory of reference archives."
    ),
    warnings_as_errors: bool = typer.Option(
        False, "--warnings-as-errors", help="Escalate compiler warnings to errors."
    ),
) -> None:
    """Compile extension sources and report diagnostics."""
    config = build_config(sources, references, warnings_as_errors)
    pipeline = ExtensionPipeline(config=config)
    pipeline.prepare()

    table = Table(title="Compilation")
    table.add_column("Module", style="cyan")
    table.add_column("Result")
    table.add_column("Warnings", justify="right")
    table.add_column("Image")

    failed = 0
    for directory in pipeline.source_directories():
        result = pipeline.build(directory)
        if result.success:
            status = "[green]ok[/green]"
            digest = image_digest(result.image)[:19]
        else:
            failed += 1
            pipeline.reporter.diagnostics(directory.name, result.diagnostics)
            status = f"[red]{len(result.diagnostics)} error(s)[/red]"
            digest = "-"
        table.add_row(Text(directory.name), status, str(len(result.warnings)), digest)

    console.print(table)
    if failed:
        raise typer.Exit(code=1)
