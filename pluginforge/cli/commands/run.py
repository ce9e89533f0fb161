"""``pluginforge run`` — run the startup pipeline.

Compiles, loads and initializes every extension module under the sources
root, then prints a per-module summary.  Exits non-zero if startup was
aborted by a failing extension.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from pluginforge.cli.commands._common import build_config
from pluginforge.core.errors import FatalStartupError
from pluginforge.core.pipeline import ExtensionPipeline
from pluginforge.models.reports import ModuleOutcome, StartupReport

console = Console()

_OUTCOME_STYLE = {
    ModuleOutcome.INITIALIZED: "green",
    ModuleOutcome.DISCOVERED: "cyan",
    ModuleOutcome.COMPILE_FAILED: "yellow",
    ModuleOutcome.LOAD_FAILED: "yellow",
    ModuleOutcome.ABORTED: "red",
}


def render_report(report: StartupReport, title: str = "Extension Modules") -> Table:
    table = Table(title=title)
    table.add_column("Module", style="cyan")
    table.add_column("Outcome")
    table.add_column("Extensions", justify="right")
    table.add_column("Detail", overflow="fold")
    for m in report.modules:
        style = _OUTCOME_STYLE.get(m.outcome, "white")
        table.add_row(
            Text(m.module_name),
            Text(m.outcome.value, style=style),
            str(len(m.extensions)),
            Text(m.error or m.image_digest),
        )
    return table


def run_cmd(
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
    """Run the extension startup pipeline."""
    config = build_config(sources, references, warnings_as_errors)
    pipeline = ExtensionPipeline(config=config)

    try:
        report = pipeline.start()
    except FatalStartupError as exc:
        console.print(Text.assemble(("Startup aborted:", "bold red"), " ", str(exc)))
        if exc.__cause__ is not None:
            cause = exc.__cause__
            console.print(f"  caused by {type(cause).__name__}: {cause}", markup=False)
        raise typer.Exit(code=1)

    console.print(render_report(report))
    console.print(
        f"[bold]{len(report.initialized_extensions)}[/bold] extension(s) initialized, "
        f"[bold]{len(report.failed_modules)}[/bold] module(s) skipped."
    )
