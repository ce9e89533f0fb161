"""``pluginforge references`` — show what extension code may import."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from pluginforge.cli.commands._common import build_config
from pluginforge.core.references import HOST_PACKAGE, resolve_references

console = Console()


def references_cmd(
    references: Path = typer.Option(
        None, "--references", "-r", help="Directory of reference archives."
    ),
) -> None:
    """List reference archives and the top-level modules they provide."""
    config = build_config(references=references)
    refs = resolve_references(
        config.references_path,
        suffixes=config.reference_suffixes,
        host_modules=config.host_modules,
    )

    if not refs.archives:
        console.print(Text(f"No reference archives in {config.references_path}.", style="dim"))
    else:
        table = Table(title="Reference Archives")
        table.add_column("Module", style="cyan")
        table.add_column("Archive")
        for module, archive in sorted(refs.archive_modules.items()):
            table.add_row(module, Text(str(archive)))
        console.print(table)

    host = sorted({HOST_PACKAGE, *config.host_modules})
    console.print(
        f"Core references: standard library ({len(refs.core_modules)} names incl. host), "
        f"host packages: {', '.join(host)}",
        highlight=False,
        markup=False,
    )
    console.print(f"{len(refs.module_names)} importable top-level name(s).", highlight=False)
