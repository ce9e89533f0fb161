"""Main Typer application — imports and registers all CLI commands.

Entry point: ``pluginforge`` (configured via pyproject.toml project.scripts).
"""

from __future__ import annotations

import typer

from pluginforge.cli.commands.check import check_cmd
from pluginforge.cli.commands.discover_cmd import discover_cmd
from pluginforge.cli.commands.references_cmd import references_cmd
from pluginforge.cli.commands.run import run_cmd

app = typer.Typer(
    name="pluginforge",
    help="pluginforge: compile, load and initialize extensions at host startup.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="run", help="Run the extension startup pipeline.")(run_cmd)
app.command(name="check", help="Compile extension sources and report diagnostics.")(check_cmd)
app.command(name="discover", help="List extensions in initialization order.")(discover_cmd)
app.command(name="references", help="List resolved reference archives.")(references_cmd)


@app.command(name="version", help="Show the pluginforge and contract versions.")
def version_cmd() -> None:
    """Print package and extension contract versions."""
    from rich.console import Console

    from pluginforge import __version__
    from pluginforge.contract import API_VERSION

    Console().print(f"pluginforge {__version__} (extension API {API_VERSION})", highlight=False)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
