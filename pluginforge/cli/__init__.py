"""pluginforge CLI — Typer-based command-line interface.

Provides the ``pluginforge`` command with subcommands for running the
startup pipeline, checking extension sources for compile errors, listing
discovered extensions and inspecting resolved references.

All output uses Rich for formatted terminal display.
"""
